class ProcessorError(Exception):
    """Base exception for all processor-related errors."""


class UnsupportedMediaTypeError(ProcessorError):
    """Raised when a document is neither a supported image nor a PDF."""


class FileReadError(ProcessorError):
    """Raised when a document cannot be read from disk."""
