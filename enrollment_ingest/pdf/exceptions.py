class PdfExtractionError(Exception):
    """Raised when text cannot be read from a PDF."""
