class ParseInvalidError(Exception):
    """Raised when a transcript lacks the registration number, name or subjects."""
