class StoreError(Exception):
    """Raised when the enrollment store cannot answer a lookup or persist."""


class NoActiveTermError(StoreError):
    """Raised when persisting without an active term to attach the receipt to."""
