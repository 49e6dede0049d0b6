import hashlib


def fingerprint(data: bytes) -> str:
    """SHA-256 hex digest of a document's raw bytes."""
    return hashlib.sha256(data).hexdigest()
