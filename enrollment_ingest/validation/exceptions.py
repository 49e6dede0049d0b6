from datetime import datetime


class ValidationFailure(Exception):
    """Terminal validation failure: the receipt is rejected outright."""


class DuplicateDocumentError(ValidationFailure):
    def __init__(self, fingerprint: str, uploaded_at: datetime | None = None) -> None:
        self.fingerprint = fingerprint
        self.uploaded_at = uploaded_at
        when = f" (uploaded {uploaded_at.date().isoformat()})" if uploaded_at else ""
        super().__init__(f"Duplicate document detected{when}")


class RegistrationMismatchError(ValidationFailure):
    def __init__(self, expected: str, received: str) -> None:
        self.expected = expected
        self.received = received
        super().__init__(
            f"Registration number mismatch: expected {expected}, received {received}"
        )


class PendingDocumentExistsError(ValidationFailure):
    def __init__(self, status: str) -> None:
        self.status = status
        super().__init__(f"A pending document already exists (status: {status})")


class QuotaExceededError(ValidationFailure):
    def __init__(self, current: int, new: int, limit: int) -> None:
        self.current = current
        self.new = new
        self.limit = limit
        super().__init__(
            f"Subject limit exceeded: {current} current + {new} new = {current + new} > "
            f"{limit} (available slots: {self.remaining_slots})"
        )

    @property
    def remaining_slots(self) -> int:
        return max(self.limit - self.current, 0)
