class OcrError(Exception):
    """Base exception for all OCR-related errors."""


class OcrProviderError(OcrError):
    """Raised by a single provider; the orchestrator moves on to the next one."""


class AllProvidersFailedError(OcrError):
    """Raised when no configured provider produced a transcript."""

    def __init__(self, failures: dict[str, str]) -> None:
        self.failures = failures
        detail = "; ".join(f"{name}: {reason}" for name, reason in failures.items())
        super().__init__(f"All OCR providers failed ({detail or 'none configured'})")
