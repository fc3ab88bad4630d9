"""Custom exception hierarchy for the SmarTalk engine."""


class SmartalkError(Exception):
    """Base exception for application and infrastructure errors."""

    def __init__(self, message: str, status_code: int = 500) -> None:
        """Initialize exception with message and optional status code."""
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class PersistenceError(SmartalkError):
    """The relational store failed. Surfaced to the caller and never retried here."""

    def __init__(self, operation: str, reason: str) -> None:
        """Initialize with the failed operation and the driver's reason."""
        self.operation = operation
        self.reason = reason
        super().__init__(f"Persistence failure during {operation}: {reason}", status_code=503)
