"""Exceptions raised by the abstract analysis."""


class SantaaneError(Exception):
    """Base exception for abstract analysis errors."""

    pass


class AbstractValidationError(SantaaneError):
    """The abstract cannot be analyzed as entered."""

    pass


class AIServiceError(SantaaneError):
    """The chat-completion endpoint failed or returned an unusable envelope."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
