"""Custom exceptions for the weight loss tracker."""


class WeightLossTrackerError(Exception):
    """Base exception for all weight loss tracker errors."""

    pass


class ConfigurationError(WeightLossTrackerError):
    """Raised when there is a configuration error."""

    pass


class ValidationError(WeightLossTrackerError):
    """Raised when user-supplied data fails validation."""

    def __init__(self, message: str, problems: list[str] | None = None) -> None:
        super().__init__(message)
        self.problems = problems or [message]


class StorageError(WeightLossTrackerError):
    """Raised when the persistent store cannot be written."""

    pass


class AuthError(WeightLossTrackerError):
    """Raised when the identity service rejects a request or is unreachable."""

    pass
