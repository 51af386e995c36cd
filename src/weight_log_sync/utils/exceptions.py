"""Custom exceptions for weight log sync."""


class WeightLogSyncError(Exception):
    """Base exception for all weight log sync errors."""

    pass


class ConfigurationError(WeightLogSyncError):
    """Raised when there is a configuration error."""

    pass


class AuthenticationError(WeightLogSyncError):
    """Raised when the access token is missing or rejected."""

    pass


class TransportError(WeightLogSyncError):
    """Raised when a request to the remote fails or returns an error status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class VersionConflictError(TransportError):
    """Raised when the remote file changed since it was last read."""

    def __init__(self, message: str, attempts: int = 1) -> None:
        super().__init__(message, status_code=409)
        self.attempts = attempts


class ValidationError(WeightLogSyncError):
    """Raised when an input value is rejected."""

    pass
