"""Custom exceptions for Daichi Comfort integration."""


class DaichiError(Exception):
    """Base exception for Daichi Comfort."""


class DaichiConnectionError(DaichiError):
    """Raised when the Daichi cloud cannot be reached."""


class DaichiTimeoutError(DaichiError):
    """Raised when a request to the Daichi cloud times out."""


class DaichiAPIError(DaichiError):
    """Raised when the API answers with a non-success status."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class DaichiAuthError(DaichiAPIError):
    """Raised when the API rejects or never issued an access token."""


class DaichiValidationError(DaichiError):
    """Raised when a payload or control value is rejected before sending."""
