"""Infrastructure layer for Daichi Comfort integration.

Error definitions shared by the API client, the push client and the
device core.
"""

from .errors import (
    DaichiAPIError,
    DaichiAuthError,
    DaichiConnectionError,
    DaichiError,
    DaichiTimeoutError,
    DaichiValidationError,
)

__all__ = [
    "DaichiError",
    "DaichiConnectionError",
    "DaichiTimeoutError",
    "DaichiAPIError",
    "DaichiAuthError",
    "DaichiValidationError",
]
