"""Exceptions raised by the shop data layer.

The store treats a network error and a rejected write the same way: it rolls
back and raises one user-facing message.
"""

from typing import Optional

__all__ = [
    "ShopError",
    "RemoteStoreError",
    "RemoteDataError",
    "AuthError",
    "MutationError",
    "ValidationError",
    "NotFoundError",
]


class ShopError(Exception):
    """Base error type for the shop package."""


class RemoteStoreError(ShopError):
    """Raised when a call to the hosted data service fails."""

    def __init__(self, message: str, status_code: Optional[int] = None, detail: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class RemoteDataError(RemoteStoreError):
    """Raised when the remote service returns rows we cannot trust."""


class AuthError(ShopError):
    """Raised when sign-in or session lookup is rejected."""


class MutationError(ShopError):
    """Raised after a failed remote write has been rolled back locally.

    The message is meant to be shown to the editor as-is.
    """

    def __init__(self, message: str, action: str = ""):
        super().__init__(message)
        self.action = action


class ValidationError(ShopError):
    """Raised when input is rejected before any state change."""


class NotFoundError(ShopError):
    """Raised when a referenced record does not exist."""
