"""Exception types shared across the store, remote client and registry."""

from typing import Optional


class ClientbookError(Exception):
    """Base class for clientbook failures."""
    pass


class NetworkError(ClientbookError):
    """The remote request could not complete (connection, timeout or HTTP status)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class DecodeError(ClientbookError):
    """The remote response body did not match the expected shape."""
    pass


class StoreError(ClientbookError):
    """The local database failed to read or write."""
    pass


class SubscriptionClosed(ClientbookError):
    """The live subscription was closed by its owner or by the store."""
    pass
