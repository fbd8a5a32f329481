"""
Error types raised while fetching and decoding on-chain accounts.

ConnectivityError is transient and may be retried by the caller. The other
errors are terminal for the address that produced them.
"""

from typing import Optional


class PoolFetchError(Exception):
    """Base class for all fetch and decode failures."""

    def __init__(self, message: str, address: Optional[str] = None):
        super().__init__(message)
        self.address = address

    def __str__(self) -> str:
        message = super().__str__()
        if self.address:
            return f"{message} (address={self.address})"
        return message


class ConnectivityError(PoolFetchError):
    """The RPC or HTTP service could not be reached or answered with an error."""


class NotFoundError(PoolFetchError):
    """The account does not exist or has been closed."""


class SchemaMismatchError(PoolFetchError):
    """Buffer length disagrees with the layout span."""

    def __init__(self, expected: int, actual: int, address: Optional[str] = None, layout: str = ""):
        name = f"{layout} " if layout else ""
        super().__init__(f"{name}layout expects {expected} bytes, got {actual}", address)
        self.expected = expected
        self.actual = actual
        self.layout = layout


class DecodeError(PoolFetchError):
    """A field inside a correctly sized buffer could not be parsed."""

    def __init__(self, message: str, address: Optional[str] = None, field: Optional[str] = None):
        super().__init__(message, address)
        self.field = field
