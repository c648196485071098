"""Storefront error taxonomy"""

from typing import Optional


class StorefrontError(Exception):
    """Base class for errors raised by the cart and catalog core"""

    retryable: bool = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(StorefrontError):
    """A lookup by id yielded nothing"""

    def __init__(self, kind: str, identifier: str):
        super().__init__(f"{kind} not found: {identifier}")
        self.kind = kind
        self.identifier = identifier


class InvalidArgument(StorefrontError):
    """A caller passed a value outside the accepted range"""


class DataSourceUnavailable(StorefrontError):
    """An external data fetch failed; the caller may retry"""

    retryable = True

    def __init__(self, source: str, reason: Optional[str] = None):
        message = f"Data source unavailable: {source}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.source = source
        self.reason = reason
