# Core modules

from .config import settings, get_settings, Settings
from .errors import StorefrontError, NotFound, InvalidArgument, DataSourceUnavailable

__all__ = [
    "settings",
    "get_settings",
    "Settings",
    "StorefrontError",
    "NotFound",
    "InvalidArgument",
    "DataSourceUnavailable",
]
