from importlib.metadata import PackageNotFoundError, version as pkg_version

try:
    __version__ = pkg_version("bolddesk")
except PackageNotFoundError:
    __version__ = "dev"

from .client import BoldDeskClient
from .config import BoldDeskConfig, load_config
from .errors import (
    BoldDeskApiError,
    BoldDeskAuthenticationError,
    BoldDeskError,
    BoldDeskRateLimitError,
    BoldDeskTimeoutError,
    BoldDeskValidationError,
    ErrorKind,
)
from .pagination import paginate
from .query import QueryBuilder, TimePeriod
from .ratelimit import RateLimitInfo

__all__ = [
    "__version__",
    "BoldDeskClient",
    "BoldDeskConfig",
    "load_config",
    "BoldDeskError",
    "BoldDeskApiError",
    "BoldDeskAuthenticationError",
    "BoldDeskRateLimitError",
    "BoldDeskTimeoutError",
    "BoldDeskValidationError",
    "ErrorKind",
    "paginate",
    "QueryBuilder",
    "TimePeriod",
    "RateLimitInfo",
]
