# LoopBack Bluemix Helper
# File: __init__.py
# Version: v1

"""Top-level package for the LoopBack Bluemix helper."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from .client import BluemixClient, get_path
from .config import BluemixConfig
from .errors import (
    ApiError,
    BluemixError,
    ConfigError,
    PaginationLimitError,
    TransportError,
)
from .models import QueryOptions, ServiceInstanceJoin, Session
from .registry import SupportedService, SupportedServices
from .session import discover_session

__all__ = [
    "__version__",
    "ApiError",
    "BluemixClient",
    "BluemixConfig",
    "BluemixError",
    "ConfigError",
    "PaginationLimitError",
    "QueryOptions",
    "ServiceInstanceJoin",
    "Session",
    "SupportedService",
    "SupportedServices",
    "TransportError",
    "discover_session",
    "get_path",
]


def _resolve_version() -> str:
    """Resolve installed distribution version.

    Falls back to a reasonable default when running from source without an
    installed distribution.
    """
    try:
        return version("loopback-bluemix")
    except PackageNotFoundError:
        return "0.1.0"


__version__ = _resolve_version()
