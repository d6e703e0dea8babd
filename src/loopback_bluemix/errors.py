# LoopBack Bluemix Helper
# File: errors.py
# Version: v1

"""Error types raised by the Bluemix client."""

from __future__ import annotations

from typing import Any, Dict, Optional


class BluemixError(Exception):
    """Base class for all errors raised by this package."""


class TransportError(BluemixError):
    """The request never produced an HTTP response (DNS, connect, TLS...)."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause


class ApiError(BluemixError):
    """The API answered with a non-2xx status.

    Every field of the JSON error body is kept in ``fields`` and is also
    readable as an attribute, e.g. ``err.error_code`` for
    ``CF-ServiceBindingAppServiceTaken``.
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        fields: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.fields: Dict[str, Any] = dict(fields or {})

    def __getattr__(self, name: str) -> Any:
        fields = self.__dict__.get("fields") or {}
        if name in fields:
            return fields[name]
        raise AttributeError(name)


class ConfigError(BluemixError):
    """Required local configuration (token, space, registry file) is missing."""


class PaginationLimitError(BluemixError):
    """The marketplace listing exceeded the configured page bound."""
