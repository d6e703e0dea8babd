# LoopBack Bluemix Helper
# File: config.py
# Version: v1

"""Configuration loading for the LoopBack Bluemix helper."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List
import os

DEFAULT_API_URL = "https://api.ng.bluemix.net"
DEFAULT_AUTH_URL = "https://login.ng.bluemix.net/UAALoginServerWAR"

SESSION_FILE_NAME = "loopback-session.json"


def _parse_bool_env(name: str, default: bool = False) -> bool:
    """Parse a boolean-like environment variable.

    Accepts 1/0, true/false, yes/no, on/off (case-insensitive).
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "on"}


def _parse_int_env(
    name: str,
    default: int,
    min_value: int | None = None,
    max_value: int | None = None,
) -> int:
    """Parse an int environment variable with clamping and safe fallback."""
    raw = os.getenv(name)
    if raw is None or not str(raw).strip():
        value = int(default)
    else:
        try:
            value = int(str(raw).strip())
        except ValueError:
            value = int(default)

    if min_value is not None and value < min_value:
        value = min_value
    if max_value is not None and value > max_value:
        value = max_value

    return value


def _env_or_none(name: str) -> str | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return raw.strip()


@dataclass
class BluemixConfig:
    """Settings for talking to the Bluemix (Cloud Foundry v2) API.

    Credential file locations are derived from ``home_dir`` unless
    ``session_file`` points the primary location somewhere else.
    """

    api_url: str = DEFAULT_API_URL
    auth_url: str = DEFAULT_AUTH_URL
    info_url: str | None = None

    home_dir: str | None = None
    session_file: str | None = None
    datasources_config: str | None = None

    verify_tls: bool = True

    # 0 means follow next_url until the server stops returning one.
    max_marketplace_pages: int = 0

    @classmethod
    def from_env(cls) -> "BluemixConfig":
        """Create configuration from environment variables."""
        return cls(
            api_url=_env_or_none("BLUEMIX_API_URL") or DEFAULT_API_URL,
            auth_url=_env_or_none("BLUEMIX_AUTH_URL") or DEFAULT_AUTH_URL,
            info_url=_env_or_none("BLUEMIX_INFO_URL"),
            home_dir=_env_or_none("BLUEMIX_HOME"),
            session_file=_env_or_none("BLUEMIX_SESSION_FILE"),
            datasources_config=_env_or_none("BLUEMIX_DATASOURCES_CONFIG"),
            verify_tls=_parse_bool_env("BLUEMIX_VERIFY_TLS", default=True),
            max_marketplace_pages=_parse_int_env(
                "BLUEMIX_MAX_MARKETPLACE_PAGES", default=0, min_value=0, max_value=10000
            ),
        )

    @property
    def home(self) -> Path:
        return Path(self.home_dir) if self.home_dir else Path.home()

    def resolved_info_url(self, api_url: str | None = None) -> str:
        if self.info_url:
            return self.info_url
        return (api_url or self.api_url).rstrip("/") + "/info"

    def credential_paths(self) -> List[Path]:
        """Return the three session locations in lookup order.

        1. the tool's own session snapshot
        2. the cf CLI config (``~/.cf/config.json``)
        3. the Bluemix CLI config (``~/.bluemix/config.json``)
        """
        primary = (
            Path(self.session_file)
            if self.session_file
            else self.home / ".bluemix" / SESSION_FILE_NAME
        )
        return [
            primary,
            self.home / ".cf" / "config.json",
            self.home / ".bluemix" / "config.json",
        ]
