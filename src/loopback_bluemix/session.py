# LoopBack Bluemix Helper
# File: session.py
# Version: v1

"""Find the current Bluemix login on disk.

Three locations are tried in order (see ``BluemixConfig.credential_paths``):

- the session snapshot written by this tool, already in Session shape
- the cf CLI config, ``~/.cf/config.json``
- the Bluemix CLI config, ``~/.bluemix/config.json`` (IAM token only)

Nothing here raises: an undiscoverable login is an empty ``Session``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from .config import BluemixConfig
from .models import Session

logger = logging.getLogger(__name__)

LOGIN_HINT = "Please use `bx login` (or `cf login`) to log into Bluemix first."

TOKEN_SCHEMES = frozenset({"bearer"})


def _load_json(path: Path) -> Optional[Dict[str, Any]]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return None
    return data if isinstance(data, dict) else None


def _strip_scheme(token: Any) -> Optional[str]:
    """Drop a leading scheme word such as ``bearer `` from a stored token."""
    if not isinstance(token, str) or not token.strip():
        return None
    parts = token.strip().split(None, 1)
    if len(parts) == 2:
        return parts[1]
    if parts[0].lower() in TOKEN_SCHEMES:
        return None
    return parts[0]


def _fields(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = data.get(key)
    return value if isinstance(value, dict) else {}


def read_session_file(path: Path) -> Optional[Session]:
    data = _load_json(path)
    if not data:
        return None
    session = Session.from_mapping(data)
    return session if session.access_token else None


def read_cf_config(path: Path) -> Optional[Session]:
    data = _load_json(path)
    if data is None:
        return None

    token = _strip_scheme(data.get("AccessToken"))
    if not token:
        return None

    org = _fields(data, "OrganizationFields")
    space = _fields(data, "SpaceFields")
    return Session(
        organization_name=org.get("Name") or None,
        organization_id=org.get("GUID") or None,
        space_name=space.get("Name") or None,
        space_id=space.get("GUID") or None,
        api_base_url=data.get("Target") or None,
        access_token=token,
    )


def read_bluemix_config(path: Path) -> Optional[Session]:
    data = _load_json(path)
    if data is None:
        return None

    token = _strip_scheme(data.get("IAMToken"))
    if not token:
        return None

    return Session(
        api_base_url=data.get("APIEndpoint") or None,
        access_token=token,
    )


def discover_session(
    config: Optional[BluemixConfig] = None,
    log: Optional[Callable[[str], Any]] = None,
) -> Session:
    """Return the first readable login, or ``Session()`` after logging a hint."""
    config = config or BluemixConfig.from_env()
    primary, cf_config, bluemix_config = config.credential_paths()

    session = read_session_file(primary)
    if session is not None:
        return session

    session = read_cf_config(cf_config) or read_bluemix_config(bluemix_config)
    if session is not None:
        return session

    (log or logger.warning)(LOGIN_HINT)
    return Session()
