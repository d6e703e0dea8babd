# LoopBack Bluemix Helper
# File: registry.py
# Version: v1

"""Registry of data services the generator knows how to wire up.

The registry maps a LoopBack connector name to the Bluemix marketplace label
of the matching service, e.g. ``mongodb -> compose-for-mongodb``. It is
normally the ``supportedServices`` object of a ``datasources-config.json``
file; a built-in copy is used when none is configured:

  BLUEMIX_DATASOURCES_CONFIG=/path/to/datasources-config.json
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, Mapping, Optional, Set

from .config import BluemixConfig
from .errors import ConfigError

logger = logging.getLogger(__name__)


DEFAULT_SUPPORTED_SERVICES: Dict[str, Dict[str, Any]] = {
    "cloudant": {"label": "cloudantNoSQLDB"},
    "dashdb": {"label": "dashDB"},
    "db2": {"label": "dashDB For Transactions"},
    "mongodb": {"label": "compose-for-mongodb"},
    "mysql": {"label": "compose-for-mysql"},
    "postgresql": {"label": "compose-for-postgresql"},
    "kv-redis": {"label": "compose-for-redis"},
}


@dataclass(frozen=True)
class SupportedService:
    connector: str
    label: str
    extra: Dict[str, Any] = field(default_factory=dict)


class SupportedServices(Mapping[str, SupportedService]):
    """Read-only mapping of connector name -> SupportedService."""

    def __init__(self, services: Mapping[str, Mapping[str, Any]]) -> None:
        entries: Dict[str, SupportedService] = {}
        for connector, entry in services.items():
            if not isinstance(entry, Mapping) or not entry.get("label"):
                raise ConfigError(
                    f"Supported service '{connector}' must be an object with a 'label'."
                )
            extra = {k: v for k, v in entry.items() if k != "label"}
            entries[connector] = SupportedService(
                connector=connector, label=str(entry["label"]), extra=extra
            )
        self._entries = entries

    @classmethod
    def default(cls) -> "SupportedServices":
        return cls(DEFAULT_SUPPORTED_SERVICES)

    def __getitem__(self, connector: str) -> SupportedService:
        return self._entries[connector]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"SupportedServices({sorted(self._entries)!r})"

    @property
    def labels(self) -> Set[str]:
        return {s.label for s in self._entries.values()}

    def is_supported(self, label: Optional[str]) -> bool:
        return label is not None and label in self.labels

    def connector_for_label(self, label: str) -> Optional[str]:
        for service in self._entries.values():
            if service.label == label:
                return service.connector
        return None


def load_supported_services(path: str | Path) -> SupportedServices:
    """Load the ``supportedServices`` object of a datasources config file."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise ConfigError(f"Cannot read datasources config '{path}': {exc}") from exc

    services = data.get("supportedServices") if isinstance(data, dict) else None
    if not isinstance(services, dict):
        raise ConfigError(
            f"Datasources config '{path}' has no 'supportedServices' object."
        )
    return SupportedServices(services)


def get_configured_registry(config: BluemixConfig) -> SupportedServices:
    """Return the registry named by the config, or the built-in one."""
    if config.datasources_config:
        logger.debug("Loading supported services from %s", config.datasources_config)
        return load_supported_services(config.datasources_config)
    return SupportedServices.default()
