# LoopBack Bluemix Helper
# File: tools/tasks.py
# Version: v1
#
# NOTE: This module is the single place where client calls are turned into
# JSON-ready results and exposed as MCP tools.  The stdio transport simply
# calls `register_tools(server)` to wire these up.

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional

from ..client import BluemixClient
from ..config import BluemixConfig
from ..models import ServiceInstanceJoin
from ..registry import get_configured_registry
from ..session import discover_session

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _make_error(
    code: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Small, LLM-friendly error shape used by diagnostics."""
    err: Dict[str, Any] = {"code": code, "message": message}
    if details:
        err["details"] = details
    return err


def _make_client(cfg: Optional[BluemixConfig] = None) -> BluemixClient:
    """Create a BluemixClient from the environment and the on-disk login.

    Note: Callers should prefer invoking this with *no arguments* to keep
    unit tests monkeypatch-friendly (tests replace _make_client with a
    no-arg lambda).
    """
    cfg = cfg or BluemixConfig.from_env()
    session = discover_session(cfg)
    return BluemixClient(
        config=cfg,
        session=session,
        supported_services=get_configured_registry(cfg),
    )


def _space_path(client: BluemixClient, space_guid: Optional[str]) -> str:
    return f"/v2/spaces/{space_guid or client.resolve_space_id(None)}"


def _summarise(resource: Dict[str, Any], *fields: str) -> Dict[str, Any]:
    entity = resource.get("entity") or {}
    out: Dict[str, Any] = {"guid": (resource.get("metadata") or {}).get("guid")}
    for name in fields:
        out[name] = entity.get(name)
    return out


def _summarise_join(
    client: BluemixClient, join: ServiceInstanceJoin
) -> Dict[str, Any]:
    label = join.label
    return {
        "name": join.name,
        "guid": join.guid,
        "label": label,
        "plan": join.plan_name,
        "free": join.is_free,
        "connector": client.supported_services.connector_for_label(label) if label else None,
    }


# ---------------------------------------------------------------------------
# Core async tasks (library-style)
# ---------------------------------------------------------------------------


async def get_session_info() -> Dict[str, Any]:
    """Redacted view of the discovered login (never includes the token)."""
    client = _make_client()
    session = client.session
    return {
        "authenticated": session.is_authenticated,
        "api_base_url": session.api_base_url or client.config.api_url,
        "organization": {"name": session.organization_name, "guid": session.organization_id},
        "space": {"name": session.space_name, "guid": session.space_id},
    }


async def list_organizations() -> Dict[str, Any]:
    client = _make_client()
    orgs = await client.get_organizations()
    return {"organizations": [_summarise(o, "name", "status") for o in orgs]}


async def list_spaces(organization_guid: Optional[str] = None) -> Dict[str, Any]:
    client = _make_client()
    org_guid = organization_guid or client.session.organization_id
    parent = f"/v2/organizations/{org_guid}" if org_guid else None
    spaces = await client.get_spaces(parent)
    return {
        "organization_guid": org_guid,
        "spaces": [_summarise(s, "name") for s in spaces],
    }


async def list_apps(space_guid: Optional[str] = None) -> Dict[str, Any]:
    client = _make_client()
    parent = _space_path(client, space_guid)
    apps = await client.get_apps(parent)
    return {
        "space": parent,
        "apps": [_summarise(a, "name", "state", "instances") for a in apps],
    }


async def list_data_service_instances(space_guid: Optional[str] = None) -> Dict[str, Any]:
    client = _make_client()
    parent = _space_path(client, space_guid)
    joins = await client.get_data_service_instances(parent)
    items = [_summarise_join(client, j) for j in joins]
    return {"space": parent, "count": len(items), "service_instances": items}


async def list_marketplace_services(space_guid: Optional[str] = None) -> Dict[str, Any]:
    """Supported data services that can be provisioned in the space."""
    client = _make_client()
    services = await client.get_supported_services(space_guid)

    items: List[Dict[str, Any]] = []
    for s in services:
        item = _summarise(s, "label", "description", "service_plans_url")
        item["connector"] = client.supported_services.connector_for_label(item["label"])
        items.append(item)

    return {"count": len(items), "services": items}


async def list_service_plans(service_guid: str) -> Dict[str, Any]:
    client = _make_client()
    plans = await client.get_service_plans(f"/v2/services/{service_guid}")
    return {
        "service_guid": service_guid,
        "plans": [_summarise(p, "name", "free", "description") for p in plans],
    }


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------


async def diagnostics() -> Dict[str, Any]:
    started = time.time()
    checks: List[Dict[str, Any]] = []
    overall_ok = True

    # Client init
    t0 = time.time()
    try:
        client = _make_client()
        checks.append(
            {"name": "client_init", "ok": True, "error": None, "elapsed_ms": int((time.time() - t0) * 1000)}
        )
    except Exception as exc:
        checks.append(
            {
                "name": "client_init",
                "ok": False,
                "error": _make_error("CONFIG_ERROR", str(exc)),
                "elapsed_ms": int((time.time() - t0) * 1000),
            }
        )
        return {
            "ok": False,
            "checks": checks,
            "meta": {"elapsed_ms": int((time.time() - started) * 1000)},
        }

    # Session
    if client.session.is_authenticated:
        checks.append({"name": "session", "ok": True, "error": None})
    else:
        overall_ok = False
        checks.append(
            {
                "name": "session",
                "ok": False,
                "error": _make_error("NOT_LOGGED_IN", "No Bluemix login was found on disk."),
            }
        )

    # Organizations
    t0 = time.time()
    try:
        orgs = await client.get_organizations()
        checks.append(
            {
                "name": "list_organizations",
                "ok": True,
                "count": len(orgs),
                "error": None,
                "elapsed_ms": int((time.time() - t0) * 1000),
            }
        )
    except Exception as exc:
        overall_ok = False
        details = {"status_code": getattr(exc, "status_code", None)}
        checks.append(
            {
                "name": "list_organizations",
                "ok": False,
                "error": _make_error("BACKEND_ERROR", str(exc), details),
                "elapsed_ms": int((time.time() - t0) * 1000),
            }
        )

    return {
        "ok": overall_ok,
        "checks": checks,
        "meta": {
            "elapsed_ms": int((time.time() - started) * 1000),
            "supported_connectors": sorted(client.supported_services),
        },
    }


# ---------------------------------------------------------------------------
# MCP tool registration
# ---------------------------------------------------------------------------


def register_tools(server: Any) -> None:
    """Register MCP tools on an MCP Server-like instance."""
    if server is None or not hasattr(server, "tool"):
        raise TypeError("register_tools() needs a server exposing a tool() decorator")

    @server.tool(
        name="bluemix_get_session_info",
        description="Show the discovered Bluemix login (API endpoint, organization, space) without the token.",
    )
    async def mcp_get_session_info() -> Dict[str, Any]:
        return await get_session_info()

    @server.tool(
        name="bluemix_list_organizations",
        description="List the Bluemix organizations visible to the current login.",
    )
    async def mcp_list_organizations() -> Dict[str, Any]:
        return await list_organizations()

    @server.tool(
        name="bluemix_list_spaces",
        description="List spaces of an organization (defaults to the targeted organization).",
    )
    async def mcp_list_spaces(organization_guid: Optional[str] = None) -> Dict[str, Any]:
        return await list_spaces(organization_guid=organization_guid)

    @server.tool(
        name="bluemix_list_apps",
        description="List apps in a space (defaults to the targeted space).",
    )
    async def mcp_list_apps(space_guid: Optional[str] = None) -> Dict[str, Any]:
        return await list_apps(space_guid=space_guid)

    @server.tool(
        name="bluemix_list_data_service_instances",
        description="List provisioned data service instances a LoopBack connector can use.",
    )
    async def mcp_list_data_service_instances(space_guid: Optional[str] = None) -> Dict[str, Any]:
        return await list_data_service_instances(space_guid=space_guid)

    @server.tool(
        name="bluemix_list_marketplace_services",
        description="List supported data services available for provisioning in a space.",
    )
    async def mcp_list_marketplace_services(space_guid: Optional[str] = None) -> Dict[str, Any]:
        return await list_marketplace_services(space_guid=space_guid)

    @server.tool(
        name="bluemix_list_service_plans",
        description="List the plans of a marketplace service.",
    )
    async def mcp_list_service_plans(service_guid: str) -> Dict[str, Any]:
        return await list_service_plans(service_guid=service_guid)

    @server.tool(
        name="bluemix_diagnostics",
        description="Check the local login and connectivity to the Bluemix API.",
    )
    async def mcp_diagnostics() -> Dict[str, Any]:
        return await diagnostics()

    logger.info("Registered Bluemix tools")
