# LoopBack Bluemix Helper
# File: tests/conftest.py
# Version: v1

"""Shared fakes: an in-memory Cloud Foundry API behind httpx.MockTransport."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest

from loopback_bluemix.client import BluemixClient
from loopback_bluemix.config import BluemixConfig
from loopback_bluemix.models import Session

API_URL = "https://api.example.test"


def resource(guid: str, **entity: Any) -> Dict[str, Any]:
    """A v2 resource envelope entry."""
    return {"metadata": {"guid": guid, "url": f"/v2/things/{guid}"}, "entity": entity}


def page(*resources: Dict[str, Any], next_url: Optional[str] = None) -> Dict[str, Any]:
    return {
        "total_results": len(resources),
        "next_url": next_url,
        "resources": list(resources),
    }


class FakeApi:
    """Routes requests by (method, path?query) to canned responses."""

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str], Any] = {}
        self.requests: List[httpx.Request] = []

    def add(
        self,
        method: str,
        path: str,
        status: int = 200,
        json: Any = None,
        content: Optional[bytes] = None,
        exc: Optional[type[Exception]] = None,
    ) -> None:
        self.routes[(method.upper(), path)] = (status, json, content, exc)

    def get(self, path: str, json: Any = None, **kwargs: Any) -> None:
        self.add("GET", path, json=json, **kwargs)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.raw_path.decode("ascii"))
        if key not in self.routes:
            key = (request.method, request.url.path)
        if key not in self.routes:
            return httpx.Response(404, json={"description": f"no route for {key}"})

        status, body, content, exc = self.routes[key]
        if exc is not None:
            raise exc("connection refused", request=request)
        if content is not None:
            return httpx.Response(status, content=content)
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)

    def paths(self) -> List[str]:
        return [r.url.raw_path.decode("ascii") for r in self.requests]


@pytest.fixture
def api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def session() -> Session:
    return Session(
        organization_name="demo-org",
        organization_id="org-1",
        space_name="dev",
        space_id="space-1",
        api_base_url=API_URL,
        access_token="token-123",
    )


@pytest.fixture
def client(api: FakeApi, session: Session) -> BluemixClient:
    return BluemixClient(
        config=BluemixConfig(),
        session=session,
        transport=httpx.MockTransport(api.handler),
    )
