# LoopBack Bluemix Helper
# File: tests/test_service_instances.py
# Version: v1

"""Tests for the instance -> plan -> service join and its filters."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional

import httpx
import pytest

from loopback_bluemix.client import BluemixClient
from loopback_bluemix.config import BluemixConfig
from loopback_bluemix.errors import ApiError, ConfigError, TransportError
from loopback_bluemix.models import Session
from loopback_bluemix.registry import SupportedServices

from conftest import page, resource


def _add_instance(
    api,
    n: int,
    label: str,
    tags: Optional[List[str]] = None,
    free: bool = False,
) -> Dict[str, Any]:
    instance = resource(
        f"inst-{n}",
        name=f"service-{n}",
        service_plan_url=f"/v2/service_plans/plan-{n}",
    )
    api.get(
        f"/v2/service_plans/plan-{n}",
        resource(f"plan-{n}", name="Lite" if free else "Standard", free=free, service_url=f"/v2/services/svc-{n}"),
    )
    api.get(f"/v2/services/svc-{n}", resource(f"svc-{n}", label=label, tags=tags or []))
    return instance


@pytest.fixture
def three_instances(api) -> List[Dict[str, Any]]:
    instances = [
        _add_instance(api, 1, "compose-for-mongodb", ["data_management"]),
        _add_instance(api, 2, "rabbitmq", ["data_management", "messaging"]),
        _add_instance(api, 3, "AutoScaling", ["ibm_created"], free=True),
    ]
    api.get("/v2/service_instances", page(*instances))
    return instances


@pytest.mark.asyncio
async def test_instances_are_joined_with_plan_and_service(client, three_instances) -> None:
    joins = await client.get_service_instances()

    assert [j.instance for j in joins] == three_instances
    assert [j.label for j in joins] == ["compose-for-mongodb", "rabbitmq", "AutoScaling"]
    assert [j.plan_name for j in joins] == ["Standard", "Standard", "Lite"]
    assert joins[2].is_free is True
    assert joins[0].service["metadata"]["guid"] == "svc-1"
    assert joins[0].plan["metadata"]["guid"] == "plan-1"


@pytest.mark.asyncio
async def test_plan_failure_aborts_whole_aggregation(api, client, three_instances) -> None:
    api.get("/v2/service_plans/plan-2", status=500, json={"description": "plan lookup failed"})

    with pytest.raises(ApiError) as excinfo:
        await client.get_service_instances()

    assert str(excinfo.value) == "plan lookup failed"
    assert excinfo.value.status_code == 500


@pytest.mark.asyncio
async def test_service_transport_failure_is_reraised_unwrapped(api, client, three_instances) -> None:
    api.get("/v2/services/svc-3", exc=httpx.ConnectError)

    with pytest.raises(TransportError):
        await client.get_data_service_instances()


@pytest.mark.asyncio
async def test_lookups_do_not_carry_list_filters(api, client, three_instances) -> None:
    await client.get_service_instances(options={"q": "name:service-1", "resultsPerPage": 50})

    listing, *lookups = api.requests
    assert listing.url.params["results-per-page"] == "50"
    assert all(not r.url.params for r in lookups)


@pytest.mark.asyncio
async def test_instances_listed_under_string_and_resource_parents(api, client) -> None:
    inst = _add_instance(api, 1, "cloudantNoSQLDB")
    api.get("/v2/spaces/space-1/service_instances", page(inst))

    by_path = await client.get_service_instances("/v2/spaces/space-1")
    space = resource("space-1", service_instances_url="/v2/spaces/space-1/service_instances")
    by_resource = await client.get_service_instances(space)

    assert [j.guid for j in by_path] == ["inst-1"]
    assert by_resource == by_path


@pytest.mark.asyncio
async def test_empty_instance_list_joins_nothing(api, client) -> None:
    api.get("/v2/service_instances", page())

    assert await client.get_service_instances() == []
    assert len(api.requests) == 1


@pytest.mark.asyncio
async def test_data_services_filtered_by_supported_label(client, three_instances) -> None:
    joins = await client.get_data_service_instances()

    assert [j.name for j in joins] == ["service-1"]


@pytest.mark.asyncio
async def test_data_services_with_custom_registry(client, three_instances) -> None:
    registry = SupportedServices({"rabbit": {"label": "rabbitmq"}, "scale": {"label": "AutoScaling"}})

    joins = await client.get_data_service_instances(supported=registry)

    assert [j.name for j in joins] == ["service-2", "service-3"]


@pytest.mark.asyncio
async def test_legacy_tag_filter(client, three_instances) -> None:
    joins = await client.get_tagged_service_instances()

    assert [j.name for j in joins] == ["service-1", "service-2"]

    messaging = await client.get_tagged_service_instances(tags=["messaging"])
    assert [j.name for j in messaging] == ["service-2"]


@pytest.mark.asyncio
async def test_space_data_services_use_session_space(api, client) -> None:
    inst = _add_instance(api, 1, "compose-for-mysql")
    api.get("/v2/spaces/space-1/service_instances", page(inst))

    joins = await client.list_space_data_service_instances()

    assert [j.label for j in joins] == ["compose-for-mysql"]
    assert api.paths()[0] == "/v2/spaces/space-1/service_instances"


@pytest.mark.asyncio
async def test_space_data_services_need_a_targeted_space(api, client) -> None:
    client.session = Session(access_token="token-123")

    with pytest.raises(ConfigError):
        await client.list_space_data_service_instances()

    assert api.requests == []


@pytest.mark.asyncio
async def test_failed_join_waits_for_cancelled_siblings(session) -> None:
    cancelled: List[str] = []
    sibling_started = asyncio.Event()
    instances = page(
        resource("inst-1", name="a", service_plan_url="/v2/service_plans/plan-1"),
        resource("inst-2", name="b", service_plan_url="/v2/service_plans/plan-2"),
    )

    async def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/v2/service_instances":
            return httpx.Response(200, json=instances)
        if request.url.path == "/v2/service_plans/plan-1":
            await sibling_started.wait()
            return httpx.Response(500, json={"description": "boom"})
        sibling_started.set()
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            cancelled.append(request.url.path)
            raise
        return httpx.Response(200, json={})

    client = BluemixClient(
        config=BluemixConfig(),
        session=session,
        transport=httpx.MockTransport(handler),
    )

    with pytest.raises(ApiError):
        await client.get_service_instances()

    assert cancelled == ["/v2/service_plans/plan-2"]
