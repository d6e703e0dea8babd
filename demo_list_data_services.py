# demo_list_data_services.py
# Version: v1
#
# Demo: discover the local Bluemix login and list the data service
# instances in the targeted space that a LoopBack connector can use.
#
# Usage:
#
#   bx login && bx target -o <org> -s <space>
#   python demo_list_data_services.py

import asyncio

from loopback_bluemix.client import BluemixClient
from loopback_bluemix.config import BluemixConfig
from loopback_bluemix.registry import get_configured_registry
from loopback_bluemix.session import discover_session


async def main() -> None:
    cfg = BluemixConfig.from_env()
    session = discover_session(cfg)
    if not session.is_authenticated:
        return

    client = BluemixClient(
        config=cfg,
        session=session,
        supported_services=get_configured_registry(cfg),
    )

    print(f"Space: {session.space_name} ({session.space_id})")
    joins = await client.list_space_data_service_instances()
    print(f"Data service instances: {len(joins)}")

    for j in joins:
        connector = client.supported_services.connector_for_label(j.label)
        free = " (free)" if j.is_free else ""
        print(f"- {j.name}: {j.label} / {j.plan_name}{free} -> {connector}")

    services = await client.get_supported_services()
    print(f"Supported services in the marketplace: {len(services)}")
    for s in services[:10]:
        print(f"- {s['entity'].get('label')}: {s['entity'].get('description')}")


if __name__ == "__main__":
    asyncio.run(main())
