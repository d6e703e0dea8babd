# LoopBack Bluemix Helper
# File: client.py
# Version: v1
"""Client for the Bluemix (Cloud Foundry v2) REST API.

Implements:

- invoke_resource() / get_resource(), the authenticated request primitive
- login() via the UAA password grant
- get_organizations(), get_spaces(), get_apps(), get_services(),
  get_service_plans()
- get_service_instances() joined with plan and service definitions
- get_data_service_instances() filtered by the supported-service registry
- get_marketplace_services() / get_supported_services() across pages
- bind_service() and provision_service()

See http://apidocs.cloudfoundry.org/253/
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import httpx

from .auth import LoginClient
from .config import BluemixConfig
from .errors import ConfigError, PaginationLimitError
from .models import OptionsLike, QueryOptions, ServiceInstanceJoin, Session, coerce_options
from .registry import SupportedServices
from .rest import send_json

logger = logging.getLogger(__name__)

Parent = Union[str, Mapping[str, Any], None]

DATA_SERVICE_TAG = "data_management"


def get_path(parent: Parent, child_name: str) -> Optional[str]:
    """Resource path of ``child_name`` under ``parent``.

    - ``"/v2/spaces/abc"`` -> ``"/v2/spaces/abc/<child>"``
    - a fetched resource -> its ``entity["<child>_url"]``
    - ``None`` -> ``"/v2/<child>"``
    """
    if isinstance(parent, str):
        return f"{parent}/{child_name}"
    if isinstance(parent, Mapping) and "entity" in parent:
        return parent["entity"].get(f"{child_name}_url")
    return f"/v2/{child_name}"


def _child_path(parent: Parent, child_name: str) -> str:
    path = get_path(parent, child_name)
    if not path:
        raise ConfigError(f"Parent resource has no '{child_name}_url' field.")
    return path


def _is_absolute(path: str) -> bool:
    return path.startswith("http://") or path.startswith("https://")


def _resources(body: Any) -> List[Dict[str, Any]]:
    if isinstance(body, dict):
        return list(body.get("resources") or [])
    return []


@dataclass
class BluemixClient:
    """Wrapper around the Cloud Foundry v2 resources used by the generator.

    ``session`` supplies the default token, API host and space. Every call
    also accepts an explicit ``access_token``.
    """

    config: BluemixConfig
    session: Session = field(default_factory=Session)
    supported_services: SupportedServices = field(default_factory=SupportedServices.default)
    transport: Optional[httpx.AsyncBaseTransport] = None

    # ------------------------------------------------------------------
    # Request primitive
    # ------------------------------------------------------------------

    def _api_url(self, options: QueryOptions) -> str:
        base = options.api_base_url or self.session.api_base_url or self.config.api_url
        return base.rstrip("/")

    def _token(self, access_token: str | None) -> str:
        token = access_token or self.session.access_token
        if not token:
            raise ConfigError(
                "No Bluemix access token. Log in with `bx login` or call login() first."
            )
        return token

    async def invoke_resource(
        self,
        path: str | None,
        access_token: str | None = None,
        options: OptionsLike = None,
    ) -> Any:
        """Call one API resource and return its parsed JSON body.

        ``path`` is either an API path (``/v2/...``) or an absolute URL as
        found in ``*_url`` / ``next_url`` fields, which is used unmodified.
        """
        opts = coerce_options(options)
        token = self._token(access_token)
        if not path:
            raise ConfigError("A resource path is required.")

        url = path if _is_absolute(path) else self._api_url(opts) + path
        headers = {
            "Accept": "application/json",
            "Authorization": f"{opts.token_type} {token}",
        }

        return await send_json(
            opts.method,
            url,
            headers=headers,
            params=opts.query_params(),
            json_body=opts.body,
            verify=self.config.verify_tls,
            transport=self.transport,
        )

    async def get_resource(
        self,
        path: str | None,
        access_token: str | None = None,
        options: OptionsLike = None,
    ) -> Any:
        opts = replace(coerce_options(options), method="GET", body=None)
        return await self.invoke_resource(path, access_token, opts)

    async def _list(
        self,
        path: str | None,
        access_token: str | None,
        options: OptionsLike,
    ) -> List[Dict[str, Any]]:
        body = await self.get_resource(path, access_token, options)
        return _resources(body)

    # ------------------------------------------------------------------
    # Login
    # ------------------------------------------------------------------

    async def login(
        self,
        username: str | None,
        password: str,
        sso: bool = False,
        options: OptionsLike = None,
    ) -> Dict[str, Any]:
        """Log in with a password (or passcode when ``sso``); return the token body."""
        opts = coerce_options(options)
        login_client = LoginClient(config=self.config, transport=self.transport)
        return await login_client.login(
            username,
            password,
            sso=sso,
            api_url=self._api_url(opts),
        )

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    async def get_organizations(
        self, options: OptionsLike = None, access_token: str | None = None
    ) -> List[Dict[str, Any]]:
        return await self._list("/v2/organizations", access_token, options)

    async def get_spaces(
        self,
        org: Parent = None,
        options: OptionsLike = None,
        access_token: str | None = None,
    ) -> List[Dict[str, Any]]:
        return await self._list(_child_path(org, "spaces"), access_token, options)

    async def get_apps(
        self,
        parent: Parent = None,
        options: OptionsLike = None,
        access_token: str | None = None,
    ) -> List[Dict[str, Any]]:
        return await self._list(_child_path(parent, "apps"), access_token, options)

    async def get_services(
        self,
        parent: Parent = None,
        options: OptionsLike = None,
        access_token: str | None = None,
    ) -> List[Dict[str, Any]]:
        return await self._list(_child_path(parent, "services"), access_token, options)

    async def get_service_plans(
        self,
        parent: Parent = None,
        options: OptionsLike = None,
        access_token: str | None = None,
    ) -> List[Dict[str, Any]]:
        return await self._list(_child_path(parent, "service_plans"), access_token, options)

    # ------------------------------------------------------------------
    # Service instances
    # ------------------------------------------------------------------

    async def _join_service_instance(
        self,
        instance: Dict[str, Any],
        token: str,
        options: QueryOptions,
    ) -> ServiceInstanceJoin:
        entity = instance.get("entity", {})
        plan = await self.get_resource(entity.get("service_plan_url"), token, options)
        service = await self.get_resource(plan["entity"].get("service_url"), token, options)

        logger.debug(
            "%s (%s:%s%s)",
            entity.get("name"),
            service["entity"].get("label"),
            plan["entity"].get("name"),
            "*" if plan["entity"].get("free") else "",
        )
        return ServiceInstanceJoin(instance=instance, service=service, plan=plan)

    async def get_service_instances(
        self,
        parent: Parent = None,
        options: OptionsLike = None,
        access_token: str | None = None,
    ) -> List[ServiceInstanceJoin]:
        """List service instances with their plan and service resolved.

        Joins run concurrently. The first failing lookup cancels the rest and
        its error is raised as-is; no partial list is returned.
        """
        opts = coerce_options(options)
        token = self._token(access_token)
        instances = await self._list(_child_path(parent, "service_instances"), token, opts)

        lookup = opts.for_lookup()
        joins = [
            asyncio.ensure_future(self._join_service_instance(inst, token, lookup))
            for inst in instances
        ]
        try:
            return list(await asyncio.gather(*joins))
        except BaseException:
            for join in joins:
                join.cancel()
            await asyncio.gather(*joins, return_exceptions=True)
            raise

    async def get_data_service_instances(
        self,
        parent: Parent = None,
        options: OptionsLike = None,
        access_token: str | None = None,
        supported: SupportedServices | None = None,
    ) -> List[ServiceInstanceJoin]:
        """Service instances whose service label is in the supported registry."""
        registry = supported if supported is not None else self.supported_services
        labels = registry.labels
        joins = await self.get_service_instances(parent, options, access_token)
        return [j for j in joins if j.label in labels]

    async def get_tagged_service_instances(
        self,
        parent: Parent = None,
        tags: Iterable[str] = (DATA_SERVICE_TAG,),
        options: OptionsLike = None,
        access_token: str | None = None,
    ) -> List[ServiceInstanceJoin]:
        """Service instances whose service tags include any of ``tags``.

        Older generator releases treated every ``data_management`` service as
        a data service; get_data_service_instances() is the current filter.
        """
        wanted = set(tags)
        joins = await self.get_service_instances(parent, options, access_token)
        return [j for j in joins if wanted.intersection(j.tags)]

    async def list_space_data_service_instances(
        self, access_token: str | None = None
    ) -> List[ServiceInstanceJoin]:
        """Supported data service instances in the session's current space."""
        space_id = self.resolve_space_id(None)
        logger.debug("Space: %s (%s)", self.session.space_name, space_id)
        return await self.get_data_service_instances(
            f"/v2/spaces/{space_id}", access_token=access_token
        )

    # ------------------------------------------------------------------
    # Marketplace
    # ------------------------------------------------------------------

    def resolve_space_id(self, space_guid: str | None) -> str:
        space_id = space_guid or self.session.space_id
        if not space_id:
            raise ConfigError(
                "No Bluemix space selected. Target a space with `bx target -s <space>`."
            )
        return space_id

    async def get_marketplace_services(
        self,
        space_guid: str | None = None,
        options: OptionsLike = None,
        access_token: str | None = None,
    ) -> List[Dict[str, Any]]:
        """All services in a space's marketplace, following ``next_url``."""
        opts = coerce_options(options)
        token = self._token(access_token)
        path: Optional[str] = f"/v2/spaces/{self.resolve_space_id(space_guid)}/services"

        max_pages = self.config.max_marketplace_pages
        accumulated: List[Dict[str, Any]] = []
        page_options = opts
        pages = 0

        while path:
            pages += 1
            if max_pages and pages > max_pages:
                raise PaginationLimitError(
                    f"Marketplace listing exceeded {max_pages} pages; last next_url was '{path}'."
                )

            body = await self.get_resource(path, token, page_options)
            resources = _resources(body)
            accumulated.extend(resources)
            logger.debug("Marketplace page %d: %d services", pages, len(resources))

            path = body.get("next_url") if isinstance(body, dict) else None
            # next_url already carries the filters of the first request
            page_options = opts.for_lookup()

        return accumulated

    async def get_supported_services(
        self,
        space_guid: str | None = None,
        options: OptionsLike = None,
        access_token: str | None = None,
        supported: SupportedServices | None = None,
    ) -> List[Dict[str, Any]]:
        """Marketplace services whose label is in the supported registry, in API order."""
        registry = supported if supported is not None else self.supported_services
        labels = registry.labels
        services = await self.get_marketplace_services(space_guid, options, access_token)
        return [s for s in services if s.get("entity", {}).get("label") in labels]

    # ------------------------------------------------------------------
    # Bindings and provisioning
    # ------------------------------------------------------------------

    async def bind_service(
        self,
        app_guid: str,
        service_instance_guid: str,
        parent: Parent = None,
        options: OptionsLike = None,
        access_token: str | None = None,
    ) -> Dict[str, Any]:
        """Bind a service instance to an app; returns the binding resource.

        A repeated binding fails with ``ApiError`` whose ``error_code`` is
        ``CF-ServiceBindingAppServiceTaken``.
        """
        opts = coerce_options(options)
        post = QueryOptions(
            api_base_url=opts.api_base_url,
            token_type=opts.token_type,
            method="POST",
            body={"app_guid": app_guid, "service_instance_guid": service_instance_guid},
        )
        return await self.invoke_resource(
            _child_path(parent, "service_bindings"), access_token, post
        )

    async def provision_service(
        self,
        name: str,
        service_plan_guid: str,
        space_guid: str | None = None,
        options: OptionsLike = None,
        access_token: str | None = None,
    ) -> Dict[str, Any]:
        """Create a service instance; returns the new instance resource."""
        opts = coerce_options(options)
        post = QueryOptions(
            api_base_url=opts.api_base_url,
            token_type=opts.token_type,
            method="POST",
            body={
                "name": name,
                "service_plan_guid": service_plan_guid,
                "space_guid": self.resolve_space_id(space_guid),
            },
        )
        return await self.invoke_resource("/v2/service_instances", access_token, post)
