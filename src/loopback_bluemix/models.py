# LoopBack Bluemix Helper
# File: models.py
# Version: v1

"""Domain models used by the Bluemix client."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

# camelCase keys of the session snapshot file -> Session attribute
_SESSION_KEYS = {
    "organizationName": "organization_name",
    "organizationId": "organization_id",
    "spaceName": "space_name",
    "spaceId": "space_id",
    "apiBaseUrl": "api_base_url",
    "accessToken": "access_token",
}


@dataclass(frozen=True)
class Session:
    """The logged-in target: organization, space, API endpoint and token.

    ``Session()`` is the empty session; callers treat it as "not logged in".
    """

    organization_name: Optional[str] = None
    organization_id: Optional[str] = None
    space_name: Optional[str] = None
    space_id: Optional[str] = None
    api_base_url: Optional[str] = None
    access_token: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.access_token)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Session":
        values: Dict[str, Any] = {}
        for key, attr in _SESSION_KEYS.items():
            value = data.get(key, data.get(attr))
            if value is not None:
                values[attr] = value
        return cls(**values)

    def as_dict(self) -> Dict[str, Optional[str]]:
        return {key: getattr(self, attr) for key, attr in _SESSION_KEYS.items()}

    def with_token(self, access_token: str) -> "Session":
        return replace(self, access_token=access_token)


# Accepted spellings for each QueryOptions field.
_OPTION_KEYS = {
    "apiBaseUrl": "api_base_url",
    "api_base_url": "api_base_url",
    "apiURL": "api_base_url",
    "tokenType": "token_type",
    "token_type": "token_type",
    "method": "method",
    "body": "body",
    "q": "q",
    "page": "page",
    "resultsPerPage": "results_per_page",
    "results_per_page": "results_per_page",
    "orderDirection": "order_direction",
    "order_direction": "order_direction",
}


@dataclass(frozen=True)
class QueryOptions:
    """Per-request options understood by ``BluemixClient.invoke_resource``.

    ``q``, ``page``, ``results_per_page`` and ``order_direction`` are sent
    verbatim as the ``q``, ``page``, ``results-per-page`` and
    ``order-direction`` query parameters.
    """

    api_base_url: Optional[str] = None
    token_type: str = "bearer"
    method: str = "GET"
    body: Any = None
    q: Union[str, Sequence[str], None] = None
    page: Optional[int] = None
    results_per_page: Optional[int] = None
    order_direction: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "QueryOptions":
        """Build options from a loose mapping, ignoring unknown keys."""
        values: Dict[str, Any] = {}
        for key, value in data.items():
            attr = _OPTION_KEYS.get(key)
            if attr is not None and value is not None:
                values[attr] = value
        return cls(**values)

    def query_params(self) -> List[tuple[str, Any]]:
        params: List[tuple[str, Any]] = []
        if self.q is not None:
            if isinstance(self.q, str):
                params.append(("q", self.q))
            else:
                params.extend(("q", item) for item in self.q)
        if self.page is not None:
            params.append(("page", self.page))
        if self.results_per_page is not None:
            params.append(("results-per-page", self.results_per_page))
        if self.order_direction is not None:
            params.append(("order-direction", self.order_direction))
        return params

    def for_lookup(self) -> "QueryOptions":
        """Options for following a ``*_url`` link: same host and auth, no filters."""
        return QueryOptions(api_base_url=self.api_base_url, token_type=self.token_type)


OptionsLike = Union[QueryOptions, Mapping[str, Any], None]


def coerce_options(options: OptionsLike) -> QueryOptions:
    if options is None:
        return QueryOptions()
    if isinstance(options, QueryOptions):
        return options
    return QueryOptions.from_mapping(options)


@dataclass(frozen=True)
class ServiceInstanceJoin:
    """A service instance together with its plan and service definition."""

    instance: Dict[str, Any]
    service: Dict[str, Any]
    plan: Dict[str, Any]

    @property
    def name(self) -> Optional[str]:
        return self.instance.get("entity", {}).get("name")

    @property
    def guid(self) -> Optional[str]:
        return self.instance.get("metadata", {}).get("guid")

    @property
    def label(self) -> Optional[str]:
        return self.service.get("entity", {}).get("label")

    @property
    def plan_name(self) -> Optional[str]:
        return self.plan.get("entity", {}).get("name")

    @property
    def tags(self) -> List[str]:
        return list(self.service.get("entity", {}).get("tags") or [])

    @property
    def is_free(self) -> bool:
        return bool(self.plan.get("entity", {}).get("free"))
