# LoopBack Bluemix Helper
# File: rest.py
# Version: v1

"""Single HTTP exchange with the Bluemix API and UAA.

Both the resource client and the login handshake go through ``send_json``
so that transport failures and non-2xx responses are reported the same way.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx
from httpx import RequestError

from .errors import ApiError, TransportError

PLATFORM_NAME = "Bluemix"


def _error_body(response: httpx.Response) -> Dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def parse_response(response: httpx.Response) -> Any:
    """Return the JSON body of a 2xx response, else raise ``ApiError``."""
    status = response.status_code
    if not response.is_success:
        body = _error_body(response)
        message = (
            body.get("description")
            or body.get("error_description")
            or f"{PLATFORM_NAME} api error: {status}"
        )
        raise ApiError(str(message), status_code=status, fields=body)

    if not response.content:
        return None

    try:
        return response.json()
    except ValueError as exc:
        raise ApiError(
            f"{PLATFORM_NAME} api error: {status} (response is not JSON)",
            status_code=status,
        ) from exc


async def send_json(
    method: str,
    url: str,
    *,
    headers: Dict[str, str],
    params: Any = None,
    json_body: Any = None,
    form: Optional[Dict[str, str]] = None,
    auth: Optional[tuple[str, str]] = None,
    verify: bool = True,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Any:
    """Issue one request and normalize its outcome."""
    request_kwargs: Dict[str, Any] = {"headers": headers}
    if params:
        request_kwargs["params"] = params
    if json_body is not None:
        request_kwargs["json"] = json_body
    if form is not None:
        request_kwargs["data"] = form
    if auth is not None:
        request_kwargs["auth"] = auth

    async with httpx.AsyncClient(verify=verify, transport=transport) as http_client:
        try:
            response = await http_client.request(method.upper(), url, **request_kwargs)
        except RequestError as exc:
            raise TransportError(
                f"Error calling {PLATFORM_NAME} API at '{url}': {exc}", cause=exc
            ) from exc

    return parse_response(response)
