# LoopBack Bluemix Helper
# File: auth.py
# Version: v1

"""Password / passcode login against the Bluemix UAA."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from .config import BluemixConfig
from .rest import send_json

# The cf CLI's public OAuth client: id "cf", empty secret.
CF_CLIENT_ID = "cf"
CF_CLIENT_SECRET = ""


@dataclass
class LoginClient:
    """Exchange user credentials or a one-time passcode for a bearer token.

    The UAA host is discovered from the API's ``/info`` document; when that
    document has no ``authorization_endpoint`` the configured default
    ``auth_url`` is used.
    """

    config: BluemixConfig
    transport: Optional[httpx.AsyncBaseTransport] = None

    async def get_authorization_endpoint(
        self,
        api_url: str | None = None,
        info_url: str | None = None,
    ) -> str:
        url = info_url or self.config.resolved_info_url(api_url)
        info = await send_json(
            "GET",
            url,
            headers={"Accept": "application/json"},
            verify=self.config.verify_tls,
            transport=self.transport,
        )
        endpoint = info.get("authorization_endpoint") if isinstance(info, dict) else None
        return (endpoint or self.config.auth_url).rstrip("/")

    async def login(
        self,
        username: str | None,
        password: str,
        sso: bool = False,
        api_url: str | None = None,
        info_url: str | None = None,
    ) -> Dict[str, Any]:
        """Return the UAA token response (``access_token``, ``token_type``, ...).

        With ``sso=True`` the ``password`` argument is the one-time passcode
        and ``username`` is ignored. A 401 from UAA surfaces as a plain
        ``ApiError``.
        """
        auth_endpoint = await self.get_authorization_endpoint(api_url, info_url)
        token_url = f"{auth_endpoint}/oauth/token"

        form: Dict[str, str] = {"grant_type": "password", "client_id": CF_CLIENT_ID}
        if sso:
            form["passcode"] = password
        else:
            form["username"] = username or ""
            form["password"] = password

        return await send_json(
            "POST",
            token_url,
            headers={"Accept": "application/json"},
            form=form,
            auth=(CF_CLIENT_ID, CF_CLIENT_SECRET),
            verify=self.config.verify_tls,
            transport=self.transport,
        )
