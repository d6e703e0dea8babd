# LoopBack Bluemix Helper
# File: tests/test_sanity.py
# Version: v1

"""Basic sanity tests for configuration and client construction."""

from pathlib import Path

from loopback_bluemix.client import BluemixClient
from loopback_bluemix.config import DEFAULT_API_URL, DEFAULT_AUTH_URL, BluemixConfig
from loopback_bluemix.models import Session


def test_config_from_env_defaults(monkeypatch) -> None:
    for name in (
        "BLUEMIX_API_URL",
        "BLUEMIX_AUTH_URL",
        "BLUEMIX_INFO_URL",
        "BLUEMIX_HOME",
        "BLUEMIX_SESSION_FILE",
        "BLUEMIX_DATASOURCES_CONFIG",
        "BLUEMIX_VERIFY_TLS",
        "BLUEMIX_MAX_MARKETPLACE_PAGES",
    ):
        monkeypatch.delenv(name, raising=False)

    config = BluemixConfig.from_env()
    assert config.api_url == DEFAULT_API_URL
    assert config.auth_url == DEFAULT_AUTH_URL
    assert config.info_url is None
    assert config.verify_tls is True
    assert config.max_marketplace_pages == 0
    assert config.resolved_info_url() == DEFAULT_API_URL + "/info"


def test_config_from_env_overrides(monkeypatch) -> None:
    monkeypatch.setenv("BLUEMIX_API_URL", "https://api.eu-gb.bluemix.net")
    monkeypatch.setenv("BLUEMIX_VERIFY_TLS", "no")
    monkeypatch.setenv("BLUEMIX_MAX_MARKETPLACE_PAGES", "999999")
    monkeypatch.setenv("BLUEMIX_HOME", "/home/dev")

    config = BluemixConfig.from_env()
    assert config.api_url == "https://api.eu-gb.bluemix.net"
    assert config.verify_tls is False
    assert config.max_marketplace_pages == 10000
    assert config.resolved_info_url() == "https://api.eu-gb.bluemix.net/info"
    assert config.credential_paths() == [
        Path("/home/dev/.bluemix/loopback-session.json"),
        Path("/home/dev/.cf/config.json"),
        Path("/home/dev/.bluemix/config.json"),
    ]


def test_invalid_page_bound_falls_back_to_default(monkeypatch) -> None:
    monkeypatch.setenv("BLUEMIX_MAX_MARKETPLACE_PAGES", "lots")
    assert BluemixConfig.from_env().max_marketplace_pages == 0


def test_client_starts_with_empty_session() -> None:
    client = BluemixClient(config=BluemixConfig())
    assert client.session == Session()
    assert client.session.is_authenticated is False
    assert "mongodb" in client.supported_services
