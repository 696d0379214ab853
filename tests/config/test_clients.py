from __future__ import annotations

import base64
import json
from pathlib import Path  # noqa: TC003

import pytest

from pressync.config import (
    ClientEntry,
    ConfigurationError,
    MissingConfigurationError,
    get_client_config,
    load_clients,
)

REGISTRY = {
    "default": {
        "name": "Main blog",
        "wp_site": "https://main.example.test/",
        "wp_user": "editor",
        "wp_app_password": "abcd efgh",
    },
    "acme": {
        "wp_site": "https://acme.example.test",
        "wp_user": "acme",
        "wp_app_password": "secret",
        "default_status": "publish",
        "request_delay_ms": "150",
        "retries": 2,
        "rate_limit_per_second": 4,
        "collection": "pages",
    },
}


def _set_wp_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WP_SITE", "https://env.example.test")
    monkeypatch.setenv("WP_USER", "env-user")
    monkeypatch.setenv("WP_APP_PASSWORD", "env-pass")


def test_load_clients_reads_env_registry(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CLIENTS_CONFIG", json.dumps(REGISTRY))

    clients = load_clients()

    assert set(clients) == {"default", "acme"}
    assert clients["acme"].request_delay_ms == 150


def test_load_clients_falls_back_to_file_on_bad_env(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    path = tmp_path / "clients.json"
    path.write_text(json.dumps({"acme": REGISTRY["acme"]}), encoding="utf-8")
    monkeypatch.setenv("CLIENTS_CONFIG", "{not json")

    clients = load_clients(path)

    assert list(clients) == ["acme"]


def test_load_clients_uses_clients_file_override(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    path = tmp_path / "custom.json"
    path.write_text(json.dumps(REGISTRY), encoding="utf-8")
    monkeypatch.setenv("PRESSYNC_CLIENTS_FILE", str(path))

    assert set(load_clients()) == {"default", "acme"}


def test_load_clients_without_sources_is_empty() -> None:
    assert load_clients() == {}


def test_load_clients_rejects_malformed_file(tmp_path: Path) -> None:
    path = tmp_path / "clients.json"
    path.write_text("[1, 2]", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="JSON object"):
        load_clients(path)


def test_get_client_config_selects_named_client() -> None:
    clients = {key: ClientEntry.model_validate(value) for key, value in REGISTRY.items()}

    config = get_client_config("acme", clients=clients)

    assert config.key == "acme"
    assert config.name == "acme"
    assert config.default_status == "publish"
    assert config.request_delay_ms == 150
    assert config.request_delay_seconds == 0.15
    assert config.collection == "pages"
    resilience = config.resilience()
    assert resilience.base_url == "https://acme.example.test/wp-json/wp/v2"
    assert resilience.retry is not None
    assert resilience.retry.total == 2
    assert resilience.ratelimit is not None
    assert resilience.ratelimit.per_seconds == 0.25


def test_get_client_config_defaults_to_default_key() -> None:
    clients = {key: ClientEntry.model_validate(value) for key, value in REGISTRY.items()}

    config = get_client_config(clients=clients)

    assert config.name == "Main blog"
    assert config.site == "https://main.example.test"
    assert config.api_base_url == "https://main.example.test/wp-json/wp/v2"
    assert config.default_status == "draft"
    assert config.request_delay_ms == 300
    assert config.resilience().retry is None
    assert config.resilience().ratelimit is None


def test_get_client_config_reads_key_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    clients = {key: ClientEntry.model_validate(value) for key, value in REGISTRY.items()}
    monkeypatch.setenv("CLIENT", "acme")

    assert get_client_config(clients=clients).key == "acme"


def test_get_client_config_unknown_key_lists_available() -> None:
    clients = {key: ClientEntry.model_validate(value) for key, value in REGISTRY.items()}

    message = r'Client "nope" not found \(available: acme, default\)'
    with pytest.raises(ConfigurationError, match=message):
        get_client_config("nope", clients=clients)


def test_get_client_config_from_environment_only(monkeypatch: pytest.MonkeyPatch) -> None:
    _set_wp_env(monkeypatch)
    monkeypatch.setenv("DEFAULT_STATUS", "pending")
    monkeypatch.setenv("REQUEST_DELAY_MS", "0")

    config = get_client_config()

    assert config.key == "default"
    assert config.site == "https://env.example.test"
    assert config.default_status == "pending"
    assert config.request_delay_ms == 0
    expected = base64.b64encode(b"env-user:env-pass").decode("ascii")
    assert config.authorization_header() == f"Basic {expected}"


def test_get_client_config_entry_fields_fall_back_to_env(monkeypatch: pytest.MonkeyPatch) -> None:
    _set_wp_env(monkeypatch)
    clients = {"partial": ClientEntry(wp_site="https://partial.example.test")}

    config = get_client_config("partial", clients=clients)

    assert config.site == "https://partial.example.test"
    assert config.user == "env-user"


def test_get_client_config_reports_missing_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WP_SITE", "https://env.example.test")

    with pytest.raises(MissingConfigurationError) as exc:
        get_client_config()

    assert "WP_USER" in str(exc.value)
    assert "WP_APP_PASSWORD" in str(exc.value)


def test_get_client_config_rejects_non_integer_delay(monkeypatch: pytest.MonkeyPatch) -> None:
    _set_wp_env(monkeypatch)
    monkeypatch.setenv("REQUEST_DELAY_MS", "fast")

    with pytest.raises(ConfigurationError, match="REQUEST_DELAY_MS must be an integer"):
        get_client_config()
