"""Per-client WordPress site configuration.

Clients are described by a JSON object keyed by client name, read from the
``CLIENTS_CONFIG`` environment variable or a ``clients.json`` file::

    {
      "default": {
        "name": "Main blog",
        "wp_site": "https://example.com",
        "wp_user": "editor",
        "wp_app_password": "xxxx xxxx xxxx",
        "default_status": "draft",
        "request_delay_ms": 300
      }
    }

Every field falls back to the matching ``WP_*`` environment variable, so a
single-site setup can skip the registry entirely.
"""

from __future__ import annotations

import base64
import json
import os
from dataclasses import dataclass
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING, Final

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .env import first_env_var
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

if TYPE_CHECKING:
    from collections.abc import Mapping

log = getLogger(__name__)

DEFAULT_CLIENT_KEY: Final[str] = "default"
DEFAULT_CLIENTS_FILENAME: Final[str] = "clients.json"
DEFAULT_STATUS: Final[str] = "draft"
DEFAULT_REQUEST_DELAY_MS: Final[int] = 300
DEFAULT_TIMEOUT_SECONDS: Final[float] = 30.0
DEFAULT_COLLECTION: Final[str] = "posts"
API_PATH: Final[str] = "/wp-json/wp/v2"


class ClientEntry(BaseModel):
    """One entry of the client registry as written by users."""

    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    wp_site: str | None = None
    wp_user: str | None = None
    wp_app_password: str | None = None
    default_status: str | None = None
    request_delay_ms: int | None = None
    timeout_seconds: float | None = None
    retries: int | None = None
    rate_limit_per_second: float | None = None
    collection: str | None = None

    @field_validator("request_delay_ms", "retries", mode="before")
    @classmethod
    def _parse_int(cls, value: object) -> object:
        if isinstance(value, str):
            stripped = value.strip()
            return int(stripped) if stripped else None
        return value


@dataclass(frozen=True, slots=True)
class ClientConfig:
    """Resolved connection settings for one WordPress site."""

    key: str
    name: str
    site: str
    user: str
    app_password: str
    default_status: str = DEFAULT_STATUS
    request_delay_ms: int = DEFAULT_REQUEST_DELAY_MS
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    retries: int = 0
    rate_limit_per_second: float | None = None
    collection: str = DEFAULT_COLLECTION

    @property
    def api_base_url(self) -> str:
        return f"{self.site.rstrip('/')}{API_PATH}"

    @property
    def request_delay_seconds(self) -> float:
        return max(self.request_delay_ms, 0) / 1000

    def authorization_header(self) -> str:
        token = base64.b64encode(f"{self.user}:{self.app_password}".encode()).decode("ascii")
        return f"Basic {token}"

    def resilience(self) -> ResilienceConfig:
        return ResilienceConfig(
            name=f"wordpress:{self.key}",
            base_url=self.api_base_url,
            timeout_seconds=self.timeout_seconds,
            retry=RetryPolicy(total=self.retries) if self.retries > 0 else None,
            ratelimit=(
                RateLimit(max_calls=1, per_seconds=1 / self.rate_limit_per_second)
                if self.rate_limit_per_second
                else None
            ),
            default_headers={
                "Authorization": self.authorization_header(),
                "Accept": "application/json",
            },
        )


def get_clients_file() -> Path:
    override = os.getenv("PRESSYNC_CLIENTS_FILE")
    return Path(override).expanduser() if override else Path.cwd() / DEFAULT_CLIENTS_FILENAME


def load_clients(path: Path | None = None) -> dict[str, ClientEntry]:
    """Load the client registry from ``CLIENTS_CONFIG`` or the clients file.

    Returns an empty mapping when neither source exists.
    """

    raw_env = os.getenv("CLIENTS_CONFIG")
    if raw_env and raw_env.strip():
        try:
            registry = _parse_registry(json.loads(raw_env))
        except (json.JSONDecodeError, ConfigurationError) as exc:
            log.error("Failed to parse CLIENTS_CONFIG, falling back to clients file: %s", exc)
        else:
            log.info("Loaded client configurations from CLIENTS_CONFIG")
            return registry

    clients_file = path or get_clients_file()
    if not clients_file.exists():
        return {}
    try:
        payload = json.loads(clients_file.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"Failed to parse {clients_file}: {exc}") from exc
    registry = _parse_registry(payload)
    log.info("Loaded client configurations from %s", clients_file)
    return registry


def get_client_config(
    key: str | None = None,
    *,
    clients: Mapping[str, ClientEntry] | None = None,
) -> ClientConfig:
    """Resolve the configuration for ``key`` with environment fallbacks."""

    registry = load_clients() if clients is None else clients
    selected = key or first_env_var("PRESSYNC_CLIENT", "CLIENT") or DEFAULT_CLIENT_KEY

    if selected in registry:
        entry = registry[selected]
    elif not registry and selected == DEFAULT_CLIENT_KEY:
        entry = ClientEntry()
    else:
        available = ", ".join(sorted(registry)) or "none"
        raise ConfigurationError(f'Client "{selected}" not found (available: {available})')

    site = entry.wp_site or first_env_var("WP_SITE")
    user = entry.wp_user or first_env_var("WP_USER")
    app_password = entry.wp_app_password or first_env_var("WP_APP_PASSWORD")
    missing = [
        name
        for name, value in (
            ("WP_SITE", site),
            ("WP_USER", user),
            ("WP_APP_PASSWORD", app_password),
        )
        if not value
    ]
    if missing or site is None or user is None or app_password is None:
        raise MissingConfigurationError(selected, missing)

    delay = entry.request_delay_ms
    if delay is None:
        delay = _int_from_env("REQUEST_DELAY_MS", DEFAULT_REQUEST_DELAY_MS)

    return ClientConfig(
        key=selected,
        name=entry.name or selected,
        site=site.strip().rstrip("/"),
        user=user.strip(),
        app_password=app_password.strip(),
        default_status=entry.default_status or first_env_var("DEFAULT_STATUS") or DEFAULT_STATUS,
        request_delay_ms=delay,
        timeout_seconds=entry.timeout_seconds or DEFAULT_TIMEOUT_SECONDS,
        retries=entry.retries or 0,
        rate_limit_per_second=entry.rate_limit_per_second,
        collection=entry.collection or DEFAULT_COLLECTION,
    )


def _parse_registry(payload: object) -> dict[str, ClientEntry]:
    if not isinstance(payload, dict):
        raise ConfigurationError("Client configuration must be a JSON object keyed by client")
    registry: dict[str, ClientEntry] = {}
    for key, value in payload.items():
        try:
            registry[str(key)] = ClientEntry.model_validate(value)
        except ValidationError as exc:
            raise ConfigurationError(f'Invalid configuration for client "{key}": {exc}') from exc
    return registry


def _int_from_env(name: str, default: int) -> int:
    raw = first_env_var(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc
