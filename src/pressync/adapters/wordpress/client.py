"""Rate-limited HTTP client for the WordPress REST API."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from pressync.adapters.http_resilience import ResilientClient
from pressync.domain.errors import ConnectivityError, RemoteAPIError
from pressync.domain.resources import ErrorResponse

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from types import TracebackType

    from pressync.config.clients import ClientConfig
    from pressync.config.http_resilience import ResilienceConfig

log = getLogger(__name__)


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


class WordPressClient:
    """Authenticated access to ``<site>/wp-json/wp/v2``.

    Mutating calls sleep for the configured delay before they are sent; reads
    go straight out. Non-2xx responses raise :class:`RemoteAPIError`. Nothing
    is retried unless the client config opts in.
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self.config = config
        self._delay = config.request_delay_seconds
        self._http = (client_factory or _default_client_factory)(config.resilience())

    async def __aenter__(self) -> WordPressClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def throttle(self) -> None:
        if self._delay > 0:
            await asyncio.sleep(self._delay)

    async def get(
        self,
        path: str,
        params: Mapping[str, str | int] | None = None,
    ) -> httpx.Response:
        response = await self._http.get(path, params=dict(params) if params else None)
        return _checked(response)

    async def post(self, path: str, body: Mapping[str, object]) -> httpx.Response:
        await self.throttle()
        response = await self._http.post(path, json=dict(body))
        return _checked(response)

    async def post_binary(
        self,
        path: str,
        content: bytes,
        mime_type: str,
        filename: str,
    ) -> httpx.Response:
        await self.throttle()
        response = await self._http.post(
            path,
            content=content,
            headers={
                "Content-Type": mime_type,
                "Content-Disposition": f'attachment; filename="{_quote_filename(filename)}"',
            },
        )
        return _checked(response)

    async def check_connectivity(self) -> None:
        """Preflight the API before any row is processed.

        Raises :class:`ConnectivityError` describing the most likely cause.
        """

        log.info("Checking WordPress REST API connectivity for %s", self.config.site)
        try:
            await self.get(f"/{self.config.collection}", {"per_page": 1})
        except RemoteAPIError as exc:
            if exc.status_code == httpx.codes.UNAUTHORIZED:
                msg = "Authentication failed. Check WP_USER and WP_APP_PASSWORD."
            elif exc.status_code == httpx.codes.FORBIDDEN:
                msg = "REST API is blocked. Enable it in WordPress settings."
            else:
                msg = f"Connectivity check failed: {exc.describe()}"
            raise ConnectivityError(msg) from exc
        except httpx.ConnectError as exc:
            msg = f"Cannot reach {self.config.site}. Check WP_SITE URL."
            raise ConnectivityError(msg) from exc
        except httpx.HTTPError as exc:
            raise ConnectivityError(f"Connectivity check failed: {exc}") from exc
        log.info("WordPress REST API is accessible")


def _checked(response: httpx.Response) -> httpx.Response:
    if response.is_success:
        return response

    payload: object
    try:
        payload = response.json()
    except ValueError:
        payload = response.text
    message = f"Request failed with status code {response.status_code}"
    if isinstance(payload, dict):
        try:
            error = ErrorResponse.model_validate(payload)
        except ValidationError:
            error = ErrorResponse()
        if error.message:
            message = f"{message} ({error.message})"
    raise RemoteAPIError(message, status_code=response.status_code, payload=payload)


def _quote_filename(filename: str) -> str:
    # header values must stay ASCII
    ascii_name = filename.encode("ascii", "replace").decode("ascii")
    return "".join("_" if char in '\\"?' else char for char in ascii_name)
