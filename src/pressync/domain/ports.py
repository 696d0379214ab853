"""Ports the sync pipeline depends on."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping

    import httpx

    from .types import MediaAsset


@runtime_checkable
class RemoteCollectionClient(Protocol):
    """Authenticated, delay-throttled access to the remote REST API."""

    async def get(
        self,
        path: str,
        params: Mapping[str, str | int] | None = None,
    ) -> httpx.Response: ...

    async def post(self, path: str, body: Mapping[str, object]) -> httpx.Response: ...

    async def post_binary(
        self,
        path: str,
        content: bytes,
        mime_type: str,
        filename: str,
    ) -> httpx.Response: ...

    async def throttle(self) -> None: ...


@runtime_checkable
class MediaSource(Protocol):
    """Turns a path or URL into an uploadable asset, or ``None``."""

    async def ingest(self, source: str) -> MediaAsset | None: ...


__all__ = ["MediaSource", "RemoteCollectionClient"]
