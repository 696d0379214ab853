"""Featured image ingestion from local files, URLs and Google Drive links."""

from __future__ import annotations

import asyncio
import mimetypes
import re
from logging import getLogger
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Final
from urllib.parse import unquote, urlsplit

import httpx

from pressync.adapters.http_resilience import ResilienceConfig, ResilientClient
from pressync.domain.types import MediaAsset

if TYPE_CHECKING:
    from collections.abc import Callable

log = getLogger(__name__)

DEFAULT_FILENAME: Final[str] = "image"
FALLBACK_MIME_TYPE: Final[str] = "application/octet-stream"
DOWNLOAD_TIMEOUT_SECONDS: Final[float] = 30.0
USER_AGENT: Final[str] = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)

DRIVE_HOSTS: Final[frozenset[str]] = frozenset({"drive.google.com", "docs.google.com"})
DRIVE_DOWNLOAD_URL: Final[str] = "https://drive.google.com/uc?export=download&id={file_id}"
_DRIVE_ID_PATTERNS: Final[tuple[re.Pattern[str], ...]] = (
    re.compile(r"/d/([a-zA-Z0-9_-]+)"),
    re.compile(r"[?&]id=([a-zA-Z0-9_-]+)"),
)
_DISPOSITION_EXT_FILENAME = re.compile(
    r"filename\*\s*=\s*(?:[\w-]+'[^']*')?\"?([^\";]+)\"?", re.IGNORECASE
)
_DISPOSITION_FILENAME = re.compile(r"filename\s*=\s*\"?([^\";]+)\"?", re.IGNORECASE)


def is_remote_source(source: str) -> bool:
    return source.lower().startswith(("http://", "https://"))


def to_direct_download_url(url: str) -> str:
    """Rewrite a Google Drive share link into its direct-download form.

    ``https://drive.google.com/file/d/<ID>/view?usp=sharing`` and
    ``https://drive.google.com/open?id=<ID>`` both become
    ``https://drive.google.com/uc?export=download&id=<ID>``. URLs that are not
    Drive links, or Drive links without a recognizable id, are returned as-is.
    """

    host = (urlsplit(url).hostname or "").lower()
    if host not in DRIVE_HOSTS:
        return url
    for pattern in _DRIVE_ID_PATTERNS:
        match = pattern.search(url)
        if match:
            file_id = match.group(1)
            log.debug("Converting Google Drive URL to direct link (id=%s)", file_id)
            return DRIVE_DOWNLOAD_URL.format(file_id=file_id)
    return url


def filename_from_disposition(header: str | None) -> str | None:
    if not header:
        return None
    for pattern in (_DISPOSITION_EXT_FILENAME, _DISPOSITION_FILENAME):
        match = pattern.search(header)
        if match:
            name = PurePosixPath(unquote(match.group(1).strip())).name
            if name:
                return name
    return None


def filename_from_url(url: str) -> str | None:
    name = PurePosixPath(unquote(urlsplit(url).path)).name
    return name or None


def mime_from_content_type(header: str | None) -> str | None:
    if not header:
        return None
    mime_type = header.split(";", 1)[0].strip().lower()
    return mime_type or None


def guess_mime_type(name: str) -> str | None:
    mime_type, _ = mimetypes.guess_type(name)
    return mime_type


def ensure_extension(filename: str, mime_type: str) -> str:
    if PurePosixPath(filename).suffix or mime_type == FALLBACK_MIME_TYPE:
        return filename
    extension = mimetypes.guess_extension(mime_type)
    return f"{filename}{extension}" if extension else filename


def _default_resilience() -> ResilienceConfig:
    return ResilienceConfig(
        name="media",
        timeout_seconds=DOWNLOAD_TIMEOUT_SECONDS,
        follow_redirects=True,
        default_headers={"User-Agent": USER_AGENT},
    )


class MediaIngestor:
    """Produces :class:`MediaAsset` objects from paths or URLs.

    Every failure is logged and reported as ``None`` so the caller can keep
    going without a featured image.
    """

    def __init__(
        self,
        *,
        base_dir: Path | None = None,
        resilience: ResilienceConfig | None = None,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self.base_dir = base_dir
        self._resilience = resilience or _default_resilience()
        self._client_factory = client_factory or ResilientClient

    async def ingest(self, source: str) -> MediaAsset | None:
        source = source.strip()
        if not source:
            return None
        if is_remote_source(source):
            return await self._download(source)
        return await self._read_local(source)

    async def _download(self, url: str) -> MediaAsset | None:
        try:
            target = to_direct_download_url(url)
            async with self._client_factory(self._resilience) as client:
                response = await client.get(target)
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            log.warning("Failed to download image from URL %r: %s", url, exc)
            return None

        if not response.is_success:
            log.warning(
                "Failed to download image from URL %r: status %s", url, response.status_code
            )
            return None

        content_type = mime_from_content_type(response.headers.get("content-type"))
        if content_type == "text/html":
            log.warning(
                "Downloaded content is HTML, not an image; the link is probably private: %s",
                url,
            )
            return None
        if not response.content:
            log.warning("Downloaded image from %r is empty", url)
            return None

        filename = (
            filename_from_disposition(response.headers.get("content-disposition"))
            or filename_from_url(target)
            or DEFAULT_FILENAME
        )
        mime_type = content_type or guess_mime_type(filename) or guess_mime_type(target)
        mime_type = mime_type or FALLBACK_MIME_TYPE
        return MediaAsset(
            content=response.content,
            mime_type=mime_type,
            filename=ensure_extension(filename, mime_type),
        )

    async def _read_local(self, source: str) -> MediaAsset | None:
        path = Path(source)
        try:
            path = path.expanduser()
            if not path.is_absolute() and self.base_dir is not None:
                path = self.base_dir / path
            content = await asyncio.to_thread(path.read_bytes)
        except (OSError, ValueError, RuntimeError) as exc:
            log.warning("Image file not readable: %r (%s)", str(path), exc)
            return None
        return MediaAsset(
            content=content,
            mime_type=guess_mime_type(path.name) or FALLBACK_MIME_TYPE,
            filename=path.name,
        )
