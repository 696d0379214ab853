"""Title-based duplicate detection across the whole remote collection."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Final

from .errors import RemoteAPIError
from .resources import RESOURCE_LIST
from .titles import normalize_title
from .types import RESOURCE_STATUSES

if TYPE_CHECKING:
    import httpx

    from .ports import RemoteCollectionClient

log = getLogger(__name__)

DEFAULT_PAGE_SIZE: Final[int] = 100
DEFAULT_MAX_PAGES: Final[int] = 10
TOTAL_PAGES_HEADER: Final[str] = "X-WP-TotalPages"
INVALID_PAGE_CODE: Final[str] = "rest_post_invalid_page_number"


@dataclass(slots=True)
class ScanStats:
    pages: int = 0
    checked: int = 0
    exhausted: bool = False


class DuplicateScanner:
    """Finds an existing resource whose normalized title equals a candidate's.

    The search endpoint does not reliably return drafts or scheduled posts, so
    the scan pages through every status, most recent first. It stops at the
    first match, at the end of the collection, or after ``max_pages`` pages;
    in the last case it reports no duplicate.
    """

    def __init__(
        self,
        client: RemoteCollectionClient,
        *,
        collection: str = "posts",
        page_size: int = DEFAULT_PAGE_SIZE,
        max_pages: int = DEFAULT_MAX_PAGES,
    ) -> None:
        self._client = client
        self.collection = collection
        self.page_size = page_size
        self.max_pages = max_pages
        self.last_stats = ScanStats()

    async def find_duplicate(self, title: str) -> int | None:
        wanted = normalize_title(title)
        stats = ScanStats()
        self.last_stats = stats
        if not wanted:
            return None

        log.debug("Scanning %s for duplicate title %r", self.collection, wanted)
        for page in range(1, self.max_pages + 1):
            try:
                response = await self._client.get(f"/{self.collection}", self._params(page))
            except RemoteAPIError as exc:
                if exc.code == INVALID_PAGE_CODE:
                    stats.exhausted = True
                    break
                raise

            resources = RESOURCE_LIST.validate_python(response.json())
            stats.pages = page
            stats.checked += len(resources)
            for resource in resources:
                if normalize_title(resource.title_text) == wanted:
                    log.info(
                        "Duplicate found: %s %s (%s) %r",
                        self.collection,
                        resource.id,
                        resource.status,
                        resource.title_text,
                    )
                    return resource.id

            total_pages = _total_pages(response.headers)
            last_page = total_pages is not None and page >= total_pages
            if len(resources) < self.page_size or last_page:
                stats.exhausted = True
                break
        else:
            log.warning(
                "Stopped duplicate scan after %s pages (%s %s checked)",
                self.max_pages,
                stats.checked,
                self.collection,
            )

        log.debug("No duplicate found after checking %s %s", stats.checked, self.collection)
        return None

    def _params(self, page: int) -> dict[str, str | int]:
        return {
            "per_page": self.page_size,
            "page": page,
            "status": ",".join(RESOURCE_STATUSES),
            "orderby": "date",
            "order": "desc",
        }


def _total_pages(headers: httpx.Headers) -> int | None:
    value = headers.get(TOTAL_PAGES_HEADER)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None
