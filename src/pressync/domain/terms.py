"""Get-or-create resolution of taxonomy terms."""

from __future__ import annotations

import html
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, TypeAlias

import httpx
from pydantic import ValidationError

from .errors import RemoteAPIError
from .resources import TERM_LIST, RemoteTerm

if TYPE_CHECKING:
    from .ports import RemoteCollectionClient

log = getLogger(__name__)

TERM_SEARCH_PAGE_SIZE = 100

TermKey: TypeAlias = "tuple[str, str]"


def split_labels(raw: str | None) -> list[str]:
    """Split a comma-separated label list into distinct, trimmed labels.

    Order is preserved and the first spelling of a case-insensitive repeat wins.
    """

    if not raw:
        return []
    labels: list[str] = []
    seen: set[str] = set()
    for part in raw.split(","):
        label = part.strip()
        if not label or label.lower() in seen:
            continue
        seen.add(label.lower())
        labels.append(label)
    return labels


@dataclass(slots=True)
class TermCache:
    """Resolved term ids for the lifetime of one batch run."""

    _ids: dict[TermKey, int] = field(default_factory=dict)

    @staticmethod
    def key(taxonomy: str, name: str) -> TermKey:
        return (taxonomy, name.strip().lower())

    def get(self, taxonomy: str, name: str) -> int | None:
        return self._ids.get(self.key(taxonomy, name))

    def put(self, taxonomy: str, name: str, term_id: int) -> None:
        self._ids[self.key(taxonomy, name)] = term_id

    def __len__(self) -> int:
        return len(self._ids)


class TermResolver:
    """Maps free-text labels to term ids, creating missing terms."""

    def __init__(self, client: RemoteCollectionClient, *, cache: TermCache | None = None) -> None:
        self._client = client
        self._cache = cache

    async def resolve(self, raw: str | None, taxonomy: str) -> list[int]:
        term_ids: list[int] = []
        for label in split_labels(raw):
            term_id = await self.get_or_create(label, taxonomy)
            if term_id is None:
                continue
            if term_id not in term_ids:
                term_ids.append(term_id)
        return term_ids

    async def get_or_create(self, name: str, taxonomy: str) -> int | None:
        """Return the id of ``name`` in ``taxonomy``; ``None`` when it cannot be resolved."""

        label = name.strip()
        if not label:
            return None
        if self._cache is not None:
            cached = self._cache.get(taxonomy, label)
            if cached is not None:
                return cached

        try:
            term_id = await self._find(label, taxonomy)
            if term_id is None:
                term_id = await self._create(label, taxonomy)
        except (RemoteAPIError, httpx.HTTPError, ValidationError, ValueError) as exc:
            detail = exc.describe() if isinstance(exc, RemoteAPIError) else str(exc)
            log.warning("Failed to get/create %s %r: %s", taxonomy, label, detail)
            return None

        if self._cache is not None:
            self._cache.put(taxonomy, label, term_id)
        return term_id

    async def _find(self, label: str, taxonomy: str) -> int | None:
        await self._client.throttle()
        response = await self._client.get(
            f"/{taxonomy}",
            {"search": label, "per_page": TERM_SEARCH_PAGE_SIZE},
        )
        wanted = label.lower()
        for term in TERM_LIST.validate_python(response.json()):
            if html.unescape(term.name).strip().lower() == wanted:
                return term.id
        return None

    async def _create(self, label: str, taxonomy: str) -> int:
        try:
            response = await self._client.post(f"/{taxonomy}", {"name": label})
        except RemoteAPIError as exc:
            existing = _existing_term_id(exc)
            if existing is None:
                raise
            log.debug("%s term %r already exists (id=%s)", taxonomy, label, existing)
            return existing
        term = RemoteTerm.model_validate(response.json())
        log.info("Created %s term %r (id=%s)", taxonomy, label, term.id)
        return term.id


def _existing_term_id(exc: RemoteAPIError) -> int | None:
    # WordPress answers a create for a name that exists under a different
    # spelling with ``term_exists`` and the id of the existing term.
    if exc.code != "term_exists" or not isinstance(exc.payload, dict):
        return None
    data = exc.payload.get("data")
    if isinstance(data, dict):
        term_id = data.get("term_id")
        if isinstance(term_id, int):
            return term_id
    return None
