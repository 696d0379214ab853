"""Per-row create-or-update reconciliation."""

from __future__ import annotations

import json
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from .errors import DuplicateResourceError, MissingFieldError, RemoteAPIError, describe_error
from .resources import RESOURCE_LIST, RemoteMedia, RemoteResource, ResourceDraft
from .types import (
    EXTENSION_FIELD,
    FEATURED_IMAGE_FIELDS,
    REQUIRED_FIELDS,
    RESOURCE_STATUSES,
    SEO_META_FIELDS,
    ReconciliationResult,
    Row,
    SyncAction,
    Taxonomy,
)

if TYPE_CHECKING:
    from .context import RunContext

log = getLogger(__name__)

UNTITLED = "Untitled"
MEDIA_PATH = "/media"


def _cell(row: Row, name: str) -> str:
    value = row.get(name)
    return value.strip() if value else ""


def validate_row(row: Row) -> None:
    for name in REQUIRED_FIELDS:
        if not _cell(row, name):
            raise MissingFieldError(name)


def featured_image_source(row: Row) -> str | None:
    for name in FEATURED_IMAGE_FIELDS:
        value = _cell(row, name)
        if value:
            return value
    return None


def parse_extension_data(raw: str, *, row_number: int) -> dict[str, object] | None:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        log.warning("Invalid %s in row %s: %s", EXTENSION_FIELD, row_number, exc)
        return None
    if not isinstance(data, dict):
        log.warning("Invalid %s in row %s: expected a JSON object", EXTENSION_FIELD, row_number)
        return None
    return data


def build_payload(row: Row, *, default_status: str, row_number: int = 0) -> ResourceDraft:
    """Map the recognized columns of a validated row onto a write payload."""

    extra: dict[str, str] = {
        name: row[name] for name in SEO_META_FIELDS if row.get(name) and row[name].strip()
    }
    draft = ResourceDraft(
        title=_cell(row, "title"),
        content=_cell(row, "content"),
        status=_cell(row, "status") or default_status,
        slug=_cell(row, "slug") or None,
        excerpt=_cell(row, "excerpt") or None,
        **extra,
    )
    raw_extension = _cell(row, EXTENSION_FIELD)
    if raw_extension:
        draft.acf = parse_extension_data(raw_extension, row_number=row_number)
    return draft


class RecordReconciler:
    """Drives one row to a terminal ``created``, ``updated`` or failed result."""

    def __init__(self, context: RunContext) -> None:
        self._context = context

    async def reconcile(self, row: Row, row_number: int) -> ReconciliationResult:
        result = ReconciliationResult(
            row_number=row_number,
            title=_cell(row, "title") or UNTITLED,
        )
        try:
            validate_row(row)
            draft = build_payload(
                row,
                default_status=self._context.default_status,
                row_number=row_number,
            )
            await self._attach_terms(row, draft)
            await self._attach_featured_media(row, draft, row_number)
            resource, action = await self._write(draft, row_number)
        except Exception as exc:  # noqa: BLE001
            result.error = describe_error(exc)
            log.error(  # noqa: TRY400
                "[%s] failed: %s - %s", row_number, result.title, result.error
            )
            return result

        result.action = action
        result.resource_id = resource.id
        result.status = resource.status
        log.info(
            "[%s] %s %s %s: %s",
            row_number,
            action,
            self._context.collection,
            resource.id,
            result.title,
        )
        return result

    async def _attach_terms(self, row: Row, draft: ResourceDraft) -> None:
        categories = _cell(row, "categories")
        if categories:
            ids = await self._context.terms.resolve(categories, Taxonomy.CATEGORIES)
            if ids:
                draft.categories = ids
        tags = _cell(row, "tags")
        if tags:
            ids = await self._context.terms.resolve(tags, Taxonomy.TAGS)
            if ids:
                draft.tags = ids

    async def _attach_featured_media(
        self,
        row: Row,
        draft: ResourceDraft,
        row_number: int,
    ) -> None:
        source = featured_image_source(row)
        if source is None:
            return
        asset = await self._context.media.ingest(source)
        if asset is None:
            log.warning("[%s] continuing without featured image %r", row_number, source)
            return
        try:
            response = await self._context.client.post_binary(
                MEDIA_PATH,
                asset.content,
                asset.mime_type,
                asset.filename,
            )
            media = RemoteMedia.model_validate(response.json())
        except (RemoteAPIError, httpx.HTTPError, ValidationError, ValueError) as exc:
            log.warning(
                "[%s] failed to upload media %r: %s", row_number, source, describe_error(exc)
            )
            return
        log.debug(
            "[%s] uploaded %s (%s bytes) as media %s",
            row_number,
            asset.filename,
            asset.size,
            media.id,
        )
        draft.featured_media = media.id

    async def _write(
        self,
        draft: ResourceDraft,
        row_number: int,
    ) -> tuple[RemoteResource, SyncAction]:
        collection = self._context.collection
        log.debug("[%s] checking for duplicate title %r", row_number, draft.title)
        duplicate_id = await self._context.duplicates.find_duplicate(draft.title)
        if duplicate_id is not None:
            raise DuplicateResourceError(draft.title, duplicate_id)

        existing_id = await self.find_by_slug(draft.slug) if draft.slug else None
        body = draft.to_body()
        if existing_id is not None:
            response = await self._context.client.post(f"/{collection}/{existing_id}", body)
            action = SyncAction.UPDATED
        else:
            response = await self._context.client.post(f"/{collection}", body)
            action = SyncAction.CREATED
        return RemoteResource.model_validate(response.json()), action

    async def find_by_slug(self, slug: str) -> int | None:
        response = await self._context.client.get(
            f"/{self._context.collection}",
            {"slug": slug, "per_page": 1, "status": ",".join(RESOURCE_STATUSES)},
        )
        resources = RESOURCE_LIST.validate_python(response.json())
        return resources[0].id if resources else None
