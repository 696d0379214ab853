"""Value types shared across the sync pipeline."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Final, TypeAlias

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

Row: TypeAlias = "Mapping[str, str]"

REQUIRED_FIELDS: Final[tuple[str, ...]] = ("title", "content")
FEATURED_IMAGE_FIELDS: Final[tuple[str, ...]] = (
    "featured_image",
    "featured_image_path",
    "featured_image_url",
)
EXTENSION_FIELD: Final[str] = "acf_json"

# Exposed as top-level writable fields by the server-side helper plugin.
SEO_META_FIELDS: Final[tuple[str, ...]] = (
    "_yoast_wpseo_title",
    "_yoast_wpseo_metadesc",
    "_yoast_wpseo_focuskw",
    "rank_math_title",
    "rank_math_description",
    "rank_math_focus_keyword",
    "meta_title",
    "meta_description",
)

RESOURCE_STATUSES: Final[tuple[str, ...]] = ("publish", "draft", "pending", "private", "future")


class SyncAction(StrEnum):
    CREATED = "created"
    UPDATED = "updated"


class Taxonomy(StrEnum):
    CATEGORIES = "categories"
    TAGS = "tags"


@dataclass(frozen=True, slots=True)
class MediaAsset:
    """Binary payload ready for upload; never retained after upload."""

    content: bytes = field(repr=False)
    mime_type: str
    filename: str

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(slots=True)
class ReconciliationResult:
    """Outcome of reconciling a single row."""

    row_number: int
    title: str
    action: SyncAction | None = None
    resource_id: int | None = None
    status: str | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, object]:
        data = asdict(self)
        data["action"] = str(self.action) if self.action is not None else None
        return data


@dataclass(slots=True)
class BatchSummary:
    """Aggregate of a whole run, one result per input row in row order."""

    results: list[ReconciliationResult]
    duration_seconds: float
    log_path: Path | None = None

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> int:
        return sum(1 for result in self.results if result.succeeded)

    @property
    def failed(self) -> int:
        return self.total - self.succeeded

    @property
    def exit_code(self) -> int:
        return 1 if self.failed else 0
