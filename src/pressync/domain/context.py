"""Per-run state shared by every component of a batch."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .duplicates import DuplicateScanner
from .terms import TermCache, TermResolver

if TYPE_CHECKING:
    from pathlib import Path

    from .ports import MediaSource, RemoteCollectionClient


@dataclass(slots=True)
class RunContext:
    """Built once per batch and passed explicitly to the reconciler.

    The client and the term cache are the only state shared across rows.
    """

    client: RemoteCollectionClient
    media: MediaSource
    default_status: str = "draft"
    collection: str = "posts"
    log_path: Path | None = None
    term_cache: TermCache = field(default_factory=TermCache)
    terms: TermResolver = field(init=False)
    duplicates: DuplicateScanner = field(init=False)

    def __post_init__(self) -> None:
        self.terms = TermResolver(self.client, cache=self.term_cache)
        self.duplicates = DuplicateScanner(self.client, collection=self.collection)
