"""CSV row source."""

from __future__ import annotations

import csv
from logging import getLogger
from typing import TYPE_CHECKING

from pressync.domain.errors import RowSourceError

if TYPE_CHECKING:
    from pathlib import Path

log = getLogger(__name__)


def load_rows(path: Path) -> list[dict[str, str]]:
    """Read every data row of ``path`` keyed by the header row.

    Header names are stripped; cells missing from short rows become empty
    strings. A UTF-8 byte order mark (as written by spreadsheet exports) is
    ignored.
    """

    if not path.is_file():
        raise RowSourceError(f"CSV file not found: {path}")
    try:
        with path.open(newline="", encoding="utf-8-sig") as handle:
            reader = csv.DictReader(handle)
            rows = [_clean(row) for row in reader]
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        raise RowSourceError(f"Failed to load CSV {path}: {exc}") from exc
    log.info("Loaded %s row(s) from %s", len(rows), path)
    return rows


def _clean(row: dict[str | None, str | list[str] | None]) -> dict[str, str]:
    cleaned: dict[str, str] = {}
    for key, value in row.items():
        # overflow cells land under a ``None`` key
        if key is None or isinstance(value, list):
            continue
        cleaned[key.strip()] = value or ""
    return cleaned
