"""Sequential batch execution and the run log artifact."""

from __future__ import annotations

import json
import time
from logging import getLogger
from typing import TYPE_CHECKING, TypeAlias

from .reconcile import RecordReconciler
from .types import BatchSummary, ReconciliationResult

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable, Iterable, Sequence
    from pathlib import Path

    from .context import RunContext
    from .types import Row

ResultObserver: TypeAlias = "Callable[[ReconciliationResult], None]"

log = getLogger(__name__)


def write_run_log(results: Sequence[ReconciliationResult], path: Path) -> Path | None:
    """Persist ``results`` as a JSON array; a write failure is logged, not raised."""

    payload = json.dumps([result.to_dict() for result in results], indent=2, ensure_ascii=False)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(payload, encoding="utf-8")
    except OSError as exc:
        log.warning("Could not write log file %s: %s", path, exc)
        log.info("Log data: %s", payload)
        return None
    log.info("Log written to: %s", path)
    return path


class BatchRunner:
    """Reconciles rows one after another.

    Rows never overlap: row ``n + 1`` starts only once row ``n`` has a terminal
    result, so duplicate detection always sees the creates made earlier in the
    same run.
    """

    def __init__(self, context: RunContext) -> None:
        self._context = context
        self._reconciler = RecordReconciler(context)

    async def iter_results(self, rows: Iterable[Row]) -> AsyncIterator[ReconciliationResult]:
        for row_number, row in enumerate(rows, start=1):
            yield await self._reconciler.reconcile(row, row_number)

    async def run(
        self,
        rows: Iterable[Row],
        *,
        observer: ResultObserver | None = None,
    ) -> BatchSummary:
        started = time.monotonic()
        results: list[ReconciliationResult] = []
        log_path = self._context.log_path
        written = None
        try:
            async for result in self.iter_results(rows):
                results.append(result)
                if observer is not None:
                    observer(result)
        finally:
            # Rows finished before an interruption are still logged.
            if log_path is not None:
                written = write_run_log(results, log_path)
        return BatchSummary(
            results=results,
            duration_seconds=round(time.monotonic() - started, 2),
            log_path=written,
        )
