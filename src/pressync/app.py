"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
import dataclasses
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING, TypeAlias

from pressync.adapters.csv_source import load_rows
from pressync.adapters.media import MediaIngestor
from pressync.adapters.wordpress import WordPressClient
from pressync.config import get_client_config, get_log_path
from pressync.domain.batch import BatchRunner
from pressync.domain.context import RunContext

if TYPE_CHECKING:
    from collections.abc import Callable

    from pressync.adapters.http_resilience import ResilientClient
    from pressync.config import ClientConfig, ResilienceConfig
    from pressync.domain.batch import ResultObserver
    from pressync.domain.ports import MediaSource
    from pressync.domain.types import BatchSummary

ClientFactory: TypeAlias = "Callable[[ResilienceConfig], ResilientClient]"

log = getLogger(__name__)


def sync_csv_file(
    csv_path: Path,
    *,
    client_key: str | None = None,
    config: ClientConfig | None = None,
    collection: str | None = None,
    log_path: Path | None = None,
    observer: ResultObserver | None = None,
    client_factory: ClientFactory | None = None,
    media: MediaSource | None = None,
) -> BatchSummary:
    """Synchronise every row of ``csv_path`` into the configured site."""

    client_config = config or get_client_config(client_key)
    if collection:
        client_config = dataclasses.replace(client_config, collection=collection)
    log.info(
        "Client: %s | Site: %s | Default status: %s | Request delay: %sms",
        client_config.name,
        client_config.site,
        client_config.default_status,
        client_config.request_delay_ms,
    )
    return asyncio.run(
        _sync_csv_file_async(
            csv_path=csv_path,
            config=client_config,
            log_path=log_path or get_log_path(),
            observer=observer,
            client_factory=client_factory,
            media=media,
        )
    )


async def _sync_csv_file_async(
    *,
    csv_path: Path,
    config: ClientConfig,
    log_path: Path,
    observer: ResultObserver | None,
    client_factory: ClientFactory | None,
    media: MediaSource | None,
) -> BatchSummary:
    async with WordPressClient(config, client_factory=client_factory) as client:
        await client.check_connectivity()

        rows = await asyncio.to_thread(load_rows, csv_path)
        if not rows:
            log.warning("CSV file is empty: %s", csv_path)

        context = RunContext(
            client=client,
            media=media or MediaIngestor(base_dir=Path(csv_path).resolve().parent),
            default_status=config.default_status,
            collection=config.collection,
            log_path=log_path,
        )
        log.info("Starting upload of %s row(s)", len(rows))
        summary = await BatchRunner(context).run(rows, observer=observer)

    log.info(
        "Finished sync: success=%s, failed=%s, total_time=%ss, log=%s",
        summary.succeeded,
        summary.failed,
        summary.duration_seconds,
        summary.log_path,
    )
    return summary
