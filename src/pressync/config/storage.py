"""Run log location helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

DEFAULT_LOG_FILENAME: Final[str] = "import_log.json"
SERVERLESS_LOG_DIR: Final[Path] = Path("/tmp")  # noqa: S108


@dataclass(frozen=True, slots=True)
class StorageConfig:
    log_dir: Path
    log_filename: str = DEFAULT_LOG_FILENAME

    def log_path(self) -> Path:
        return self.log_dir.expanduser() / self.log_filename


def _is_serverless() -> bool:
    return bool(os.getenv("VERCEL") or os.getenv("VERCEL_ENV"))


def get_storage_config() -> StorageConfig:
    log_dir = SERVERLESS_LOG_DIR if _is_serverless() else Path.cwd()
    return StorageConfig(log_dir=log_dir)


def get_log_path(*, storage: StorageConfig | None = None) -> Path:
    """Return where the run log should be written, respecting overrides."""

    env_path = os.getenv("PRESSYNC_LOG_PATH")
    if env_path:
        return Path(env_path).expanduser()
    storage_config = storage or get_storage_config()
    return storage_config.log_path()
