from __future__ import annotations

from pathlib import Path  # noqa: TC003

import pytest  # noqa: TC002

from pressync.config import storage


def test_get_log_path_prefers_explicit_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    custom = tmp_path / "runs" / "latest.json"
    monkeypatch.setenv("PRESSYNC_LOG_PATH", str(custom))

    assert storage.get_log_path() == custom


def test_get_log_path_defaults_to_working_directory(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    monkeypatch.chdir(tmp_path)

    assert storage.get_log_path() == tmp_path / "import_log.json"


@pytest.mark.parametrize("variable", ["VERCEL", "VERCEL_ENV"])
def test_get_log_path_uses_tmp_on_serverless(
    monkeypatch: pytest.MonkeyPatch,
    variable: str,
) -> None:
    monkeypatch.setenv(variable, "1")

    assert storage.get_log_path() == Path("/tmp/import_log.json")  # noqa: S108


def test_get_log_path_accepts_explicit_storage(tmp_path: Path) -> None:
    config = storage.StorageConfig(log_dir=tmp_path, log_filename="run.json")

    assert storage.get_log_path(storage=config) == tmp_path / "run.json"
