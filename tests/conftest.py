from __future__ import annotations

import pytest

from pressync.adapters.wordpress import WordPressClient
from pressync.domain.context import RunContext
from tests.support.fake_wordpress import FakeWordPress, make_client_config
from tests.support.stub_media import StubMediaSource


@pytest.fixture(autouse=True)
def _isolated_environment(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path_factory: pytest.TempPathFactory,
) -> None:
    for name in (
        "CLIENTS_CONFIG",
        "CLIENT",
        "PRESSYNC_CLIENT",
        "PRESSYNC_CLIENTS_FILE",
        "PRESSYNC_LOG_PATH",
        "WP_SITE",
        "WP_USER",
        "WP_APP_PASSWORD",
        "DEFAULT_STATUS",
        "REQUEST_DELAY_MS",
        "CSV_PATH",
        "VERCEL",
        "VERCEL_ENV",
    ):
        monkeypatch.delenv(name, raising=False)
    empty_dir = tmp_path_factory.mktemp("no-clients")
    monkeypatch.setenv("PRESSYNC_CLIENTS_FILE", str(empty_dir / "clients.json"))


@pytest.fixture
def fake_wordpress() -> FakeWordPress:
    return FakeWordPress()


@pytest.fixture
def media_source() -> StubMediaSource:
    return StubMediaSource()


@pytest.fixture
def wordpress_client(fake_wordpress: FakeWordPress) -> WordPressClient:
    return WordPressClient(make_client_config(), client_factory=fake_wordpress.client_factory())


@pytest.fixture
def run_context(wordpress_client: WordPressClient, media_source: StubMediaSource) -> RunContext:
    return RunContext(client=wordpress_client, media=media_source)
