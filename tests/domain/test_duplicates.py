from __future__ import annotations

import asyncio

import httpx
import pytest

from pressync.adapters.wordpress import WordPressClient
from pressync.domain.duplicates import DEFAULT_MAX_PAGES, DuplicateScanner
from pressync.domain.errors import RemoteAPIError
from tests.support.fake_wordpress import FakeWordPress, make_client_config, make_client_factory


@pytest.mark.parametrize("status", ["publish", "draft", "pending", "private", "future"])
def test_find_duplicate_matches_any_status(
    status: str,
    fake_wordpress: FakeWordPress,
    wordpress_client: WordPressClient,
) -> None:
    post_id = fake_wordpress.add_post("Weekend Brunch & More", status=status)

    found = asyncio.run(DuplicateScanner(wordpress_client).find_duplicate("weekend brunch & more"))

    assert found == post_id


def test_find_duplicate_compares_normalized_titles(
    fake_wordpress: FakeWordPress,
    wordpress_client: WordPressClient,
) -> None:
    post_id = fake_wordpress.add_post(
        "Weekend Brunch", rendered="<b>Weekend   Brunch</b> &amp; More"
    )

    found = asyncio.run(
        DuplicateScanner(wordpress_client).find_duplicate("  WEEKEND brunch & more ")
    )

    assert found == post_id


def test_find_duplicate_requires_exact_match(
    fake_wordpress: FakeWordPress,
    wordpress_client: WordPressClient,
) -> None:
    fake_wordpress.add_post("Weekend Brunch & More Ideas")
    fake_wordpress.add_post("Brunch")

    scanner = DuplicateScanner(wordpress_client)
    found = asyncio.run(scanner.find_duplicate("Weekend Brunch"))

    assert found is None
    assert scanner.last_stats.exhausted
    assert scanner.last_stats.checked == 2


def test_find_duplicate_requests_every_status_newest_first(
    fake_wordpress: FakeWordPress,
    wordpress_client: WordPressClient,
) -> None:
    asyncio.run(DuplicateScanner(wordpress_client).find_duplicate("Anything"))

    (request,) = fake_wordpress.calls("GET", "/posts")
    params = request.url.params
    assert params["status"] == "publish,draft,pending,private,future"
    assert params["per_page"] == "100"
    assert params["page"] == "1"
    assert params["orderby"] == "date"
    assert params["order"] == "desc"


def test_find_duplicate_first_match_wins(
    fake_wordpress: FakeWordPress,
    wordpress_client: WordPressClient,
) -> None:
    fake_wordpress.add_post("Same Title", slug="older")
    newer = fake_wordpress.add_post("Same Title", slug="newer")

    found = asyncio.run(DuplicateScanner(wordpress_client).find_duplicate("Same Title"))

    assert found == newer


def test_find_duplicate_walks_pages_until_collection_ends(
    fake_wordpress: FakeWordPress,
    wordpress_client: WordPressClient,
) -> None:
    oldest = fake_wordpress.add_post("Needle")
    for index in range(250):
        fake_wordpress.add_post(f"Filler {index}")

    scanner = DuplicateScanner(wordpress_client)
    found = asyncio.run(scanner.find_duplicate("needle"))

    assert found == oldest
    assert len(fake_wordpress.calls("GET", "/posts")) == 3
    assert scanner.last_stats.pages == 3


def test_find_duplicate_stops_on_last_page_header(
    fake_wordpress: FakeWordPress,
    wordpress_client: WordPressClient,
) -> None:
    for index in range(200):
        fake_wordpress.add_post(f"Filler {index}")

    scanner = DuplicateScanner(wordpress_client)
    assert asyncio.run(scanner.find_duplicate("needle")) is None

    assert len(fake_wordpress.calls("GET", "/posts")) == 2
    assert scanner.last_stats.exhausted


def test_find_duplicate_treats_invalid_page_as_end_of_collection(
    fake_wordpress: FakeWordPress,
    wordpress_client: WordPressClient,
) -> None:
    fake_wordpress.send_total_pages = False
    for index in range(200):
        fake_wordpress.add_post(f"Filler {index}")

    scanner = DuplicateScanner(wordpress_client)
    assert asyncio.run(scanner.find_duplicate("needle")) is None

    assert len(fake_wordpress.calls("GET", "/posts")) == 3
    assert scanner.last_stats.exhausted
    assert scanner.last_stats.checked == 200


def test_find_duplicate_gives_up_after_page_ceiling(
    fake_wordpress: FakeWordPress,
    wordpress_client: WordPressClient,
) -> None:
    fake_wordpress.send_total_pages = False
    fake_wordpress.add_post("Needle")
    for index in range(1000):
        fake_wordpress.add_post(f"Filler {index}")

    scanner = DuplicateScanner(wordpress_client)
    found = asyncio.run(scanner.find_duplicate("needle"))

    assert found is None
    assert len(fake_wordpress.calls("GET", "/posts")) == DEFAULT_MAX_PAGES
    assert scanner.last_stats.checked == 1000
    assert not scanner.last_stats.exhausted


def test_find_duplicate_scans_configured_collection(
    fake_wordpress: FakeWordPress,
    wordpress_client: WordPressClient,
) -> None:
    asyncio.run(DuplicateScanner(wordpress_client, collection="pages").find_duplicate("About"))

    assert len(fake_wordpress.calls("GET", "/pages")) == 1
    assert fake_wordpress.calls("GET", "/posts") == []


def test_find_duplicate_skips_blank_titles(
    fake_wordpress: FakeWordPress,
    wordpress_client: WordPressClient,
) -> None:
    assert asyncio.run(DuplicateScanner(wordpress_client).find_duplicate("<b> </b>")) is None
    assert fake_wordpress.requests == []


def test_find_duplicate_propagates_other_remote_errors() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"code": "internal_server_error", "message": "boom"})

    client = WordPressClient(make_client_config(), client_factory=make_client_factory(handler))

    with pytest.raises(RemoteAPIError) as exc_info:
        asyncio.run(DuplicateScanner(client).find_duplicate("Title"))

    assert exc_info.value.status_code == 500
