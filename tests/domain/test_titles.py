from __future__ import annotations

import pytest

from pressync.domain.titles import normalize_title


def test_normalize_title_strips_markup_and_decodes_entities() -> None:
    assert normalize_title("<b>Weekend Brunch</b> &amp; More") == "weekend brunch & more"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("Nafisa&#8217;s   Kitchen", "nafisa's kitchen"),
        ("&#8220;Quoted&#8221; title", '"quoted" title'),
        ("Salt&nbsp;&#038;&nbsp;Pepper", "salt & pepper"),
        ("Price &euro; list", "price list"),
        ("  Mixed\tCase\nTitle  ", "mixed case title"),
        ("", ""),
    ],
)
def test_normalize_title_variants(raw: str, expected: str) -> None:
    assert normalize_title(raw) == expected


def test_normalize_title_handles_none() -> None:
    assert normalize_title(None) == ""


@pytest.mark.parametrize(
    "raw",
    [
        "<b>Weekend Brunch</b> &amp; More",
        "a &amp;amp; b",
        "&amp;nbsp;tail",
        "Tom &amp; Jerry&#8217;s <i>Show</i>",
        "x < y and &;",
    ],
)
def test_normalize_title_is_idempotent(raw: str) -> None:
    once = normalize_title(raw)

    assert normalize_title(once) == once
