from __future__ import annotations

import pytest

from locshare.deep_link import build_share_url, page_origin, resolve_location_id


@pytest.mark.parametrize(
    ("page_url", "expected"),
    [
        ("http://localhost:3000/", None),
        ("http://localhost:3000/?locationId=abc123", "abc123"),
        ("http://localhost:3000?foo=1&locationId=xyz", "xyz"),
        ("http://localhost:3000/?locationId=", None),
        ("http://localhost:3000/?locationid=abc", None),
        ("http://localhost:3000/?locationId=a%20b", "a b"),
    ],
)
def test_resolve_location_id(page_url: str, expected: str | None) -> None:
    assert resolve_location_id(page_url) == expected


def test_page_origin_drops_path_and_query() -> None:
    assert page_origin("https://maps.example.org:8443/app/?locationId=1") == "https://maps.example.org:8443"


def test_build_share_url() -> None:
    assert build_share_url("http://localhost:3000", "xyz") == "http://localhost:3000?locationId=xyz"
    assert build_share_url("http://localhost:3000/", "a/b") == "http://localhost:3000?locationId=a%2Fb"


def test_share_url_round_trips_through_resolver() -> None:
    url = build_share_url(page_origin("http://localhost:3000/"), "665f1c2e9b1d")
    assert resolve_location_id(url) == "665f1c2e9b1d"
