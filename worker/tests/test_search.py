import pytest

from offmarket.models import Coordinate
from offmarket.pipeline import search
from offmarket.vendors.google_places import GooglePlacesError

AUSTIN = Coordinate(lat=30.2672, lng=-97.7431)


class FakeClock:
    def __init__(self):
        self.sleeps = []

    def __call__(self, seconds):
        self.sleeps.append(seconds)


def _page(ids, token=None):
    payload = {"status": "OK" if ids else "ZERO_RESULTS", "results": [{"place_id": pid, "name": pid} for pid in ids]}
    if token:
        payload["next_page_token"] = token
    return payload


class ScriptedSearch:
    """Returns pages per keyword in order; raises when an entry is an exception."""

    def __init__(self, pages_by_keyword):
        self.pages_by_keyword = {kw: list(pages) for kw, pages in pages_by_keyword.items()}
        self.calls = []

    def __call__(self, location, radius_meters, keyword, api_key, pagetoken=None):
        self.calls.append((keyword, pagetoken, radius_meters))
        page = self.pages_by_keyword[keyword].pop(0)
        if isinstance(page, Exception):
            raise page
        return page


def test_miles_to_meters():
    assert search.miles_to_meters(10) == 16093
    assert search.miles_to_meters(5) == 8047
    assert search.miles_to_meters(100) == 160934


def test_fetch_all_waits_before_each_continuation():
    clock = FakeClock()
    fake = ScriptedSearch({"hvac": [_page(["a", "b"], "t1"), _page(["c"], "t2"), _page(["d"])]})
    searcher = search.PaginatedSearch("key", sleep=clock, settle_seconds=2.0, search_fn=fake)

    results = searcher.fetch_all("hvac", AUSTIN, 16093)

    assert [r.external_id for r in results] == ["a", "b", "c", "d"]
    assert [call[1] for call in fake.calls] == [None, "t1", "t2"]
    assert clock.sleeps == [2.0, 2.0]


def test_fetch_all_respects_page_ceiling():
    clock = FakeClock()
    fake = ScriptedSearch({"hvac": [_page(["a"], "t1"), _page(["b"], "t2"), _page(["c"], "t3"), _page(["d"])]})
    searcher = search.PaginatedSearch("key", max_pages=3, sleep=clock, search_fn=fake)

    results = searcher.fetch_all("hvac", AUSTIN, 100)

    assert [r.external_id for r in results] == ["a", "b", "c"]
    assert len(fake.calls) == 3
    assert len(clock.sleeps) == 2


def test_zero_results_stops_without_error():
    clock = FakeClock()
    fake = ScriptedSearch({"hvac": [_page([])]})
    searcher = search.PaginatedSearch("key", sleep=clock, search_fn=fake)

    assert searcher.fetch_all("hvac", AUSTIN, 100) == []
    assert clock.sleeps == []


def test_failure_on_later_page_keeps_earlier_pages():
    fake = ScriptedSearch({"hvac": [_page(["a"], "t1"), GooglePlacesError("INVALID_REQUEST")]})
    searcher = search.PaginatedSearch("key", sleep=FakeClock(), search_fn=fake)

    assert [r.external_id for r in searcher.fetch_all("hvac", AUSTIN, 100)] == ["a"]


def test_search_keywords_preserves_keyword_order_and_isolates_failures():
    fake = ScriptedSearch(
        {
            "hvac": [_page(["a", "b"])],
            "heating": [GooglePlacesError("OVER_QUERY_LIMIT")],
            "air conditioning": [_page(["b", "c"])],
        }
    )
    searcher = search.PaginatedSearch("key", sleep=FakeClock(), search_fn=fake)

    per_keyword = search.search_keywords(["hvac", "heating", "air conditioning"], AUSTIN, 100, searcher, max_workers=3)

    assert [[r.external_id for r in results] for results in per_keyword] == [["a", "b"], [], ["b", "c"]]


def test_search_keywords_empty():
    searcher = search.PaginatedSearch("key", sleep=FakeClock(), search_fn=pytest.fail)
    assert search.search_keywords([], AUSTIN, 100, searcher) == []
