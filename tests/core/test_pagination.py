"""Tests for paged fetching: fetch_all and fetch_capped."""

from __future__ import annotations

from typing import Any

import pytest

from zephyr_cli.types import PageData
from zephyr_cli.tree import fetch_all, fetch_capped


class ScriptedPages:
    """Page operation replaying canned pages and recording each call."""

    def __init__(self, pages: list[PageData]) -> None:
        self.pages = pages
        self.calls: list[tuple[int, int]] = []

    def __call__(self, start_at: int, max_results: int) -> PageData:
        self.calls.append((start_at, max_results))
        return self.pages[len(self.calls) - 1]


class ListPages:
    """Page operation slicing a list, with ``next`` set while records remain."""

    def __init__(self, records: list[dict[str, Any]]) -> None:
        self.records = records
        self.calls: list[tuple[int, int]] = []

    def __call__(self, start_at: int, max_results: int) -> PageData:
        self.calls.append((start_at, max_results))
        values = self.records[start_at : start_at + max_results]
        more = start_at + max_results < len(self.records)
        return {"values": values, "next": "more" if more else None}


def _records(n: int) -> list[dict[str, Any]]:
    return [{"key": f"PROJ-T{i}", "name": f"case {i}"} for i in range(n)]


class TestFetchAll:
    def test_single_page(self) -> None:
        op = ScriptedPages([{"values": [{"id": 1}, {"id": 2}], "next": None}])
        assert fetch_all(op) == [{"id": 1}, {"id": 2}]
        assert op.calls == [(0, 100)]

    def test_advances_start_at_by_page_size(self) -> None:
        op = ListPages(_records(250))
        result = fetch_all(op)
        assert len(result) == 250
        assert op.calls == [(0, 100), (100, 100), (200, 100)]

    def test_full_last_page_without_next_stops(self) -> None:
        op = ScriptedPages([{"values": [{"id": i} for i in range(3)], "next": None}])
        assert len(fetch_all(op, page_size=3)) == 3
        assert len(op.calls) == 1

    def test_short_page_with_next_keeps_going(self) -> None:
        op = ScriptedPages(
            [
                {"values": [{"id": 1}], "next": "more"},
                {"values": [{"id": 2}], "next": None},
            ]
        )
        assert fetch_all(op) == [{"id": 1}, {"id": 2}]
        assert op.calls == [(0, 100), (100, 100)]

    def test_empty_page_with_next_keeps_going(self) -> None:
        op = ScriptedPages(
            [
                {"values": [], "next": "more"},
                {"values": [{"id": 7}], "next": None},
            ]
        )
        assert fetch_all(op) == [{"id": 7}]
        assert len(op.calls) == 2

    def test_missing_values_treated_as_empty(self) -> None:
        op = ScriptedPages([{"next": None}])
        assert fetch_all(op) == []

    def test_page_order_is_preserved(self) -> None:
        op = ScriptedPages(
            [
                {"values": [{"id": 3}, {"id": 1}], "next": "more"},
                {"values": [{"id": 2}], "next": None},
            ]
        )
        assert [r["id"] for r in fetch_all(op, page_size=2)] == [3, 1, 2]

    def test_failure_propagates(self) -> None:
        def op(start_at: int, max_results: int) -> PageData:
            if start_at:
                raise RuntimeError("boom")
            return {"values": [{"id": 1}], "next": "more"}

        with pytest.raises(RuntimeError, match="boom"):
            fetch_all(op)

    def test_rejects_non_positive_page_size(self) -> None:
        with pytest.raises(ValueError, match="page_size"):
            fetch_all(ListPages([]), page_size=0)


class TestFetchCapped:
    def test_under_limit_reports_no_more(self) -> None:
        op = ListPages(_records(3))
        records, has_more = fetch_capped(op, limit=5)
        assert len(records) == 3
        assert has_more is False

    def test_exact_limit_with_nothing_beyond(self) -> None:
        op = ListPages(_records(5))
        records, has_more = fetch_capped(op, limit=5)
        assert len(records) == 5
        assert has_more is False

    def test_truncates_and_reports_more(self) -> None:
        op = ListPages(_records(8))
        records, has_more = fetch_capped(op, limit=5)
        assert [r["key"] for r in records] == [f"PROJ-T{i}" for i in range(5)]
        assert has_more is True

    def test_requests_only_what_fits(self) -> None:
        op = ListPages(_records(300))
        records, has_more = fetch_capped(op, limit=150)
        assert len(records) == 150
        assert has_more is True
        assert op.calls == [(0, 100), (100, 50)]

    def test_oversized_page_is_truncated(self) -> None:
        op = ScriptedPages([{"values": _records(4), "next": None}])
        records, has_more = fetch_capped(op, limit=2)
        assert len(records) == 2
        assert has_more is True

    def test_rejects_non_positive_limit(self) -> None:
        with pytest.raises(ValueError, match="limit"):
            fetch_capped(ListPages([]), limit=0)
