"""Tests for table, key-value, and JSON output helpers."""

from __future__ import annotations

import json
import logging

import pytest

from zephyr_cli.output import (
    Column,
    format_as_key_value,
    format_as_table,
    nested,
    output_results,
    show_pagination_info,
    to_json,
)

COLUMNS = [Column("ID", nested("id")), Column("NAME", nested("name")), Column("FOLDER", nested("folder", "id"))]


class TestNested:
    def test_walks_path(self) -> None:
        assert nested("a", "b")({"a": {"b": 3}}) == 3

    def test_missing_levels_are_none(self) -> None:
        assert nested("a", "b")({"a": None}) is None
        assert nested("a", "b")({}) is None
        assert nested("a")("not a dict") is None


class TestTable:
    def test_layout(self) -> None:
        rows = [{"id": 1, "name": "Root", "folder": {"id": 9}}, {"id": 22, "name": "A much longer name"}]
        assert format_as_table(rows, COLUMNS).splitlines() == [
            "ID  NAME                FOLDER",
            "------------------------------",
            "1   Root                9",
            "22  A much longer name  N/A",
        ]

    def test_empty(self) -> None:
        assert format_as_table([], COLUMNS) == "No results found"

    def test_lists_joined(self) -> None:
        table = format_as_table([{"id": 1, "name": ["a", "b"]}], COLUMNS)
        assert "a, b" in table


class TestKeyValue:
    def test_labels_aligned(self) -> None:
        fields = [("Key:", nested("key")), ("Description:", nested("description"))]
        assert format_as_key_value({"key": "PROJ-T1"}, fields).splitlines() == [
            "Key:          PROJ-T1",
            "Description:  N/A",
        ]

    def test_empty_list_is_na(self) -> None:
        assert format_as_key_value({"labels": []}, [("Labels:", nested("labels"))]) == "Labels:  N/A"


class TestJson:
    def test_indented_and_unicode(self) -> None:
        text = to_json({"name": "Prüfung"})
        assert text == '{\n  "name": "Prüfung"\n}'

    def test_output_results_defaults_to_json(self, capsys: pytest.CaptureFixture[str]) -> None:
        output_results([{"id": 1}], text=False, formatter=lambda rows: "TABLE")
        assert json.loads(capsys.readouterr().out) == [{"id": 1}]

    def test_output_results_text_uses_formatter(self, capsys: pytest.CaptureFixture[str]) -> None:
        output_results([{"id": 1}], text=True, formatter=lambda rows: f"{len(rows)} row(s)")
        assert capsys.readouterr().out == "1 row(s)\n"


class TestPaginationInfo:
    def test_hint_when_more(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = logging.getLogger("zephyr_cli.test.output")
        with caplog.at_level(logging.INFO, logger="zephyr_cli.test.output"):
            show_pagination_info(True, 20, 10, logger)
        assert "Use --start-at 30 to get next page" in caplog.text

    def test_silent_on_last_page(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = logging.getLogger("zephyr_cli.test.output")
        with caplog.at_level(logging.INFO, logger="zephyr_cli.test.output"):
            show_pagination_info(False, 20, 10, logger)
        assert caplog.text == ""
