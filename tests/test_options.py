"""Tests for shared click options: custom fields, labels, and pagination bounds."""

from __future__ import annotations

import json
from typing import Any

import click
import pytest
from click.testing import CliRunner

from zephyr_cli.options import custom_field_option, labels_option, pagination_options, parse_custom_field_value


@click.command()
@pagination_options
@labels_option
@custom_field_option
def echo_options(
    max_results: int, start_at: int, labels: list[str] | None, custom_fields: dict[str, Any] | None
) -> None:
    click.echo(json.dumps({"max": max_results, "start": start_at, "labels": labels, "fields": custom_fields}))


def run(*args: str) -> dict[str, Any]:
    result = CliRunner().invoke(echo_options, list(args))
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)  # type: ignore[no-any-return]


class TestCustomFieldValues:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("42", 42),
            ("-7", -7),
            ("3.5", 3.5),
            ("true", True),
            ("FALSE", False),
            ('["a", "b"]', ["a", "b"]),
            ('{"x": 1}', {"x": 1}),
            ("[not json", "[not json"),
            ("[broken]", "[broken]"),
            ("hello world", "hello world"),
            ("", ""),
            ("1e5", "1e5"),
        ],
    )
    def test_parse(self, raw: str, expected: Any) -> None:
        assert parse_custom_field_value(raw) == expected

    def test_repeatable_and_split_on_first_equals(self) -> None:
        data = run("--custom-field", "Points=3", "--custom-field", "Formula=a=b", "--custom-field", " Flag =true")
        assert data["fields"] == {"Points": 3, "Formula": "a=b", "Flag": True}

    def test_absent_is_none(self) -> None:
        assert run()["fields"] is None

    def test_missing_equals_rejected(self) -> None:
        result = CliRunner().invoke(echo_options, ["--custom-field", "Points"])
        assert result.exit_code == 2
        assert 'Invalid custom field format: "Points"' in result.output


class TestLabels:
    def test_split_and_trimmed(self) -> None:
        assert run("--labels", " smoke, regression ,,api")["labels"] == ["smoke", "regression", "api"]

    def test_absent_is_none(self) -> None:
        assert run()["labels"] is None


class TestPagination:
    def test_defaults(self) -> None:
        data = run()
        assert (data["max"], data["start"]) == (10, 0)

    @pytest.mark.parametrize("args", [["--max-results", "0"], ["--max-results", "1001"], ["--start-at", "-1"]])
    def test_bounds(self, args: list[str]) -> None:
        assert CliRunner().invoke(echo_options, args).exit_code == 2

    def test_upper_bound_accepted(self) -> None:
        assert run("--max-results", "1000")["max"] == 1000
