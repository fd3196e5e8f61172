"""Click options and parameter types shared by several command groups."""

from __future__ import annotations

import json
import re
from collections.abc import Callable
from typing import Any, TypeVar

import click

F = TypeVar("F", bound=Callable[..., Any])

POSITIVE_INT = click.IntRange(min=1)
NON_NEGATIVE_INT = click.IntRange(min=0)

FOLDER_TYPES = ("TEST_CASE", "TEST_PLAN", "TEST_CYCLE")
STATUS_TYPES = ("TEST_CASE", "TEST_PLAN", "TEST_CYCLE", "TEST_EXECUTION")

_NUMBER = re.compile(r"^-?\d+(\.\d+)?$")


def pagination_options(f: F) -> F:
    """Add ``--max-results`` / ``--start-at`` to a list command."""
    f = click.option(
        "--start-at",
        default=0,
        show_default=True,
        type=NON_NEGATIVE_INT,
        help="Starting position (zero-indexed)",
    )(f)
    f = click.option(
        "--max-results",
        default=10,
        show_default=True,
        type=click.IntRange(1, 1000),
        help="Maximum results to return (1-1000)",
    )(f)
    return f


def parse_custom_field_value(value: str) -> Any:
    """Auto-type a custom field value: number, boolean, JSON array/object, else string."""
    if _NUMBER.match(value):
        return float(value) if "." in value else int(value)
    if value.lower() == "true":
        return True
    if value.lower() == "false":
        return False
    if (value.startswith("[") and value.endswith("]")) or (value.startswith("{") and value.endswith("}")):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            pass  # not JSON, keep the raw string
    return value


def _parse_custom_fields(ctx: click.Context, param: click.Parameter, values: tuple[str, ...]) -> dict[str, Any] | None:
    if not values:
        return None
    fields: dict[str, Any] = {}
    for item in values:
        if "=" not in item:
            raise click.BadParameter(f'Invalid custom field format: "{item}". Expected "key=value"')
        key, raw = item.split("=", 1)
        fields[key.strip()] = parse_custom_field_value(raw)
    return fields


def custom_field_option(f: F) -> F:
    return click.option(
        "--custom-field",
        "custom_fields",
        multiple=True,
        callback=_parse_custom_fields,
        metavar="KEY=VALUE",
        help="Set custom field (repeatable). Values are auto-parsed as number/boolean/JSON",
    )(f)


def _parse_labels(ctx: click.Context, param: click.Parameter, value: str | None) -> list[str] | None:
    if value is None:
        return None
    return [label.strip() for label in value.split(",") if label.strip()]


def labels_option(f: F) -> F:
    return click.option("--labels", callback=_parse_labels, help="Comma-separated list of labels")(f)


def folder_id_option(help_text: str = "Folder ID filter") -> Callable[[F], F]:
    return click.option("--folder-id", type=POSITIVE_INT, default=None, help=help_text)
