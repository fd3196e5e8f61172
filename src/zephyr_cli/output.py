"""Output helpers for flat records: JSON by default, tables / key-value text with --text."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

import click

Getter = Callable[[Any], Any]


@dataclass(frozen=True)
class Column:
    header: str
    get: Getter


def nested(*path: str) -> Getter:
    """Getter for a nested key path, e.g. ``nested("folder", "id")``."""

    def get(record: Any) -> Any:
        value = record
        for key in path:
            if not isinstance(value, dict):
                return None
            value = value.get(key)
        return value

    return get


def _cell(value: Any) -> str:
    if value is None or value == "":
        return "N/A"
    if isinstance(value, list):
        return ", ".join(str(v) for v in value) or "N/A"
    return str(value)


def format_as_table(rows: Sequence[Any], columns: Sequence[Column]) -> str:
    if not rows:
        return "No results found"

    cells = [[_cell(col.get(row)) for col in columns] for row in rows]
    widths = [max(len(col.header), *(len(r[i]) for r in cells)) for i, col in enumerate(columns)]

    header = "  ".join(col.header.ljust(widths[i]) for i, col in enumerate(columns))
    lines = [header, "-" * len(header)]
    lines.extend("  ".join(value.ljust(widths[i]) for i, value in enumerate(r)) for r in cells)
    return "\n".join(line.rstrip() for line in lines)


def format_as_key_value(record: Any, fields: Sequence[tuple[str, Getter]]) -> str:
    label_width = max(len(label) for label, _ in fields)
    return "\n".join(f"{label.ljust(label_width)}  {_cell(get(record))}" for label, get in fields)


def to_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


def output_results(data: Any, text: bool, formatter: Callable[[Any], str]) -> None:
    """Echo *data* as JSON, or through *formatter* when --text is active."""
    click.echo(formatter(data) if text else to_json(data))


def show_pagination_info(has_next: bool, start_at: int, max_results: int, logger: logging.Logger) -> None:
    if has_next:
        logger.info("More results available. Use --start-at %d to get next page", start_at + max_results)


CREATED_FIELDS: list[tuple[str, Getter]] = [("ID:", nested("id")), ("URL:", nested("self"))]
KEYED_CREATED_FIELDS: list[tuple[str, Getter]] = [("Key:", nested("key")), *CREATED_FIELDS]
UPDATED_FIELDS: list[tuple[str, Getter]] = [("Key:", nested("key")), ("Updated:", nested("updated"))]
