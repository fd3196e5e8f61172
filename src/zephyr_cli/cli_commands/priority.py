"""CLI commands for priorities."""

from __future__ import annotations

import logging
from typing import Any

import click

from zephyr_cli.cli_common import get_client, handle_errors, resolve_project_key, use_text
from zephyr_cli.options import POSITIVE_INT, pagination_options
from zephyr_cli.output import (
    CREATED_FIELDS,
    Column,
    format_as_key_value,
    format_as_table,
    nested,
    output_results,
    show_pagination_info,
)

logger = logging.getLogger(__name__)

PRIORITY_COLUMNS = [
    Column("ID", nested("id")),
    Column("NAME", nested("name")),
    Column("COLOR", nested("color")),
    Column("DEFAULT", nested("default")),
]

PRIORITY_FIELDS = [
    ("ID:", nested("id")),
    ("Name:", nested("name")),
    ("Description:", nested("description")),
    ("Color:", nested("color")),
    ("Default:", nested("default")),
]


@click.group()
def priority() -> None:
    """Manage priorities."""


@priority.command("list")
@pagination_options
@click.pass_context
@handle_errors
def priority_list(ctx: click.Context, max_results: int, start_at: int) -> None:
    """List priorities."""
    key = resolve_project_key(ctx)
    logger.info("Fetching priorities for project: %s", key)

    response = get_client(ctx).priorities.list_priorities(project_key=key, max_results=max_results, start_at=start_at)
    priorities: list[Any] = response.data.get("values") or []
    logger.info("Found %d priority(ies)", len(priorities))

    show_pagination_info(bool(response.data.get("next")), start_at, max_results, logger)
    output_results(priorities, use_text(ctx), lambda rows: format_as_table(rows, PRIORITY_COLUMNS))


@priority.command("get")
@click.argument("priority_id", type=POSITIVE_INT)
@click.pass_context
@handle_errors
def priority_get(ctx: click.Context, priority_id: int) -> None:
    """Get a priority by ID."""
    logger.info("Fetching priority: %d", priority_id)
    response = get_client(ctx).priorities.get_priority(priority_id)
    output_results(response.data, use_text(ctx), lambda record: format_as_key_value(record, PRIORITY_FIELDS))


@priority.command("create")
@click.option("--name", required=True, help="Priority name")
@click.option("--description", default=None, help="Priority description")
@click.option("--color", default=None, help="Color in hexadecimal format (e.g. #FF0000)")
@click.pass_context
@handle_errors
def priority_create(ctx: click.Context, name: str, description: str | None, color: str | None) -> None:
    """Create a new priority."""
    key = resolve_project_key(ctx)
    logger.info("Creating priority in project: %s", key)
    response = get_client(ctx).priorities.create_priority(
        {"projectKey": key, "name": name, "description": description, "color": color}
    )
    logger.info("Priority created successfully")
    output_results(response.data, use_text(ctx), lambda record: format_as_key_value(record, CREATED_FIELDS))


def register(cli: click.Group) -> None:
    """Register priority commands with the CLI group."""
    cli.add_command(priority)
