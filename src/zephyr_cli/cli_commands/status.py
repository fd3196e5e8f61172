"""CLI commands for statuses."""

from __future__ import annotations

import logging
from typing import Any

import click

from zephyr_cli.cli_common import get_client, handle_errors, resolve_project_key, use_text
from zephyr_cli.options import POSITIVE_INT, STATUS_TYPES, pagination_options
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

STATUS_COLUMNS = [
    Column("ID", nested("id")),
    Column("NAME", nested("name")),
    Column("TYPE", nested("type")),
    Column("COLOR", nested("color")),
    Column("ARCHIVED", nested("archived")),
]

STATUS_FIELDS = [
    ("ID:", nested("id")),
    ("Name:", nested("name")),
    ("Type:", nested("type")),
    ("Description:", nested("description")),
    ("Color:", nested("color")),
    ("Archived:", nested("archived")),
    ("Default:", nested("default")),
]


@click.group()
def status() -> None:
    """Manage statuses."""


@status.command("list")
@pagination_options
@click.option("--status-type", type=click.Choice(STATUS_TYPES), default=None, help="Filter by status type")
@click.pass_context
@handle_errors
def status_list(ctx: click.Context, max_results: int, start_at: int, status_type: str | None) -> None:
    """List statuses."""
    key = resolve_project_key(ctx)
    logger.info("Fetching statuses for project: %s", key)

    response = get_client(ctx).statuses.list_statuses(
        project_key=key, status_type=status_type, max_results=max_results, start_at=start_at
    )
    statuses: list[Any] = response.data.get("values") or []
    logger.info("Found %d status(es)", len(statuses))

    show_pagination_info(bool(response.data.get("next")), start_at, max_results, logger)
    output_results(statuses, use_text(ctx), lambda rows: format_as_table(rows, STATUS_COLUMNS))


@status.command("get")
@click.argument("status_id", type=POSITIVE_INT)
@click.pass_context
@handle_errors
def status_get(ctx: click.Context, status_id: int) -> None:
    """Get a status by ID."""
    logger.info("Fetching status: %d", status_id)
    response = get_client(ctx).statuses.get_status(status_id)
    output_results(response.data, use_text(ctx), lambda record: format_as_key_value(record, STATUS_FIELDS))


@status.command("create")
@click.option("--name", required=True, help="Status name")
@click.option("--type", "status_type", type=click.Choice(STATUS_TYPES), required=True, help="Status type")
@click.option("--description", default=None, help="Status description")
@click.option("--color", default=None, help="Color in hexadecimal format (e.g. #FF0000)")
@click.pass_context
@handle_errors
def status_create(
    ctx: click.Context, name: str, status_type: str, description: str | None, color: str | None
) -> None:
    """Create a new status."""
    key = resolve_project_key(ctx)
    logger.info("Creating status in project: %s", key)
    response = get_client(ctx).statuses.create_status(
        {"projectKey": key, "name": name, "type": status_type, "description": description, "color": color}
    )
    logger.info("Status created successfully")
    output_results(response.data, use_text(ctx), lambda record: format_as_key_value(record, CREATED_FIELDS))


def register(cli: click.Group) -> None:
    """Register status commands with the CLI group."""
    cli.add_command(status)
