"""CLI commands for Zephyr-enabled Jira projects."""

from __future__ import annotations

import logging
from typing import Any

import click

from zephyr_cli.cli_common import get_client, handle_errors, use_text
from zephyr_cli.options import pagination_options
from zephyr_cli.output import (
    Column,
    format_as_key_value,
    format_as_table,
    nested,
    output_results,
    show_pagination_info,
)

logger = logging.getLogger(__name__)

PROJECT_COLUMNS = [
    Column("ID", nested("id")),
    Column("KEY", nested("key")),
    Column("JIRA PROJECT", nested("jiraProjectId")),
    Column("ENABLED", nested("enabled")),
]

PROJECT_FIELDS = [
    ("ID:", nested("id")),
    ("Key:", nested("key")),
    ("Jira Project ID:", nested("jiraProjectId")),
    ("Enabled:", nested("enabled")),
]


@click.group()
def project() -> None:
    """View projects."""


@project.command("list")
@pagination_options
@click.pass_context
@handle_errors
def project_list(ctx: click.Context, max_results: int, start_at: int) -> None:
    """List all projects."""
    logger.info("Fetching projects")
    response = get_client(ctx).projects.list_projects(max_results=max_results, start_at=start_at)
    projects: list[Any] = response.data.get("values") or []
    logger.info("Found %d project(s)", len(projects))

    show_pagination_info(bool(response.data.get("next")), start_at, max_results, logger)
    output_results(projects, use_text(ctx), lambda rows: format_as_table(rows, PROJECT_COLUMNS))


@project.command("get")
@click.argument("id_or_key")
@click.pass_context
@handle_errors
def project_get(ctx: click.Context, id_or_key: str) -> None:
    """Get a project by ID or key."""
    logger.info("Fetching project: %s", id_or_key)
    response = get_client(ctx).projects.get_project(id_or_key)
    output_results(response.data, use_text(ctx), lambda record: format_as_key_value(record, PROJECT_FIELDS))


def register(cli: click.Group) -> None:
    """Register project commands with the CLI group."""
    cli.add_command(project)
