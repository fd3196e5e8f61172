"""CLI commands for test environments."""

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

ENVIRONMENT_COLUMNS = [
    Column("ID", nested("id")),
    Column("NAME", nested("name")),
    Column("DESCRIPTION", nested("description")),
]

ENVIRONMENT_FIELDS = [
    ("ID:", nested("id")),
    ("Name:", nested("name")),
    ("Description:", nested("description")),
    ("Project:", nested("project", "id")),
    ("Index:", nested("index")),
]


@click.group()
def environment() -> None:
    """Manage test environments."""


@environment.command("list")
@pagination_options
@click.pass_context
@handle_errors
def environment_list(ctx: click.Context, max_results: int, start_at: int) -> None:
    """List environments."""
    key = resolve_project_key(ctx)
    logger.info("Fetching environments for project: %s", key)

    response = get_client(ctx).environments.list_environments(
        project_key=key, max_results=max_results, start_at=start_at
    )
    environments: list[Any] = response.data.get("values") or []
    logger.info("Found %d environment(s)", len(environments))

    show_pagination_info(bool(response.data.get("next")), start_at, max_results, logger)
    output_results(environments, use_text(ctx), lambda rows: format_as_table(rows, ENVIRONMENT_COLUMNS))


@environment.command("get")
@click.argument("environment_id", type=POSITIVE_INT)
@click.pass_context
@handle_errors
def environment_get(ctx: click.Context, environment_id: int) -> None:
    """Get an environment by ID."""
    logger.info("Fetching environment: %d", environment_id)
    response = get_client(ctx).environments.get_environment(environment_id)
    output_results(response.data, use_text(ctx), lambda record: format_as_key_value(record, ENVIRONMENT_FIELDS))


@environment.command("create")
@click.option("--name", required=True, help="Environment name")
@click.option("--description", default=None, help="Environment description")
@click.pass_context
@handle_errors
def environment_create(ctx: click.Context, name: str, description: str | None) -> None:
    """Create a new environment."""
    key = resolve_project_key(ctx)
    logger.info("Creating environment in project: %s", key)
    response = get_client(ctx).environments.create_environment(
        {"projectKey": key, "name": name, "description": description}
    )
    logger.info("Environment created successfully")
    output_results(response.data, use_text(ctx), lambda record: format_as_key_value(record, CREATED_FIELDS))


@environment.command("update")
@click.argument("environment_id", type=POSITIVE_INT)
@click.option("--name", default=None, help="Environment name")
@click.option("--description", default=None, help="Environment description")
@click.pass_context
@handle_errors
def environment_update(ctx: click.Context, environment_id: int, name: str | None, description: str | None) -> None:
    """Update an environment; unspecified fields keep their current values."""
    client = get_client(ctx)
    current: dict[str, Any] = client.environments.get_environment(environment_id).data

    logger.info("Updating environment: %d", environment_id)
    client.environments.update_environment(
        environment_id,
        {
            "id": current.get("id"),
            "project": current.get("project"),
            "name": name or current.get("name"),
            "description": description if description is not None else current.get("description"),
            "index": current.get("index"),
        },
    )
    logger.info("Environment updated successfully")

    response = client.environments.get_environment(environment_id)
    output_results(response.data, use_text(ctx), lambda record: format_as_key_value(record, ENVIRONMENT_FIELDS))


def register(cli: click.Group) -> None:
    """Register environment commands with the CLI group."""
    cli.add_command(environment)
