"""CLI commands for test plans."""

from __future__ import annotations

import logging
from typing import Any

import click

from zephyr_cli.cli_common import get_client, handle_errors, resolve_project_key, use_text
from zephyr_cli.options import POSITIVE_INT, custom_field_option, folder_id_option, labels_option, pagination_options
from zephyr_cli.output import (
    KEYED_CREATED_FIELDS,
    Column,
    format_as_key_value,
    format_as_table,
    nested,
    output_results,
    show_pagination_info,
)

logger = logging.getLogger(__name__)

TEST_PLAN_COLUMNS = [
    Column("KEY", nested("key")),
    Column("NAME", nested("name")),
    Column("STATUS", nested("status", "id")),
    Column("FOLDER", nested("folder", "id")),
]

TEST_PLAN_FIELDS = [
    ("Key:", nested("key")),
    ("Name:", nested("name")),
    ("Status:", nested("status", "id")),
    ("Folder:", nested("folder", "id")),
    ("Owner:", nested("owner", "accountId")),
    ("Objective:", nested("objective")),
    ("Labels:", nested("labels")),
]


@click.group()
def testplan() -> None:
    """Manage test plans."""


@testplan.command("list")
@pagination_options
@folder_id_option()
@click.pass_context
@handle_errors
def testplan_list(ctx: click.Context, max_results: int, start_at: int, folder_id: int | None) -> None:
    """List test plans."""
    key = resolve_project_key(ctx)
    logger.info("Fetching test plans for project: %s", key)

    response = get_client(ctx).testplans.list_test_plans(
        project_key=key, folder_id=folder_id, max_results=max_results, start_at=start_at
    )
    plans: list[Any] = response.data.get("values") or []
    logger.info("Found %d test plan(s)", len(plans))

    show_pagination_info(bool(response.data.get("next")), start_at, max_results, logger)
    output_results(plans, use_text(ctx), lambda rows: format_as_table(rows, TEST_PLAN_COLUMNS))


@testplan.command("get")
@click.argument("key")
@click.pass_context
@handle_errors
def testplan_get(ctx: click.Context, key: str) -> None:
    """Get a test plan by key or ID."""
    logger.info("Fetching test plan: %s", key)
    response = get_client(ctx).testplans.get_test_plan(key)
    output_results(response.data, use_text(ctx), lambda record: format_as_key_value(record, TEST_PLAN_FIELDS))


@testplan.command("create")
@click.option("--name", required=True, help="Test plan name")
@click.option("--objective", default=None, help="Description of the objective")
@click.option("--status-name", default=None, help="Status name")
@click.option("--folder-id", type=POSITIVE_INT, default=None, help="Folder ID")
@click.option("--owner-id", default=None, help="Atlassian Account ID of the owner")
@labels_option
@custom_field_option
@click.pass_context
@handle_errors
def testplan_create(
    ctx: click.Context,
    name: str,
    objective: str | None,
    status_name: str | None,
    folder_id: int | None,
    owner_id: str | None,
    labels: list[str] | None,
    custom_fields: dict[str, Any] | None,
) -> None:
    """Create a new test plan."""
    key = resolve_project_key(ctx)
    logger.info("Creating test plan in project: %s", key)

    response = get_client(ctx).testplans.create_test_plan(
        {
            "projectKey": key,
            "name": name,
            "objective": objective,
            "statusName": status_name,
            "folderId": folder_id,
            "ownerId": owner_id,
            "labels": labels,
            "customFields": custom_fields,
        }
    )
    logger.info("Test plan created successfully")
    output_results(response.data, use_text(ctx), lambda record: format_as_key_value(record, KEYED_CREATED_FIELDS))


def register(cli: click.Group) -> None:
    """Register test plan commands with the CLI group."""
    cli.add_command(testplan)
