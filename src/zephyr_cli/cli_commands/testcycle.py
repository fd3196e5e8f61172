"""CLI commands for test cycles, including the cycle folder tree."""

from __future__ import annotations

import logging
from typing import Any

import click

from zephyr_cli.cli_common import get_client, handle_errors, resolve_project_key, use_text
from zephyr_cli.options import POSITIVE_INT, custom_field_option, folder_id_option, pagination_options
from zephyr_cli.output import (
    KEYED_CREATED_FIELDS,
    UPDATED_FIELDS,
    Column,
    format_as_key_value,
    format_as_table,
    nested,
    output_results,
    show_pagination_info,
)
from zephyr_cli.tree import EMPTY_CYCLE_MESSAGE, build_cycle_tree, render

logger = logging.getLogger(__name__)

TEST_CYCLE_COLUMNS = [
    Column("KEY", nested("key")),
    Column("NAME", nested("name")),
    Column("STATUS", nested("status", "id")),
    Column("FOLDER", nested("folder", "id")),
]

TEST_CYCLE_FIELDS = [
    ("Key:", nested("key")),
    ("Name:", nested("name")),
    ("Status:", nested("status", "id")),
    ("Folder:", nested("folder", "id")),
    ("Owner:", nested("owner", "accountId")),
    ("Planned Start:", nested("plannedStartDate")),
    ("Planned End:", nested("plannedEndDate")),
    ("Description:", nested("description")),
]


def _cycle_options(f: Any) -> Any:
    """Options shared by ``create`` and ``update``; ``--name`` is added per command."""
    f = custom_field_option(f)
    f = click.option("--owner-id", default=None, help="Atlassian Account ID of the owner")(f)
    f = click.option("--folder-id", type=POSITIVE_INT, default=None, help="Folder ID")(f)
    f = click.option("--status-name", default=None, help="Status name")(f)
    f = click.option("--jira-project-version", type=POSITIVE_INT, default=None, help="Jira project version ID")(f)
    f = click.option("--planned-end-date", default=None, help="Planned end date (ISO 8601 format)")(f)
    f = click.option("--planned-start-date", default=None, help="Planned start date (ISO 8601 format)")(f)
    f = click.option("--description", default=None, help="Description of the test cycle")(f)
    return f


@click.group()
def testcycle() -> None:
    """Manage test cycles."""


@testcycle.command("list")
@pagination_options
@folder_id_option()
@click.pass_context
@handle_errors
def testcycle_list(ctx: click.Context, max_results: int, start_at: int, folder_id: int | None) -> None:
    """List test cycles."""
    key = resolve_project_key(ctx)
    logger.info("Fetching test cycles for project: %s", key)

    response = get_client(ctx).testcycles.list_test_cycles(
        project_key=key, folder_id=folder_id, max_results=max_results, start_at=start_at
    )
    cycles: list[Any] = response.data.get("values") or []
    logger.info("Found %d test cycle(s)", len(cycles))

    show_pagination_info(bool(response.data.get("next")), start_at, max_results, logger)
    output_results(cycles, use_text(ctx), lambda rows: format_as_table(rows, TEST_CYCLE_COLUMNS))


@testcycle.command("get")
@click.argument("key")
@click.pass_context
@handle_errors
def testcycle_get(ctx: click.Context, key: str) -> None:
    """Get a test cycle by key or ID."""
    logger.info("Fetching test cycle: %s", key)
    response = get_client(ctx).testcycles.get_test_cycle(key)
    output_results(response.data, use_text(ctx), lambda record: format_as_key_value(record, TEST_CYCLE_FIELDS))


@testcycle.command("create")
@click.option("--name", required=True, help="Test cycle name")
@_cycle_options
@click.pass_context
@handle_errors
def testcycle_create(
    ctx: click.Context,
    name: str,
    description: str | None,
    planned_start_date: str | None,
    planned_end_date: str | None,
    jira_project_version: int | None,
    status_name: str | None,
    folder_id: int | None,
    owner_id: str | None,
    custom_fields: dict[str, Any] | None,
) -> None:
    """Create a new test cycle."""
    key = resolve_project_key(ctx)
    logger.info("Creating test cycle in project: %s", key)

    response = get_client(ctx).testcycles.create_test_cycle(
        {
            "projectKey": key,
            "name": name,
            "description": description,
            "plannedStartDate": planned_start_date,
            "plannedEndDate": planned_end_date,
            "jiraProjectVersion": jira_project_version,
            "statusName": status_name,
            "folderId": folder_id,
            "ownerId": owner_id,
            "customFields": custom_fields,
        }
    )
    logger.info("Test cycle created successfully")
    output_results(response.data, use_text(ctx), lambda record: format_as_key_value(record, KEYED_CREATED_FIELDS))


@testcycle.command("update")
@click.argument("key")
@click.option("--name", default=None, help="Test cycle name")
@_cycle_options
@click.pass_context
@handle_errors
def testcycle_update(
    ctx: click.Context,
    key: str,
    name: str | None,
    description: str | None,
    planned_start_date: str | None,
    planned_end_date: str | None,
    jira_project_version: int | None,
    status_name: str | None,
    folder_id: int | None,
    owner_id: str | None,
    custom_fields: dict[str, Any] | None,
) -> None:
    """Update an existing test cycle; unspecified fields keep their current values."""
    logger.info("Updating test cycle: %s", key)
    client = get_client(ctx)
    current: dict[str, Any] = client.testcycles.get_test_cycle(key).data

    changes = {
        "name": name,
        "description": description,
        "plannedStartDate": planned_start_date,
        "plannedEndDate": planned_end_date,
        "jiraProjectVersion": jira_project_version,
        "statusName": status_name,
        "folderId": folder_id,
        "ownerId": owner_id,
    }
    body = {**current, **{k: v for k, v in changes.items() if v is not None}}
    if custom_fields:
        body["customFields"] = {**(current.get("customFields") or {}), **custom_fields}

    client.testcycles.update_test_cycle(key, body)
    logger.info("Test cycle updated successfully: %s", key)
    output_results({"key": key, "updated": True}, use_text(ctx), lambda r: format_as_key_value(r, UPDATED_FIELDS))


@testcycle.command("tree")
@click.argument("test_cycle_key")
@click.pass_context
@handle_errors
def testcycle_tree(ctx: click.Context, test_cycle_key: str) -> None:
    """Show the folders holding a test cycle's test cases (may take a long time)."""
    text = use_text(ctx)
    logger.info("Fetching tree for test cycle: %s", test_cycle_key)
    logger.info("This may take a while...")

    forest = build_cycle_tree(get_client(ctx), resolve_project_key(ctx), test_cycle_key, logger=logger)
    if not forest:
        click.echo(EMPTY_CYCLE_MESSAGE if text else "[]")
        return
    click.echo(render(forest, text=text))


def register(cli: click.Group) -> None:
    """Register test cycle commands with the CLI group."""
    cli.add_command(testcycle)
