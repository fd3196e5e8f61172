"""CLI commands for folders: list, get, create, and the recursive tree view."""

from __future__ import annotations

import logging
from typing import Any

import click

from zephyr_cli.cli_common import get_client, handle_errors, resolve_project_key, use_text
from zephyr_cli.options import FOLDER_TYPES, POSITIVE_INT, pagination_options
from zephyr_cli.output import (
    CREATED_FIELDS,
    Column,
    format_as_key_value,
    format_as_table,
    nested,
    output_results,
    show_pagination_info,
)
from zephyr_cli.tree import build_folder_tree, render

logger = logging.getLogger(__name__)

FOLDER_COLUMNS = [
    Column("ID", nested("id")),
    Column("NAME", nested("name")),
    Column("TYPE", nested("folderType")),
    Column("PARENT", nested("parentId")),
    Column("PROJECT", nested("project", "id")),
]

FOLDER_FIELDS = [
    ("ID:", nested("id")),
    ("Name:", nested("name")),
    ("Type:", nested("folderType")),
    ("Parent ID:", nested("parentId")),
    ("Project:", nested("project", "id")),
]


@click.group()
def folder() -> None:
    """Manage folders."""


@folder.command("list")
@pagination_options
@click.option("--project-key", default=None, help="Jira project key filter (default: profile project)")
@click.option("--folder-type", type=click.Choice(FOLDER_TYPES), default=None, help="Folder type filter")
@click.pass_context
@handle_errors
def folder_list(
    ctx: click.Context, max_results: int, start_at: int, project_key: str | None, folder_type: str | None
) -> None:
    """List folders."""
    key = resolve_project_key(ctx, project_key)
    logger.info("Fetching folders for project: %s", key)
    logger.debug("Parameters: maxResults=%d, startAt=%d", max_results, start_at)

    response = get_client(ctx).folders.list_folders(
        project_key=key, folder_type=folder_type, max_results=max_results, start_at=start_at
    )
    folders: list[Any] = response.data.get("values") or []
    logger.info("Found %d folder(s)", len(folders))

    show_pagination_info(bool(response.data.get("next")), start_at, max_results, logger)
    output_results(folders, use_text(ctx), lambda rows: format_as_table(rows, FOLDER_COLUMNS))


@folder.command("get")
@click.argument("folder_id", type=POSITIVE_INT)
@click.pass_context
@handle_errors
def folder_get(ctx: click.Context, folder_id: int) -> None:
    """Get a folder by ID."""
    logger.info("Fetching folder: %d", folder_id)
    response = get_client(ctx).folders.get_folder(folder_id)
    output_results(response.data, use_text(ctx), lambda record: format_as_key_value(record, FOLDER_FIELDS))


@folder.command("create")
@click.option("--name", required=True, help="Folder name")
@click.option("--folder-type", type=click.Choice(FOLDER_TYPES), required=True, help="Folder type")
@click.option("--parent-id", type=POSITIVE_INT, default=None, help="Parent folder ID")
@click.option("--project-key", default=None, help="Jira project key (default: profile project)")
@click.pass_context
@handle_errors
def folder_create(
    ctx: click.Context, name: str, folder_type: str, parent_id: int | None, project_key: str | None
) -> None:
    """Create a new folder."""
    key = resolve_project_key(ctx, project_key)
    logger.info("Creating folder in project: %s", key)
    logger.debug("Folder name: %s, type: %s", name, folder_type)

    response = get_client(ctx).folders.create_folder(
        {"projectKey": key, "name": name, "folderType": folder_type, "parentId": parent_id}
    )
    logger.info("Folder created successfully")
    output_results(response.data, use_text(ctx), lambda record: format_as_key_value(record, CREATED_FIELDS))


@folder.command("tree")
@click.option("--project-key", default=None, help="Jira project key (default: profile project)")
@click.option(
    "--max-test-cases",
    type=POSITIVE_INT,
    default=None,
    help="Attach at most N test cases to each folder",
)
@click.option(
    "--all-test-cases",
    is_flag=True,
    help="Attach every test case to its folder (overrides --max-test-cases)",
)
@click.pass_context
@handle_errors
def folder_tree(ctx: click.Context, project_key: str | None, max_test_cases: int | None, all_test_cases: bool) -> None:
    """Show the test-case folder hierarchy of a project."""
    forest = build_folder_tree(
        get_client(ctx),
        resolve_project_key(ctx, project_key),
        max_test_cases=max_test_cases,
        all_test_cases=all_test_cases,
        logger=logger,
    )
    output = render(forest, text=use_text(ctx))
    if output:
        click.echo(output)


def register(cli: click.Group) -> None:
    """Register folder commands with the CLI group."""
    cli.add_command(folder)
