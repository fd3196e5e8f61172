"""CLI commands for Zephyr resources linked to a Jira issue."""

from __future__ import annotations

import logging

import click

from zephyr_cli.cli_common import get_client, handle_errors, use_text
from zephyr_cli.client import ApiResponse
from zephyr_cli.output import Column, format_as_table, nested, output_results

logger = logging.getLogger(__name__)

LINK_COLUMNS = [
    Column("ID", nested("id")),
    Column("KEY", nested("key")),
    Column("URL", nested("self")),
]


@click.group()
def issuelink() -> None:
    """Get Zephyr resources linked to Jira issues."""


def _show_links(ctx: click.Context, kind: str, response: ApiResponse) -> None:
    links = response.data if isinstance(response.data, list) else []
    logger.info("Found %d linked %s", len(links), kind)
    output_results(response.data, use_text(ctx), lambda _: format_as_table(links, LINK_COLUMNS))


@issuelink.command("testcases")
@click.argument("issue_key")
@click.pass_context
@handle_errors
def issuelink_testcases(ctx: click.Context, issue_key: str) -> None:
    """Get test cases linked to a Jira issue."""
    logger.info("Fetching test cases linked to: %s", issue_key)
    _show_links(ctx, "test cases", get_client(ctx).issuelinks.get_test_cases(issue_key))


@issuelink.command("testcycles")
@click.argument("issue_key")
@click.pass_context
@handle_errors
def issuelink_testcycles(ctx: click.Context, issue_key: str) -> None:
    """Get test cycles linked to a Jira issue."""
    logger.info("Fetching test cycles linked to: %s", issue_key)
    _show_links(ctx, "test cycles", get_client(ctx).issuelinks.get_test_cycles(issue_key))


@issuelink.command("testplans")
@click.argument("issue_key")
@click.pass_context
@handle_errors
def issuelink_testplans(ctx: click.Context, issue_key: str) -> None:
    """Get test plans linked to a Jira issue."""
    logger.info("Fetching test plans linked to: %s", issue_key)
    _show_links(ctx, "test plans", get_client(ctx).issuelinks.get_test_plans(issue_key))


@issuelink.command("executions")
@click.argument("issue_key")
@click.pass_context
@handle_errors
def issuelink_executions(ctx: click.Context, issue_key: str) -> None:
    """Get test executions linked to a Jira issue."""
    logger.info("Fetching test executions linked to: %s", issue_key)
    _show_links(ctx, "test executions", get_client(ctx).issuelinks.get_executions(issue_key))


def register(cli: click.Group) -> None:
    """Register issue link commands with the CLI group."""
    cli.add_command(issuelink)
