"""CLI commands for test executions, including bulk status updates per test cycle."""

from __future__ import annotations

import logging
import sys
from typing import Any

import click

from zephyr_cli.cli_common import fail, get_client, handle_errors, resolve_project_key, use_text
from zephyr_cli.errors import ZephyrError, format_error
from zephyr_cli.options import NON_NEGATIVE_INT, custom_field_option, pagination_options
from zephyr_cli.output import (
    CREATED_FIELDS,
    Column,
    format_as_key_value,
    format_as_table,
    nested,
    output_results,
    show_pagination_info,
    to_json,
)
from zephyr_cli.tree import fetch_all

logger = logging.getLogger(__name__)

EXECUTION_COLUMNS = [
    Column("KEY", nested("key")),
    Column("TEST CASE", nested("testCase", "self")),
    Column("STATUS", nested("testExecutionStatus", "id")),
    Column("ENVIRONMENT", nested("environment", "id")),
    Column("END DATE", nested("actualEndDate")),
]

EXECUTION_FIELDS = [
    ("Key:", nested("key")),
    ("ID:", nested("id")),
    ("Test Case:", nested("testCase", "self")),
    ("Test Cycle:", nested("testCycle", "self")),
    ("Status:", nested("testExecutionStatus", "id")),
    ("Environment:", nested("environment", "id")),
    ("Executed By:", nested("executedById")),
    ("Assigned To:", nested("assignedToId")),
    ("End Date:", nested("actualEndDate")),
    ("Execution Time:", nested("executionTime")),
    ("Comment:", nested("comment")),
]


def _created_from_location(headers: dict[str, str]) -> dict[str, Any]:
    """The create endpoint answers 201 with a Location header and no body."""
    location = headers.get("location") or headers.get("Location")
    if not location:
        return {"success": True}
    tail = location.rstrip("/").rsplit("/", 1)[-1]
    return {"id": int(tail) if tail.isdigit() else None, "self": location}


def _execution_fields(f: Any) -> Any:
    """Options that set fields of an execution (create and update)."""
    f = click.option("--comment", default=None, help="Comment on the execution")(f)
    f = click.option("--assigned-to-id", default=None, help="Atlassian Account ID of assignee")(f)
    f = click.option("--executed-by-id", default=None, help="Atlassian Account ID of executor")(f)
    f = click.option(
        "--execution-time", type=NON_NEGATIVE_INT, default=None, help="Actual execution time in milliseconds"
    )(f)
    f = click.option(
        "--actual-end-date", default=None, help="Actual end date (ISO 8601, e.g. 2024-01-01T12:00:00Z)"
    )(f)
    f = click.option("--environment-name", default=None, help="Environment name")(f)
    return f


@click.group()
def testexecution() -> None:
    """Manage test executions."""


@testexecution.command("list")
@pagination_options
@click.option("--test-cycle", default=None, help="Filter by test cycle key (e.g. PROJ-R1)")
@click.option("--test-case", default=None, help="Filter by test case key (e.g. PROJ-T1)")
@click.option("--actual-end-date-after", default=None, help="Actual end date after (ISO 8601)")
@click.option("--actual-end-date-before", default=None, help="Actual end date before (ISO 8601)")
@click.option("--only-last-executions", is_flag=True, help="Only the last execution of each test cycle item")
@click.pass_context
@handle_errors
def testexecution_list(
    ctx: click.Context,
    max_results: int,
    start_at: int,
    test_cycle: str | None,
    test_case: str | None,
    actual_end_date_after: str | None,
    actual_end_date_before: str | None,
    only_last_executions: bool,
) -> None:
    """List test executions."""
    key = resolve_project_key(ctx)
    logger.info("Fetching test executions for project: %s", key)

    response = get_client(ctx).testexecutions.list_test_executions(
        project_key=key,
        test_cycle=test_cycle,
        test_case=test_case,
        actual_end_date_after=actual_end_date_after,
        actual_end_date_before=actual_end_date_before,
        only_last_executions=True if only_last_executions else None,
        max_results=max_results,
        start_at=start_at,
    )
    executions: list[Any] = response.data.get("values") or []
    logger.info("Found %d test execution(s)", len(executions))

    show_pagination_info(bool(response.data.get("next")), start_at, max_results, logger)
    output_results(executions, use_text(ctx), lambda rows: format_as_table(rows, EXECUTION_COLUMNS))


@testexecution.command("get")
@click.argument("id_or_key")
@click.pass_context
@handle_errors
def testexecution_get(ctx: click.Context, id_or_key: str) -> None:
    """Get a test execution by ID or key."""
    logger.info("Fetching test execution: %s", id_or_key)
    response = get_client(ctx).testexecutions.get_test_execution(id_or_key)
    output_results(response.data, use_text(ctx), lambda record: format_as_key_value(record, EXECUTION_FIELDS))


@testexecution.command("create")
@click.option("--test-case-key", required=True, help="Test case key (e.g. PROJ-T1)")
@click.option("--test-cycle-key", required=True, help="Test cycle key (e.g. PROJ-R1)")
@click.option("--status-name", required=True, help="Execution status (e.g. Pass, Fail, Not Executed)")
@_execution_fields
@custom_field_option
@click.pass_context
@handle_errors
def testexecution_create(
    ctx: click.Context,
    test_case_key: str,
    test_cycle_key: str,
    status_name: str,
    environment_name: str | None,
    actual_end_date: str | None,
    execution_time: int | None,
    executed_by_id: str | None,
    assigned_to_id: str | None,
    comment: str | None,
    custom_fields: dict[str, Any] | None,
) -> None:
    """Create a new test execution."""
    key = resolve_project_key(ctx)
    logger.info("Creating test execution in project: %s", key)

    response = get_client(ctx).testexecutions.create_test_execution(
        {
            "projectKey": key,
            "testCaseKey": test_case_key,
            "testCycleKey": test_cycle_key,
            "statusName": status_name,
            "environmentName": environment_name,
            "actualEndDate": actual_end_date,
            "executionTime": execution_time,
            "executedById": executed_by_id,
            "assignedToId": assigned_to_id,
            "comment": comment,
            "customFields": custom_fields,
        }
    )
    logger.info("Test execution created successfully")
    created = _created_from_location(response.headers)
    output_results(created, use_text(ctx), lambda record: format_as_key_value(record, CREATED_FIELDS))


@testexecution.command("update")
@click.argument("id_or_key", required=False)
@click.option("--test-cycle", default=None, help="Update every execution in this test cycle (e.g. PROJ-R1)")
@click.option("--status-name", default=None, help="Execution status (e.g. Pass, Fail, Not Executed)")
@_execution_fields
@click.pass_context
@handle_errors
def testexecution_update(
    ctx: click.Context,
    id_or_key: str | None,
    test_cycle: str | None,
    status_name: str | None,
    environment_name: str | None,
    actual_end_date: str | None,
    execution_time: int | None,
    executed_by_id: str | None,
    assigned_to_id: str | None,
    comment: str | None,
) -> None:
    """Update one test execution, or every execution of a test cycle.

    \b
    Examples:
      zephyr testexecution update PROJ-E1 --status-name Pass
      zephyr testexecution update --test-cycle PROJ-R1 --status-name Pass
    """
    candidate = {
        "statusName": status_name,
        "environmentName": environment_name,
        "actualEndDate": actual_end_date,
        "executionTime": execution_time,
        "executedById": executed_by_id,
        "assignedToId": assigned_to_id,
        "comment": comment,
    }
    body = {k: v for k, v in candidate.items() if v is not None}
    if not body:
        fail("No update fields provided")

    client = get_client(ctx)

    if test_cycle is None:
        if not id_or_key:
            fail("Either idOrKey or --test-cycle option must be provided")
        logger.info("Updating test execution: %s", id_or_key)
        client.testexecutions.update_test_execution(id_or_key, body)
        logger.info("Test execution updated successfully")
        response = client.testexecutions.get_test_execution(id_or_key)
        output_results(response.data, use_text(ctx), lambda record: format_as_key_value(record, EXECUTION_FIELDS))
        return

    if id_or_key:
        logger.warning('Ignoring idOrKey "%s" because --test-cycle option is specified', id_or_key)

    key = resolve_project_key(ctx)
    logger.info("Updating all test executions in test cycle: %s", test_cycle)
    executions = fetch_all(
        lambda start_at, size: client.testexecutions.list_test_executions(
            project_key=key, test_cycle=test_cycle, max_results=size, start_at=start_at
        ).data
    )
    if not executions:
        logger.warning("No test executions found in test cycle: %s", test_cycle)
        return
    logger.info("Found %d test execution(s) to update", len(executions))

    results: list[dict[str, Any]] = []
    for execution in executions:
        execution_key = execution.get("key") or str(execution.get("id"))
        try:
            client.testexecutions.update_test_execution(execution_key, body)
        except ZephyrError as e:
            message = format_error(e)
            logger.error("Failed to update %s: %s", execution_key, message)
            results.append({"key": execution_key, "success": False, "error": message})
        else:
            logger.info("Updated: %s", execution_key)
            results.append({"key": execution_key, "success": True})

    failed = sum(1 for r in results if not r["success"])
    summary = {
        "testCycle": test_cycle,
        "total": len(executions),
        "success": len(results) - failed,
        "failed": failed,
        "results": results,
    }
    click.echo(to_json(summary))
    if failed:
        sys.exit(1)


def register(cli: click.Group) -> None:
    """Register test execution commands with the CLI group."""
    cli.add_command(testexecution)
