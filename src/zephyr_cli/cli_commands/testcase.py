"""CLI commands for test cases and their test steps."""

from __future__ import annotations

import logging
from typing import Any

import click

from zephyr_cli.cli_common import fail, get_client, handle_errors, resolve_project_key, use_text
from zephyr_cli.options import (
    NON_NEGATIVE_INT,
    POSITIVE_INT,
    custom_field_option,
    folder_id_option,
    labels_option,
    pagination_options,
)
from zephyr_cli.output import (
    CREATED_FIELDS,
    KEYED_CREATED_FIELDS,
    UPDATED_FIELDS,
    Column,
    format_as_key_value,
    format_as_table,
    nested,
    output_results,
    show_pagination_info,
)

logger = logging.getLogger(__name__)

TEST_CASE_COLUMNS = [
    Column("KEY", nested("key")),
    Column("NAME", nested("name")),
    Column("FOLDER", nested("folder", "id")),
]

TEST_CASE_FIELDS = [
    ("Key:", nested("key")),
    ("Name:", nested("name")),
    ("Status:", nested("status", "id")),
    ("Priority:", nested("priority", "id")),
    ("Owner:", nested("owner", "accountId")),
    ("Folder:", nested("folder", "id")),
    ("Created:", nested("createdOn")),
    ("Objective:", nested("objective")),
    ("Precondition:", nested("precondition")),
    ("Labels:", nested("labels")),
]


def _step_type(step: dict[str, Any]) -> str:
    if step.get("inline"):
        return "Inline"
    if step.get("testCase"):
        return "Call"
    return "Unknown"


TEST_STEP_COLUMNS = [
    Column("TYPE", _step_type),
    Column("DESCRIPTION", lambda s: nested("inline", "description")(s) or nested("testCase", "testCaseKey")(s)),
    Column("EXPECTED RESULT", nested("inline", "expectedResult")),
]


def _parse_steps(ctx: click.Context, param: click.Parameter, values: tuple[str, ...]) -> list[dict[str, Any]]:
    """``DESCRIPTION[|EXPECTED RESULT]`` -> inline test-step items."""
    steps = []
    for value in values:
        description, _, expected = value.partition("|")
        if not description.strip():
            raise click.BadParameter(f'Invalid step "{value}": description is empty')
        inline: dict[str, Any] = {"description": description.strip()}
        if expected.strip():
            inline["expectedResult"] = expected.strip()
        steps.append({"inline": inline})
    return steps


def _case_options(f: Any) -> Any:
    """Options shared by ``create`` and ``update``; ``--name`` is added per command."""
    f = custom_field_option(f)
    f = labels_option(f)
    f = click.option("--owner-id", default=None, help="Atlassian Account ID of the owner")(f)
    f = click.option("--folder-id", type=POSITIVE_INT, default=None, help="Folder ID")(f)
    f = click.option("--status-name", default=None, help="Status name")(f)
    f = click.option("--priority-name", default=None, help="Priority name")(f)
    f = click.option("--component-id", type=POSITIVE_INT, default=None, help="Jira component ID")(f)
    f = click.option("--estimated-time", type=NON_NEGATIVE_INT, default=None, help="Estimated time in milliseconds")(f)
    f = click.option("--precondition", default=None, help="Preconditions to execute the test")(f)
    f = click.option("--objective", default=None, help="Description of the objective")(f)
    return f


@click.group()
def testcase() -> None:
    """Manage test cases."""


@testcase.command("list")
@pagination_options
@folder_id_option()
@click.pass_context
@handle_errors
def testcase_list(ctx: click.Context, max_results: int, start_at: int, folder_id: int | None) -> None:
    """List test cases."""
    key = resolve_project_key(ctx)
    logger.info("Fetching test cases for project: %s", key)
    logger.debug("Parameters: maxResults=%d, startAt=%d", max_results, start_at)

    response = get_client(ctx).testcases.list_test_cases(
        project_key=key, folder_id=folder_id, max_results=max_results, start_at=start_at
    )
    cases: list[Any] = response.data.get("values") or []
    logger.info("Found %d test case(s)", len(cases))

    show_pagination_info(bool(response.data.get("next")), start_at, max_results, logger)
    output_results(cases, use_text(ctx), lambda rows: format_as_table(rows, TEST_CASE_COLUMNS))


@testcase.command("get")
@click.argument("key")
@click.pass_context
@handle_errors
def testcase_get(ctx: click.Context, key: str) -> None:
    """Get a test case by key."""
    logger.info("Fetching test case: %s", key)
    response = get_client(ctx).testcases.get_test_case(key)
    logger.info("Test case found: %s", response.data.get("name"))
    output_results(response.data, use_text(ctx), lambda record: format_as_key_value(record, TEST_CASE_FIELDS))


@testcase.command("create")
@click.option("--name", required=True, help="Test case name")
@_case_options
@click.option(
    "--step",
    "steps",
    multiple=True,
    callback=_parse_steps,
    metavar="DESC[|EXPECTED]",
    help="Inline test step, appended in order (repeatable)",
)
@click.pass_context
@handle_errors
def testcase_create(
    ctx: click.Context,
    name: str,
    objective: str | None,
    precondition: str | None,
    estimated_time: int | None,
    component_id: int | None,
    priority_name: str | None,
    status_name: str | None,
    folder_id: int | None,
    owner_id: str | None,
    labels: list[str] | None,
    custom_fields: dict[str, Any] | None,
    steps: list[dict[str, Any]],
) -> None:
    """Create a new test case, optionally with inline test steps."""
    key = resolve_project_key(ctx)
    logger.info("Creating test case in project: %s", key)
    logger.debug("Test case name: %s", name)

    client = get_client(ctx)
    response = client.testcases.create_test_case(
        {
            "projectKey": key,
            "name": name,
            "objective": objective,
            "precondition": precondition,
            "estimatedTime": estimated_time,
            "componentId": component_id,
            "priorityName": priority_name,
            "statusName": status_name,
            "folderId": folder_id,
            "ownerId": owner_id,
            "labels": labels,
            "customFields": custom_fields,
        }
    )
    logger.info("Test case created successfully")

    created_key = (response.data or {}).get("key")
    if steps and created_key:
        logger.info("Creating %d test step(s)", len(steps))
        client.testcases.create_test_steps(created_key, {"mode": "APPEND", "items": steps})
        logger.info("Test steps created successfully")

    output_results(response.data, use_text(ctx), lambda record: format_as_key_value(record, KEYED_CREATED_FIELDS))


@testcase.command("update")
@click.argument("key")
@click.option("--name", default=None, help="Test case name")
@_case_options
@click.pass_context
@handle_errors
def testcase_update(
    ctx: click.Context,
    key: str,
    name: str | None,
    objective: str | None,
    precondition: str | None,
    estimated_time: int | None,
    component_id: int | None,
    priority_name: str | None,
    status_name: str | None,
    folder_id: int | None,
    owner_id: str | None,
    labels: list[str] | None,
    custom_fields: dict[str, Any] | None,
) -> None:
    """Update an existing test case; unspecified fields keep their current values."""
    logger.info("Updating test case: %s", key)
    client = get_client(ctx)
    current: dict[str, Any] = client.testcases.get_test_case(key).data

    changes = {
        "name": name,
        "objective": objective,
        "precondition": precondition,
        "estimatedTime": estimated_time,
        "componentId": component_id,
        "priorityName": priority_name,
        "statusName": status_name,
        "folderId": folder_id,
        "ownerId": owner_id,
        "labels": labels,
    }
    body = {**current, **{k: v for k, v in changes.items() if v is not None}}
    if custom_fields:
        body["customFields"] = {**(current.get("customFields") or {}), **custom_fields}

    client.testcases.update_test_case(key, body)
    logger.info("Test case updated successfully: %s", key)
    output_results({"key": key, "updated": True}, use_text(ctx), lambda r: format_as_key_value(r, UPDATED_FIELDS))


# ---------------------------------------------------------------------------
# Test steps
# ---------------------------------------------------------------------------


@testcase.group("teststep")
def teststep() -> None:
    """Manage test steps for test cases."""


@teststep.command("list")
@click.argument("test_case_key")
@pagination_options
@click.pass_context
@handle_errors
def teststep_list(ctx: click.Context, test_case_key: str, max_results: int, start_at: int) -> None:
    """List test steps for a test case."""
    logger.info("Fetching test steps for test case: %s", test_case_key)
    response = get_client(ctx).testcases.get_test_steps(test_case_key, max_results=max_results, start_at=start_at)
    steps: list[Any] = response.data.get("values") or []
    logger.info("Found %d test step(s)", len(steps))

    def table(rows: list[Any]) -> str:
        numbered = [{"index": start_at + i + 1, **step} for i, step in enumerate(rows)]
        return format_as_table(numbered, [Column("INDEX", nested("index")), *TEST_STEP_COLUMNS])

    show_pagination_info(bool(response.data.get("next")), start_at, max_results, logger)
    output_results(steps, use_text(ctx), table)


@teststep.command("create")
@click.argument("test_case_key")
@click.option(
    "--mode",
    type=click.Choice(["APPEND", "OVERWRITE"]),
    default="APPEND",
    show_default=True,
    help="APPEND adds to existing steps, OVERWRITE replaces them",
)
@click.option("--inline", "inline_description", default=None, help="Inline step description")
@click.option("--expected-result", default=None, help="Expected result for an inline step")
@click.option("--test-data", default=None, help="Test data for an inline step")
@click.option("--test-case-key", "call_key", default=None, help="Test case key to delegate execution to")
@custom_field_option
@click.pass_context
@handle_errors
def teststep_create(
    ctx: click.Context,
    test_case_key: str,
    mode: str,
    inline_description: str | None,
    expected_result: str | None,
    test_data: str | None,
    call_key: str | None,
    custom_fields: dict[str, Any] | None,
) -> None:
    """Create a test step for a test case."""
    if not inline_description and not call_key:
        fail("Either --inline or --test-case-key must be provided")
    if inline_description and call_key:
        fail("Only one of --inline or --test-case-key can be provided")

    logger.info("Creating test steps for test case: %s", test_case_key)
    logger.debug("Mode: %s", mode)

    if inline_description:
        inline: dict[str, Any] = {"description": inline_description}
        if expected_result:
            inline["expectedResult"] = expected_result
        if test_data:
            inline["testData"] = test_data
        if custom_fields:
            inline["customFields"] = custom_fields
        step: dict[str, Any] = {"inline": inline}
    else:
        step = {"testCase": {"testCaseKey": call_key}}

    response = get_client(ctx).testcases.create_test_steps(test_case_key, {"mode": mode, "items": [step]})
    logger.info("Test step created successfully")
    output_results(response.data, use_text(ctx), lambda record: format_as_key_value(record, CREATED_FIELDS))


def register(cli: click.Group) -> None:
    """Register test case commands with the CLI group."""
    cli.add_command(testcase)
