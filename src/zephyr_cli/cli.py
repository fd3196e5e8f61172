"""CLI for the Zephyr Scale test-management API.

Credentials and the default project come from a profile in
``~/.zephyr/config.json`` (see ``zephyr config init``).

Usage:
    zephyr config init --api-token T --project-key PROJ   # Write a config file
    zephyr folder tree                                     # Test-case folder hierarchy
    zephyr --text folder tree --max-test-cases 5           # ...with up to 5 test cases per folder
    zephyr --text testcycle tree PROJ-R1                   # Folders holding a cycle's test cases
    zephyr testcase list --folder-id 42                    # List test cases in a folder
    zephyr testcase get PROJ-T1                            # Show one test case
    zephyr testexecution update --test-cycle PROJ-R1 --status-name Pass
    zephyr project list                                    # List projects
"""

from __future__ import annotations

from pathlib import Path

import click

from zephyr_cli import __version__
from zephyr_cli.cli_commands import (
    config_cmd,
    environment,
    folder,
    issuelink,
    priority,
    project,
    status,
    testcase,
    testcycle,
    testexecution,
    testplan,
)
from zephyr_cli.logging import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="zephyr")
@click.option("--profile", default=None, help="Profile name to use (default: currentProfile)")
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to the config file (default: $ZEPHYR_CONFIG_PATH or ~/.zephyr/config.json)",
)
@click.option("--text", is_flag=True, help="Human-readable output instead of JSON")
@click.option("--verbose", "-v", count=True, help="Progress output on stderr (-vv for debug)")
@click.option(
    "--log-file",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Also write JSON-lines logs to this file",
)
@click.pass_context
def cli(
    ctx: click.Context,
    profile: str | None,
    config_path: Path | None,
    text: bool,
    verbose: int,
    log_file: Path | None,
) -> None:
    """Zephyr Scale command-line client."""
    ctx.ensure_object(dict)
    ctx.obj["profile"] = profile
    ctx.obj["config_path"] = config_path
    ctx.obj["text"] = text
    setup_logging(verbose=verbose, log_file=log_file)


config_cmd.register(cli)
environment.register(cli)
folder.register(cli)
issuelink.register(cli)
priority.register(cli)
project.register(cli)
status.register(cli)
testcase.register(cli)
testcycle.register(cli)
testexecution.register(cli)
testplan.register(cli)


if __name__ == "__main__":
    cli()
