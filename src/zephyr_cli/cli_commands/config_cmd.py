"""CLI commands for the configuration file."""

from __future__ import annotations

import logging

import click

from zephyr_cli.cli_common import fail, handle_errors
from zephyr_cli.config import resolve_config_path, validate_config, write_config
from zephyr_cli.types import Config, Profile

logger = logging.getLogger(__name__)


@click.group("config")
def config_group() -> None:
    """Manage the zephyr configuration file."""


@config_group.command("init")
@click.option("--api-token", required=True, help="Zephyr Scale API access token")
@click.option("--project-key", required=True, help="Default Jira project key")
@click.option("--profile", "profile_name", default="default", show_default=True, help="Profile name")
@click.option("--base-url", default=None, help="API base URL (default: public cloud API)")
@click.option("--force", is_flag=True, help="Overwrite an existing configuration file")
@click.pass_context
@handle_errors
def config_init(
    ctx: click.Context,
    api_token: str,
    project_key: str,
    profile_name: str,
    base_url: str | None,
    force: bool,
) -> None:
    """Write a starter configuration file with a single profile."""
    config_path = resolve_config_path(ctx.find_root().obj.get("config_path"))
    if config_path.exists() and not force:
        fail(f"Configuration file already exists at {config_path} (use --force to overwrite)")

    profile = Profile(apiToken=api_token, projectKey=project_key)
    if base_url:
        profile["baseUrl"] = base_url
    config = Config(currentProfile=profile_name, profiles={profile_name: profile})
    validate_config(config)

    write_config(config_path, config)
    logger.info("Configuration written to %s", config_path)
    click.echo(f"Wrote {config_path}")
    click.echo(f"  Profile: {profile_name}")
    click.echo(f"  Project: {project_key}")


def register(cli: click.Group) -> None:
    """Register configuration commands with the CLI group."""
    cli.add_command(config_group)
