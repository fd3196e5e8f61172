"""Shared CLI helpers used by ``cli.py`` and every ``cli_commands/*.py`` module.

Provides lazy profile/client access off the click context and the error
boundary that turns failures into a message on stderr plus exit code 1.
"""

from __future__ import annotations

import functools
import logging
import sys
import time
from collections.abc import Callable
from typing import Any, NoReturn, TypeVar

import click

from zephyr_cli.client import ZephyrClient, create_client
from zephyr_cli.config import get_profile, load_config
from zephyr_cli.errors import ZephyrError, format_error
from zephyr_cli.types import Profile

logger = logging.getLogger("zephyr_cli.cli")

F = TypeVar("F", bound=Callable[..., Any])


def _root_obj(ctx: click.Context) -> dict[str, Any]:
    obj = ctx.find_root().obj
    if obj is None:
        obj = ctx.find_root().obj = {}
    return obj  # type: ignore[no-any-return]


def get_profile_for(ctx: click.Context) -> Profile:
    """Load config and resolve the active profile once per invocation."""
    obj = _root_obj(ctx)
    if "_profile" not in obj:
        config = load_config(obj.get("config_path"))
        obj["_profile"] = get_profile(config, obj.get("profile"))
    profile: Profile = obj["_profile"]
    return profile


def get_client(ctx: click.Context) -> ZephyrClient:
    """Build the API client for the active profile; closed when the command ends."""
    obj = _root_obj(ctx)
    if "_client" not in obj:
        client = create_client(get_profile_for(ctx), transport=obj.get("transport"))
        ctx.find_root().call_on_close(client.close)
        obj["_client"] = client
    client_: ZephyrClient = obj["_client"]
    return client_


def resolve_project_key(ctx: click.Context, override: str | None = None) -> str:
    """Explicit ``--project-key`` if given, else the profile's default project."""
    return override or get_profile_for(ctx)["projectKey"]


def use_text(ctx: click.Context) -> bool:
    return bool(_root_obj(ctx).get("text"))


def fail(message: str) -> NoReturn:
    """Report a validation failure the way handled errors are reported."""
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def handle_errors(f: F) -> F:
    """Report any error on stderr and exit 1; let click exceptions through."""

    @functools.wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        ctx = click.get_current_context(silent=True)
        command = ctx.command_path if ctx is not None else f.__name__
        started = time.monotonic()
        try:
            return f(*args, **kwargs)
        except (click.ClickException, click.exceptions.Exit, click.Abort):
            raise
        except (ZephyrError, ValueError) as e:
            logger.debug("%s failed", command, exc_info=True, extra={"command": command})
            click.echo(format_error(e), err=True)
            sys.exit(1)
        except Exception as e:
            # Malformed API payloads surface here as KeyError/TypeError/AttributeError.
            logger.debug("%s failed unexpectedly", command, exc_info=True, extra={"command": command})
            click.echo(format_error(e), err=True)
            sys.exit(1)
        finally:
            duration_ms = round((time.monotonic() - started) * 1000, 1)
            logger.debug("%s finished", command, extra={"command": command, "duration_ms": duration_ms})

    return wrapper  # type: ignore[return-value]
