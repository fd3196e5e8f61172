"""Profile-based configuration loading.

Configuration lives in a JSON file (default ``~/.zephyr/config.json``) holding
one or more named profiles, each with an API token and a default Jira project
key. The path can be overridden with ``--config`` or ``ZEPHYR_CONFIG_PATH``.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from zephyr_cli.errors import ConfigError
from zephyr_cli.types import Config, Profile

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "ZEPHYR_CONFIG_PATH"
DEFAULT_CONFIG_PATH = Path.home() / ".zephyr" / "config.json"

EXAMPLE_CONFIG: dict[str, Any] = {
    "currentProfile": "default",
    "profiles": {
        "default": {
            "apiToken": "your-api-token",
            "projectKey": "YOUR-PROJECT-KEY",
        },
    },
}


def resolve_config_path(custom_path: str | Path | None = None) -> Path:
    """Pick the config file: explicit path > $ZEPHYR_CONFIG_PATH > ~/.zephyr/config.json."""
    if custom_path:
        return Path(custom_path).expanduser()
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_PATH


def load_config(custom_path: str | Path | None = None) -> Config:
    """Read and validate the configuration file.

    Raises ConfigError when the file is missing, is not valid JSON, or does
    not have the expected structure.
    """
    config_path = resolve_config_path(custom_path)
    logger.debug("Loading configuration from %s", config_path)

    if not config_path.exists():
        msg = (
            f"Configuration file not found at {config_path}\n\n"
            "Please create a configuration file with the following structure:\n\n"
            f"{json.dumps(EXAMPLE_CONFIG, indent=2)}"
        )
        raise ConfigError(msg)

    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Failed to parse configuration file: {exc}") from exc

    validate_config(raw)
    logger.debug("Configuration loaded successfully")
    return raw  # type: ignore[no-any-return]


def validate_config(config: Any) -> None:
    """Raise ConfigError unless *config* matches the profile file layout."""
    if not isinstance(config, dict):
        raise ConfigError("Configuration must be an object")

    current = config.get("currentProfile")
    if not current or not isinstance(current, str):
        raise ConfigError("Configuration must have a 'currentProfile' field")

    profiles = config.get("profiles")
    if not isinstance(profiles, dict):
        raise ConfigError("Configuration must have a 'profiles' field")
    if not profiles:
        raise ConfigError("Configuration must have at least one profile")

    for name, profile in profiles.items():
        if not isinstance(profile, dict):
            raise ConfigError(f"Profile '{name}' must be an object")
        for field in ("apiToken", "projectKey"):
            value = profile.get(field)
            if not value or not isinstance(value, str):
                raise ConfigError(f"Profile '{name}' must have an '{field}' field")
        if "baseUrl" in profile and (not profile["baseUrl"] or not isinstance(profile["baseUrl"], str)):
            raise ConfigError(f"Profile '{name}' has an invalid 'baseUrl' field")


def get_profile(config: Config, profile_name: str | None = None) -> Profile:
    """Return the named profile, falling back to ``currentProfile``."""
    name = profile_name or config["currentProfile"]
    logger.debug("Using profile: %s", name)

    profile = config["profiles"].get(name)
    if profile is None:
        available = ", ".join(config["profiles"])
        raise ConfigError(f"Profile '{name}' not found in configuration\n\nAvailable profiles: {available}")
    return profile


def write_config(config_path: Path, config: Config | dict[str, Any]) -> None:
    """Write *config* as indented JSON, creating parent directories."""
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(json.dumps(config, indent=2) + "\n", encoding="utf-8")
