"""Exception types shared by the client, config loader and tree builders."""

from __future__ import annotations


class ZephyrError(Exception):
    """Base class for every error this package raises on purpose."""


class ConfigError(ZephyrError):
    """Configuration file missing, unreadable, or structurally invalid."""


class ApiError(ZephyrError):
    """A call to the Zephyr Scale API failed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TreeError(ZephyrError):
    """Folder parentage does not form a forest (cycle or unreachable folders)."""


def format_error(error: BaseException) -> str:
    """Render an exception as the single message shown to CLI users."""
    if isinstance(error, ConfigError):
        return (
            f"Configuration Error: {error}\n\n"
            "Please check your configuration file at ~/.zephyr/config.json "
            "(or the path given by --config / ZEPHYR_CONFIG_PATH)"
        )
    if isinstance(error, ApiError):
        status = f" (Status: {error.status_code})" if error.status_code is not None else ""
        return f"API Error: {error}{status}"
    return f"Error: {error}"
