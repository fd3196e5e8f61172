"""zephyr-cli: command-line client for the Zephyr Scale test-management API."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("zephyr-cli")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

from zephyr_cli.client import ZephyrClient
from zephyr_cli.tree import TreeNode

__all__ = ["TreeNode", "ZephyrClient", "__version__"]
