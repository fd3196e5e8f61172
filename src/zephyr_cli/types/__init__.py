# IMPORT CONSTRAINT: types/ modules must only import from typing, stdlib, and each other.
# NEVER import from client.py, tree.py, or the CLI layer (circular imports).
"""Typed shapes for configuration, API payloads, and tree output."""

from __future__ import annotations

from zephyr_cli.types.api import (
    FolderRecord,
    PageData,
    ResourceRef,
    TestCaseRecord,
)
from zephyr_cli.types.core import Config, Profile, TestCaseRef, TreeNodeDict

__all__ = [
    "Config",
    "FolderRecord",
    "PageData",
    "Profile",
    "ResourceRef",
    "TestCaseRecord",
    "TestCaseRef",
    "TreeNodeDict",
]
