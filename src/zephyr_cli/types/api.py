"""Subset of the Zephyr Scale v2 response shapes the client relies on.

The remote API returns more fields than listed here; only the keys read by
this package are declared.
"""

from __future__ import annotations

from typing import Any, NotRequired, TypedDict


class ResourceRef(TypedDict, total=False):
    id: int
    key: str
    self: str


class PageData(TypedDict, total=False):
    """Envelope returned by every paged listing endpoint."""

    values: list[dict[str, Any]]
    next: str | None
    startAt: int
    maxResults: int
    total: int
    isLast: bool


class FolderRecord(TypedDict):
    id: int
    name: str
    parentId: int | None
    folderType: NotRequired[str]
    index: NotRequired[int]


class TestCaseRecord(TypedDict):
    key: str
    name: str
    folder: NotRequired[ResourceRef | None]

