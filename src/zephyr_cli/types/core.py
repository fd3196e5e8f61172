"""Foundational TypedDicts for configuration and tree output."""

from __future__ import annotations

from typing import NotRequired, TypedDict


class Profile(TypedDict):
    """One named credential set in ~/.zephyr/config.json."""

    apiToken: str
    projectKey: str
    baseUrl: NotRequired[str]


class Config(TypedDict):
    """Shape of ~/.zephyr/config.json."""

    currentProfile: str
    profiles: dict[str, Profile]


class TestCaseRef(TypedDict):
    key: str
    name: str


class TreeNodeDict(TypedDict):
    id: int
    name: str
    children: list[TreeNodeDict]
    testCases: list[TestCaseRef]
    hasMoreTestCases: NotRequired[bool]
