"""Shared pytest fixtures for zephyr-cli tests."""

from __future__ import annotations

import itertools
import json
import logging
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import httpx
import pytest
from click.testing import CliRunner, Result

from zephyr_cli.cli import cli
from zephyr_cli.client import DEFAULT_BASE_URL, ZephyrClient
from zephyr_cli.config import write_config
from zephyr_cli.logging import LOGGER_NAME

API_ROOT = "/v2"

_KEY_PREFIXES = {"testcases": "T", "testcycles": "R", "testplans": "P", "testexecutions": "E"}


def _ident_matches(record: dict[str, Any], ident: str) -> bool:
    return str(record.get("id")) == ident or record.get("key") == ident


class FakeZephyr:
    """In-memory Zephyr Scale API served through ``httpx.MockTransport``.

    Collections live in ``store`` keyed by resource path (``folders``,
    ``testcases``, ...). Every request is recorded in ``requests`` as
    ``(method, path, params)`` and every PUT body in ``updates``.
    ``fail_on["GET /testcases/PROJ-T9"] = (404, "Test case not found")``
    makes a route answer with an error.
    ``raw_on["GET /folders"] = httpx.Response(...)`` replaces a route's response outright.
    """

    def __init__(self, project_key: str = "PROJ") -> None:
        self.project_key = project_key
        self.store: dict[str, list[dict[str, Any]]] = {
            name: []
            for name in (
                "folders",
                "testcases",
                "testcycles",
                "testexecutions",
                "testplans",
                "environments",
                "priorities",
                "statuses",
                "projects",
            )
        }
        self.test_steps: dict[str, list[dict[str, Any]]] = {}
        self.issue_links: dict[str, dict[str, list[dict[str, Any]]]] = {}
        self.requests: list[tuple[str, str, dict[str, str]]] = []
        self.updates: list[tuple[str, dict[str, Any]]] = []
        self.created: list[tuple[str, dict[str, Any]]] = []
        self.fail_on: dict[str, tuple[int, str]] = {}
        self.raw_on: dict[str, httpx.Response] = {}
        self._ids = itertools.count(1000)

    # -- seeding helpers -------------------------------------------------

    def add_folder(self, folder_id: int, name: str, parent_id: int | None = None, **extra: Any) -> dict[str, Any]:
        record = {"id": folder_id, "name": name, "parentId": parent_id, "folderType": "TEST_CASE", **extra}
        self.store["folders"].append(record)
        return record

    def add_test_case(self, key: str, name: str, folder_id: int | None = None, **extra: Any) -> dict[str, Any]:
        record = {
            "id": next(self._ids),
            "key": key,
            "name": name,
            "folder": {"id": folder_id, "self": f"{DEFAULT_BASE_URL}/folders/{folder_id}"} if folder_id else None,
            **extra,
        }
        self.store["testcases"].append(record)
        return record

    def add_execution(self, cycle_key: str, test_case_key: str | None, key: str | None = None) -> dict[str, Any]:
        execution_id = next(self._ids)
        record: dict[str, Any] = {
            "id": execution_id,
            "key": key or f"{self.project_key}-E{execution_id}",
            "testCycle": {"self": f"{DEFAULT_BASE_URL}/testcycles/{cycle_key}"},
            "testCase": (
                {"self": f"{DEFAULT_BASE_URL}/testcases/{test_case_key}/versions/1"} if test_case_key else None
            ),
        }
        self.store["testexecutions"].append(record)
        return record

    # -- transport -------------------------------------------------------

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def paths(self, method: str = "GET") -> list[str]:
        return [path for m, path, _ in self.requests if m == method]

    def handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix(API_ROOT)
        params = dict(request.url.params)
        self.requests.append((request.method, path, params))

        raw = self.raw_on.get(f"{request.method} {path}")
        if raw is not None:
            return raw

        failure = self.fail_on.get(f"{request.method} {path}")
        if failure is not None:
            status, message = failure
            return httpx.Response(status, json={"errorCode": status, "message": message})

        parts = [p for p in path.split("/") if p]
        body = json.loads(request.content) if request.content else None

        if parts[0] == "issuelinks":
            return httpx.Response(200, json=self.issue_links.get(parts[1], {}).get(parts[2], []))
        if parts[0] == "testcases" and len(parts) == 3 and parts[2] == "teststeps":
            return self._test_steps(request.method, parts[1], params, body)

        collection = self.store.get(parts[0])
        if collection is None:
            return httpx.Response(404, json={"message": f"Unknown resource {parts[0]}"})

        if len(parts) == 1 and request.method == "GET":
            return httpx.Response(200, json=self._page(self._filtered(parts[0], params), params))
        if len(parts) == 1 and request.method == "POST":
            return self._create(parts[0], body or {})

        record = next((r for r in collection if _ident_matches(r, parts[1])), None)
        if record is None:
            return httpx.Response(404, json={"message": f"{parts[0]} {parts[1]} not found"})
        if request.method == "GET":
            return httpx.Response(200, json=record)
        if request.method == "PUT":
            self.updates.append((parts[1], body or {}))
            record.update(body or {})
            return httpx.Response(200)
        return httpx.Response(405)

    def _filtered(self, name: str, params: dict[str, str]) -> list[dict[str, Any]]:
        records = self.store[name]
        if "folderType" in params:
            records = [r for r in records if r.get("folderType") == params["folderType"]]
        if "folderId" in params:
            records = [r for r in records if (r.get("folder") or {}).get("id") == int(params["folderId"])]
        if "testCycle" in params:
            suffix = "/testcycles/" + params["testCycle"]
            records = [r for r in records if ((r.get("testCycle") or {}).get("self") or "").endswith(suffix)]
        if "statusType" in params:
            records = [r for r in records if r.get("type") == params["statusType"]]
        return records

    @staticmethod
    def _page(records: list[dict[str, Any]], params: dict[str, str]) -> dict[str, Any]:
        start_at = int(params.get("startAt", 0))
        max_results = int(params.get("maxResults", 10))
        values = records[start_at : start_at + max_results]
        has_next = start_at + max_results < len(records)
        return {
            "values": values,
            "startAt": start_at,
            "maxResults": max_results,
            "total": len(records),
            "isLast": not has_next,
            "next": f"{DEFAULT_BASE_URL}/page?startAt={start_at + max_results}" if has_next else None,
        }

    def _create(self, name: str, body: dict[str, Any]) -> httpx.Response:
        new_id = next(self._ids)
        record: dict[str, Any] = {"id": new_id, **body}
        prefix = _KEY_PREFIXES.get(name)
        if prefix is not None:
            record["key"] = f"{body.get('projectKey', self.project_key)}-{prefix}{new_id}"
        self.store[name].append(record)
        self.created.append((name, body))

        location = f"{DEFAULT_BASE_URL}/{name}/{new_id}"
        if name == "testexecutions":
            return httpx.Response(201, headers={"Location": location})
        created: dict[str, Any] = {"id": new_id, "self": location}
        if "key" in record:
            created["key"] = record["key"]
        return httpx.Response(201, json=created)

    def _test_steps(self, method: str, key: str, params: dict[str, str], body: Any) -> httpx.Response:
        steps = self.test_steps.setdefault(key, [])
        if method == "GET":
            return httpx.Response(200, json=self._page(steps, params))
        if body.get("mode") == "OVERWRITE":
            steps.clear()
        steps.extend(body.get("items", []))
        location = f"{DEFAULT_BASE_URL}/testcases/{key}/teststeps"
        return httpx.Response(201, json={"id": next(self._ids), "self": location})


@pytest.fixture(autouse=True)
def _reset_zephyr_logger() -> Iterator[None]:
    """Each CLI invocation reconfigures the package logger; drop its handlers afterwards."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def fake_api() -> FakeZephyr:
    """Empty in-memory Zephyr API for project PROJ."""
    return FakeZephyr()


@pytest.fixture
def api_client(fake_api: FakeZephyr) -> ZephyrClient:
    """ZephyrClient talking to ``fake_api``."""
    return ZephyrClient("test-token", transport=fake_api.transport)


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Config with a ``default`` profile (PROJ) and an ``other`` profile (OTHER)."""
    path = tmp_path / "zephyr" / "config.json"
    write_config(
        path,
        {
            "currentProfile": "default",
            "profiles": {
                "default": {"apiToken": "test-token", "projectKey": "PROJ"},
                "other": {"apiToken": "other-token", "projectKey": "OTHER"},
            },
        },
    )
    return path


@pytest.fixture
def cli_runner() -> CliRunner:
    """Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def run_cli(cli_runner: CliRunner, config_file: Path, fake_api: FakeZephyr) -> Callable[..., Result]:
    """Invoke ``zephyr`` against ``fake_api`` with ``config_file``; global options come first."""

    def invoke(*args: str) -> Result:
        return cli_runner.invoke(cli, ["--config", str(config_file), *args], obj={"transport": fake_api.transport})

    return invoke
