"""Thin HTTP client for the Zephyr Scale Cloud REST API (v2).

Each resource family is exposed as an attribute of :class:`ZephyrClient`
(``client.folders``, ``client.testcases``, ...). Every call returns an
:class:`ApiResponse` carrying the decoded JSON body and the response headers;
paging is left to the caller via ``start_at``/``max_results``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from zephyr_cli.errors import ApiError
from zephyr_cli.types import Profile

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.zephyrscale.smartbear.com/v2"
DEFAULT_TIMEOUT = 30.0


@dataclass
class ApiResponse:
    data: Any
    headers: dict[str, str] = field(default_factory=dict)


def _compact(params: dict[str, Any]) -> dict[str, Any]:
    """Drop ``None`` values so optional filters are simply omitted."""
    return {k: v for k, v in params.items() if v is not None}


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("message", "errorMessage", "error"):
            if body.get(key):
                return str(body[key])
    text = response.text.strip()
    return text or response.reason_phrase or f"HTTP {response.status_code}"


class ZephyrClient:
    """Bearer-token authenticated client for one Zephyr Scale account."""

    def __init__(
        self,
        api_token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._http = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers={
                "Authorization": f"Bearer {api_token}",
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )
        self.folders = FoldersApi(self)
        self.testcases = TestCasesApi(self)
        self.testcycles = TestCyclesApi(self)
        self.testexecutions = TestExecutionsApi(self)
        self.testplans = TestPlansApi(self)
        self.environments = EnvironmentsApi(self)
        self.priorities = PrioritiesApi(self)
        self.statuses = StatusesApi(self)
        self.projects = ProjectsApi(self)
        self.issuelinks = IssueLinksApi(self)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> ZephyrClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> ApiResponse:
        """Send one request; raise ApiError on transport failure or non-2xx status."""
        logger.debug("%s %s params=%s", method, path, params)
        try:
            response = self._http.request(
                method,
                path,
                params=_compact(params) if params else None,
                json=json,
            )
        except httpx.HTTPError as exc:
            raise ApiError(f"{method} {path} failed: {exc}") from exc

        if response.is_error:
            raise ApiError(_error_message(response), status_code=response.status_code)

        data: Any = None
        if response.content:
            try:
                data = response.json()
            except ValueError as exc:
                raise ApiError(
                    f"Invalid JSON in response to {method} {path}", status_code=response.status_code
                ) from exc
        return ApiResponse(data=data, headers=dict(response.headers))


class _Resource:
    def __init__(self, client: ZephyrClient) -> None:
        self._client = client

    def _get(self, path: str, **params: Any) -> ApiResponse:
        return self._client.request("GET", path, params=params)

    def _post(self, path: str, body: dict[str, Any]) -> ApiResponse:
        return self._client.request("POST", path, json=_compact(body))

    def _put(self, path: str, body: dict[str, Any]) -> ApiResponse:
        return self._client.request("PUT", path, json=body)


class FoldersApi(_Resource):
    def list_folders(
        self,
        *,
        project_key: str | None = None,
        folder_type: str | None = None,
        max_results: int = 10,
        start_at: int = 0,
    ) -> ApiResponse:
        return self._get(
            "/folders",
            projectKey=project_key,
            folderType=folder_type,
            maxResults=max_results,
            startAt=start_at,
        )

    def get_folder(self, folder_id: int) -> ApiResponse:
        return self._get(f"/folders/{folder_id}")

    def create_folder(self, body: dict[str, Any]) -> ApiResponse:
        return self._post("/folders", body)


class TestCasesApi(_Resource):
    def list_test_cases(
        self,
        *,
        project_key: str | None = None,
        folder_id: int | None = None,
        max_results: int = 10,
        start_at: int = 0,
    ) -> ApiResponse:
        return self._get(
            "/testcases",
            projectKey=project_key,
            folderId=folder_id,
            maxResults=max_results,
            startAt=start_at,
        )

    def get_test_case(self, key: str) -> ApiResponse:
        return self._get(f"/testcases/{key}")

    def create_test_case(self, body: dict[str, Any]) -> ApiResponse:
        return self._post("/testcases", body)

    def update_test_case(self, key: str, body: dict[str, Any]) -> ApiResponse:
        return self._put(f"/testcases/{key}", body)

    def get_test_steps(self, key: str, *, max_results: int = 10, start_at: int = 0) -> ApiResponse:
        return self._get(f"/testcases/{key}/teststeps", maxResults=max_results, startAt=start_at)

    def create_test_steps(self, key: str, body: dict[str, Any]) -> ApiResponse:
        return self._post(f"/testcases/{key}/teststeps", body)


class TestCyclesApi(_Resource):
    def list_test_cycles(
        self,
        *,
        project_key: str | None = None,
        folder_id: int | None = None,
        max_results: int = 10,
        start_at: int = 0,
    ) -> ApiResponse:
        return self._get(
            "/testcycles",
            projectKey=project_key,
            folderId=folder_id,
            maxResults=max_results,
            startAt=start_at,
        )

    def get_test_cycle(self, key: str) -> ApiResponse:
        return self._get(f"/testcycles/{key}")

    def create_test_cycle(self, body: dict[str, Any]) -> ApiResponse:
        return self._post("/testcycles", body)

    def update_test_cycle(self, key: str, body: dict[str, Any]) -> ApiResponse:
        return self._put(f"/testcycles/{key}", body)


class TestExecutionsApi(_Resource):
    def list_test_executions(
        self,
        *,
        project_key: str | None = None,
        test_cycle: str | None = None,
        test_case: str | None = None,
        actual_end_date_after: str | None = None,
        actual_end_date_before: str | None = None,
        only_last_executions: bool | None = None,
        max_results: int = 10,
        start_at: int = 0,
    ) -> ApiResponse:
        return self._get(
            "/testexecutions",
            projectKey=project_key,
            testCycle=test_cycle,
            testCase=test_case,
            actualEndDateAfter=actual_end_date_after,
            actualEndDateBefore=actual_end_date_before,
            onlyLastExecutions=only_last_executions,
            maxResults=max_results,
            startAt=start_at,
        )

    def get_test_execution(self, id_or_key: str) -> ApiResponse:
        return self._get(f"/testexecutions/{id_or_key}")

    def create_test_execution(self, body: dict[str, Any]) -> ApiResponse:
        return self._post("/testexecutions", body)

    def update_test_execution(self, id_or_key: str, body: dict[str, Any]) -> ApiResponse:
        return self._put(f"/testexecutions/{id_or_key}", body)


class TestPlansApi(_Resource):
    def list_test_plans(
        self,
        *,
        project_key: str | None = None,
        folder_id: int | None = None,
        max_results: int = 10,
        start_at: int = 0,
    ) -> ApiResponse:
        return self._get(
            "/testplans",
            projectKey=project_key,
            folderId=folder_id,
            maxResults=max_results,
            startAt=start_at,
        )

    def get_test_plan(self, key: str) -> ApiResponse:
        return self._get(f"/testplans/{key}")

    def create_test_plan(self, body: dict[str, Any]) -> ApiResponse:
        return self._post("/testplans", body)


class EnvironmentsApi(_Resource):
    def list_environments(
        self, *, project_key: str | None = None, max_results: int = 10, start_at: int = 0
    ) -> ApiResponse:
        return self._get("/environments", projectKey=project_key, maxResults=max_results, startAt=start_at)

    def get_environment(self, environment_id: int) -> ApiResponse:
        return self._get(f"/environments/{environment_id}")

    def create_environment(self, body: dict[str, Any]) -> ApiResponse:
        return self._post("/environments", body)

    def update_environment(self, environment_id: int, body: dict[str, Any]) -> ApiResponse:
        return self._put(f"/environments/{environment_id}", body)


class PrioritiesApi(_Resource):
    def list_priorities(
        self, *, project_key: str | None = None, max_results: int = 10, start_at: int = 0
    ) -> ApiResponse:
        return self._get("/priorities", projectKey=project_key, maxResults=max_results, startAt=start_at)

    def get_priority(self, priority_id: int) -> ApiResponse:
        return self._get(f"/priorities/{priority_id}")

    def create_priority(self, body: dict[str, Any]) -> ApiResponse:
        return self._post("/priorities", body)


class StatusesApi(_Resource):
    def list_statuses(
        self,
        *,
        project_key: str | None = None,
        status_type: str | None = None,
        max_results: int = 10,
        start_at: int = 0,
    ) -> ApiResponse:
        return self._get(
            "/statuses",
            projectKey=project_key,
            statusType=status_type,
            maxResults=max_results,
            startAt=start_at,
        )

    def get_status(self, status_id: int) -> ApiResponse:
        return self._get(f"/statuses/{status_id}")

    def create_status(self, body: dict[str, Any]) -> ApiResponse:
        return self._post("/statuses", body)


class ProjectsApi(_Resource):
    def list_projects(self, *, max_results: int = 10, start_at: int = 0) -> ApiResponse:
        return self._get("/projects", maxResults=max_results, startAt=start_at)

    def get_project(self, id_or_key: str) -> ApiResponse:
        return self._get(f"/projects/{id_or_key}")


class IssueLinksApi(_Resource):
    def get_test_cases(self, issue_key: str) -> ApiResponse:
        return self._get(f"/issuelinks/{issue_key}/testcases")

    def get_test_cycles(self, issue_key: str) -> ApiResponse:
        return self._get(f"/issuelinks/{issue_key}/testcycles")

    def get_test_plans(self, issue_key: str) -> ApiResponse:
        return self._get(f"/issuelinks/{issue_key}/testplans")

    def get_executions(self, issue_key: str) -> ApiResponse:
        return self._get(f"/issuelinks/{issue_key}/executions")


def create_client(profile: Profile, transport: httpx.BaseTransport | None = None) -> ZephyrClient:
    """Build a client from a configuration profile."""
    return ZephyrClient(
        api_token=profile["apiToken"],
        base_url=profile.get("baseUrl", DEFAULT_BASE_URL),
        transport=transport,
    )
