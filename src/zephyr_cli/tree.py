"""Folder hierarchy assembly and rendering for ``folder tree`` / ``testcycle tree``.

Two entry points build the same forest shape:

* :func:`build_folder_tree` lists every test-case folder of a project and
  optionally attaches the test cases found in each folder.
* :func:`build_cycle_tree` starts from the executions of one test cycle,
  resolves them to test cases, then fetches only the folders (and their
  ancestors) needed to place those test cases.

Both are strictly sequential: every request completes before the next one is
issued and nothing is printed until the whole forest is built.
"""

from __future__ import annotations

import json
import logging
import re
from collections import defaultdict
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from zephyr_cli.errors import TreeError
from zephyr_cli.types import FolderRecord, PageData, TestCaseRecord, TestCaseRef, TreeNodeDict

if TYPE_CHECKING:
    from zephyr_cli.client import ZephyrClient

_logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100

# Adjacency key for top-level folders. Reserved: real folder ids are positive.
_ROOT = 0

NO_FOLDER_ID = 0
NO_FOLDER_NAME = "(No Folder)"
EMPTY_CYCLE_MESSAGE = "(No test cases in this cycle)"

_TEST_CASE_LINK = re.compile(r"testcases/([^/?#]+)")

PageOp = Callable[[int, int], PageData]
"""``(start_at, max_results) -> page``"""

FolderPageOp = Callable[[int, int, int], PageData]
"""``(folder_id, start_at, max_results) -> page``"""


@dataclass
class TreeNode:
    """One folder in the rendered hierarchy plus its test-case leaves."""

    id: int
    name: str
    children: list[TreeNode] = field(default_factory=list)
    test_cases: list[TestCaseRef] = field(default_factory=list)
    has_more_test_cases: bool | None = None

    def to_dict(self) -> TreeNodeDict:
        result = TreeNodeDict(
            id=self.id,
            name=self.name,
            children=[child.to_dict() for child in self.children],
            testCases=[TestCaseRef(key=tc["key"], name=tc["name"]) for tc in self.test_cases],
        )
        if self.has_more_test_cases is not None:
            result["hasMoreTestCases"] = self.has_more_test_cases
        return result

    def walk(self) -> Iterable[TreeNode]:
        """Yield this node and every descendant in pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------


def fetch_all(page_op: PageOp, page_size: int = MAX_PAGE_SIZE) -> list[dict[str, Any]]:
    """Call *page_op* until the server reports no further pages.

    Termination follows the ``next`` indicator only; a short or empty page is
    not treated as the last one. Any failure propagates and discards what was
    collected so far.
    """
    if page_size < 1:
        msg = f"page_size must be positive, got {page_size}"
        raise ValueError(msg)

    results: list[dict[str, Any]] = []
    start_at = 0
    while True:
        page = page_op(start_at, page_size)
        results.extend(page.get("values") or [])
        if not page.get("next"):
            return results
        start_at += page_size


def fetch_capped(page_op: PageOp, limit: int, page_size: int = MAX_PAGE_SIZE) -> tuple[list[dict[str, Any]], bool]:
    """Collect at most *limit* records.

    Returns ``(records, has_more)`` where ``has_more`` is true when the server
    indicated results beyond the cutoff. ``len(records)`` never exceeds *limit*.
    """
    if limit < 1:
        msg = f"limit must be positive, got {limit}"
        raise ValueError(msg)

    collected: list[dict[str, Any]] = []
    start_at = 0
    while True:
        room = limit - len(collected)
        want = min(page_size, room)
        page = page_op(start_at, want)
        values = page.get("values") or []
        has_next = bool(page.get("next"))

        collected.extend(values[:room])
        if len(values) > room:
            return collected, True
        if len(collected) >= limit or not has_next:
            return collected, has_next
        start_at += want


# ---------------------------------------------------------------------------
# Forest assembly
# ---------------------------------------------------------------------------


def _index_folders(
    folders: Iterable[FolderRecord], log: logging.Logger
) -> tuple[dict[int, FolderRecord], dict[int, list[FolderRecord]]]:
    """Return ``(by_id, adjacency)``; adjacency buckets keep input order.

    A folder whose parent is null, or not among *folders*, goes in the
    ``_ROOT`` bucket.
    """
    by_id: dict[int, FolderRecord] = {}
    for folder in folders:
        folder_id = folder["id"]
        if folder_id <= 0:
            raise TreeError(f"Invalid folder id {folder_id!r} (folder ids must be positive)")
        if folder_id in by_id:
            log.warning("Duplicate folder id %d (%s) ignored", folder_id, folder.get("name"))
            continue
        by_id[folder_id] = folder

    adjacency: dict[int, list[FolderRecord]] = defaultdict(list)
    for folder in by_id.values():
        parent_id = folder.get("parentId")
        key = parent_id if parent_id and parent_id in by_id else _ROOT
        adjacency[key].append(folder)
    return by_id, adjacency


def _assemble(
    by_id: dict[int, FolderRecord],
    adjacency: dict[int, list[FolderRecord]],
    attach: Callable[[TreeNode], None] | None = None,
) -> list[TreeNode]:
    """Depth-first, pre-order assembly with an explicit stack.

    *attach* is invoked once per node in visiting order. Raises TreeError when
    a folder is reached twice or cannot be reached from any root, i.e. when
    parent links form a cycle.
    """
    roots = [TreeNode(id=f["id"], name=f["name"]) for f in adjacency.get(_ROOT, [])]
    visited: set[int] = set()
    stack = list(reversed(roots))

    while stack:
        node = stack.pop()
        if node.id in visited:
            raise TreeError(f"Folder {node.id} ({node.name}) reached twice: folder parentage contains a cycle")
        visited.add(node.id)
        if attach is not None:
            attach(node)
        node.children = [TreeNode(id=f["id"], name=f["name"]) for f in adjacency.get(node.id, [])]
        stack.extend(reversed(node.children))

    unreachable = [folder_id for folder_id in by_id if folder_id not in visited]
    if unreachable:
        ids = ", ".join(str(i) for i in unreachable)
        raise TreeError(f"Folder parentage contains a cycle; unreachable folder(s): {ids}")
    return roots


def build_folder_forest(
    folders: Iterable[FolderRecord],
    test_case_fetcher: FolderPageOp | None = None,
    *,
    max_test_cases: int | None = None,
    logger: logging.Logger | None = None,
) -> list[TreeNode]:
    """Turn a flat folder listing into a forest.

    When *test_case_fetcher* is given, each node gets the test cases of its
    folder: all of them when *max_test_cases* is None, otherwise at most
    *max_test_cases* with ``has_more_test_cases`` reporting truncation. A
    fetch failure for any folder aborts the whole build.
    """
    log = logger or _logger
    if max_test_cases is not None and max_test_cases < 1:
        msg = f"max_test_cases must be positive, got {max_test_cases}"
        raise ValueError(msg)

    by_id, adjacency = _index_folders(folders, log)
    if test_case_fetcher is None:
        return _assemble(by_id, adjacency)

    fetcher = test_case_fetcher

    def attach_test_cases(node: TreeNode) -> None:
        def page_op(start_at: int, size: int) -> PageData:
            return fetcher(node.id, start_at, size)

        log.debug("Fetching test cases for folder %d (%s)", node.id, node.name)
        if max_test_cases is None:
            records = fetch_all(page_op)
            node.has_more_test_cases = False
        else:
            records, node.has_more_test_cases = fetch_capped(page_op, max_test_cases)
        node.test_cases = [TestCaseRef(key=r["key"], name=r["name"]) for r in records]

    return _assemble(by_id, adjacency, attach_test_cases)


# ---------------------------------------------------------------------------
# Test-cycle path
# ---------------------------------------------------------------------------


def execution_test_case_key(execution: dict[str, Any]) -> str | None:
    """Extract the test-case key from an execution's ``testCase.self`` link.

    Returns None when the link is absent or does not contain ``testcases/<key>``.
    """
    link = (execution.get("testCase") or {}).get("self")
    if not link:
        return None
    match = _TEST_CASE_LINK.search(link)
    return match.group(1) if match else None


@dataclass
class _ResolvedCase:
    key: str
    name: str
    folder_id: int | None


def build_cycle_forest(
    test_cycle_key: str,
    *,
    list_executions: PageOp,
    get_test_case: Callable[[str], TestCaseRecord],
    get_folder: Callable[[int], FolderRecord],
    logger: logging.Logger | None = None,
) -> list[TreeNode]:
    """Build the minimal folder forest containing every test case of a cycle.

    Returns an empty list when the cycle has no (resolvable) executions.
    Executions whose test-case link cannot be parsed are skipped with a
    warning; any failed test-case or folder lookup is fatal.
    """
    log = logger or _logger

    log.info("Fetching test executions for %s...", test_cycle_key)
    executions = fetch_all(list_executions)

    keys: list[str] = []
    seen: set[str] = set()
    for execution in executions:
        key = execution_test_case_key(execution)
        if key is None:
            log.warning(
                "Skipping execution %s: no test case link",
                execution.get("key") or execution.get("id") or "?",
            )
            continue
        if key not in seen:
            seen.add(key)
            keys.append(key)
    log.info("Found %d test execution(s), %d distinct test case(s)", len(executions), len(keys))

    if not keys:
        return []

    cases: list[_ResolvedCase] = []
    for key in keys:
        log.debug("Fetching test case: %s", key)
        record = get_test_case(key)
        folder = record.get("folder")
        folder_id = folder.get("id") if folder else None
        cases.append(_ResolvedCase(key=record["key"], name=record["name"], folder_id=folder_id))

    log.info("Fetching folder details...")
    folders: dict[int, FolderRecord] = {}
    for case in cases:
        current = case.folder_id
        while current and current not in folders:
            log.debug("Fetching folder: %d", current)
            folder = get_folder(current)
            folders[current] = folder
            current = folder.get("parentId")
    log.info("Found %d folder(s)", len(folders))

    by_folder: dict[int | None, list[TestCaseRef]] = defaultdict(list)
    for case in cases:
        folder_id = case.folder_id if case.folder_id else None
        by_folder[folder_id].append(TestCaseRef(key=case.key, name=case.name))

    def attach(node: TreeNode) -> None:
        node.test_cases = list(by_folder.get(node.id, []))

    by_id, adjacency = _index_folders(folders.values(), log)
    forest = _assemble(by_id, adjacency, attach)

    unfiled = by_folder.get(None, [])
    if unfiled:
        forest.append(TreeNode(id=NO_FOLDER_ID, name=NO_FOLDER_NAME, test_cases=list(unfiled)))
    return forest


# ---------------------------------------------------------------------------
# Client-bound entry points
# ---------------------------------------------------------------------------


def build_folder_tree(
    client: ZephyrClient,
    project_key: str,
    *,
    max_test_cases: int | None = None,
    all_test_cases: bool = False,
    logger: logging.Logger | None = None,
) -> list[TreeNode]:
    """Fetch a project's test-case folders and assemble them.

    Test cases are attached only when *all_test_cases* is set or
    *max_test_cases* is given; *all_test_cases* takes precedence.
    """
    log = logger or _logger

    def list_folders(start_at: int, size: int) -> PageData:
        return client.folders.list_folders(
            project_key=project_key, folder_type="TEST_CASE", max_results=size, start_at=start_at
        ).data

    def list_test_cases(folder_id: int, start_at: int, size: int) -> PageData:
        return client.testcases.list_test_cases(
            project_key=project_key, folder_id=folder_id, max_results=size, start_at=start_at
        ).data

    log.info("Fetching folder tree for %s...", project_key)
    folders: list[Any] = fetch_all(list_folders)
    log.info("Found %d folder(s)", len(folders))

    if all_test_cases:
        return build_folder_forest(folders, list_test_cases, logger=log)
    if max_test_cases is not None:
        return build_folder_forest(folders, list_test_cases, max_test_cases=max_test_cases, logger=log)
    return build_folder_forest(folders, logger=log)


def build_cycle_tree(
    client: ZephyrClient,
    project_key: str,
    test_cycle_key: str,
    *,
    logger: logging.Logger | None = None,
) -> list[TreeNode]:
    """Resolve a test cycle into its folder forest."""

    def list_executions(start_at: int, size: int) -> PageData:
        return client.testexecutions.list_test_executions(
            project_key=project_key, test_cycle=test_cycle_key, max_results=size, start_at=start_at
        ).data

    return build_cycle_forest(
        test_cycle_key,
        list_executions=list_executions,
        get_test_case=lambda key: client.testcases.get_test_case(key).data,
        get_folder=lambda folder_id: client.folders.get_folder(folder_id).data,
        logger=logger,
    )


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def _connector(is_last: bool) -> str:
    return "└── " if is_last else "├── "


def _render_contents(node: TreeNode, prefix: str, lines: list[str]) -> None:
    # "..." counts as one more item so the real last item keeps ├──.
    has_more = bool(node.has_more_test_cases)
    total = len(node.children) + len(node.test_cases) + (1 if has_more else 0)
    index = 0

    for tc in node.test_cases:
        index += 1
        lines.append(f"{prefix}{_connector(index == total)}{tc['key']}: {tc['name']}")
    if has_more:
        index += 1
        lines.append(f"{prefix}{_connector(index == total)}...")

    last = len(node.children) - 1
    for i, child in enumerate(node.children):
        lines.append(f"{prefix}{_connector(i == last)}{child.name}/ ({child.id})")
        _render_contents(child, prefix + ("    " if i == last else "│   "), lines)


def render_text(forest: list[TreeNode]) -> str:
    """Render the forest as an indented box-drawing tree, one root per block."""
    lines: list[str] = []
    for root in forest:
        lines.append(f"{root.name}/ ({root.id})")
        _render_contents(root, "", lines)
    return "\n".join(lines)


def render_json(forest: list[TreeNode]) -> str:
    return json.dumps([node.to_dict() for node in forest], indent=2, ensure_ascii=False)


def render(forest: list[TreeNode], text: bool = False) -> str:
    return render_text(forest) if text else render_json(forest)
