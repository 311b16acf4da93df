"""Common test fixtures."""

import pytest

from splitcommit.core.changes import ChangeRecord, ChangeSet, ChangeStatus
from splitcommit.core.exceptions import CommitExecutionError
from splitcommit.core.grouping import Group, GroupingResult


class FakeRepo:
    """In-memory stand-in for GitOperations that tracks index and history."""

    def __init__(
        self, changes, extra_working=(), fail_commit_at=None, branch="feature/login", remotes=()
    ):
        self.changes = changes
        self.working = set(changes.paths) | set(extra_working)
        self.index: set[str] = set()
        self.history: list[tuple[str, list[str]]] = []
        self.commit_attempts = 0
        self.fail_commit_at = fail_commit_at
        self.branch = branch
        self.staged_batches: list[list[str]] = []
        self.remotes = set(remotes)
        self.pushes: list[tuple[str, bool]] = []

    def list_changes(self, include_unstaged=False):
        if include_unstaged:
            self.stage_all()
        return self.changes

    def stage_all(self):
        self.index |= self.working

    def stage_files(self, files):
        self.staged_batches.append(list(files))
        self.index |= {path for path in files if path in self.working}

    def unstage_all(self):
        self.index.clear()

    def get_staged_paths(self):
        return sorted(self.index)

    def current_branch(self):
        return self.branch

    def current_commit_hash(self):
        return f"{len(self.history):040x}"

    def create_commit(self, message, label="commit"):
        self.commit_attempts += 1
        if self.commit_attempts == self.fail_commit_at:
            raise CommitExecutionError("Failed to create commit: hook rejected commit")
        if not self.index:
            raise CommitExecutionError("Failed to create commit: nothing to commit")
        files = sorted(self.index)
        self.history.append((message, files))
        self.working -= self.index
        self.index.clear()
        return self.current_commit_hash()

    def has_origin_remote(self):
        return "origin" in self.remotes

    def add_origin_remote(self, url):
        self.remotes.add("origin")
        self.origin_url = url

    def push(self, set_upstream=True):
        self.pushes.append((self.branch, set_upstream))


class StubClassifier:
    """Deterministic classifier returning canned groupings and numbered messages."""

    def __init__(self, groupings=(), messages=None):
        self.groupings = list(groupings)
        self.messages = list(messages or [])
        self.group_calls: list[list[str]] = []
        self.message_calls: list[tuple[list[str], str, str | None]] = []

    def group_changes(self, changes, branch):
        self.group_calls.append([change.path for change in changes])
        if len(self.groupings) > 1:
            return self.groupings.pop(0)
        return self.groupings[0]

    def generate_message(self, changes, branch, feedback=None):
        self.message_calls.append(([change.path for change in changes], branch, feedback))
        if self.messages:
            return self.messages.pop(0)
        return f"feat: change set {len(self.message_calls)}\n\nGenerated body."


def group(group_id, files, dependencies=(), type_="feat", scope=None):
    return Group(
        id=group_id,
        type=type_,
        scope=scope,
        description=f"group {group_id}",
        reasoning=f"files for group {group_id}",
        files=list(files),
        dependencies=list(dependencies),
    )


def grouping(*groups):
    return GroupingResult(groups=list(groups), total_groups=len(groups))


@pytest.fixture
def make_changes():
    """Fixture for building change sets from paths.

    Paths listed in ``skipped`` get a skip flag with a fixed reason.
    """

    def _make(*paths, skipped=(), status=ChangeStatus.MODIFIED):
        records = []
        for path in paths:
            if path in skipped:
                records.append(
                    ChangeRecord(path=path, status=status, skipped=True, skip_reason="Migration file")
                )
            else:
                records.append(ChangeRecord(path=path, status=status, diff=f"+ change in {path}"))
        return ChangeSet(records)

    return _make


@pytest.fixture
def fake_repo_factory():
    return FakeRepo
