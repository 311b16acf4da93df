"""Tests for group ordering and uncovered-file reconciliation."""

import logging

import pytest

from conftest import group, grouping
from splitcommit.core.exceptions import ClassificationError
from splitcommit.core.grouping import (
    Group,
    GroupingResult,
    find_uncovered_files,
    reconcile_uncovered_files,
    sort_groups_by_dependencies,
)


def ids(groups):
    return [g.id for g in groups]


class TestSortGroups:
    """Test dependency ordering."""

    def test_dependencies_precede_dependents(self):
        """Test that every dependency is placed before the group needing it."""
        groups = [
            group(1, ["api.py"], dependencies=[3]),
            group(2, ["docs.md"], dependencies=[1]),
            group(3, ["models.py"]),
            group(4, ["tests/test_api.py"], dependencies=[1, 3]),
        ]

        ordered = sort_groups_by_dependencies(groups)
        position = {g.id: index for index, g in enumerate(ordered)}

        for g in groups:
            for dep in g.dependencies:
                assert position[dep] < position[g.id]
        assert ids(ordered) == [3, 1, 2, 4]

    def test_independent_groups_keep_input_order(self):
        """Test deterministic output for groups without dependencies."""
        groups = [group(5, ["a"]), group(2, ["b"]), group(9, ["c"])]

        assert ids(sort_groups_by_dependencies(groups)) == [5, 2, 9]

    def test_mutual_cycle_does_not_raise(self, caplog):
        """Test that a two-group cycle is reported and both groups appear once."""
        groups = [group(1, ["a"], dependencies=[2]), group(2, ["b"], dependencies=[1])]

        with caplog.at_level(logging.WARNING):
            ordered = sort_groups_by_dependencies(groups)

        assert sorted(ids(ordered)) == [1, 2]
        assert ids(ordered) == [2, 1]
        assert "Circular dependency detected involving group 1" in caplog.text

    def test_self_dependency(self, caplog):
        """Test that a group depending on itself is still emitted once."""
        with caplog.at_level(logging.WARNING):
            ordered = sort_groups_by_dependencies([group(7, ["a"], dependencies=[7])])

        assert ids(ordered) == [7]
        assert "group 7" in caplog.text

    def test_unknown_dependency_ignored(self, caplog):
        """Test that references to missing groups are a silent no-op."""
        groups = [group(1, ["a"], dependencies=[42]), group(2, ["b"])]

        with caplog.at_level(logging.WARNING):
            ordered = sort_groups_by_dependencies(groups)

        assert ids(ordered) == [1, 2]
        assert caplog.text == ""

    def test_empty(self):
        """Test sorting no groups."""
        assert sort_groups_by_dependencies([]) == []


class TestReconcile:
    """Test that every changed file ends up in a group."""

    def test_uncovered_file_appended_to_last_group(self, make_changes):
        """Test that an unclaimed file joins the last group in commit order."""
        changes = make_changes("a.txt", "b.txt", "c.txt")
        groups = sort_groups_by_dependencies([group(1, ["a.txt"]), group(2, ["b.txt"])])

        appended = reconcile_uncovered_files(groups, changes)

        assert appended == ["c.txt"]
        assert groups[-1].files == ["b.txt", "c.txt"]
        assert {p for g in groups for p in g.files} == set(changes.paths)

    def test_reconcile_is_idempotent(self, make_changes):
        """Test that a second pass adds nothing and duplicates nothing."""
        changes = make_changes("a.txt", "b.txt", "c.txt")
        groups = [group(1, ["a.txt"]), group(2, ["b.txt"])]

        reconcile_uncovered_files(groups, changes)
        second = reconcile_uncovered_files(groups, changes)

        assert second == []
        all_files = [p for g in groups for p in g.files]
        assert len(all_files) == len(set(all_files)) == 3

    def test_reconcile_logs_warning(self, make_changes, caplog):
        """Test that uncovered files are reported."""
        changes = make_changes("a.txt", "orphan.txt")

        with caplog.at_level(logging.WARNING):
            reconcile_uncovered_files([group(1, ["a.txt"]), group(2, [])], changes)

        assert "orphan.txt" in caplog.text

    def test_reconcile_without_groups(self, make_changes):
        """Test that reconciliation is a no-op with no groups."""
        assert reconcile_uncovered_files([], make_changes("a.txt")) == []

    def test_find_uncovered_preserves_change_order(self, make_changes):
        """Test uncovered paths are reported in enumeration order."""
        changes = make_changes("z.py", "a.py", "m.py")

        assert find_uncovered_files([group(1, ["a.py"])], changes) == ["z.py", "m.py"]


class TestGroupingResult:
    """Test parsing of classifier output."""

    def test_from_dict(self):
        """Test building a grouping from JSON data."""
        result = GroupingResult.from_dict(
            {
                "groups": [
                    {
                        "id": 1,
                        "type": "feat",
                        "scope": "auth",
                        "description": "add login",
                        "files": ["auth.py"],
                        "reasoning": "login flow",
                        "dependencies": [],
                    },
                    {
                        "id": "2",
                        "type": "test",
                        "description": "cover login",
                        "files": ["tests/test_auth.py"],
                        "dependencies": ["1"],
                    },
                ],
                "totalGroups": 2,
            }
        )

        assert result.total_groups == 2
        assert result.groups[0].header == "feat(auth)"
        assert result.groups[1].header == "test"
        assert result.groups[1].dependencies == [1]
        assert not result.is_single

    def test_total_groups_must_match(self):
        """Test that a wrong group count is rejected."""
        with pytest.raises(ClassificationError):
            GroupingResult(groups=[group(1, ["a"])], total_groups=2)

    def test_empty_groups_rejected(self):
        """Test that an empty grouping is rejected."""
        with pytest.raises(ClassificationError):
            GroupingResult.from_dict({"groups": [], "totalGroups": 0})

    def test_duplicate_ids_rejected(self):
        """Test that group ids must be unique."""
        with pytest.raises(ClassificationError):
            grouping(group(1, ["a"]), group(1, ["b"]))

    def test_missing_files_rejected(self):
        """Test that a group without a file list is malformed."""
        with pytest.raises(ClassificationError):
            Group.from_dict({"id": 1, "type": "feat"})

    def test_missing_groups_key(self):
        """Test that a response without groups is malformed."""
        with pytest.raises(ClassificationError):
            GroupingResult.from_dict({"message": "feat: something"})
