"""Commit groups proposed by the classifier, dependency ordering and file coverage."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .changes import ChangeSet
from .exceptions import ClassificationError

logger = logging.getLogger(__name__)


@dataclass
class Group:
    """A logically coherent subset of changes destined for one commit."""

    id: int
    type: str
    description: str
    files: list[str]
    scope: str | None = None
    reasoning: str = ""
    dependencies: list[int] = field(default_factory=list)

    @property
    def header(self) -> str:
        """Conventional-commit style label, e.g. ``feat(api)``."""
        return f"{self.type}({self.scope})" if self.scope else self.type

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Group":
        """Build a group from classifier JSON."""
        try:
            return cls(
                id=int(data["id"]),
                type=str(data.get("type") or "chore"),
                scope=data.get("scope") or None,
                description=str(data.get("description", "")),
                reasoning=str(data.get("reasoning", "")),
                files=[str(path) for path in data["files"]],
                dependencies=[int(dep) for dep in data.get("dependencies") or []],
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ClassificationError(f"Malformed group in classifier response: {e}") from e


@dataclass
class GroupingResult:
    """The classifier's decomposition of a change set."""

    groups: list[Group]
    total_groups: int

    def __post_init__(self) -> None:
        if self.total_groups != len(self.groups):
            raise ClassificationError(
                f"Classifier reported {self.total_groups} groups but returned {len(self.groups)}"
            )
        if not self.groups:
            raise ClassificationError("Classifier returned no groups")
        ids = [group.id for group in self.groups]
        if len(set(ids)) != len(ids):
            raise ClassificationError(f"Classifier returned duplicate group ids: {ids}")

    @property
    def is_single(self) -> bool:
        return self.total_groups == 1

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GroupingResult":
        """Build a grouping result from classifier JSON."""
        raw_groups = data.get("groups")
        if not isinstance(raw_groups, list):
            raise ClassificationError("Classifier response has no 'groups' list")
        groups = [Group.from_dict(item) for item in raw_groups]
        try:
            total = int(data.get("totalGroups", data.get("total_groups", len(groups))))
        except (TypeError, ValueError) as e:
            raise ClassificationError(f"Invalid group count: {e}") from e
        return cls(groups=groups, total_groups=total)


class _Mark(Enum):
    UNVISITED = 0
    IN_PROGRESS = 1
    DONE = 2


def sort_groups_by_dependencies(groups: list[Group]) -> list[Group]:
    """
    Order groups so that dependencies are committed before their dependents.

    Depth-first traversal in input order. Cycles are reported and broken at
    the back-edge; references to unknown group ids are ignored. Every input
    group appears exactly once in the output.

    Args:
        groups: Groups in classifier order

    Returns:
        Groups in commit order
    """
    index_by_id = {group.id: index for index, group in enumerate(groups)}
    marks = [_Mark.UNVISITED] * len(groups)
    ordered: list[Group] = []

    def visit(index: int) -> None:
        if marks[index] is _Mark.DONE:
            return
        if marks[index] is _Mark.IN_PROGRESS:
            logger.warning("Circular dependency detected involving group %s", groups[index].id)
            return

        marks[index] = _Mark.IN_PROGRESS
        for dep_id in groups[index].dependencies:
            dep_index = index_by_id.get(dep_id)
            if dep_index is None:
                logger.debug(
                    "Group %s depends on unknown group %s; ignoring", groups[index].id, dep_id
                )
                continue
            visit(dep_index)

        marks[index] = _Mark.DONE
        ordered.append(groups[index])

    for index in range(len(groups)):
        if marks[index] is _Mark.UNVISITED:
            visit(index)

    return ordered


def find_uncovered_files(groups: list[Group], changes: ChangeSet) -> list[str]:
    """Paths of the change set that no group claims, in change-set order."""
    covered = {path for group in groups for path in group.files}
    return [path for path in changes.paths if path not in covered]


def reconcile_uncovered_files(groups: list[Group], changes: ChangeSet) -> list[str]:
    """
    Append every uncovered path to the last group so each change is committed.

    Running this again on a fully covered grouping changes nothing.

    Returns:
        The paths that were appended
    """
    if not groups:
        return []

    uncovered = find_uncovered_files(groups, changes)
    if uncovered:
        logger.warning(
            "%d file(s) not assigned to any group, adding to group %s: %s",
            len(uncovered),
            groups[-1].id,
            ", ".join(uncovered),
        )
        groups[-1].files.extend(uncovered)

    return uncovered
