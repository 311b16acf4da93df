"""Sequential, fail-fast commit orchestration over classifier groups."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from .changes import ChangeSet
from .exceptions import CommitExecutionError, GitError
from .feedback import FeedbackLoop
from .git import GitOperations
from .grouping import Group, GroupingResult, reconcile_uncovered_files, sort_groups_by_dependencies

if TYPE_CHECKING:
    from ..services.ai_service import Classifier

logger = logging.getLogger(__name__)

CLEANUP_COMMIT_MESSAGE = "chore: commit remaining changes"


class GroupState(Enum):
    """Per-group progress through the commit sequence."""

    PENDING = "pending"
    STAGING = "staging"
    MESSAGE_GENERATION = "message_generation"
    COMMIT_ATTEMPT = "commit_attempt"
    COMMITTED = "committed"
    FAILED = "failed"


class GroupDecision(Enum):
    """Operator decision after reviewing the proposed groups."""

    PROCEED = "yes"
    REGENERATE = "regenerate"
    SINGLE = "single"
    CANCEL = "cancel"


@dataclass
class CommitRecord:
    """A commit that was actually created."""

    message: str
    hash: str
    files: list[str]

    @property
    def subject(self) -> str:
        return self.message.split("\n", 1)[0]

    @property
    def short_hash(self) -> str:
        return self.hash[:7]


@dataclass
class CommitResult:
    """Outcome of an orchestration run."""

    success: bool = True
    commits: list[CommitRecord] = field(default_factory=list)
    skipped_groups: list[int] = field(default_factory=list)
    cleanup_commit: CommitRecord | None = None
    failed_group: int | None = None
    error: str | None = None

    @property
    def committed_files(self) -> set[str]:
        files = {path for commit in self.commits for path in commit.files}
        if self.cleanup_commit:
            files.update(self.cleanup_commit.files)
        return files


class CommitOrchestrator:
    """Drives classification, ordering and one-commit-per-group execution."""

    def __init__(
        self,
        git: GitOperations,
        classifier: "Classifier",
        feedback_loop: FeedbackLoop | None = None,
    ):
        self.git = git
        self.classifier = classifier
        self.feedback_loop = feedback_loop or FeedbackLoop(git, classifier, auto_accept=True)
        self.states: dict[int, GroupState] = {}

    def run(
        self,
        changes: ChangeSet,
        branch: str,
        review: Callable[[list[Group]], GroupDecision] | None = None,
    ) -> CommitResult | None:
        """
        Classify, order and commit a change set.

        Args:
            changes: All staged changes
            branch: Current branch name, passed to the classifier as context
            review: Called with the ordered groups before committing; when
                omitted the groups are committed without confirmation

        Returns:
            The commit result, or None if the operator cancelled
        """
        while True:
            # Skipped files are included; the classifier sees only their skip reason
            grouping = self.classifier.group_changes(changes.records, branch)
            logger.info("Identified %d logical group(s)", grouping.total_groups)

            if grouping.is_single:
                logger.info("All changes belong to a single logical commit")
                return self.commit_single(changes, branch)

            groups = self.prepare_groups(grouping, changes)
            decision = review(groups) if review else GroupDecision.PROCEED

            if decision is GroupDecision.REGENERATE:
                logger.info("Regenerating grouping...")
                continue
            if decision is GroupDecision.SINGLE:
                logger.info("Switching to single commit mode")
                return self.commit_single(changes, branch)
            if decision is GroupDecision.CANCEL:
                logger.info("Operation cancelled")
                return None

            result = self.commit_groups(groups, changes, branch)
            if result.success:
                result.cleanup_commit = self.finalize()
            return result

    def prepare_groups(self, grouping: GroupingResult, changes: ChangeSet) -> list[Group]:
        """Sort groups by dependency and make sure every changed file is covered."""
        groups = sort_groups_by_dependencies(grouping.groups)
        reconcile_uncovered_files(groups, changes)
        return groups

    def commit_single(self, changes: ChangeSet, branch: str) -> CommitResult | None:
        """Commit the whole change set at once through the feedback loop."""
        outcome = self.feedback_loop.run(changes, branch)
        if outcome is None:
            return None

        message, commit_hash = outcome
        return CommitResult(
            success=True,
            commits=[CommitRecord(message=message, hash=commit_hash, files=changes.paths)],
        )

    def commit_groups(self, groups: list[Group], changes: ChangeSet, branch: str) -> CommitResult:
        """
        Commit each group in order, stopping at the first failed commit.

        Staging failures and classifier failures propagate; a failed commit
        ends the sequence with ``success=False`` and keeps earlier commits.
        """
        result = CommitResult()
        self.states = {group.id: GroupState.PENDING for group in groups}

        for position, group in enumerate(groups, start=1):
            files = self._known_files(group, changes)
            if not files:
                logger.warning("No changes found for group %s", group.id)
                result.skipped_groups.append(group.id)
                continue

            try:
                record = self._commit_group(group, files, changes, branch)
            except CommitExecutionError as e:
                self.states[group.id] = GroupState.FAILED
                logger.error("Failed to create commit for group %s: %s", group.id, e)
                result.success = False
                result.failed_group = group.id
                result.error = str(e)
                break
            except Exception:
                self.states[group.id] = GroupState.FAILED
                raise

            result.commits.append(record)
            logger.info(
                "Commit %d of %d created: %s - %s",
                position,
                len(groups),
                record.short_hash,
                record.subject,
            )

        return result

    def _known_files(self, group: Group, changes: ChangeSet) -> list[str]:
        unknown = [path for path in group.files if path not in changes]
        if unknown:
            logger.warning(
                "Group %s lists files that are not changed, ignoring: %s",
                group.id,
                ", ".join(unknown),
            )
        return [path for path in group.files if path in changes]

    def _commit_group(
        self, group: Group, files: list[str], changes: ChangeSet, branch: str
    ) -> CommitRecord:
        self.states[group.id] = GroupState.STAGING
        self.git.unstage_all()
        self.git.stage_files(changes.stage_paths(files))

        self.states[group.id] = GroupState.MESSAGE_GENERATION
        records = [record for record in changes.subset(files) if not record.skipped]
        if not records:
            logger.info("Group %s has no analyzable content; generating message anyway", group.id)
        message = self.classifier.generate_message(records, branch)

        self.states[group.id] = GroupState.COMMIT_ATTEMPT
        commit_hash = self.git.create_commit(message, label=f"group-{group.id}")

        self.states[group.id] = GroupState.COMMITTED
        return CommitRecord(message=message, hash=commit_hash, files=files)

    def finalize(self) -> CommitRecord | None:
        """
        Commit anything still left in the working tree after the grouped pass.

        Returns:
            The cleanup commit, or None when nothing remained or it failed
        """
        try:
            self.git.stage_all()
            remaining = self.git.get_staged_paths()
        except GitError as e:
            logger.error("Could not inspect remaining changes: %s", e)
            return None

        if not remaining:
            return None

        logger.warning(
            "%d file(s) still staged after grouped commits: %s",
            len(remaining),
            ", ".join(remaining),
        )
        try:
            commit_hash = self.git.create_commit(CLEANUP_COMMIT_MESSAGE, label="cleanup")
        except GitError as e:
            logger.error("Failed to create cleanup commit, changes left staged: %s", e)
            return None

        return CommitRecord(message=CLEANUP_COMMIT_MESSAGE, hash=commit_hash, files=remaining)
