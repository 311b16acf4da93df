"""Application flow behind the splitcommit command."""

import logging
import sys

from ..core.changes import ChangeSet
from ..core.exceptions import ClassificationError, GitError
from ..core.feedback import FeedbackLoop
from ..core.git import GitOperations
from ..core.grouping import Group
from ..core.orchestrator import CommitOrchestrator, CommitResult, GroupDecision
from ..services.ai_service import AIService
from . import console

logger = logging.getLogger(__name__)


class SplitCommit:
    """Main application class."""

    def __init__(self):
        """Initialize splitcommit."""
        self.git = GitOperations()
        self.ai_service = AIService()
        self.auto_commit = False

    def _feedback_loop(self) -> FeedbackLoop:
        return FeedbackLoop(
            self.git,
            self.ai_service,
            choose_action=console.select_message_action,
            ask_feedback=console.ask_feedback,
            auto_accept=self.auto_commit,
        )

    def _review_groups(self, changes: ChangeSet):
        def review(groups: list[Group]) -> GroupDecision:
            console.print_groups(groups, changes)
            if self.auto_commit:
                console.print_info(f"Auto-accepting: proceeding with {len(groups)} commits")
                return GroupDecision.PROCEED
            return console.select_group_action(len(groups))

        return review

    def _load_changes(self, include_unstaged: bool) -> ChangeSet | None:
        changes = self.git.list_changes(include_unstaged=include_unstaged)
        if not changes:
            console.print_warning("No changes to commit. Working directory is clean.")
            return None

        console.print_changed_files(changes)
        if not changes.included:
            console.print_warning("All files were skipped.")
            console.print_skipped_files(changes.skipped)
            return None

        if changes.skipped:
            console.print_info(
                f"Note: {len(changes.skipped)} large/migration file(s) will be committed "
                "without AI analysis"
            )
        return changes

    def run_single(self) -> CommitResult | None:
        """Commit the staged changes (or everything, if nothing is staged) at once."""
        staged = self.git.get_staged_paths()
        changes = self._load_changes(include_unstaged=not staged)
        if changes is None:
            return None

        branch = self.git.current_branch()
        orchestrator = CommitOrchestrator(self.git, self.ai_service, self._feedback_loop())
        result = orchestrator.commit_single(changes, branch)
        if result is None:
            console.print_warning("Commit cancelled by user.")
            return None

        console.print_skipped_files(changes.skipped)
        console.print_commit_result(result)
        return result

    def run_grouped(self) -> CommitResult | None:
        """Stage everything, split it into logical groups and commit them in order."""
        changes = self._load_changes(include_unstaged=True)
        if changes is None:
            return None

        branch = self.git.current_branch()
        orchestrator = CommitOrchestrator(self.git, self.ai_service, self._feedback_loop())
        result = orchestrator.run(changes, branch, review=self._review_groups(changes))
        if result is None:
            console.print_warning("Commit cancelled by user.")
            return None

        console.print_commit_result(result)
        return result

    def offer_push(self) -> bool:
        """
        Push the new commits to origin after asking, or right away with auto-commit.

        Returns:
            True if the branch was pushed
        """
        if self.auto_commit:
            console.print_info("Auto-accepting: pushing to origin")
        elif not console.confirm_push():
            console.print_info("Commits created but not pushed.")
            return False

        if not self.git.has_origin_remote():
            if self.auto_commit:
                console.print_warning("Commits created but not pushed (no origin remote configured).")
                return False
            url = console.ask_remote_url()
            if url is None:
                console.print_info("Commits created but not pushed.")
                return False
            self.git.add_origin_remote(url)
            console.print_info("Origin remote added")

        self.git.push(set_upstream=True)
        console.print_success("Successfully pushed to origin!")
        return True

    def run(
        self, auto_commit: bool = False, single_commit: bool = False, debug: bool = False
    ) -> CommitResult | None:
        """Run the main application logic."""
        self.auto_commit = auto_commit
        try:
            console.setup_logging(debug)

            if not self.git.is_git_repository():
                console.print_error(
                    "Not a git repository. Please run this command in a git repository."
                )
                sys.exit(1)

            result = self.run_single() if single_commit else self.run_grouped()
            if result is not None and not result.success:
                sys.exit(1)
            if result is not None:
                self.offer_push()
            return result

        except GitError as e:
            console.print_error(f"Git error: {str(e)}")
            if debug:
                logger.debug("Git error details:", exc_info=True)
            sys.exit(1)
        except ClassificationError as e:
            console.print_error(f"API error: {str(e)}")
            if debug:
                logger.debug("Classifier error details:", exc_info=True)
            sys.exit(1)
