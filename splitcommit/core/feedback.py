"""Interactive regenerate/commit/cancel loop for single-commit mode."""

import logging
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING

from .changes import ChangeSet
from .git import GitOperations

if TYPE_CHECKING:
    from ..services.ai_service import Classifier

logger = logging.getLogger(__name__)


class FeedbackAction(Enum):
    """What the operator wants to do with a generated message."""

    COMMIT = "commit"
    REGENERATE = "regenerate"
    CANCEL = "cancel"


class FeedbackLoop:
    """
    Generate a message, present it, and commit, regenerate or cancel.

    There is no iteration cap; the loop ends when the operator commits or
    cancels. With ``auto_accept`` the first generated message is committed.
    """

    def __init__(
        self,
        git: GitOperations,
        classifier: "Classifier",
        choose_action: Callable[[str], FeedbackAction] | None = None,
        ask_feedback: Callable[[], str] | None = None,
        auto_accept: bool = False,
    ):
        if not auto_accept and (choose_action is None or ask_feedback is None):
            raise ValueError("Interactive feedback loop needs choose_action and ask_feedback")
        self.git = git
        self.classifier = classifier
        self.choose_action = choose_action
        self.ask_feedback = ask_feedback
        self.auto_accept = auto_accept

    def propose(self, changes: ChangeSet, branch: str) -> str | None:
        """Run the generate/present cycle and return the accepted message, if any."""
        feedback: str | None = None
        while True:
            message = self.classifier.generate_message(changes.included, branch, feedback)

            if self.auto_accept:
                logger.info("Auto-accepting: committing with generated message")
                return message

            action = self.choose_action(message)
            if action is FeedbackAction.COMMIT:
                return message
            if action is FeedbackAction.CANCEL:
                logger.info("Commit cancelled")
                return None

            feedback = self.ask_feedback()
            logger.debug("Regenerating commit message with feedback: %s", feedback)

    def run(self, changes: ChangeSet, branch: str) -> tuple[str, str] | None:
        """
        Produce one commit for the whole change set.

        Returns:
            ``(message, hash)`` of the new commit, or None when cancelled
        """
        message = self.propose(changes, branch)
        if message is None:
            return None

        self.git.stage_files(changes.stage_paths(changes.paths))
        commit_hash = self.git.create_commit(message, label="single")
        return message, commit_hash
