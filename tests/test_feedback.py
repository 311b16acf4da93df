"""Tests for the single-commit feedback loop."""

import pytest

from conftest import FakeRepo, StubClassifier
from splitcommit.core.changes import ChangeSet
from splitcommit.core.feedback import FeedbackAction, FeedbackLoop


def scripted(actions, feedback):
    """Operator stub answering from fixed scripts."""
    actions = iter(actions)
    feedback = iter(feedback)
    return (lambda message: next(actions)), (lambda: next(feedback))


def test_auto_accept_commits_first_message(make_changes):
    """Test that auto-accept commits without asking."""
    changes = make_changes("a.py")
    repo = FakeRepo(changes)
    classifier = StubClassifier(messages=["fix: handle empty input"])

    outcome = FeedbackLoop(repo, classifier, auto_accept=True).run(changes, "main")

    assert outcome == ("fix: handle empty input", repo.current_commit_hash())
    assert repo.history == [("fix: handle empty input", ["a.py"])]
    assert len(classifier.message_calls) == 1


def test_regenerate_passes_latest_feedback(make_changes):
    """Test that each regeneration receives only the most recent feedback."""
    changes = make_changes("a.py")
    repo = FakeRepo(changes)
    classifier = StubClassifier(messages=["first", "second", "third"])
    choose, ask = scripted(
        [FeedbackAction.REGENERATE, FeedbackAction.REGENERATE, FeedbackAction.COMMIT],
        ["shorter", "mention the bug"],
    )

    outcome = FeedbackLoop(repo, classifier, choose, ask).run(changes, "main")

    assert outcome[0] == "third"
    assert [call[2] for call in classifier.message_calls] == [None, "shorter", "mention the bug"]
    assert repo.history[0][0] == "third"


def test_cancel_creates_no_commit(make_changes):
    """Test that cancelling leaves the repository untouched."""
    changes = make_changes("a.py")
    repo = FakeRepo(changes)
    choose, ask = scripted([FeedbackAction.CANCEL], [])

    assert FeedbackLoop(repo, StubClassifier(), choose, ask).run(changes, "main") is None
    assert repo.history == []


def test_only_analyzable_changes_sent(make_changes):
    """Test that skipped files are not sent for message generation but are committed."""
    changes = make_changes("a.py", "huge.json", skipped=["huge.json"])
    repo = FakeRepo(changes)
    classifier = StubClassifier()

    FeedbackLoop(repo, classifier, auto_accept=True).run(changes, "dev")

    assert classifier.message_calls[0][:2] == (["a.py"], "dev")
    assert repo.history[0][1] == ["a.py", "huge.json"]


def test_interactive_loop_requires_prompts():
    """Test that an interactive loop cannot be built without decision providers."""
    with pytest.raises(ValueError):
        FeedbackLoop(FakeRepo(ChangeSet()), StubClassifier())
