"""Console output formatting and user interaction."""

import logging
import sys

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.text import Text

from ..core.changes import ChangeRecord, ChangeSet
from ..core.feedback import FeedbackAction
from ..core.grouping import Group
from ..core.orchestrator import CommitRecord, CommitResult, GroupDecision

console = Console()

REMOTE_HOSTS = ("github.com", "gitlab.com", "bitbucket.org")


def setup_logging(debug: bool = False) -> None:
    """Configure logging for the CLI."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(levelname)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )


def print_changed_files(changes: ChangeSet) -> None:
    """Print list of changed files."""
    console.print("\n[bold blue]📜 Changes detected in the following files:[/bold blue]")
    for change in changes:
        suffix = f" [dim]({change.skip_reason})[/dim]" if change.skipped else ""
        console.print(f"  - [cyan]{change.path}[/cyan]{suffix}")


def print_skipped_files(skipped: list[ChangeRecord], title: str = "Skipped files") -> None:
    """Print files whose content is not sent for analysis."""
    if not skipped:
        return
    lines = "\n".join(f"  {change.path} - {change.skip_reason}" for change in skipped)
    console.print(Panel(Text(lines), title=title, expand=False, border_style="yellow"))


def format_group(group: Group, index: int, total: int, changes: ChangeSet) -> tuple[str, str]:
    """Build the header and body text describing one group."""
    header = f"Group {index} of {total}: {group.header} - {group.description}"
    lines = []
    for path in group.files:
        change = changes.get(path)
        if change is not None and change.skipped:
            lines.append(f"  • {path} ({change.skip_reason} - content not analyzed)")
        else:
            lines.append(f"  • {path}")
    body = "\n".join(lines)
    if group.reasoning:
        body += f"\n\nReasoning: {group.reasoning}"
    return header, body


def print_groups(groups: list[Group], changes: ChangeSet) -> None:
    """Print every group in commit order."""
    console.print()
    for index, group in enumerate(groups, start=1):
        header, body = format_group(group, index, len(groups), changes)
        console.print(Panel(Text(body), title=header, title_align="left", expand=False))
    console.print()


def print_commit_message(message: str) -> None:
    """Print formatted commit message."""
    console.print(Panel(Text(message), expand=False, border_style="green"))


def format_commit_line(commit: CommitRecord) -> str:
    return f"{commit.short_hash} - {commit.subject}"


def print_commit_result(result: CommitResult) -> None:
    """Print the commits created by a run."""
    for index, commit in enumerate(result.commits, start=1):
        console.print(f"  {index}. [green]{format_commit_line(commit)}[/green]")

    if result.cleanup_commit:
        print_warning(
            "Some changes were not covered by any group and were committed separately:"
        )
        console.print(f"  [yellow]{format_commit_line(result.cleanup_commit)}[/yellow]")
        for path in result.cleanup_commit.files:
            console.print(f"    - [dim]{path}[/dim]")

    if result.skipped_groups:
        groups = ", ".join(str(group_id) for group_id in result.skipped_groups)
        print_warning(f"Groups with no changes were skipped: {groups}")

    if result.success:
        total = len(result.commits) + (1 if result.cleanup_commit else 0)
        print_success(f"Successfully created {total} commit(s)!")
    else:
        print_error(
            f"Stopped at group {result.failed_group} after {len(result.commits)} commit(s): "
            f"{result.error}"
        )


def select_group_action(total: int) -> GroupDecision:
    """Ask how to proceed with the proposed groups."""
    choice = Prompt.ask(
        f"\n[bold blue]Proceed with {total} commits in this order?[/bold blue]",
        choices=[decision.value for decision in GroupDecision],
        default=GroupDecision.PROCEED.value,
    )
    return GroupDecision(choice)


def select_message_action(message: str) -> FeedbackAction:
    """Show a generated message and ask what to do with it."""
    print_info("Suggested commit message:")
    print_commit_message(message)
    choice = Prompt.ask(
        "What would you like to do?",
        choices=[action.value for action in FeedbackAction],
        default=FeedbackAction.COMMIT.value,
    )
    return FeedbackAction(choice)


def ask_feedback() -> str:
    """Ask for feedback used to regenerate the commit message."""
    while True:
        feedback = Prompt.ask(
            "What would you like to change? (e.g., 'Make it shorter', 'Add more details about why')"
        )
        if feedback and feedback.strip():
            return feedback.strip()
        print_warning("Feedback is required")


def confirm_push() -> bool:
    """Ask whether to push the new commits."""
    return Confirm.ask("\n[bold blue]Do you want to push these commits?[/bold blue]", default=True)


def ask_remote_url() -> str | None:
    """Ask for an origin URL. An empty answer means do not push."""
    while True:
        url = Prompt.ask(
            "Enter the remote repository URL (leave empty to skip)", default=""
        ).strip()
        if not url:
            return None
        if url.startswith("git@") or any(host in url for host in REMOTE_HOSTS):
            return url
        print_warning("Please enter a valid git repository URL")


def print_success(message: str) -> None:
    """Print success message."""
    console.print(f"\n[bold green]✅ {message}[/bold green]")


def print_error(message: str) -> None:
    """Print error message."""
    console.print(f"\n[bold red]❌ {message}[/bold red]")


def print_info(message: str) -> None:
    """Print info message."""
    console.print(f"\n[bold blue]ℹ️ {message}[/bold blue]")


def print_warning(message: str) -> None:
    """Print warning message."""
    console.print(f"\n[bold yellow]⚠️ {message}[/bold yellow]")
