#!/usr/bin/env python3
"""Entry point for running splitcommit as a module."""

import os
import sys
from typing import NoReturn

import click
from dotenv import load_dotenv

# Load environment variables before any imports
env_path = os.path.join(os.path.dirname(__file__), "..", ".env")
load_dotenv(dotenv_path=env_path)

from .cli import console  # noqa: E402
from .cli.cli_handler import SplitCommit  # noqa: E402


def handle_error(error: BaseException) -> NoReturn:
    """Handle errors in a consistent way."""
    if isinstance(error, KeyboardInterrupt):
        console.print_error("\nOperation cancelled by user.")
        sys.exit(1)
    else:
        console.print_error(f"An error occurred: {str(error)}")
        sys.exit(1)


@click.command()
@click.option("-y", "--yes", is_flag=True, help="Skip all confirmation prompts")
@click.option("-s", "--single", is_flag=True, help="Create one commit instead of grouping changes")
@click.option("-d", "--debug", is_flag=True, help="Enable debug logging")
def main(yes: bool, single: bool, debug: bool) -> None:
    """Split your changes into logical git commits with AI-generated messages."""
    try:
        app = SplitCommit()
        app.run(auto_commit=yes, single_commit=single, debug=debug)
    except (KeyboardInterrupt, Exception) as e:
        handle_error(e)


if __name__ == "__main__":
    main()
