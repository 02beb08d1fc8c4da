#!/usr/bin/env python3
"""gitrewrite CLI - drive merge, rebase, cherry-pick, revert and am."""

import asyncio
import sys

from pydantic import Field
from pydantic_settings import CliApp, CliSubCommand, get_subcommand

from gitrewrite.command import (
    AbortCommand,
    AmCommand,
    CherryPickCommand,
    ContinueCommand,
    MergeCommand,
    RebaseCommand,
    ResolveCommand,
    RevertCommand,
    SkipCommand,
    StatusCommand,
)
from gitrewrite.core.config import State
from gitrewrite.core.log import logger


class CliState(State):
    """Run git history-rewriting operations that can stop and resume.

    Start an operation with merge, rebase, cherry-pick, revert or am.
    When it stops on conflicts or an edit stop, fix things up and run
    continue, skip or abort; status shows where it stands.

    Exit codes: 0 completed (or nothing in progress), 1 failed,
    2 stopped and waiting for you.

    Configuration sources (in priority order):
    1. Command-line arguments (--config.git.workdir PATH)
    2. gitrewrite.yaml in the current directory, user config dir,
       and any --include FILE
    3. .env file
    4. Environment variables (GITREWRITE_CONFIG__GIT__WORKDIR=PATH)
    """

    merge: CliSubCommand[MergeCommand]
    rebase: CliSubCommand[RebaseCommand]
    cherry_pick: CliSubCommand[CherryPickCommand] = Field(alias="cherry-pick")
    revert: CliSubCommand[RevertCommand]
    am: CliSubCommand[AmCommand]
    continue_: CliSubCommand[ContinueCommand] = Field(alias="continue")
    skip: CliSubCommand[SkipCommand]
    abort: CliSubCommand[AbortCommand]
    resolve: CliSubCommand[ResolveCommand]
    status: CliSubCommand[StatusCommand]

    def cli_cmd(self):
        """Dispatch to the chosen subcommand, or show help."""
        subcommand = get_subcommand(self, is_required=False)
        if subcommand is None:
            CliApp.run(CliState, cli_args=['--help'])
            sys.exit(1)

        with self.config:
            exit_code = asyncio.run(subcommand.run_workflow(self))
            logger.debug(f"Exiting with {exit_code}")
        raise SystemExit(exit_code)


def main():
    """Main entry point for CLI."""
    CliApp.run(CliState)


if __name__ == "__main__":
    main()
