#!/usr/bin/env python3
"""sysroot-matrix CLI - build a sysroot for every supported target."""

import asyncio
import sys

from pydantic_settings import CliApp, CliSubCommand, get_subcommand

from sysroot_matrix.command.reset import ResetCommand
from sysroot_matrix.command.run import RunCommand
from sysroot_matrix.command.targets import TargetsCommand
from sysroot_matrix.core.config import State
from sysroot_matrix.core.log import logger


class CliState(State):
    """Build the sysroot of every supported target and report which
    ones fail.

    Configuration sources (in priority order):
    1. Command-line arguments (--config.build.timeout 600)
    2. ./sysroot-matrix.yaml and any --include files
    3. .env file
    4. Environment variables
       (SYSROOT_MATRIX_CONFIG__BUILD__TIMEOUT=600)
    """

    run: CliSubCommand[RunCommand]
    targets: CliSubCommand[TargetsCommand]
    reset: CliSubCommand[ResetCommand]

    def cli_cmd(self):
        """Dispatch to the active subcommand, or show help."""
        subcommand = get_subcommand(self, is_required=False)

        if subcommand is None:
            CliApp.run(CliState, cli_args=['--help'])
            sys.exit(1)

        with logger:
            exit_code = asyncio.run(subcommand.run_workflow(self))
            raise SystemExit(exit_code)


def main():
    """Main entry point for CLI."""
    CliApp.run(CliState)


if __name__ == "__main__":
    main()
