"""Command execution using invoke."""

import contextlib
import os
import signal
import time
from pathlib import Path
from subprocess import PIPE, Popen

from invoke import Config, Context, Local, Result
from invoke.exceptions import CommandTimedOut

from sysroot_matrix.core.errors import StepFailed
from sysroot_matrix.core.log import logger


class SessionLocal(Local):
    """invoke's Local runner, with each command in its own session.

    invoke's kill() only signals the shell. Anything the shell forked
    would survive a timeout and keep the output pipes open, so the
    whole process group is killed instead.
    """

    def start(self, command: str, shell: str, env: dict) -> None:
        if self.using_pty or not hasattr(os, "killpg"):
            super().start(command, shell, env)
            return
        self.process = Popen(
            command,
            shell=True,
            executable=shell,
            env=env,
            stdout=PIPE,
            stderr=PIPE,
            stdin=PIPE,
            start_new_session=True,
        )

    def kill(self) -> None:
        if self.using_pty or not hasattr(os, "killpg"):
            super().kill()
            return
        # The shell leads its own session, so its pid is the group id
        with contextlib.suppress(ProcessLookupError):
            os.killpg(self.get_pid(), signal.SIGKILL)


class Runner(Context):
    """invoke.Context with the execution options the matrix needs.

    Output is always captured rather than echoed; callers choose the
    log level it is replayed at. Timeouts do not raise, they come
    back as a result with exit code -1.
    """

    def __init__(self, config: Config | None = None):
        if config is None:
            config = Config(overrides={"runners": {"local": SessionLocal}})
        super().__init__(config=config)

    def execute(
        self,
        command: str,
        cwd: Path | None = None,
        timeout: int | None = None,
        log_level: str | None = None,
        check: bool = True,
        merge_streams: bool = False,
    ) -> Result:
        """Execute a command.

        Args:
            command: Shell command to execute
            cwd: Working directory for the command
            timeout: Maximum execution time in seconds; on expiry the
                command and everything it started are killed
            log_level: Level to replay output lines at (None: silent)
            check: Raise StepFailed on a non-zero exit code
            merge_streams: Redirect stderr into stdout so the captured
                output keeps its original interleaving

        Returns:
            invoke.Result with stdout, stderr and exited

        Raises:
            StepFailed: If check is set and the command fails
        """
        shell_command = f"{{ {command}\n}} 2>&1" if merge_streams else command

        kwargs = {
            "hide": True,
            "warn": True,
            "in_stream": False,
        }
        if timeout:
            kwargs["timeout"] = timeout

        logger.debug("Running: {command}", command=command)
        started = time.monotonic()
        try:
            if cwd:
                with self.cd(str(cwd)):
                    result = self.run(shell_command, **kwargs)
            else:
                result = self.run(shell_command, **kwargs)
        except CommandTimedOut as e:
            logger.warn(
                "Timed out after {timeout}s: {command}",
                timeout=timeout,
                command=command,
            )
            result = e.result
            result.exited = -1
        result.duration = time.monotonic() - started

        if log_level:
            for line in combined_output(result).splitlines():
                logger.output(log_level, line.rstrip())

        if check and result.exited != 0:
            raise StepFailed(command, result.exited, combined_output(result))

        return result


def combined_output(result: Result) -> str:
    """Return stdout followed by stderr."""
    return (result.stdout or "") + (result.stderr or "")
