"""Errors raised when the tooling itself is broken."""


class StepFailed(RuntimeError):
    """A command outside the per-target build returned non-zero.

    Unlike a target build failure this aborts the whole run. The exit
    code of the failing command is kept so the CLI can propagate it.
    """

    def __init__(self, command: str, returncode: int, output: str = ""):
        self.command = command
        self.returncode = returncode
        self.output = output
        super().__init__(
            f"Command failed with return code {returncode}: {command}"
        )

    @property
    def exit_code(self) -> int:
        """Process exit status to report; never 0."""
        return self.returncode if self.returncode > 0 else 1
