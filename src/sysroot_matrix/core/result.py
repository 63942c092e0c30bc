"""Result types for sysroot builds."""

from pydantic import BaseModel, Field, computed_field


class TargetResult(BaseModel):
    """Outcome of one target's sysroot build."""

    target: str
    success: bool
    returncode: int
    output: str = ""
    duration: float = 0.0


class MatrixReport(BaseModel):
    """Aggregate outcome of a matrix run."""

    results: list[TargetResult] = Field(default_factory=list)

    @computed_field
    @property
    def failed(self) -> list[str]:
        # Matches the order of a directory listing
        return sorted({r.target for r in self.results if not r.success})

    @property
    def exit_code(self) -> int:
        return 1 if self.failed else 0
