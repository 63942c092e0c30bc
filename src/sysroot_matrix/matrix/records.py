"""Failure records: one file per failed target."""

import shutil
from pathlib import Path

from sysroot_matrix.core.result import TargetResult


class FailureRecords:
    """The directory holding failed targets' build output.

    A file named after a target exists there if and only if that
    target's build failed in the latest run.
    """

    def __init__(self, directory: Path):
        self.directory = directory

    def reset(self) -> bool:
        """Delete the directory and recreate it empty.

        Returns:
            True if a previous directory was removed
        """
        existed = self.directory.exists()
        self.remove()
        self.directory.mkdir(parents=True)
        return existed

    def remove(self) -> bool:
        """Delete the directory if present."""
        if self.directory.is_dir() and not self.directory.is_symlink():
            shutil.rmtree(self.directory)
            return True
        if self.directory.exists() or self.directory.is_symlink():
            self.directory.unlink()
            return True
        return False

    def write(self, results: list[TargetResult]) -> list[Path]:
        """Write a record for every failed result."""
        paths = []
        for result in results:
            if result.success:
                continue
            path = self.directory / result.target
            path.write_text(result.output, encoding="utf-8")
            paths.append(path)
        return paths

    def failed_targets(self) -> list[str]:
        """Names of recorded targets, in listing order."""
        if not self.directory.is_dir():
            return []
        return sorted(p.name for p in self.directory.iterdir())
