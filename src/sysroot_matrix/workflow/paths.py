"""Path helpers shared by workflow nodes."""

from pathlib import Path

from sysroot_matrix.core.config import Config


def failures_dir(config: Config) -> Path:
    """Failures directory; relative paths are under the build workdir."""
    path = config.build.failures_dir
    if path.is_absolute():
        return path
    return config.build.workdir / path
