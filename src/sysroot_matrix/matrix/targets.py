"""Target discovery."""

from __future__ import annotations

import re
from pathlib import Path

from sysroot_matrix.core.config import TargetsConfig
from sysroot_matrix.core.errors import StepFailed
from sysroot_matrix.core.log import logger
from sysroot_matrix.core.runner import Runner

PLACEHOLDER = re.compile(r"\{(\w+)\}")


def fill_placeholders(template: str, **values) -> str:
    """Replace ``{name}`` for each given name; other braces stay.

    Shell commands carry their own braces (``${HOME}``,
    ``awk '{print $1}'``), so str.format cannot be used here.
    """
    def replace(match: re.Match) -> str:
        name = match.group(1)
        return str(values[name]) if name in values else match.group(0)

    return PLACEHOLDER.sub(replace, template)


def parse_targets(text: str) -> list[str]:
    """Split scraper output into target names.

    Whitespace of any kind separates targets; blank lines vanish.
    """
    return text.split()


def find_support_document(
    config: TargetsConfig, runner: Runner, cwd: Path | None = None
) -> Path:
    """Locate the platform support document of the active toolchain.

    Raises:
        StepFailed: If the sysroot query fails
    """
    result = runner.execute(config.sysroot_command, cwd=cwd)
    sysroot = result.stdout.strip()
    logger.debug("Toolchain sysroot: {sysroot}", sysroot=sysroot)
    return Path(fill_placeholders(config.support_document, sysroot=sysroot))


def read_target_file(path: Path) -> list[str]:
    """Read a whitespace-separated target list.

    Raises:
        StepFailed: If the file cannot be read
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise StepFailed(f"read target file {path}", 1, f"{e}\n") from e
    return parse_targets(text)


def discover_targets(
    config: TargetsConfig, runner: Runner, cwd: Path | None = None
) -> list[str]:
    """Return the ordered list of targets to build.

    A static list wins, then a target file; otherwise the support
    document is scraped.

    Raises:
        StepFailed: If the target file is unreadable, or the sysroot
            query or the scraper fails
    """
    if config.static:
        return list(config.static)

    if config.file is not None:
        path = config.file if cwd is None else Path(cwd) / config.file
        return read_target_file(path)

    document = find_support_document(config, runner, cwd)
    result = runner.execute(
        fill_placeholders(config.scrape_command, support_document=document),
        cwd=cwd,
    )
    return parse_targets(result.stdout)
