"""YAML configuration loading with include support."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import yaml
from platformdirs import user_config_dir
from pydantic_settings import BaseSettings, YamlConfigSettingsSource

CONFIG_NAME = "sysroot-matrix.yaml"
DEFAULTS_FILE = Path(__file__).parent.parent / "defaults" / "default.yaml"


def cli_includes(argv: list[str] | None = None) -> list[str]:
    """Collect ``--include FILE`` values from the command line.

    Read ahead of pydantic's own CLI parsing so included files can
    contribute to the same load.
    """
    argv = sys.argv if argv is None else argv
    includes = []
    i = 1
    while i < len(argv):
        if argv[i] == "--include" and i + 1 < len(argv):
            includes.append(argv[i + 1])
            i += 1
        elif argv[i].startswith("--include="):
            includes.append(argv[i].split("=", 1)[1])
        i += 1
    return includes


def merge_dicts(base: dict, override: dict) -> dict:
    """Merge override into a copy of base; nested dicts merge too."""
    result = base.copy()
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = merge_dicts(result[key], value)
        else:
            result[key] = value
    return result


class YamlWithIncludesSettingsSource(YamlConfigSettingsSource):
    """YAML settings source layering several config files.

    Files are deep-merged, later ones winning:
        package defaults < user config < ./sysroot-matrix.yaml
        < files named by --include

    Any file may carry an ``include:`` key (string or list) naming
    further files relative to itself; the including file wins over
    what it includes.
    """

    def __init__(self, settings_cls: type[BaseSettings], yaml_file=None):
        includes = cli_includes()
        if yaml_file is None:
            yaml_file = settings_cls.model_config.get("yaml_file")
        self.project_file = Path(yaml_file) if yaml_file else None
        super().__init__(settings_cls, includes or None)

    def _read_files(self, files, deep_merge: bool = True):  # noqa: ARG002
        files_to_load = [
            DEFAULTS_FILE,
            Path(user_config_dir("sysroot-matrix", appauthor=False))
            / CONFIG_NAME,
        ]
        if self.project_file:
            files_to_load.append(self.project_file)
        if files:
            if isinstance(files, (str, os.PathLike)):
                files = [files]
            files_to_load.extend(Path(f).expanduser() for f in files)

        result = {}
        for file_path in files_to_load:
            if file_path.is_file():
                result = merge_dicts(
                    result, self._load_file_recursive(file_path, set())
                )
        return result

    def _load_file_recursive(self, filepath: Path, visited: set[Path]) -> dict:
        """Load one file with its include: directives resolved.

        Raises:
            ValueError: On a circular include
        """
        filepath = filepath.resolve()
        if filepath in visited:
            raise ValueError(f"Circular include: {filepath}")
        visited.add(filepath)

        with open(filepath, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        includes = data.pop("include", None) or []
        if isinstance(includes, str):
            includes = [includes]

        merged = {}
        for inc in includes:
            inc_path = Path(inc).expanduser()
            if not inc_path.is_absolute():
                inc_path = filepath.parent / inc_path
            merged = merge_dicts(
                merged, self._load_file_recursive(inc_path, visited.copy())
            )
        return merge_dicts(merged, data)
