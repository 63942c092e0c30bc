"""Application state and configuration."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import platformdirs
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from sysroot_matrix.core.base import BaseConfig, BaseState
from sysroot_matrix.core.log import Logger
from sysroot_matrix.core.result import TargetResult
from sysroot_matrix.core.yaml_settings import (
    CONFIG_NAME,
    YamlWithIncludesSettingsSource,
)

# Modules reachable from templates, e.g. {platformdirs.user_log_dir}
TEMPLATE_NAMESPACE = {
    'os': os,
    'platformdirs': platformdirs,
}

# ============================================================
# CONFIG MODELS (loaded from YAML/env/CLI)
# ============================================================

class TargetsConfig(BaseConfig):
    """Where the list of build targets comes from."""

    sysroot_command: str = Field(
        default="rustc +miri --print sysroot",
        description="Prints the toolchain installation root",
    )
    support_document: str = Field(
        default=(
            "{sysroot}/share/doc/rust/html/rustc/platform-support.html"
        ),
        description=(
            "Platform support document; {sysroot} is the output of "
            "sysroot_command"
        ),
    )
    scrape_command: str = Field(
        default="python3 ci/scrape-targets.py {support_document}",
        description=(
            "Prints one target per line; {support_document} is the "
            "resolved document path"
        ),
    )
    static: list[str] = Field(
        default_factory=list,
        description="Fixed target list; skips the scraper when non-empty",
    )
    file: Path | None = Field(
        default=None,
        description="File with one target per line; skips the scraper",
    )


class BuildConfig(BaseConfig):
    """Per-target build actions."""

    workdir: Path = Field(
        default=Path("."),
        description="Working directory for every command",
    )
    clean_command: str = Field(
        default="cargo +miri miri clean",
        description="Wipes the build cache before each target",
    )
    clean_before_each: bool = Field(
        default=True,
        description="Run clean_command before every target build",
    )
    setup_command: str = Field(
        default="cargo +miri miri setup --target {target}",
        description="Builds the sysroot for {target}",
    )
    timeout: int | None = Field(
        default=None,
        description=(
            "Seconds allowed per setup_command; a timeout counts as a "
            "failed target"
        ),
    )
    failures_dir: Path = Field(
        default=Path("failures"),
        description=(
            "Directory holding one output file per failed target; "
            "wiped at the start of every run"
        ),
    )


class Config(BaseConfig):
    """Application configuration loaded from YAML/env/CLI."""

    logger: Logger | None = Field(
        default=None,
        description="Logger configuration and runtime instance",
    )
    targets: TargetsConfig = Field(
        default_factory=TargetsConfig,
        description="Target discovery settings",
    )
    build: BuildConfig = Field(
        default_factory=BuildConfig,
        description="Sysroot build settings",
    )
    log_level: str = Field(
        default="info",
        alias="log-level",
        description=(
            "Console log level: 'spew', 'trace', 'debug', 'info', "
            "'warn', 'error', 'fatal'"
        ),
    )
    log_root: Path = Field(
        default_factory=(
            lambda: Path(platformdirs.user_state_dir("sysroot-matrix"))
        ),
        description="Root directory for log files",
    )

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode='after')
    def _setup_logger(self) -> 'Config':
        """Install the global logger from this configuration."""
        from sysroot_matrix.core.log import setup_logger

        if self.logger is None:
            self.logger = Logger(level=self.log_level)

        setup_logger(
            log_root=self.log_root,
            run_name="matrix",
            console=self.logger.console,
            file=self.logger.file,
            level=self.logger.level,
        )
        return self

    def close(self):
        """Close the global logger along with the sections."""
        from sysroot_matrix.core.log import logger
        logger.close()
        super().close()


# ============================================================
# RUNTIME STATE MODELS (mutable during workflow execution)
# ============================================================

class MatrixState(BaseState):
    """Matrix run state."""

    targets: list[str] = Field(
        default_factory=list,
        description="Targets to build, in order",
    )
    results: dict[str, TargetResult] = Field(
        default_factory=dict,
        description="Outcome per attempted target, in attempt order",
    )
    status: str = Field(
        default="pending",
        description="pending, running, passed or failed",
    )


class ResetState(BaseState):
    """Reset command state."""

    removed: bool = Field(
        default=False,
        description="Whether a failures directory was deleted",
    )


class Runtime(BaseModel):
    """All runtime state, one section per workflow."""

    matrix: MatrixState = Field(default_factory=MatrixState)
    reset: ResetState = Field(default_factory=ResetState)


# ============================================================
# STATE (config + runtime combined)
# ============================================================

class State(BaseSettings):
    """Configuration plus runtime state; flows through every workflow.

    Loaded from, highest priority first: constructor arguments and
    CLI, YAML files (see YamlWithIncludesSettingsSource), .env, then
    SYSROOT_MATRIX_* environment variables.
    """

    config: Config = Field(
        default_factory=Config,
        description="Application configuration (from YAML/env/CLI)",
    )
    runtime: Runtime = Field(
        default_factory=Runtime,
        description="Runtime state (mutates during workflow execution)",
    )
    include: list[str] | None = Field(
        default=None,
        description=(
            "Additional YAML files to load and deep-merge over the "
            "others (--include FILE, repeatable)"
        ),
    )

    model_config = SettingsConfigDict(
        yaml_file=CONFIG_NAME,
        env_file=".env",
        env_prefix="SYSROOT_MATRIX_",
        env_nested_delimiter="__",
        cli_parse_args=True,
        cli_implicit_flags=True,
        cli_use_class_docs_for_groups=True,
        arbitrary_types_allowed=True,
        extra='ignore',
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            YamlWithIncludesSettingsSource(settings_cls),
            dotenv_settings,
            env_settings,
            file_secret_settings,
        )

    @model_validator(mode="after")
    def substitute_templates(self) -> "State":
        """Expand {config.*} and {platformdirs.*} style templates.

        Placeholders that do not name an attribute, such as {target},
        are left for the command that fills them in later.
        """
        self._substitute_recursive(self)
        return self

    def _substitute_recursive(self, obj: Any) -> None:
        if isinstance(obj, BaseModel):
            for field_name in obj.__class__.model_fields:
                value = getattr(obj, field_name)
                new_value = self._substitute_value(value)
                if new_value is not value:
                    setattr(obj, field_name, new_value)
        elif isinstance(obj, dict):
            for key in obj:
                obj[key] = self._substitute_value(obj[key])
        elif isinstance(obj, list):
            for i in range(len(obj)):
                obj[i] = self._substitute_value(obj[i])

    def _substitute_value(self, value: Any) -> Any:
        if isinstance(value, str):
            return self._substitute_string(value)
        elif isinstance(value, Path):
            return Path(self._substitute_string(str(value)))
        elif isinstance(value, (BaseModel, dict, list)):
            self._substitute_recursive(value)
            return value
        return value

    def _substitute_string(self, value: str) -> str:
        """Replace {dotted.path} templates with their values.

        Examples:
            "{config.build.workdir}/failures" -> "./failures"
            "{platformdirs.user_log_dir}"
            -> "~/.local/state/sysroot-matrix/log"
        """
        def replace_template(match):
            parts = match.group(1).split(".")

            if parts[0] in TEMPLATE_NAMESPACE:
                module = parts[0]
                obj = TEMPLATE_NAMESPACE[module]
                parts = parts[1:]
            else:
                module = None
                obj = self

            try:
                for part in parts:
                    obj = getattr(obj, part)
                if callable(obj):
                    if module == 'platformdirs':
                        obj = obj('sysroot-matrix', appauthor=False)
                    else:
                        obj = obj()
                return str(obj)
            except (AttributeError, TypeError):
                return match.group(0)

        return re.sub(r'\{([a-z._]+)\}', replace_template, value)


__all__ = ["State", "Config", "BaseConfig", "BaseState"]
