"""Base classes for configuration and runtime state models.

Kept apart from config.py so that log.py can build on them without
a circular import:
- Closeable protocol for anything holding an open resource
- BaseCloseable, which closes its Closeable fields on exit
- BaseConfig / BaseState markers
"""

from __future__ import annotations

import sys
from typing import Protocol, runtime_checkable

from pydantic import BaseModel


@runtime_checkable
class Closeable(Protocol):
    """Protocol for objects that support close()."""

    def close(self) -> None:
        ...


class BaseCloseable(BaseModel):
    """Model that closes its Closeable children.

    close() walks the model fields and calls close() on each child
    implementing the Closeable protocol. A failing child is reported
    on stderr and the remaining children are still closed.
    """

    def close(self):
        for field_name in self.__class__.model_fields:
            child = getattr(self, field_name, None)
            if child is None:
                continue

            if isinstance(child, Closeable):
                try:
                    child.close()
                except Exception as e:
                    print(
                        f"Warning: Error closing {field_name}: {e}",
                        file=sys.stderr,
                    )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):  # noqa: U100
        self.close()
        return False


class BaseConfig(BaseCloseable):
    """Marker for configuration sections (YAML/env/CLI)."""


class BaseState(BaseCloseable):
    """Marker for runtime state mutated while the matrix runs."""


__all__ = ["Closeable", "BaseCloseable", "BaseConfig", "BaseState"]
