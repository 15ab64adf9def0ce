from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Tuple

from .optimizer import DEFAULT_PASSES, resolve_passes


@dataclass(frozen=True)
class CompilerConfig:
    memory_size: int = 30000
    indent: str = "    "
    cell_type: str = "char"
    passes: Tuple[str, ...] = DEFAULT_PASSES
    optimize: bool = True

    def __post_init__(self) -> None:
        if self.memory_size < 1:
            raise ValueError("memory_size must be at least 1")
        # A bare string names one pass; lists come from the CLI or JSON payloads.
        passes = (self.passes,) if isinstance(self.passes, str) else tuple(self.passes)
        resolve_passes(passes)
        object.__setattr__(self, "passes", passes)

    def with_overrides(self, **changes: Any) -> "CompilerConfig":
        return replace(self, **changes)

    @property
    def active_passes(self) -> Tuple[str, ...]:
        return self.passes if self.optimize else ()


DEFAULT_CONFIG = CompilerConfig()

__all__ = ["CompilerConfig", "DEFAULT_CONFIG"]
