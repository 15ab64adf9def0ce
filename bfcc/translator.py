from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from .config import DEFAULT_CONFIG, CompilerConfig
from .emitter import CEmitter
from .ir import Node, Program
from .optimizer import optimize
from .tokenizer import tokenize

logger = logging.getLogger(__name__)


def read_source(path: str) -> str:
    source_path = Path(path)
    if not source_path.exists():
        raise FileNotFoundError(f"Source file not found: {path}")
    return source_path.read_text(encoding="utf-8")


def write_output(path: str, data: str) -> None:
    output_path = Path(path)
    output_path.write_text(data, encoding="utf-8")


@dataclass(frozen=True)
class Compilation:
    source: str
    passes: Sequence[str]
    program: Program
    code: str


class Translator:
    """Drives tokenize -> optimize -> emit for one configuration."""

    def __init__(self, config: Optional[CompilerConfig] = None) -> None:
        self.config = config or DEFAULT_CONFIG
        self.emitter = CEmitter(self.config)

    def translate(self, source: str) -> Program:
        program = tokenize(source)
        logger.debug("tokenized %d characters into %d nodes", len(source), len(program))
        return program

    def optimize(self, program: Sequence[Node]) -> Program:
        passes = self.config.active_passes
        optimized = optimize(program, passes)
        logger.debug("optimized with %s: %d -> %d nodes", list(passes), len(program), len(optimized))
        return optimized

    def to_c(self, program: Sequence[Node]) -> str:
        return self.emitter.emit(program)

    def compile(self, source: str) -> Compilation:
        program = self.optimize(self.translate(source))
        return Compilation(
            source=source,
            passes=self.config.active_passes,
            program=program,
            code=self.to_c(program),
        )


def compile_source(source: str, config: Optional[CompilerConfig] = None) -> str:
    return Translator(config).compile(source).code


__all__ = [
    "Compilation",
    "Translator",
    "compile_source",
    "read_source",
    "write_output",
]
