from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from .config import DEFAULT_CONFIG, CompilerConfig
from .ir import Assign, CellAdjust, Input, LoopEnd, LoopStart, Node, Output, PointerMove

logger = logging.getLogger(__name__)


class UnknownNodeError(TypeError):
    """Raised when something other than an IR node reaches the emitter."""


@dataclass
class EmitState:
    lines: List[str]
    depth: int


class CEmitter:
    def __init__(self, config: Optional[CompilerConfig] = None) -> None:
        self.config = config or DEFAULT_CONFIG

    def emit(self, nodes: Iterable[Node]) -> str:
        # Depth 1 is the body of main().
        state = EmitState(lines=self.prologue(), depth=1)
        for node in nodes:
            self._emit_node(node, state)
        if state.depth != 1:
            logger.debug("emitter finished at depth %d; loop delimiters are unbalanced", state.depth)
        state.lines.extend(self.epilogue())
        return "\n".join(state.lines) + "\n"

    def prologue(self) -> List[str]:
        indent = self.config.indent
        cell_type = self.config.cell_type
        return [
            "#include <stdio.h>",
            "",
            "int main(void)",
            "{",
            f"{indent}{cell_type} mem[{self.config.memory_size}] = {{0}};",
            f"{indent}{cell_type} *ptr = mem;",
        ]

    def epilogue(self) -> List[str]:
        return [f"{self.config.indent}return 0;", "}"]

    # --- Helpers ---

    def _emit_node(self, node: Node, state: EmitState) -> None:
        if isinstance(node, LoopEnd):
            state.depth -= 1
        state.lines.append(self.config.indent * max(state.depth, 0) + self.statement(node))
        if isinstance(node, LoopStart):
            state.depth += 1

    def statement(self, node: Node) -> str:
        if isinstance(node, PointerMove):
            return _signed_statement("ptr", node.count)
        if isinstance(node, CellAdjust):
            return _signed_statement("(*ptr)", node.count)
        if isinstance(node, Output):
            return "putchar(*ptr);"
        if isinstance(node, Input):
            return "*ptr = getchar();"
        if isinstance(node, LoopStart):
            return "while (*ptr) {"
        if isinstance(node, LoopEnd):
            return "}"
        if isinstance(node, Assign):
            if node.offset is None:
                return f"*ptr = {node.value};"
            return f"ptr[{node.offset}] = {node.value};"
        raise UnknownNodeError(f"Cannot emit C for unknown node: {node!r}")


def _signed_statement(target: str, count: int) -> str:
    if count == 1:
        return f"{target}++;"
    if count == -1:
        return f"{target}--;"
    if count > 0:
        return f"{target} += {count};"
    return f"{target} -= {-count};"


def emit_c(nodes: Iterable[Node], config: Optional[CompilerConfig] = None) -> str:
    return CEmitter(config).emit(nodes)


__all__ = ["CEmitter", "EmitState", "UnknownNodeError", "emit_c"]
