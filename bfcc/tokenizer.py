from __future__ import annotations

from typing import Dict, Iterable, Optional

from .ir import CellAdjust, Input, LoopEnd, LoopStart, Node, Output, PointerMove, Program

INSTRUCTIONS: Dict[str, Node] = {
    ">": PointerMove(1),
    "<": PointerMove(-1),
    "+": CellAdjust(1),
    "-": CellAdjust(-1),
    ".": Output(),
    ",": Input(),
    "[": LoopStart(),
    "]": LoopEnd(),
}


def tokenize_char(char: str) -> Optional[Node]:
    # Anything outside the instruction alphabet is a comment.
    return INSTRUCTIONS.get(char)


def tokenize(source: Iterable[str]) -> Program:
    nodes = (tokenize_char(char) for char in source)
    return tuple(node for node in nodes if node is not None)


__all__ = ["INSTRUCTIONS", "tokenize", "tokenize_char"]
