"""Read emitted C back into IR nodes.

Only the statement shapes produced by :mod:`bfcc.emitter` are understood.
This lets generated code be checked against the source program by running
both through the IR interpreter.
"""

from __future__ import annotations

import re
from typing import Callable, List, Optional, Tuple

from .ir import Assign, CellAdjust, Input, LoopEnd, LoopStart, Node, Output, PointerMove, Program


class ParseError(Exception):
    pass


_INT = r"(-?\d+)"

_STATEMENTS: List[Tuple["re.Pattern[str]", Callable[["re.Match[str]"], Node]]] = [
    (re.compile(r"ptr\+\+;"), lambda m: PointerMove(1)),
    (re.compile(r"ptr--;"), lambda m: PointerMove(-1)),
    (re.compile(r"ptr \+= (\d+);"), lambda m: PointerMove(int(m.group(1)))),
    (re.compile(r"ptr -= (\d+);"), lambda m: PointerMove(-int(m.group(1)))),
    (re.compile(r"\(\*ptr\)\+\+;"), lambda m: CellAdjust(1)),
    (re.compile(r"\(\*ptr\)--;"), lambda m: CellAdjust(-1)),
    (re.compile(r"\(\*ptr\) \+= (\d+);"), lambda m: CellAdjust(int(m.group(1)))),
    (re.compile(r"\(\*ptr\) -= (\d+);"), lambda m: CellAdjust(-int(m.group(1)))),
    (re.compile(r"putchar\(\*ptr\);"), lambda m: Output()),
    (re.compile(r"\*ptr = getchar\(\);"), lambda m: Input()),
    (re.compile(r"while \(\*ptr\) \{"), lambda m: LoopStart()),
    (re.compile(r"\}"), lambda m: LoopEnd()),
    (re.compile(r"\*ptr = " + _INT + ";"), lambda m: Assign(int(m.group(1)))),
    (re.compile(r"ptr\[" + _INT + r"\] = " + _INT + ";"), lambda m: Assign(int(m.group(2)), int(m.group(1)))),
]

_BODY_START = re.compile(r".+ \*ptr = mem;")
_BODY_END = "return 0;"


def parse_statement(line: str) -> Node:
    text = line.strip()
    for pattern, build in _STATEMENTS:
        match = pattern.fullmatch(text)
        if match:
            return build(match)
    raise ParseError(f"Unknown statement syntax: '{text}'")


class CParser:
    def __init__(self) -> None:
        self.lines: List[str] = []
        self.pos = 0

    def parse(self, code: str) -> Program:
        self.lines = [line.strip() for line in code.splitlines()]
        self.pos = self._find_body_start()
        nodes: List[Node] = []
        while True:
            line = self._advance()
            if line is None:
                raise ParseError("Missing 'return 0;' before end of program")
            if line == _BODY_END:
                return tuple(nodes)
            if not line:
                continue
            nodes.append(parse_statement(line))

    def _find_body_start(self) -> int:
        for index, line in enumerate(self.lines):
            if _BODY_START.fullmatch(line):
                return index + 1
        raise ParseError("Missing pointer declaration in prologue")

    def _advance(self) -> Optional[str]:
        if self.pos >= len(self.lines):
            return None
        line = self.lines[self.pos]
        self.pos += 1
        return line


def parse_c(code: str) -> Program:
    return CParser().parse(code)


__all__ = ["CParser", "ParseError", "parse_c", "parse_statement"]
