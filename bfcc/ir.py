from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union


# === IR Nodes ===


@dataclass(frozen=True)
class PointerMove:
    """Move the data pointer by ``count`` cells (positive is rightward)."""

    count: int

    def __post_init__(self) -> None:
        if self.count == 0:
            raise ValueError("PointerMove count must be non-zero")


@dataclass(frozen=True)
class CellAdjust:
    """Add ``count`` to the current cell (negative subtracts)."""

    count: int

    def __post_init__(self) -> None:
        if self.count == 0:
            raise ValueError("CellAdjust count must be non-zero")


@dataclass(frozen=True)
class Output:
    pass


@dataclass(frozen=True)
class Input:
    pass


@dataclass(frozen=True)
class LoopStart:
    pass


@dataclass(frozen=True)
class LoopEnd:
    pass


@dataclass(frozen=True)
class Assign:
    """Store a constant. ``offset`` of ``None`` targets the current cell."""

    value: int = 0
    offset: Optional[int] = None


Node = Union[PointerMove, CellAdjust, Output, Input, LoopStart, LoopEnd, Assign]
NODE_TYPES = (PointerMove, CellAdjust, Output, Input, LoopStart, LoopEnd, Assign)

Program = Tuple[Node, ...]


def pointer_move(count: int) -> Optional[PointerMove]:
    if count == 0:
        return None
    return PointerMove(count)


def cell_adjust(count: int) -> Optional[CellAdjust]:
    if count == 0:
        return None
    return CellAdjust(count)


def is_node(value: object) -> bool:
    return isinstance(value, NODE_TYPES)


def format_node(node: Node) -> str:
    if isinstance(node, (PointerMove, CellAdjust)):
        return f"{type(node).__name__}({node.count:+d})"
    if isinstance(node, Assign):
        target = "current" if node.offset is None else f"{node.offset:+d}"
        return f"Assign({node.value}, {target})"
    return type(node).__name__


def format_program(nodes: Program) -> str:
    """Render one node per line, indented by loop depth."""
    lines = []
    depth = 0
    for node in nodes:
        if isinstance(node, LoopEnd):
            depth -= 1
        lines.append("  " * max(depth, 0) + format_node(node))
        if isinstance(node, LoopStart):
            depth += 1
    return "\n".join(lines)


def node_to_dict(node: Node) -> dict:
    data: dict = {"kind": type(node).__name__}
    if isinstance(node, (PointerMove, CellAdjust)):
        data["count"] = node.count
    elif isinstance(node, Assign):
        data["value"] = node.value
        data["offset"] = node.offset
    return data


__all__ = [
    "Assign",
    "CellAdjust",
    "Input",
    "LoopEnd",
    "LoopStart",
    "NODE_TYPES",
    "Node",
    "Output",
    "PointerMove",
    "Program",
    "cell_adjust",
    "format_node",
    "format_program",
    "is_node",
    "node_to_dict",
    "pointer_move",
]
