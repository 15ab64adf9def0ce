from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .ir import (
    Assign,
    CellAdjust,
    LoopEnd,
    LoopStart,
    Node,
    PointerMove,
    Program,
    cell_adjust,
    pointer_move,
)

logger = logging.getLogger(__name__)

Pass = Callable[[Sequence[Node]], Program]


class UnknownPassError(ValueError):
    pass


def _compress_runs(
    nodes: Sequence[Node],
    kind: type,
    normalize: Callable[[int], Optional[Node]],
) -> Program:
    compressed: List[Node] = []
    pending: Optional[Node] = None
    # The trailing None flushes the last pending node.
    for current in [*nodes, None]:
        if isinstance(pending, kind) and isinstance(current, kind):
            pending = normalize(pending.count + current.count)
            continue
        if pending is not None:
            compressed.append(pending)
        pending = current
    return tuple(compressed)


def compress_pointer_moves(nodes: Sequence[Node]) -> Program:
    """Merge each run of ``PointerMove`` nodes into one net move.

    A run whose moves cancel out disappears entirely.
    """
    result = _compress_runs(nodes, PointerMove, pointer_move)
    logger.debug("compress_pointer_moves: %d -> %d nodes", len(nodes), len(result))
    return result


def compress_cell_adjusts(nodes: Sequence[Node]) -> Program:
    """Merge each run of ``CellAdjust`` nodes into one net adjustment."""
    result = _compress_runs(nodes, CellAdjust, cell_adjust)
    logger.debug("compress_cell_adjusts: %d -> %d nodes", len(nodes), len(result))
    return result


def _is_zero_loop(first: Optional[Node], middle: Optional[Node], last: Optional[Node]) -> bool:
    return (
        isinstance(first, LoopStart)
        and isinstance(middle, CellAdjust)
        and middle.count == -1
        and isinstance(last, LoopEnd)
    )


def rewrite_zero_idiom(nodes: Sequence[Node]) -> Program:
    """Replace ``[-]`` with a direct ``Assign(0)``.

    Only a single decrement per iteration qualifies; ``[--]`` may never reach
    zero on odd values and is left alone. Expects cell adjustments to be
    compressed already, so that ``[+--]`` has become ``[-]``.
    """
    rewritten: List[Node] = []
    older: Optional[Node] = None
    newer: Optional[Node] = None
    for current in [*nodes, None, None]:
        if _is_zero_loop(older, newer, current):
            rewritten.append(Assign(0))
            older = newer = None
            continue
        if older is not None:
            rewritten.append(older)
        older, newer = newer, current
    result = tuple(rewritten)
    logger.debug("rewrite_zero_idiom: %d -> %d nodes", len(nodes), len(result))
    return result


PASSES: Dict[str, Pass] = {
    "pointer-moves": compress_pointer_moves,
    "cell-adjusts": compress_cell_adjusts,
    "zero-idiom": rewrite_zero_idiom,
}

DEFAULT_PASSES: Tuple[str, ...] = ("pointer-moves", "cell-adjusts", "zero-idiom")


def resolve_passes(names: Iterable[str]) -> List[Pass]:
    resolved: List[Pass] = []
    for name in names:
        try:
            resolved.append(PASSES[name])
        except KeyError as exc:
            available = ", ".join(PASSES)
            raise UnknownPassError(f"Unknown optimization pass '{name}' (available: {available})") from exc
    return resolved


def optimize(nodes: Sequence[Node], passes: Iterable[str] = DEFAULT_PASSES) -> Program:
    """Run the named passes in order and return the final sequence."""
    program: Program = tuple(nodes)
    for optimization in resolve_passes(passes):
        program = optimization(program)
    return program


__all__ = [
    "DEFAULT_PASSES",
    "PASSES",
    "UnknownPassError",
    "compress_cell_adjusts",
    "compress_pointer_moves",
    "optimize",
    "resolve_passes",
    "rewrite_zero_idiom",
]
