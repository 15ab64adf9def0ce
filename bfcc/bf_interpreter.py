from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

from .ir import Assign, CellAdjust, Input, LoopEnd, LoopStart, Node, Output, PointerMove, format_node
from .tokenizer import tokenize


class StepLimitExceeded(RuntimeError):
    """Raised when execution exceeds the configured step budget."""


@dataclass
class ExecutionState:
    step: int
    pc: int
    node: Optional[str]
    pointer: int
    tape_start: int
    tape: List[int]
    output: str
    program_length: int


@dataclass
class IRInterpreter:
    """Executes IR node sequences on a tape of wrapping cells."""

    tape_length: int = 30000
    cell_max: int = 255
    cell_min: int = 0

    tape: List[int] = field(init=False, repr=False)
    pointer: int = field(init=False, repr=False)
    output_buffer: List[str] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self.tape = [0] * self.tape_length
        self.pointer = 0
        self.output_buffer = []

    def run(
        self,
        nodes: Sequence[Node],
        input_data: Optional[Iterable[int]] = None,
        max_steps: Optional[int] = None,
    ) -> str:
        for _ in self.step(nodes, input_data=input_data, max_steps=max_steps):
            pass
        return "".join(self.output_buffer)

    def run_source(
        self,
        source: str,
        input_data: Optional[Iterable[int]] = None,
        max_steps: Optional[int] = None,
    ) -> str:
        return self.run(tokenize(source), input_data=input_data, max_steps=max_steps)

    def final_state(
        self,
        nodes: Sequence[Node],
        input_data: Optional[Iterable[int]] = None,
        max_steps: Optional[int] = None,
        tape_window: int = 10,
    ) -> ExecutionState:
        # step() always ends with a completion snapshot.
        states = deque(
            self.step(nodes, input_data=input_data, max_steps=max_steps, tape_window=tape_window),
            maxlen=1,
        )
        return states[0]

    def step(
        self,
        nodes: Sequence[Node],
        input_data: Optional[Iterable[int]] = None,
        max_steps: Optional[int] = None,
        tape_window: int = 10,
    ) -> Iterator[ExecutionState]:
        self.reset()
        program = list(nodes)
        input_iter = iter(list(input_data or []))
        jump_map = self._build_jump_map(program)
        pc = 0
        steps = 0
        program_length = len(program)

        while pc < program_length:
            if max_steps is not None and steps >= max_steps:
                raise StepLimitExceeded("Program exceeded allowed step count")

            node = program[pc]
            pc = self._execute_node(node, pc, jump_map, input_iter)
            steps += 1
            yield self._snapshot(pc, node, steps, program_length, tape_window)

        yield self._snapshot(pc, None, steps, program_length, tape_window)

    def _wrap(self, value: int) -> int:
        span = self.cell_max - self.cell_min + 1
        return ((value - self.cell_min) % span) + self.cell_min

    def _check_cell(self, index: int) -> int:
        if index >= self.tape_length:
            raise IndexError("Pointer moved beyond the tape length.")
        if index < 0:
            raise IndexError("Pointer moved before start of tape.")
        return index

    def _execute_node(
        self,
        node: Node,
        pc: int,
        jump_map: Dict[int, int],
        input_iter: Iterator[int],
    ) -> int:
        new_pc = pc + 1
        if isinstance(node, PointerMove):
            self.pointer = self._check_cell(self.pointer + node.count)
        elif isinstance(node, CellAdjust):
            self.tape[self.pointer] = self._wrap(self.tape[self.pointer] + node.count)
        elif isinstance(node, Output):
            self.output_buffer.append(chr(self.tape[self.pointer]))
        elif isinstance(node, Input):
            try:
                self.tape[self.pointer] = self._wrap(next(input_iter))
            except StopIteration:
                self.tape[self.pointer] = 0
        elif isinstance(node, LoopStart):
            if self.tape[self.pointer] == 0:
                new_pc = jump_map[pc] + 1
        elif isinstance(node, LoopEnd):
            if self.tape[self.pointer] != 0:
                new_pc = jump_map[pc] + 1
        elif isinstance(node, Assign):
            target = self.pointer if node.offset is None else self._check_cell(self.pointer + node.offset)
            self.tape[target] = self._wrap(node.value)
        else:
            raise TypeError(f"Cannot execute unknown node: {node!r}")
        return new_pc

    def _snapshot(
        self,
        pc: int,
        node: Optional[Node],
        step: int,
        program_length: int,
        tape_window: int,
    ) -> ExecutionState:
        start = max(0, self.pointer - tape_window)
        end = min(self.tape_length, self.pointer + tape_window + 1)
        return ExecutionState(
            step=step,
            pc=pc,
            node=format_node(node) if node is not None else None,
            pointer=self.pointer,
            tape_start=start,
            tape=self.tape[start:end].copy(),
            output="".join(self.output_buffer),
            program_length=program_length,
        )

    def _build_jump_map(self, program: List[Node]) -> Dict[int, int]:
        jump_map: Dict[int, int] = {}
        stack: List[int] = []
        for index, node in enumerate(program):
            if isinstance(node, LoopStart):
                stack.append(index)
            elif isinstance(node, LoopEnd):
                if not stack:
                    raise ValueError("Unmatched LoopEnd at position {}".format(index))
                start = stack.pop()
                jump_map[start] = index
                jump_map[index] = start
        if stack:
            raise ValueError("Unmatched LoopStart at position {}".format(stack.pop()))
        return jump_map


__all__ = [
    "ExecutionState",
    "IRInterpreter",
    "StepLimitExceeded",
]
