from .bf_interpreter import ExecutionState, IRInterpreter, StepLimitExceeded
from .c_parser import ParseError, parse_c
from .config import CompilerConfig
from .emitter import CEmitter, UnknownNodeError, emit_c
from .ir import Assign, CellAdjust, Input, LoopEnd, LoopStart, Output, PointerMove
from .optimizer import (
    DEFAULT_PASSES,
    PASSES,
    UnknownPassError,
    compress_cell_adjusts,
    compress_pointer_moves,
    optimize,
    rewrite_zero_idiom,
)
from .tokenizer import tokenize, tokenize_char
from .translator import Compilation, Translator, compile_source

__all__ = [
    "Assign",
    "CEmitter",
    "CellAdjust",
    "Compilation",
    "CompilerConfig",
    "DEFAULT_PASSES",
    "ExecutionState",
    "IRInterpreter",
    "Input",
    "LoopEnd",
    "LoopStart",
    "Output",
    "PASSES",
    "ParseError",
    "PointerMove",
    "StepLimitExceeded",
    "Translator",
    "UnknownNodeError",
    "UnknownPassError",
    "compile_source",
    "compress_cell_adjusts",
    "compress_pointer_moves",
    "emit_c",
    "optimize",
    "parse_c",
    "rewrite_zero_idiom",
    "tokenize",
    "tokenize_char",
]
