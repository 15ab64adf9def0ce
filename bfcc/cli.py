from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .bf_interpreter import IRInterpreter, StepLimitExceeded
from .config import CompilerConfig
from .ir import format_program
from .optimizer import DEFAULT_PASSES, UnknownPassError
from .translator import Translator, read_source, write_output


def _to_input_bytes(data: str) -> List[int]:
    return [ord(ch) for ch in data]


def _parse_passes(value: str) -> List[str]:
    return [name.strip() for name in value.split(",") if name.strip()]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Brainfuck to C compiler")
    parser.add_argument("source", help="Path to Brainfuck source file")
    parser.add_argument(
        "-o",
        "--emit",
        help="Destination file for emitted C (default: print to stdout)",
    )
    parser.add_argument(
        "-O0",
        "--no-optimize",
        dest="optimize",
        action="store_false",
        help="Emit the IR exactly as tokenized",
    )
    parser.add_argument(
        "--passes",
        type=_parse_passes,
        default=list(DEFAULT_PASSES),
        help="Comma-separated optimization passes to run, in order (default: %(default)s)",
    )
    parser.add_argument(
        "--memory-size",
        type=int,
        default=30000,
        help="Number of cells in the generated memory buffer (default: %(default)s)",
    )
    parser.add_argument(
        "--dump-ir",
        action="store_true",
        help="Print the optimized IR instead of C",
    )
    parser.add_argument(
        "--run",
        action="store_true",
        help="Execute the optimized IR after compilation",
    )
    parser.add_argument(
        "--input",
        help="Optional input string supplied to the program when running",
        default="",
    )
    parser.add_argument("--max-steps", type=int, default=None, help="Step budget for --run")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = CompilerConfig(memory_size=args.memory_size, passes=args.passes, optimize=args.optimize)
    except (UnknownPassError, ValueError) as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1

    try:
        source_text = read_source(args.source)
    except FileNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    compilation = Translator(config).compile(source_text)

    if args.dump_ir:
        sys.stdout.write(format_program(compilation.program) + "\n")
    elif args.emit:
        write_output(args.emit, compilation.code)
    elif not args.run:
        sys.stdout.write(compilation.code)

    if args.run:
        interpreter = IRInterpreter(tape_length=config.memory_size)
        try:
            output = interpreter.run(
                compilation.program,
                input_data=_to_input_bytes(args.input),
                max_steps=args.max_steps,
            )
        except (StepLimitExceeded, IndexError, ValueError) as exc:
            print(f"Runtime error: {exc}", file=sys.stderr)
            return 1
        sys.stdout.write(output)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
