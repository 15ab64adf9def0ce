import unittest

from bfcc import (
    Assign,
    CEmitter,
    CellAdjust,
    CompilerConfig,
    Input,
    LoopEnd,
    LoopStart,
    Output,
    PointerMove,
    Translator,
    UnknownNodeError,
    UnknownPassError,
    compile_source,
    compress_cell_adjusts,
    compress_pointer_moves,
    emit_c,
    optimize,
    rewrite_zero_idiom,
    tokenize,
    tokenize_char,
)
from bfcc.ir import cell_adjust, format_program, node_to_dict, pointer_move
from bfcc.optimizer import PASSES


SAMPLE_PROGRAMS = [
    "",
    "+++--",
    ">>><<<",
    "[-]>[-]<",
    "++++[>++++<-]>.",
    "+[[-]>+<-]",
    ">+<[--]+++-[-]",
    "++++++++[>++++[>++>+++>+++>+<<<<-]>+>+>->>+[<]<-]>>.>---.+++++++..+++.>>.<-.<.+++.------.--------.>>+.>++.",
]


class IRNodeTests(unittest.TestCase):
    def test_zero_count_rejected(self) -> None:
        with self.assertRaises(ValueError):
            PointerMove(0)
        with self.assertRaises(ValueError):
            CellAdjust(0)

    def test_normalization_drops_zero(self) -> None:
        self.assertIsNone(pointer_move(0))
        self.assertIsNone(cell_adjust(0))
        self.assertEqual(pointer_move(-3), PointerMove(-3))
        self.assertEqual(cell_adjust(7), CellAdjust(7))

    def test_nodes_are_immutable(self) -> None:
        node = PointerMove(2)
        with self.assertRaises(AttributeError):
            node.count = 3  # type: ignore[misc]

    def test_assign_defaults_to_current_cell(self) -> None:
        self.assertEqual(Assign(), Assign(0, None))
        self.assertEqual(node_to_dict(Assign(5, -2)), {"kind": "Assign", "value": 5, "offset": -2})

    def test_format_program_indents_loops(self) -> None:
        text = format_program((CellAdjust(2), LoopStart(), PointerMove(-1), LoopEnd(), Assign(0)))
        self.assertEqual(
            text.splitlines(),
            ["CellAdjust(+2)", "LoopStart", "  PointerMove(-1)", "LoopEnd", "Assign(0, current)"],
        )


class TokenizerTests(unittest.TestCase):
    def test_each_instruction_maps_to_one_node(self) -> None:
        self.assertEqual(tokenize_char(">"), PointerMove(1))
        self.assertEqual(tokenize_char("<"), PointerMove(-1))
        self.assertEqual(tokenize_char("+"), CellAdjust(1))
        self.assertEqual(tokenize_char("-"), CellAdjust(-1))
        self.assertEqual(tokenize_char("."), Output())
        self.assertEqual(tokenize_char(","), Input())
        self.assertEqual(tokenize_char("["), LoopStart())
        self.assertEqual(tokenize_char("]"), LoopEnd())

    def test_comments_are_dropped(self) -> None:
        self.assertIsNone(tokenize_char("a"))
        self.assertIsNone(tokenize_char("\n"))
        program = tokenize("add one: + \n then print .")
        self.assertEqual(program, (CellAdjust(1), Output()))

    def test_tokenize_returns_tuple(self) -> None:
        self.assertEqual(tokenize(""), ())
        self.assertIsInstance(tokenize("+"), tuple)


class OptimizerTests(unittest.TestCase):
    def test_pointer_moves_net_right(self) -> None:
        self.assertEqual(compress_pointer_moves(tokenize(">>><<")), (PointerMove(1),))

    def test_pointer_moves_cancel_out(self) -> None:
        self.assertEqual(compress_pointer_moves(tokenize(">>><<<")), ())

    def test_pointer_moves_leave_other_nodes(self) -> None:
        program = compress_pointer_moves(tokenize(">>+<<<."))
        self.assertEqual(program, (PointerMove(2), CellAdjust(1), PointerMove(-3), Output()))

    def test_run_continues_after_cancellation(self) -> None:
        self.assertEqual(compress_pointer_moves(tokenize("><>>")), (PointerMove(2),))

    def test_cell_adjusts_merge(self) -> None:
        self.assertEqual(compress_cell_adjusts(tokenize("+++--")), (CellAdjust(1),))
        self.assertEqual(compress_cell_adjusts(tokenize("--+---")), (CellAdjust(-4),))

    def test_cell_pass_ignores_pointer_moves(self) -> None:
        program = tokenize(">>")
        self.assertEqual(compress_cell_adjusts(program), program)

    def test_zero_idiom(self) -> None:
        self.assertEqual(rewrite_zero_idiom(tokenize("[-]")), (Assign(0),))

    def test_zero_idiom_rejects_double_decrement(self) -> None:
        program = optimize(tokenize("[--]"))
        self.assertEqual(program, (LoopStart(), CellAdjust(-2), LoopEnd()))

    def test_zero_idiom_rejects_increment_loop(self) -> None:
        program = tokenize("[+]")
        self.assertEqual(rewrite_zero_idiom(program), program)

    def test_zero_idiom_inside_outer_loop(self) -> None:
        program = rewrite_zero_idiom(tokenize("[[-]>]"))
        self.assertEqual(program, (LoopStart(), Assign(0), PointerMove(1), LoopEnd()))

    def test_zero_idiom_needs_compressed_input(self) -> None:
        program = tokenize("[+--]")
        self.assertEqual(rewrite_zero_idiom(program), program)
        self.assertEqual(optimize(program), (Assign(0),))

    def test_consecutive_zero_idioms(self) -> None:
        self.assertEqual(rewrite_zero_idiom(tokenize("[-][-]")), (Assign(0), Assign(0)))

    def test_passes_are_idempotent(self) -> None:
        for source in SAMPLE_PROGRAMS:
            for name, optimization in PASSES.items():
                with self.subTest(source=source, optimization=name):
                    once = optimization(tokenize(source))
                    self.assertEqual(optimization(once), once)

    def test_pipeline_order(self) -> None:
        program = optimize(tokenize("++++[>++++<-]>."))
        self.assertEqual(
            program,
            (
                CellAdjust(4),
                LoopStart(),
                PointerMove(1),
                CellAdjust(4),
                PointerMove(-1),
                CellAdjust(-1),
                LoopEnd(),
                PointerMove(1),
                Output(),
            ),
        )

    def test_pipeline_is_deterministic(self) -> None:
        for source in SAMPLE_PROGRAMS:
            with self.subTest(source=source):
                first = optimize(tokenize(source))
                second = optimize(tokenize(source))
                self.assertEqual(first, second)
                self.assertEqual(emit_c(first), emit_c(second))

    def test_subset_of_passes(self) -> None:
        program = optimize(tokenize(">>[-]"), passes=["pointer-moves"])
        self.assertEqual(program, (PointerMove(2), LoopStart(), CellAdjust(-1), LoopEnd()))
        self.assertEqual(optimize(tokenize(">>"), passes=[]), tokenize(">>"))

    def test_unknown_pass(self) -> None:
        with self.assertRaises(UnknownPassError):
            optimize(tokenize("+"), passes=["loop-unrolling"])

    def test_passes_do_not_mutate_input(self) -> None:
        original = list(tokenize("+++>>"))
        snapshot = list(original)
        optimize(original)
        self.assertEqual(original, snapshot)


class EmitterTests(unittest.TestCase):
    def test_full_program_text(self) -> None:
        code = emit_c(optimize(tokenize("++++[>++++<-]>.")))
        expected = "\n".join(
            [
                "#include <stdio.h>",
                "",
                "int main(void)",
                "{",
                "    char mem[30000] = {0};",
                "    char *ptr = mem;",
                "    (*ptr) += 4;",
                "    while (*ptr) {",
                "        ptr++;",
                "        (*ptr) += 4;",
                "        ptr--;",
                "        (*ptr)--;",
                "    }",
                "    ptr++;",
                "    putchar(*ptr);",
                "    return 0;",
                "}",
                "",
            ]
        )
        self.assertEqual(code, expected)

    def test_statement_forms(self) -> None:
        emitter = CEmitter()
        self.assertEqual(emitter.statement(PointerMove(1)), "ptr++;")
        self.assertEqual(emitter.statement(PointerMove(-1)), "ptr--;")
        self.assertEqual(emitter.statement(PointerMove(5)), "ptr += 5;")
        self.assertEqual(emitter.statement(PointerMove(-5)), "ptr -= 5;")
        self.assertEqual(emitter.statement(CellAdjust(1)), "(*ptr)++;")
        self.assertEqual(emitter.statement(CellAdjust(-1)), "(*ptr)--;")
        self.assertEqual(emitter.statement(CellAdjust(9)), "(*ptr) += 9;")
        self.assertEqual(emitter.statement(CellAdjust(-9)), "(*ptr) -= 9;")
        self.assertEqual(emitter.statement(Output()), "putchar(*ptr);")
        self.assertEqual(emitter.statement(Input()), "*ptr = getchar();")
        self.assertEqual(emitter.statement(LoopStart()), "while (*ptr) {")
        self.assertEqual(emitter.statement(LoopEnd()), "}")
        self.assertEqual(emitter.statement(Assign(0)), "*ptr = 0;")
        self.assertEqual(emitter.statement(Assign(7, -2)), "ptr[-2] = 7;")

    def test_depth_tracks_loops(self) -> None:
        program = tokenize("+[>[-<]+]")
        body = emit_c(program).splitlines()[6:-2]
        depth = 1
        for node, line in zip(program, body):
            if isinstance(node, LoopEnd):
                depth -= 1
            indent = len(line) - len(line.lstrip(" "))
            self.assertEqual(indent, 4 * depth, line)
            if isinstance(node, LoopStart):
                depth += 1
        self.assertEqual(depth, 1)

    def test_unbalanced_input_does_not_crash(self) -> None:
        code = emit_c((LoopEnd(), LoopEnd(), Output()))
        self.assertIn("}\n}\nputchar(*ptr);", code)

    def test_unknown_node_is_fatal(self) -> None:
        with self.assertRaises(UnknownNodeError):
            emit_c([CellAdjust(1), "not a node"])  # type: ignore[list-item]

    def test_config_controls_prologue(self) -> None:
        config = CompilerConfig(memory_size=64, indent="\t", cell_type="unsigned char")
        code = emit_c(tokenize("[+]"), config)
        self.assertIn("\tunsigned char mem[64] = {0};", code)
        self.assertIn("\tunsigned char *ptr = mem;", code)
        self.assertIn("\t\t(*ptr)++;", code)


class TranslatorTests(unittest.TestCase):
    def test_end_to_end_example(self) -> None:
        source = "++++[>++++<-]>."
        program = tokenize(source)
        self.assertGreaterEqual(len({type(node) for node in program}), 3)
        code = compile_source(source)
        self.assertEqual(code.count("while"), 1)
        self.assertEqual(code.count("{"), code.count("}"))

    def test_compile_without_optimization(self) -> None:
        compilation = Translator(CompilerConfig(optimize=False)).compile("++")
        self.assertEqual(compilation.program, (CellAdjust(1), CellAdjust(1)))
        self.assertEqual(tuple(compilation.passes), ())
        self.assertEqual(compilation.code.count("(*ptr)++;"), 2)

    def test_compile_records_passes(self) -> None:
        compilation = Translator().compile("[-]")
        self.assertEqual(compilation.program, (Assign(0),))
        self.assertIn("*ptr = 0;", compilation.code)
        self.assertEqual(tuple(compilation.passes), ("pointer-moves", "cell-adjusts", "zero-idiom"))

    def test_config_validation(self) -> None:
        with self.assertRaises(ValueError):
            CompilerConfig(memory_size=0)
        config = CompilerConfig(passes=["zero-idiom"])
        self.assertEqual(config.passes, ("zero-idiom",))
        self.assertEqual(config.with_overrides(optimize=False).active_passes, ())

    def test_config_single_pass_name(self) -> None:
        config = CompilerConfig(passes="zero-idiom")
        self.assertEqual(config.passes, ("zero-idiom",))
        compilation = Translator(config).compile("[-]")
        self.assertEqual(compilation.program, (Assign(0),))

    def test_config_rejects_unknown_pass_eagerly(self) -> None:
        with self.assertRaises(UnknownPassError):
            CompilerConfig(passes=["unroll"])
        with self.assertRaises(UnknownPassError):
            CompilerConfig().with_overrides(passes=("pointer-moves", "unroll"))


if __name__ == "__main__":
    unittest.main()
