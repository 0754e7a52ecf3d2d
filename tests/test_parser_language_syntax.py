from __future__ import annotations

import importlib.util
import unittest


JAX_AVAILABLE = importlib.util.find_spec("jax") is not None


@unittest.skipUnless(JAX_AVAILABLE, "jax is required to import veccalc")
class LexerTests(unittest.TestCase):
    def test_token_kinds(self) -> None:
        from veccalc.lexer import tokenize

        kinds = [tok.kind for tok in tokenize("x = [1, 2.5] * sin(y)")]
        self.assertEqual(
            kinds,
            ["NAME", "ASSIGN", "LBRACK", "NUMBER", "COMMA", "NUMBER", "RBRACK", "OP", "NAME", "LPAREN", "NAME", "RPAREN", "EOF"],
        )

    def test_number_literal_forms(self) -> None:
        from veccalc.lexer import tokenize

        texts = [tok.text for tok in tokenize("1 2.5 .5 3. 1e3 2E-2") if tok.kind == "NUMBER"]
        self.assertEqual([float(t) for t in texts], [1.0, 2.5, 0.5, 3.0, 1000.0, 0.02])

    def test_newlines_and_semicolons_collapse_into_one_separator(self) -> None:
        from veccalc.lexer import tokenize

        kinds = [tok.kind for tok in tokenize("1\n\n ;2")]
        self.assertEqual(kinds, ["NUMBER", "SEP", "NUMBER", "EOF"])

    def test_comments_are_skipped(self) -> None:
        from veccalc.lexer import tokenize

        kinds = [tok.kind for tok in tokenize("1 # one\n2")]
        self.assertEqual(kinds, ["NUMBER", "SEP", "NUMBER", "EOF"])

    def test_bad_characters_and_numbers_are_rejected(self) -> None:
        from veccalc.lexer import LexError, tokenize

        for source in ("1 $ 2", "1e", "1.2.3", "2x"):
            with self.subTest(source=source):
                with self.assertRaises(LexError):
                    tokenize(source)


@unittest.skipUnless(JAX_AVAILABLE, "jax is required to import veccalc")
class ParserLanguageSyntaxTests(unittest.TestCase):
    def test_multiplication_binds_tighter_than_addition(self) -> None:
        from veccalc.ast import Infix
        from veccalc.parser import parse

        expr = parse("1 + 2 * 3")
        self.assertIsInstance(expr, Infix)
        assert isinstance(expr, Infix)
        self.assertEqual(expr.op, "+")
        self.assertIsInstance(expr.right, Infix)
        assert isinstance(expr.right, Infix)
        self.assertEqual(expr.right.op, "*")

    def test_subtraction_is_left_associative(self) -> None:
        from veccalc.ast import Infix, Number
        from veccalc.parser import parse

        expr = parse("5 - 2 - 1")
        assert isinstance(expr, Infix)
        self.assertIsInstance(expr.left, Infix)
        self.assertEqual(expr.right, Number(1.0))

    def test_power_is_right_associative(self) -> None:
        from veccalc.ast import Infix, Number
        from veccalc.parser import parse

        expr = parse("2 ^ 3 ^ 2")
        assert isinstance(expr, Infix)
        self.assertEqual(expr.left, Number(2.0))
        self.assertIsInstance(expr.right, Infix)

    def test_unary_minus_binds_looser_than_power(self) -> None:
        from veccalc.ast import Infix, Prefix
        from veccalc.parser import parse

        expr = parse("-2 ^ 2")
        self.assertIsInstance(expr, Prefix)
        assert isinstance(expr, Prefix)
        self.assertEqual(expr.kind, "u-")
        self.assertIsInstance(expr.right, Infix)

        product = parse("-2 * 3")
        self.assertIsInstance(product, Infix)

    def test_unary_sign_after_operator(self) -> None:
        from veccalc.ast import Infix, Prefix
        from veccalc.parser import parse

        expr = parse("2 ^ -1")
        assert isinstance(expr, Infix)
        self.assertIsInstance(expr.right, Prefix)
        self.assertEqual(parse("+x").kind, "u+")

    def test_vector_and_call_parse(self) -> None:
        from veccalc.ast import Call, Name, Number, Vector
        from veccalc.parser import parse

        vec = parse("[1, x, [2]]")
        self.assertIsInstance(vec, Vector)
        assert isinstance(vec, Vector)
        self.assertEqual(len(vec.items), 3)
        self.assertEqual(vec.items[1], Name("x"))
        self.assertIsInstance(vec.items[2], Vector)
        self.assertEqual(parse("[]"), Vector(items=()))

        call = parse("sin(1, 2)")
        self.assertEqual(call, Call(name="sin", args=(Number(1.0), Number(2.0))))
        self.assertEqual(call.kind, "function")

    def test_assignment_parse(self) -> None:
        from veccalc.ast import Assign, Name
        from veccalc.parser import parse

        expr = parse("a = b = 3")
        self.assertIsInstance(expr, Assign)
        assert isinstance(expr, Assign)
        self.assertEqual(expr.target, Name("a"))
        self.assertIsInstance(expr.value, Assign)
        self.assertEqual(expr.kind, "assignment")

    def test_program_parse(self) -> None:
        from veccalc.ast import Program
        from veccalc.parser import parse_program

        program = parse_program("\na = 1\nb = 2; a + b\n")
        self.assertIsInstance(program, Program)
        self.assertEqual(len(program.statements), 3)
        self.assertEqual(parse_program("  \n# nothing\n").statements, ())

    def test_parse_errors_carry_span_and_expectation(self) -> None:
        from veccalc.parser import ParseError, parse_program

        with self.assertRaises(ParseError) as ctx:
            parse_program("1 +")
        err = ctx.exception
        self.assertEqual(err.found, "EOF")
        self.assertIn("NUMBER", err.expected)
        self.assertEqual((err.start, err.end), (3, 3))

        with self.assertRaises(ParseError) as ctx:
            parse_program("(1 + 2")
        self.assertEqual(ctx.exception.expected, ("RPAREN",))

    def test_invalid_assignment_target(self) -> None:
        from veccalc.parser import ParseError, parse_program

        with self.assertRaises(ParseError) as ctx:
            parse_program("1 = 2")
        self.assertIn("Invalid assignment target", str(ctx.exception))

    def test_adjacent_expressions_are_rejected(self) -> None:
        from veccalc.parser import ParseError, parse_program

        with self.assertRaises(ParseError):
            parse_program("1 2")

    def test_lexer_failures_surface_as_parse_errors(self) -> None:
        from veccalc.parser import ParseError, parse_program

        with self.assertRaises(ParseError) as ctx:
            parse_program("1 @ 2")
        self.assertEqual(ctx.exception.start, 2)


if __name__ == "__main__":
    unittest.main()
