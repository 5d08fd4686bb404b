import unittest

from lambdalab.grammar.pure import is_macro_name, parse, Scanner, IDENT
from lambdalab.lang.error import ParseError, UnboundMacroError
from lambdalab.lang.macro import MacroTable
from lambdalab.pure.lexical import Abstraction, Application, MacroRef, Variable
from lambdalab.pure.reducer import Strategy


x, y, z = Variable("x"), Variable("y"), Variable("z")


class ScannerTestCase(unittest.TestCase):

    def test_scan(self):
        scanner = Scanner("abc def")
        self.assertEqual("abc", scanner.scan(IDENT))
        self.assertIsNone(scanner.scan(IDENT))  # not at the beginning of an identifier
        scanner.skip_whitespace()
        self.assertEqual("def", scanner.scan(IDENT))
        self.assertTrue(scanner.done())

    def test_error(self):
        scanner = Scanner("λx")
        scanner.offset = 1
        error = scanner.error("boom")
        self.assertIsInstance(error, ParseError)
        self.assertEqual(1, error.pos)


class ParseTestCase(unittest.TestCase):

    def test_parse(self):
        cases = {
            "x": x,
            "  ( x )  ": x,
            r"\x.x": Abstraction("x", x),
            "λx.x": Abstraction("x", x),
            "λ x . x": Abstraction("x", x),
            "x y z": Application(Application(x, y), z),
            "x (y z)": Application(x, Application(y, z)),
            "λx.x y": Abstraction("x", Application(x, y)),
            "(λx.x) y": Application(Abstraction("x", x), y),
            "x λy.y z": Application(x, Abstraction("y", Application(y, z))),
            "λx.λy.x": Abstraction("x", Abstraction("y", x)),
            "foo bar2": Application(Variable("foo"), Variable("bar2")),
            "x₀": Variable("x₀"),
        }
        for case, result in cases.items():
            self.assertEqual(result, parse(case), case)

    def test_parse_errors(self):
        should_raise = {
            "": 0,
            "(x": 2,
            "x)": 1,
            r"\.x": 1,
            r"\x x": 3,
            r"\x.": 3,
            "λX.X": 1,
            "x . y": 2,
        }
        for case, pos in should_raise.items():
            with self.assertRaises(ParseError, msg=case) as context:
                parse(case)
            self.assertEqual(pos, context.exception.pos, case)

    def test_unbound_macro(self):
        should_raise = ["I", "x I", "λx.FOO x"]
        for case in should_raise:
            self.assertRaises(UnboundMacroError, parse, case)

        table = MacroTable()
        self.assertRaises(UnboundMacroError, parse, "I", table)

    def test_macro_ref(self):
        table = MacroTable()
        table.define("I", parse("λx.x"))

        term = parse("I y", table)
        self.assertEqual(Application(MacroRef("I", Abstraction("x", x)), y), term)

        for strategy in Strategy:
            self.assertEqual("I", parse("I", table, strategy).name)


class MacroNameTestCase(unittest.TestCase):

    def test_is_macro_name(self):
        should_fail = ["x", "", "1A", "A-B", "λ", "A B"]
        for case in should_fail:
            self.assertFalse(is_macro_name(case), case)

        should_pass = ["I", "TRUE", "Foo1", "S2"]
        for case in should_pass:
            self.assertTrue(is_macro_name(case), case)


if __name__ == '__main__':
    unittest.main()
