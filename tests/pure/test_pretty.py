import unittest

from lambdalab.grammar.pure import parse
from lambdalab.pure.lexical import Abstraction, Application, MacroRef, Variable
from lambdalab.pure.pretty import mark, render, strip_markers


class RenderTestCase(unittest.TestCase):

    def test_render(self):
        cases = {
            "x": "x",
            r"\x.x": "λx.x",
            "(λx.x)": "λx.x",
            "(λx.x) y": "(λx.x) y",
            "(λx.x x)(λx.x x)": "(λx.x x)(λx.x x)",
            "(λx.x x) (λx.x x)": "(λx.x x)(λx.x x)",
            "λx.λy.x y": "λx.λy.x y",
            "λx.(λy.x) y": "λx.(λy.x) y",
            "f x (g x)": "f x (g x)",
            "(f x) (g x)": "f x (g x)",
            "((a b) c) d": "a b c d",
            "a (b (c d))": "a (b (c d))",
            "f (λx.x)": "f (λx.x)",
            "(λx.x) (y z)": "(λx.x)(y z)",
            "(λx.x) λy.y": "(λx.x)(λy.y)",
            "x₀ y₁": "x₀ y₁",
        }
        for case, result in cases.items():
            self.assertEqual(result, render(parse(case)), case)

    def test_render_round_trip(self):
        should_pass = ["(λx.x) y", "λx.λy.x y", "f x (g x)", "(λf.f)(λx.(λy.y) x)", "a (λx.x) b"]
        for case in should_pass:
            self.assertEqual(parse(case), parse(render(parse(case))), case)

    def test_render_macro_ref(self):
        identity = Abstraction("x", Variable("x"))
        term = Application(Abstraction("y", Variable("y")), MacroRef("I", identity))
        self.assertEqual("(λy.y) I", render(term))
        self.assertEqual("λz.I", render(Abstraction("z", MacroRef("I", identity))))

    def test_render_invalid(self):
        self.assertRaises(TypeError, render, "λx.x")


class HighlightTestCase(unittest.TestCase):

    def test_mark(self):
        self.assertEqual("<a>λx.x</a>", mark("λx.x", "a"))

    def test_render_highlight(self):
        cases = {
            ("(λx.x) y", ()): "<a>(λx.x)</a> <s>y</s>",
            ("(λx.x x)(λx.x x)", ()): "<a>(λx.x x)</a><s>(λx.x x)</s>",
            ("z ((λx.x) y)", (1,)): "z (<a>(λx.x)</a> <s>y</s>)",
            ("λz.(λx.x) z", (0,)): "λz.<a>(λx.x)</a> <s>z</s>",
            ("((λx.x) y) z", (0,)): "<a>(λx.x)</a> <s>y</s> z",
            ("x y", None): "x y",
        }
        for (case, path), result in cases.items():
            self.assertEqual(result, render(parse(case), path), case)

    def test_render_highlight_macro(self):
        term = Application(MacroRef("I", Abstraction("x", Variable("x"))), Variable("y"))
        self.assertEqual("<a>I</a> <s>y</s>", render(term, ()))
        self.assertEqual("<a>I</a> y", render(term, (0,)))

    def test_strip_markers(self):
        cases = {
            "<a>(λx.x)</a> <s>y</s>": "(λx.x) y",
            "z (<a>(λx.x)</a> <s>y</s>)": "z ((λx.x) y)",
            "λx.x": "λx.x",
        }
        for case, result in cases.items():
            self.assertEqual(result, strip_markers(case))


if __name__ == '__main__':
    unittest.main()
