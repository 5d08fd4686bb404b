"""Recursive-descent parser for pure lambda calculus with macro references.

Formally, the accepted grammar can be defined as

```
<expr>  ::= <term>+                     ; application, associating by left: a b c = ((a b) c)
<term>  ::= <ident>                     ; variable, or macro reference if <ident> starts with an uppercase letter
          | ("λ" | "\\") <ident> "." <expr>
                                        ; abstraction: the body is greedy and extends as far right as possible
          | "(" <expr> ")"
<ident> ::= [A-Za-z0-9]+                ; subscript digits (x₀, x₁, ...) are also accepted, so that renamed
                                        ; variables in rendered output parse back
```

Whitespace is insignificant except as a separator between adjacent identifiers.

Source: https://opendsa-server.cs.vt.edu/ODSA/Books/PL/html/Syntax.html
"""

import re

from lambdalab.lang.error import ParseError, UnboundMacroError
from lambdalab.pure.lexical import Abstraction, Application, Variable
from lambdalab.pure.reducer import Strategy


IDENT = re.compile(r"[A-Za-z0-9₀-₉]+")
WHITESPACE = re.compile(r"\s*")
LAMBDA = re.compile(r"\\|λ")
DOT = re.compile(r"\.")
OPEN = re.compile(r"\(")
CLOSE = re.compile(r"\)")


def is_macro_name(name):
    """Macro names are identifiers that start with an uppercase letter."""
    return bool(name) and name[0].isupper() and IDENT.fullmatch(name) is not None


class Scanner:
    """A simple tokenization helper that advances an offset in a string."""

    def __init__(self, expr):
        self.expr = expr
        self.offset = 0

    def scan(self, pattern):
        """Matches pattern at the current offset and advances past the match. Returns the match, or None if pattern
        does not match here.
        """
        match = pattern.match(self.expr, self.offset)
        if not match:
            return None
        self.offset = match.end()
        return match.group()

    def skip_whitespace(self):
        self.scan(WHITESPACE)

    def done(self):
        return self.offset == len(self.expr)

    def error(self, msg, pos=None):
        """Returns a ParseError referring to pos (defaults to the current offset)."""
        return ParseError(msg, self.expr, self.offset if pos is None else pos)


class Parser:
    """Parses λ-terms, resolving macro references through table (a MacroTable) for the given strategy."""

    def __init__(self, expr, table=None, strategy=Strategy.CBV):
        self.scanner = Scanner(expr)
        self.table = table
        self.strategy = strategy

    def parse(self):
        """Parses the whole string."""
        term = self.parse_expr()
        if not self.scanner.done():
            raise self.scanner.error("unexpected token")
        return term

    def parse_expr(self):
        """Parses a sequence of terms separated by whitespace: in other words, a nested hierarchy of applications."""
        self.scanner.skip_whitespace()
        result = None
        while True:
            term = self.parse_term()
            if term is None:
                if result is None:
                    raise self.scanner.error("expected term")
                return result

            self.scanner.skip_whitespace()
            result = term if result is None else Application(result, term)

    def parse_term(self):
        """Parses a non-application: a variable, macro reference, abstraction, or parenthesized expression. Returns
        None if there is no term here.
        """
        start = self.scanner.offset
        name = self.scanner.scan(IDENT)
        if name:
            if is_macro_name(name):
                return self.lookup(name, start)
            return Variable(name)

        abstraction = self.parse_abs()
        if abstraction:
            return abstraction

        if self.scanner.scan(OPEN):
            term = self.parse_expr()
            if not self.scanner.scan(CLOSE):
                raise self.scanner.error("unbalanced parentheses")
            return term

        return None

    def parse_abs(self):
        """Parses a lambda abstraction, or returns None if there is no λ here."""
        if not self.scanner.scan(LAMBDA):
            return None
        self.scanner.skip_whitespace()

        start = self.scanner.offset
        arg = self.scanner.scan(IDENT)
        if not arg:
            raise self.scanner.error("expected variable name after lambda")
        if is_macro_name(arg):
            raise self.scanner.error("macro name cannot be bound by a lambda", start)
        self.scanner.skip_whitespace()

        if not self.scanner.scan(DOT):
            raise self.scanner.error("expected dot after variable name")

        return Abstraction(arg, self.parse_expr())

    def lookup(self, name, start):
        if self.table is None or name not in self.table:
            expr = self.scanner.expr
            msg = "'{}' references undefined macro '{}'"
            raise UnboundMacroError(msg, [expr, name], start=start, end=start + len(name))
        return self.table.lookup(name, self.strategy)


def parse(expr, table=None, strategy=Strategy.CBV):
    """Parses expr into a LambdaTerm. May raise a ParseError when expr is not a valid term, or an UnboundMacroError
    when it references a macro that table does not define.
    """
    return Parser(expr, table, strategy).parse()
