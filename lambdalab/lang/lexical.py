"""Lexical analysis for lambdalab session lines, a shallow wrapper around pure lambda calculus. Note that this module
does not parse λ-terms itself (see grammar/pure.py), but rather decides what kind of statement a line is.

All grammar can be loosely defined as follows:

```
<macro_stmt> ::= <NAME> ("≜" | ":=") <λ-term>   ; binds NAME to the closed λ-term, pre-evaluating it
<exec_stmt>  ::= <λ-term>                       ; reduced when the session is run

<comment>    ::= ";;" <char>*
```

Comments are stripped in `Grammar.preprocess`: there is no dedicated Grammar class for comments.
"""

from abc import abstractmethod, ABC
import re

from lambdalab.grammar.pure import is_macro_name
from lambdalab.lang.error import GenericException, MacroError


DECLARE = re.compile(r"≜|:=")
COMMENT = ";;"


class Grammar(ABC):
    """Superclass representing any statement in a lambdalab session."""

    def __init__(self, expr):
        """Assumes check_grammar has been run."""
        self.expr = Grammar.preprocess(expr)

    @staticmethod
    @abstractmethod
    def check_grammar(expr):
        """This method should check expr's top-level grammar and return whether or not it is valid. It should also
        raise a GenericException if expr's top-level grammar is similar to the accepted grammar but invalid.
        """

    @staticmethod
    def preprocess(expr):
        """Removes comments and surrounding whitespace."""
        if COMMENT in expr:
            expr = expr[:expr.index(COMMENT)]
        return expr.strip()

    @classmethod
    def infer(cls, expr):
        """Infers the type of statement expr is and returns an object of the matching subclass. Subclasses are tried
        in definition order, so ExecStmt (which accepts anything) must come last.
        """
        for subclass in cls.__subclasses__():
            if subclass.check_grammar(expr):
                return subclass(expr)
        raise GenericException("'{}' is not a valid statement", expr)

    def __repr__(self):
        return f"{type(self).__name__}('{self.expr}')"

    def __str__(self):
        return self.expr


class MacroStmt(Grammar):
    """MacroStmts represent macro definitions: <NAME> ≜ <λ-term>."""

    def __init__(self, expr):
        super().__init__(expr)

        name, body = DECLARE.split(self.expr)
        self.name = name.strip()
        self.body = body.strip()

    @staticmethod
    def check_grammar(expr):
        expr = Grammar.preprocess(expr)

        # check 1: is there exactly one declarator?
        declarators = DECLARE.findall(expr)
        if not declarators:
            return False
        elif len(declarators) > 1:
            start = expr.rfind(declarators[-1])
            msg = "'{}' contains more than one definition"
            raise GenericException(msg, expr, start=start, end=start + len(declarators[-1]))

        # check 2: is the l-value a macro name?
        lval, rval = DECLARE.split(expr)
        if not is_macro_name(lval.strip()):
            msg = "l-value of '{}' is not a valid macro name (must start with an uppercase letter)"
            raise MacroError(msg, expr, end=len(lval.rstrip()))

        # check 3: is there a body?
        if not rval.strip():
            raise GenericException("'{}' has an empty macro body", expr, start=len(lval))

        return True

    def __repr__(self):
        return f"{type(self).__name__}(name='{self.name}', body='{self.body}')"


class ExecStmt(Grammar):
    """Any line that is not a macro statement: a λ-term to reduce."""

    @staticmethod
    def check_grammar(expr):
        return bool(Grammar.preprocess(expr))
