"""Pure lambda calculus abstract syntax tree and capture-avoiding substitution.

The `pure` directory contains the pure lambda calculus engine (terms, reduction, rendering). Named macros are a
session-level feature and live in `lang`; the only trace of them here is `MacroRef`, a leaf that carries the body
the macro resolved to when it was referenced.

Formally, the terms handled here can be defined as

```
<λ-term> ::= <var>                      ; "variable"
                                        ; - alphanumeric, starting with a lowercase letter or digit
           | "λ" <var> "." <λ-term>     ; "abstraction"
                                        ; - abstraction bodies are greedy: λx.x y = λx.(x y) != (λx.x) (y)
           | <λ-term> <λ-term>          ; "application"
                                        ; - associating by left: a b c d = (((a) b) c) d
           | <NAME>                     ; "macro reference"
                                        ; - alphanumeric, starting with an uppercase letter
```

Terms are immutable. Substitution and reduction build new trees, sharing every subtree they do not touch, so
successive snapshots of a reduction can safely reference the same nodes.

Nodes are addressed by index paths: tuples of positions into `LambdaTerm.nodes`. For an Application, 0 is the
function side and 1 the argument; for an Abstraction, 0 is the body; for a MacroRef, 0 is the resolved term.
"""

from abc import abstractmethod, ABC
from dataclasses import dataclass, field


class LambdaTerm(ABC):
    """Represents a valid λ-term: variable, abstraction, application, or macro reference."""

    @property
    @abstractmethod
    def nodes(self):
        """Child terms of this term, in left-to-right order."""

    @abstractmethod
    def rebuild(self, nodes):
        """Returns a term of the same kind as self with its children replaced by nodes."""

    @abstractmethod
    def free_vars(self):
        """Frozenset of the names of variables that occur free in this term."""

    @abstractmethod
    def names(self):
        """Frozenset of every variable name in this term, free or bound. Used to pick fresh names."""

    @abstractmethod
    def sub(self, var, new_term):
        """Given a redex (λvar.M) new_term, this method returns M with all free occurrences of var replaced by
        new_term. Bound variables of M are renamed where new_term would otherwise be captured by them.
        """

    @abstractmethod
    def is_closed(self, bound=()):
        """Whether or not every variable in this term is bound by an enclosing abstraction. bound is the sequence of
        names bound by abstractions enclosing this term.
        """

    @abstractmethod
    def alpha_equals(self, other, bound=()):
        """Whether or not two LambdaTerms are alpha-equivalent. bound holds (self name, other name) pairs for the
        abstractions enclosing both terms, innermost last. Macro references are compared through the terms they
        resolve to, unless both sides reference the same macro.
        """

    def macro_names(self):
        """Frozenset of the names of macros referenced directly by this term."""
        names = frozenset()
        for node in self.nodes:
            names |= node.macro_names()
        return names

    def get(self, path):
        """Gets node at positions specified by path. path=() will return self."""
        if not path:
            return self

        this, *others = path
        return self.nodes[this].get(others)

    def set(self, path, node):
        """Returns a copy of self with node at the position specified by path. path=() will return node."""
        if not path:
            return node

        this, *others = path
        nodes = list(self.nodes)
        nodes[this] = nodes[this].set(others, node)
        return self.rebuild(nodes)


@dataclass(frozen=True)
class Variable(LambdaTerm):
    """Variable in lambda calculus: character(s) that stand for the argument of an enclosing abstraction."""
    SUBS = ("₀", "₁", "₂", "₃", "₄", "₅", "₆", "₇", "₈", "₉")

    name: str

    @property
    def nodes(self):
        return ()

    def rebuild(self, nodes):
        return self

    def free_vars(self):
        return frozenset([self.name])

    def names(self):
        return frozenset([self.name])

    def sub(self, var, new_term):
        if self.name == var:
            return new_term
        return self

    def is_closed(self, bound=()):
        return self.name in bound

    def alpha_equals(self, other, bound=()):
        if isinstance(other, MacroRef):
            return self.alpha_equals(other.term, bound)
        if not isinstance(other, Variable):
            return False

        for name, other_name in reversed(bound):
            if name == self.name or other_name == other.name:
                return name == self.name and other_name == other.name
        return self.name == other.name

    def macro_names(self):
        return frozenset()

    @staticmethod
    def subscript(var, num):
        """Returns var with subscript of num."""
        return var + "".join(Variable.SUBS[int(digit)] for digit in str(num))

    @staticmethod
    def split(var):
        """Splits var into base name and subscript (-1 if var has no subscript)."""
        subscript = ""
        while var and var[-1] in Variable.SUBS:
            subscript = str(Variable.SUBS.index(var[-1])) + subscript
            var = var[:-1]
        return var, int(subscript) if subscript else -1

    @staticmethod
    def fresh(var, used):
        """Returns the next name that is like var but isn't in used: var's base name with a subscript one higher than
        any subscript of that base name in used.
        """
        base, __ = Variable.split(var)
        max_subscript = -1

        for name in used:
            other_base, subscript = Variable.split(name)
            if other_base == base and subscript > max_subscript:
                max_subscript = subscript

        return Variable.subscript(base, max_subscript + 1)


@dataclass(frozen=True)
class Abstraction(LambdaTerm):
    """Abstraction: λarg.body."""

    arg: str
    body: LambdaTerm

    @property
    def nodes(self):
        return (self.body,)

    def rebuild(self, nodes):
        body, = nodes
        if body is self.body:
            return self
        return Abstraction(self.arg, body)

    def free_vars(self):
        return self.body.free_vars() - {self.arg}

    def names(self):
        return self.body.names() | {self.arg}

    def sub(self, var, new_term):
        if var == self.arg or var not in self.body.free_vars():
            return self  # var is shadowed by, or absent from, this abstraction

        arg, body = self.arg, self.body
        if arg in new_term.free_vars():
            arg = Variable.fresh(arg, body.names() | new_term.names() | {var})
            body = body.sub(self.arg, Variable(arg))

        return Abstraction(arg, body.sub(var, new_term))

    def is_closed(self, bound=()):
        return self.body.is_closed(bound + (self.arg,))

    def alpha_equals(self, other, bound=()):
        if isinstance(other, MacroRef):
            return self.alpha_equals(other.term, bound)
        if not isinstance(other, Abstraction):
            return False
        return self.body.alpha_equals(other.body, bound + ((self.arg, other.arg),))


@dataclass(frozen=True)
class Application(LambdaTerm):
    """Application of the left term (function side) to the right term (argument)."""

    left: LambdaTerm
    right: LambdaTerm

    @property
    def nodes(self):
        return (self.left, self.right)

    def rebuild(self, nodes):
        left, right = nodes
        if left is self.left and right is self.right:
            return self
        return Application(left, right)

    def free_vars(self):
        return self.left.free_vars() | self.right.free_vars()

    def names(self):
        return self.left.names() | self.right.names()

    def sub(self, var, new_term):
        return self.rebuild([node.sub(var, new_term) for node in self.nodes])

    def is_closed(self, bound=()):
        return self.left.is_closed(bound) and self.right.is_closed(bound)

    def alpha_equals(self, other, bound=()):
        if isinstance(other, MacroRef):
            return self.alpha_equals(other.term, bound)
        if not isinstance(other, Application):
            return False
        return self.left.alpha_equals(other.left, bound) and self.right.alpha_equals(other.right, bound)


@dataclass(frozen=True)
class MacroRef(LambdaTerm):
    """Reference to a named macro. term is the macro's body as resolved when the reference was made; macro bodies are
    closed by construction, so a MacroRef never has free variables and substitution never descends into it.
    """

    name: str
    term: LambdaTerm = field(repr=False)

    @property
    def nodes(self):
        return (self.term,)

    def rebuild(self, nodes):
        term, = nodes
        if term is self.term:
            return self
        return MacroRef(self.name, term)

    def free_vars(self):
        return frozenset()

    def names(self):
        return frozenset()

    def sub(self, var, new_term):
        return self

    def is_closed(self, bound=()):
        return True

    def alpha_equals(self, other, bound=()):
        if isinstance(other, MacroRef) and other.name == self.name:
            return True
        return self.term.alpha_equals(other, bound)

    def macro_names(self):
        return frozenset([self.name])
