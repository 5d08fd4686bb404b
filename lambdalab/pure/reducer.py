"""Reduction strategies for pure lambda calculus, and the bounded runner that drives them.

Every strategy contracts one redex per step. Redexes are β-redexes, (λx.M) N -> M[x := N], whose function side is
an abstraction or a macro reference resolving to one, plus δ-redexes: expanding a macro reference into the term it
resolved to. A macro reference is expanded when it makes up the whole term, or when the term it resolved to still
contains a redex the strategy would contract; otherwise it is left alone and keeps printing as its name.

Strategies differ only in which redex they pick:
    - call-by-value: leftmost-outermost, never under an abstraction, and only once the argument is a value
    - call-by-name: leftmost-outermost, never under an abstraction, with the argument left unevaluated
    - applicative order: leftmost-innermost, under abstractions; function side, then argument, then the redex
    - normal order: leftmost-outermost, under abstractions; finds a normal form whenever one exists

Sources: https://en.wikipedia.org/wiki/Evaluation_strategy,
         http://pages.cs.wisc.edu/~horwitz/CS704-NOTES/1.LAMBDA-CALCULUS.html#NOR
"""

from abc import abstractmethod, ABC
from dataclasses import dataclass, field
from enum import Enum

from lambdalab.lang.error import GenericException
from lambdalab.pure.lexical import Abstraction, Application, MacroRef, Variable
from lambdalab.pure.pretty import render


TIMEOUT = 100  # reduction steps to execute before giving up on reaching a value


def head(term):
    """Returns term with any macro references at its root expanded."""
    while isinstance(term, MacroRef):
        term = term.term
    return term


def contract(redex):
    """Returns the result of contracting redex."""
    if isinstance(redex, MacroRef):
        return redex.term

    if isinstance(redex, Application):
        abstraction = head(redex.left)
        if isinstance(abstraction, Abstraction):
            return abstraction.body.sub(abstraction.arg, redex.right)

    raise ValueError(f"{redex!r} is not a redex")


def _within(idx, path):
    """Prefixes path with idx, propagating None."""
    return None if path is None else (idx,) + path


class Reducer(ABC):
    """Implements one reduction strategy. Reducers are stateless: the same instance can step any number of terms."""

    def redex_path(self, term):
        """Returns the index path to the redex this strategy contracts next in term, or None if there is none."""
        if isinstance(term, MacroRef):
            return ()
        return self.find_redex(term)

    def find_redex(self, term):
        """Like redex_path, but for a term nested inside a larger one."""
        if isinstance(term, Variable):
            return None
        elif isinstance(term, MacroRef):
            return () if self.find_redex(term.term) is not None else None
        elif isinstance(term, Abstraction):
            return self.find_in_abstraction(term)
        elif isinstance(term, Application):
            return self.find_in_application(term)
        raise TypeError(f"unexpected term {term!r}")

    def find_in_abstraction(self, abstraction):
        """Weak strategies never reduce under an abstraction."""
        return None

    @abstractmethod
    def find_in_application(self, application):
        """This method should return the index path (relative to application) of the redex to contract next, or
        None if the strategy is stuck on application.
        """

    def step(self, term):
        """Contracts one redex of term, or returns None if term is a value (or stuck) under this strategy."""
        path = self.redex_path(term)
        if path is None:
            return None
        return term.set(path, contract(term.get(path)))

    def is_value(self, term):
        return self.redex_path(term) is None

    def __call__(self, term):
        return self.step(term)


class CallByValueReducer(Reducer):
    """Call-by-value: arguments are reduced to values (variables, abstractions) before they are substituted."""

    def find_in_application(self, application):
        if not isinstance(head(application.left), Abstraction):
            return _within(0, self.find_redex(application.left))

        path = self.find_redex(application.right)
        if path is not None:
            return _within(1, path)
        if isinstance(application.right, Application):
            return None  # argument is stuck, so the redex can never fire
        return ()


class CallByNameReducer(Reducer):
    """Call-by-name: arguments are substituted unevaluated, and reduced again wherever they are duplicated."""

    def find_in_application(self, application):
        if isinstance(head(application.left), Abstraction):
            return ()
        return _within(0, self.find_redex(application.left))


class ApplicativeOrderReducer(Reducer):
    """Applicative order: function side and argument are reduced to normal form before the redex fires."""

    def find_in_abstraction(self, abstraction):
        return _within(0, self.find_redex(abstraction.body))

    def find_in_application(self, application):
        for idx, node in enumerate(application.nodes):
            path = self.find_redex(node)
            if path is not None:
                return (idx,) + path

        if isinstance(head(application.left), Abstraction):
            return ()
        return None


class NormalOrderReducer(Reducer):
    """Normal order (full β-reduction): always contracts the leftmost outermost redex, under abstractions too."""

    def find_in_abstraction(self, abstraction):
        return _within(0, self.find_redex(abstraction.body))

    def find_in_application(self, application):
        if isinstance(head(application.left), Abstraction):
            return ()

        for idx, node in enumerate(application.nodes):
            path = self.find_redex(node)
            if path is not None:
                return (idx,) + path
        return None


class Strategy(Enum):
    """Reduction strategies selectable by callers."""
    CBV = "cbv"
    CBN = "cbn"
    APPL = "appl"
    NORMAL = "normal"

    @classmethod
    def from_string(cls, name):
        """Returns the strategy called name (case-insensitive)."""
        try:
            return cls(name.strip().lower())
        except ValueError:
            raise GenericException("'{}' is not a reduction strategy", name)

    @property
    def reducer(self):
        return REDUCERS[self]


REDUCERS = {
    Strategy.CBV: CallByValueReducer(),
    Strategy.CBN: CallByNameReducer(),
    Strategy.APPL: ApplicativeOrderReducer(),
    Strategy.NORMAL: NormalOrderReducer(),
}


@dataclass
class Run:
    """Outcome of a bounded reduction. trace holds the rendered snapshots, starting term first; final is the term the
    reduction stopped at, or None if the step budget ran out first. A timed-out trace is only the observed prefix of
    the reduction and says nothing about the term's value.
    """
    trace: list = field(default_factory=list)
    final: object = None

    @property
    def timed_out(self):
        return self.final is None

    def __iter__(self):
        return iter((self.trace, self.final))


def run(term, budget, reducer, highlight=False):
    """Repeatedly records a rendering of term and then steps it with reducer, at most budget times. If highlight, each
    snapshot marks the redex about to be contracted.

    A term nested too deeply to walk counts as running out of budget: the reduction stops there, as a timeout.
    """
    trace = []
    try:
        for __ in range(budget):
            path = reducer.redex_path(term)
            trace.append(render(term, path if highlight else None))

            if path is None:
                return Run(trace, term)
            term = term.set(path, contract(term.get(path)))
    except RecursionError:
        return Run(trace, None)  # snapshots recorded so far

    return Run(trace, None)


def evaluate(term, strategy, budget=TIMEOUT, highlight=False):
    """Reduces term under strategy for at most budget steps."""
    return run(term, budget, strategy.reducer, highlight)
