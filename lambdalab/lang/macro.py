"""Named macros: closed λ-terms bound to uppercase names for the lifetime of a session.

Every macro is pre-evaluated when it is defined, so that references to it can stand in for its value rather than its
literal body:
    1. normal order first. A normal form is valid under every strategy, so it is the only value kept.
    2. otherwise call-by-name and call-by-value, independently. Each one that reaches a value within the step budget
       keeps that value for its own strategy.
    3. if nothing converges, the macro can still be referenced, but it never reduces past its literal definition.

Macros may reference earlier macros, but never themselves (directly or through others). Redefining a macro
recompiles every macro in dependency order, so cached values always reflect the latest bodies they depend on.

Reduced output is resugared by folding subterms that are alpha-equivalent to a macro's value back into a reference to
that macro.
"""

from dataclasses import dataclass, replace
from graphlib import CycleError, TopologicalSorter

from lambdalab.grammar.pure import is_macro_name
from lambdalab.lang.error import CyclicMacroError, MacroError, NonClosedMacroError, UnboundMacroError
from lambdalab.pure.lexical import MacroRef, Variable
from lambdalab.pure.pretty import render
from lambdalab.pure.reducer import Strategy, TIMEOUT, run


@dataclass
class MacroDefinition:
    """A macro's unreduced body, plus the values its pre-evaluation converged to (None where it did not)."""
    name: str
    body: object
    normal: object = None  # full normal form
    cbn: object = None
    cbv: object = None

    @property
    def dependencies(self):
        """Names of the macros this macro's body references."""
        return self.body.macro_names()

    def value(self, strategy):
        """Returns the value to use for this macro under strategy, or None if none is known."""
        if self.normal is not None:
            return self.normal
        if strategy is Strategy.CBV:
            return self.cbv
        if strategy is Strategy.CBN:
            return self.cbn
        return None

    def __str__(self):
        return f"{self.name} ≜ {render(self.body)}"


class MacroTable:
    """Macros defined in one session, by name. budget is the step budget for pre-evaluating macro bodies."""

    def __init__(self, budget=TIMEOUT):
        self.budget = budget
        self.macros = {}  # dict of name: MacroDefinition, in definition order

    def __contains__(self, name):
        return name in self.macros

    def __getitem__(self, name):
        return self.macros[name]

    def __iter__(self):
        return iter(self.macros)

    def __len__(self):
        return len(self.macros)

    def copy(self):
        """Returns a table with copies of all of this table's definitions."""
        table = MacroTable(self.budget)
        table.macros = {name: replace(macro) for name, macro in self.macros.items()}
        return table

    def clear(self):
        self.macros = {}

    def resolve(self, name, strategy):
        """Returns the term references to name stand for under strategy: its normal form, else its value for
        strategy, else its unreduced body with its own references resolved under strategy.
        """
        if name not in self.macros:
            raise UnboundMacroError("'{}' is not a defined macro", name)

        macro = self.macros[name]
        value = macro.value(strategy)
        if value is None:
            value = self.refresh(macro.body, strategy)
        return value

    def lookup(self, name, strategy):
        """Returns a reference to the macro called name, resolved under strategy."""
        return MacroRef(name, self.resolve(name, strategy))

    def refresh(self, term, strategy):
        """Returns term with every macro reference in it resolved again under strategy."""
        if isinstance(term, MacroRef):
            return self.lookup(term.name, strategy)
        if isinstance(term, Variable):
            return term
        return term.rebuild([self.refresh(node, strategy) for node in term.nodes])

    def define(self, name, body):
        """Binds name to the closed term body, replacing any previous definition. Returns the trace of pre-evaluating
        body. Raises a MacroError, leaving the table unchanged, if the definition is not valid.
        """
        if not is_macro_name(name):
            raise MacroError("'{}' is not a valid macro name (must start with an uppercase letter)", name)

        if not body.is_closed():
            free = ", ".join(sorted(body.free_vars()))
            raise NonClosedMacroError("'{}' has free variable(s) '{}'", [render(body), free])

        for dependency in sorted(body.macro_names()):
            if dependency == name:
                raise CyclicMacroError("'{}' cannot reference itself", name)
            if dependency not in self.macros:
                raise UnboundMacroError("'{}' references undefined macro '{}'", [render(body), dependency])

        candidate = self.copy()
        candidate.macros[name] = MacroDefinition(name, body)
        try:
            order = candidate.sort()
        except CycleError as error:
            cycle = " -> ".join(reversed(error.args[1]))
            raise CyclicMacroError("cannot define circularly dependent macro '{}' ({})", [name, cycle])

        traces = candidate.recompile(order)
        self.macros = candidate.macros  # commit
        return traces[name]

    def try_define(self, name, body):
        """Like define, but returns the MacroError instead of raising it."""
        try:
            return self.define(name, body)
        except MacroError as error:
            return error

    def sort(self):
        """Returns the names of all macros, dependencies before dependents. Raises graphlib.CycleError if the
        dependency graph has a cycle.
        """
        sorter = TopologicalSorter()
        for name, macro in self.macros.items():
            sorter.add(name, *sorted(macro.dependencies))
        return list(sorter.static_order())

    def list_macros(self):
        """Returns all MacroDefinitions, dependencies before dependents."""
        return [self.macros[name] for name in self.sort()]

    def recompile(self, order):
        """Recompiles the macros named in order, in that order. Returns dict of name: pre-evaluation trace."""
        return {name: self.compile(self.macros[name]) for name in order}

    def compile(self, macro):
        """Pre-evaluates macro's body and stores whatever values it converges to. Returns the trace of the run that
        converged, or of the normal order run if none did.
        """
        macro.normal = macro.cbn = macro.cbv = None

        trace, macro.normal = run(self.refresh(macro.body, Strategy.NORMAL), self.budget, Strategy.NORMAL.reducer)
        if macro.normal is not None:
            return trace

        cbn_trace, macro.cbn = run(self.refresh(macro.body, Strategy.CBN), self.budget, Strategy.CBN.reducer)
        cbv_trace, macro.cbv = run(self.refresh(macro.body, Strategy.CBV), self.budget, Strategy.CBV.reducer)

        if macro.cbn is not None:
            return cbn_trace
        if macro.cbv is not None:
            return cbv_trace
        return trace

    def resugar(self, term, strategy, prefer=()):
        """Folds the outermost subterms of term that are alpha-equivalent to some macro's value under strategy into
        references to that macro. Returns the resugared term and whether or not anything was folded.

        Where several macros match, the ones named in prefer are tried first (in the given order), then the rest in
        dependency order. So with I ≜ λx.x and J ≜ (λy.y)(λz.z), λx.x folds into I unless prefer names J.
        """
        names = list(prefer) + [macro.name for macro in self.list_macros() if macro.name not in prefer]
        values = [(name, self.resolve(name, strategy)) for name in names]
        sugared = self._fold(term, values)
        return sugared, sugared is not term

    def _fold(self, term, values):
        if isinstance(term, MacroRef):
            return term

        for name, value in values:
            if term.alpha_equals(value):
                return MacroRef(name, value)

        return term.rebuild([self._fold(node, values) for node in term.nodes])
