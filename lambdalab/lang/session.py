"""Session control for lambdalab. A Session owns the macro table and the reduction settings that front ends use to
define macros and evaluate λ-terms, either directly or line by line.

The macro table is never global: each Session has its own, so independent sessions (and tests) cannot interfere.
"""

from lambdalab.grammar.pure import parse
from lambdalab.lang.error import ErrorHandler
from lambdalab.lang.lexical import ExecStmt, Grammar, MacroStmt
from lambdalab.lang.macro import MacroTable
from lambdalab.pure.pretty import render
from lambdalab.pure.reducer import Strategy, TIMEOUT, evaluate


class Session:
    """Governs a lambdalab session, with control over the macros defined in it."""
    SH_FILE = "<in>"       # filename used in error messages
    RESUGARED = "=   "     # prefix of the snapshot added when a result folds back into macros

    def __init__(self, error_handler=None, strategy=Strategy.CBV, budget=TIMEOUT):
        self.error_handler = error_handler if error_handler is not None else ErrorHandler()
        self.error_handler.register_file(Session.SH_FILE)

        self.strategy = strategy  # strategy used when none is given explicitly
        self.budget = budget      # step budget for evaluation and macro pre-evaluation

        self.macros = MacroTable(budget)
        self.results = []   # traces produced by add/run, oldest first
        self.to_exec = {}   # dict of line num: λ-terms to reduce on run
        self.line_num = 0   # lines added so far

    def parse(self, expr, strategy=None):
        """Parses expr, resolving macro references under strategy (defaults to the session's strategy)."""
        return parse(expr, self.macros, strategy if strategy else self.strategy)

    def define(self, name, body):
        """Defines macro name as body (a LambdaTerm or its text) and returns the trace of pre-evaluating it."""
        if isinstance(body, str):
            body = self.parse(body)
        return self.macros.define(name, body)

    def evaluate(self, term, strategy=None, budget=None, highlight=False):
        """Reduces term (a LambdaTerm or its text). Returns a Run: (trace, final), final being None on timeout."""
        strategy = strategy if strategy else self.strategy
        if isinstance(term, str):
            term = self.parse(term, strategy)
        return evaluate(term, strategy, budget if budget is not None else self.budget, highlight)

    def resugar(self, term, strategy=None, prefer=()):
        """Folds macro values in term back into macro names, trying the macros named in prefer first. Returns (term,
        whether anything changed).
        """
        return self.macros.resugar(term, strategy if strategy else self.strategy, prefer)

    def list_macros(self):
        """All macro definitions, dependencies before dependents."""
        return self.macros.list_macros()

    def add(self, line, line_num=None):
        """Adds a line to the current session. Macro statements take effect immediately (their pre-evaluation trace is
        added to results); λ-terms are parsed now and reduced when run is called. Raises any GenericException
        encountered, leaving the session unchanged.
        """
        self.line_num += 1
        if line_num is None:
            line_num = self.line_num
        self.error_handler.register_line(Session.SH_FILE, line, line_num)  # in case error is raised

        if Grammar.preprocess(line):
            stmt = Grammar.infer(line)

            if isinstance(stmt, MacroStmt):
                self.results.append(self.define(stmt.name, stmt.body))

            elif isinstance(stmt, ExecStmt):
                self.to_exec[line_num] = self.parse(stmt.expr)

        self.error_handler.remove_line(Session.SH_FILE)  # error was not raised

    def run(self):
        """Reduces this session's queued λ-terms, adding each trace to results. A result that folds back into macros
        gets one more snapshot, prefixed by RESUGARED. Timeouts are reported as warnings.
        """
        for line_num, term in list(self.to_exec.items()):
            del self.to_exec[line_num]

            expr = render(term)
            self.error_handler.register_line(Session.SH_FILE, expr, line_num)

            trace, final = self.evaluate(term)
            if final is None:
                msg = "'{}' did not reach a value within {} steps"
                self.error_handler.warn(msg, [expr, str(self.budget)], diagnosis=False)
            else:
                sugared, changed = self.resugar(final)
                if changed:
                    trace.append(Session.RESUGARED + render(sugared))

            self.results.append(trace)
            self.error_handler.remove_line(Session.SH_FILE)

    def pop(self):
        """Removes and returns the most recent trace."""
        return self.results.pop()
