"""Errors and warnings for lambdalab. Every error raised for bad input is a GenericException: a message template
filled with the offending snippets, plus the span of the offending expr so that it can be pointed out.

Running out of reduction steps is not an error. A reduction that times out is a normal outcome (see `Run` in
pure/reducer.py); sessions report it as a warning through ErrorHandler.
"""

from termcolor import colored


class GenericException(Exception):
    """Templates an error/warning message so that it can be used to raise a lambdalab error or print a warning."""

    def __init__(self, msg, exprs=None, start=0, end=-1, diagnosis=True):
        if exprs is None:
            exprs = ""
        if isinstance(exprs, str):
            exprs = [exprs]

        self.msg = msg.format(*(colored(expr, attrs=["bold"]) for expr in exprs))  # color expr snippets
        self.expr = exprs[0]  # exprs[0] should be the offending expr
        self.start = start
        self.end = end if end != -1 else len(self.expr)
        self.diagnosis = diagnosis  # whether a caret diagnosis of expr is worth printing

        super().__init__(self.msg)


class ParseError(GenericException):
    """Raised when text is not a valid λ-term. pos is the offset in expr where parsing failed."""

    def __init__(self, msg, expr, pos):
        super().__init__(msg, expr, start=pos, end=pos + 1)
        self.pos = pos


class MacroError(GenericException):
    """Raised when a macro cannot be defined or referenced. Definitions that raise leave the macro table as it was."""


class UnboundMacroError(MacroError):
    """Reference to a macro name that has not been defined."""


class NonClosedMacroError(MacroError):
    """Macro body with a free variable."""


class CyclicMacroError(MacroError):
    """Macro definition that would make the macro dependency graph cyclic."""


class ErrorHandler:
    """Reports lambdalab warnings against the lines a session has registered, with a caret diagnosis of the offending
    span. traceback is a dict of file: (line, line_num) for the line currently being handled in each file.
    """
    WARNING = "magenta"

    def __init__(self):
        self.traceback = {}

    def register_file(self, path):
        """Registers path in traceback."""
        self.traceback[path] = (None, None)

    def register_line(self, path, line, line_num):
        """Registers line in traceback given path. Should be called prior to Session add/run."""
        self.traceback[path] = (line, line_num)

    def remove_line(self, path):
        """Removes line from traceback given path. Should be called after successful Session add/run."""
        self.traceback[path] = (None, None)

    @staticmethod
    def diagnose(error, color=WARNING):
        """Returns error.expr with the span from error.start to error.end bolded and underlined by a caret."""
        end = max(error.end, error.start + 1)
        underline = "^" + "~" * (end - error.start - 1)

        lines = [
            "  " + error.expr[:error.start] + colored(error.expr[error.start:end], color, attrs=["bold"])
            + error.expr[end:],
            "  " + " " * error.start + colored(underline, color, attrs=["bold"]),
        ]
        return "\n".join(lines)

    def location(self, error):
        """Returns 'file:line:col: ' for the innermost registered line, or '' if no line is registered."""
        for file, (line, line_num) in reversed(list(self.traceback.items())):
            if line:
                col = max(line.find(error.expr), 0) + error.start
                return f"{file}:{line_num}:{col}: "
        return ""

    def warn(self, *args, **kwargs):
        """Generates and prints runtime warning message based on args (see GenericException)."""
        warning = GenericException(*args, **kwargs)

        print(colored(self.location(warning), attrs=["bold"])
              + colored("warning: ", ErrorHandler.WARNING, attrs=["bold"]) + warning.msg)

        if warning.expr and warning.diagnosis:
            print(ErrorHandler.diagnose(warning))
