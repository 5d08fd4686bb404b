"""Renders LambdaTerms as text, with the fewest parentheses that still read back as the same term.

Applications associate to the left and abstraction bodies extend as far right as possible, so parentheses are only
needed around an abstraction in function position and around an application or abstraction in argument position:

```
(λx.x) y           ; abstraction applied to a variable
(λx.x x)(λx.x x)   ; no space is needed between ")" and "("
λx.λy.x y          ; λx.(λy.(x y))
f x (g x)          ; (f x) (g x)
```

A highlighted snapshot wraps the active redex in markers that a front end can parse back out: the function side of
the redex (or the macro about to be expanded) in <a>...</a>, and the argument about to be substituted in <s>...</s>.
"""

import re

from lambdalab.pure.lexical import Abstraction, Application, MacroRef, Variable


LAMBDA = "λ"
ACTIVE = "a"  # active abstraction/variable/macro
SUBST = "s"   # active substitution target

MARKERS = re.compile(r"</?[{}{}]>".format(ACTIVE, SUBST))


def mark(text, tag):
    """Wraps text in a tag marker."""
    return f"<{tag}>{text}</{tag}>"


def strip_markers(text):
    """Removes all highlight markers from text."""
    return MARKERS.sub("", text)


def render(term, highlight=None):
    """Returns term as text. highlight is the index path of the active redex, if any."""
    return _render(term, (), tuple(highlight) if highlight is not None else None)


def _render(term, path, highlight):
    active = path == highlight

    if isinstance(term, (Variable, MacroRef)):
        text = term.name

    elif isinstance(term, Abstraction):
        text = f"{LAMBDA}{term.arg}.{_render(term.body, path + (0,), highlight)}"

    elif isinstance(term, Application):
        left = _render(term.left, path + (0,), highlight)
        right = _render(term.right, path + (1,), highlight)

        if isinstance(term.left, Abstraction):
            left = f"({left})"
        if isinstance(term.right, (Abstraction, Application)):
            right = f"({right})"

        if active:
            left, right = mark(left, ACTIVE), mark(right, SUBST)
            active = False

        if strip_markers(left).endswith(")") and strip_markers(right).startswith("("):
            text = left + right
        else:
            text = f"{left} {right}"

    else:
        raise TypeError(f"cannot render {term!r}")

    return mark(text, ACTIVE) if active else text
