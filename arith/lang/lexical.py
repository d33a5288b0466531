"""Lexical analysis for arith programs as they appear in files or at the prompt, a shallow wrapper around the core
calculus. Note that this module does not provide input file parsing, but rather tokenization of single program lines.

```
<exec_stmt> ::= <term>          ; reduced to a value and outputted when the session is run
                                ; in numbers mode, decimal literals n are read as succ^n 0
<comment>   ::= ";;" <char>*
```

Comments are handled in session.py: there is no dedicated class for comments.
"""

from arith.core.reduction import SmallStepReducer
from arith.lang.error import GenericException
from arith.lang.numerical import cnumberify, numberify


class ExecStmt:
    """A thin wrapper around SmallStepReducer, which provides functionality for directly executing a program line."""

    def __init__(self, expr, original_expr=None, max_depth=None, numbers=False):
        if not ExecStmt.check_grammar(expr):
            raise GenericException("program cannot be empty", original_expr or expr)

        self.expr = ExecStmt.preprocess(expr)
        self.original_expr = original_expr if original_expr else self.expr  # used for error messages
        self.numbers = numbers

        source = cnumberify(self.expr) if numbers else self.expr
        self.term = SmallStepReducer(source, self.original_expr, max_depth)
        self._cls = type(self).__name__

    @staticmethod
    def preprocess(expr):
        """Removes trailing whitespace, such as the newline left by a line reader."""
        return expr.rstrip()

    @staticmethod
    def check_grammar(expr):
        return bool(ExecStmt.preprocess(expr).strip())

    def execute(self, error_handler, numbers=None):
        """Running an ExecStmt is equivalent to reducing its term. If numbers (by default, whether decimal literals were
        accepted), numeric values are rendered as decimal numbers.
        """
        if numbers is None:
            numbers = self.numbers
        value = self.term.reduce(error_handler)
        return numberify(value) if numbers else value.expr

    def __repr__(self):
        return f"{self._cls}('{self.expr}')"

    def __str__(self):
        return self.expr
