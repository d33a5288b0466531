"""Small-step evaluation of arith terms.

Evaluation rules (one applies to any non-value term, or none and the term is stuck):

```
if true then t2 else t3   -> t2                        E-IfTrue
if false then t2 else t3  -> t3                        E-IfFalse
if t1 then t2 else t3     -> if t1' then t2 else t3    E-If        (t1 -> t1')
succ t                    -> succ t'                   E-Succ      (t -> t')
pred 0                    -> 0                         E-PredZero
pred succ nv              -> nv                        E-PredSucc
pred t                    -> pred t'                   E-Pred      (t -> t')
iszero 0                  -> true                      E-IsZeroZero
iszero succ nv            -> false                     E-IsZeroSucc
iszero t                  -> iszero t'                 E-IsZero    (t -> t')
```

No rule makes a term deeper, so evaluation always terminates.
"""

from arith.core.lexical import ArithTerm
from arith.lang.error import StuckTerm


class SmallStepReducer:
    """Implements small-step reduction of a syntax tree to a value."""

    def __init__(self, expr, original_expr=None, max_depth=None):
        if isinstance(expr, ArithTerm):
            self.tree = expr
            self.original_expr = original_expr if original_expr else expr.expr
        else:
            self.original_expr = original_expr if original_expr else expr
            self.tree = ArithTerm.generate_tree(expr, max_depth)

        self.steps = []
        self.reduced = False

    @staticmethod
    def stuck_subterm(term):
        """Follows the congruence path (always the first node) down to the innermost non-value."""
        while term.nodes and not term.nodes[0].is_value:
            term = term.nodes[0]
        return term

    def reduce(self, error_handler=None):
        """Reduces self.tree to a value, one rule at a time. Raises StuckTerm if no rule applies to a non-value.
        error_handler is the current session's error handler, if any.
        """
        while not self.tree.is_value:
            result = self.tree.step()
            if result is None:
                raise StuckTerm(self.tree, SmallStepReducer.stuck_subterm(self.tree), self.original_expr)

            self.tree, rule = result
            self.steps.append((rule, self.tree.expr))
            if error_handler is not None:
                error_handler.register_step(rule, self.tree.expr)

        self.reduced = True
        return self.tree

    def __repr__(self):
        return repr(self.tree)

    def __str__(self):
        return self.tree.display()


def evaluate(term, max_depth=None):
    """Reduces term (an ArithTerm or source text) to a value."""
    return SmallStepReducer(term, max_depth=max_depth).reduce()
