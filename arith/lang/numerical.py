"""Natural numbers encoded as numerals: n is succ applied n times to 0. There are no negative numerals (pred 0 is 0).

Source: Pierce, Types and Programming Languages, section 3.2.
"""

import re

from arith.core.lexical import Succ, Zero
from arith.lang.error import GenericException


def numeral(num):
    """Returns the numeric value denoting num."""
    try:
        assert not isinstance(num, (float, bool))
        num = int(num)
        assert num >= 0
    except (AssertionError, TypeError, ValueError):
        raise GenericException("expected natural number, got '{}'", str(num), internal=True)

    term = Zero()
    for __ in range(num):
        term = Succ(term)
    return term


LITERAL = re.compile(r"(?<![A-Za-z0-9])[0-9]+(?![A-Za-z0-9])")


def cnumberify(expr):
    """Replaces every decimal literal in expr with the numeral it denotes: succ 2 becomes succ succ succ 0."""
    return LITERAL.sub(lambda match: numeral(match.group()).expr, expr)


def number(term):
    """Returns the int denoted by term. If term isn't a numeric value, returns None."""
    if not term.is_numeric:
        return None

    num = 0
    while isinstance(term, Succ):
        term = term.operand
        num += 1
    return num


def numberify(term):
    """Renders term with every numeric value written as a decimal number."""
    num = number(term)
    if num is not None:
        return str(num)
    if not term.nodes:
        return term.expr

    rendered = [numberify(node) for node in term.nodes]
    if len(rendered) == 3:
        return "if {} then {} else {}".format(*rendered)
    return f"{term.KEYWORD} {rendered[0]}"
