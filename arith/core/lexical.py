"""Arithmetic/boolean calculus abstract syntax tree token generator and parser.

The `core` directory contains the calculus itself (terms, parsing and reduction), with no input/output.

Formally, the arith calculus can be defined as

```
<input>  ::= <term>                                    ; all of the input must be consumed
<term>   ::= "(" <term> ")"                            ; grouping only: never kept in the tree
           | "true" | "false" | "0"                    ; constants, also values
           | "if" <term> "then" <term> "else" <term>   ; all three branches are required
           | "pred" <term>                             ; prefix operators bind exactly one term:
           | "succ" <term>                             ; - pred succ 0 = pred (succ (0))
           | "iszero" <term>
```

Tokens are "(", ")" and maximal runs of letters/digits, separated by one or more spaces (parentheses don't need
any). Keywords are matched against the whole run, so `iszero` is never mistaken for `if` and `succ0` is an unknown
token. Tabs, newlines and all other characters are rejected.

Source: Pierce, Types and Programming Languages, chapter 3 (figures 3-1 and 3-2).
"""

import re
from abc import abstractmethod, ABC
from dataclasses import dataclass

from arith.lang.error import ArithSyntaxError, NestingDepthError


@dataclass(frozen=True)
class Token:
    """A single token and its character offset in the source."""
    text: str
    start: int

    @property
    def end(self):
        return self.start + len(self.text)


class Builtin:
    """Built-in arith tokens: '(', ')' """
    TOKENS = ["(", ")"]
    SEPARATOR = " "
    WORD = re.compile(r"[A-Za-z0-9]+")

    @staticmethod
    def tokenize(expr):
        """Yields the Tokens of expr lazily. Raises ArithSyntaxError once it reaches a character that can't start a
        token, so earlier grammar errors are reported first.
        """
        idx = 0
        while idx < len(expr):
            char = expr[idx]
            if char == Builtin.SEPARATOR:
                idx += 1
            elif char in Builtin.TOKENS:
                yield Token(char, idx)
                idx += 1
            else:
                match = Builtin.WORD.match(expr, idx)
                if not match:
                    raise ArithSyntaxError(expr, idx, [Builtin.SEPARATOR, "<keyword>"] + Builtin.TOKENS, char)
                yield Token(match.group(), idx)
                idx = match.end()


class ArithTerm(ABC):
    """Represents a valid arith term. Terms are immutable: reduction builds new terms instead of changing nodes."""
    KEYWORD = None

    def __init__(self, *nodes):
        self.nodes = tuple(nodes)
        self._cls = type(self).__name__

    @abstractmethod
    def parts(self):
        """This method should return the concrete syntax of this term as a list of keywords and nodes."""

    @property
    def expr(self):
        """Canonical concrete syntax. Rendered on demand, iteratively."""
        words = []
        stack = [self]
        while stack:
            part = stack.pop()
            if isinstance(part, str):
                words.append(part)
            else:
                stack.extend(reversed(part.parts()))
        return " ".join(words)

    @classmethod
    @abstractmethod
    def tokenize(cls, parser):
        """This method should build a term of this type, given that parser has just consumed cls.KEYWORD. Sub-terms are
        parsed by calling parser.parse_term.
        """

    @abstractmethod
    def step(self):
        """This method should apply a single reduction rule and return (new term, rule name), or None if no rule
        applies (the term is either a value or stuck).
        """

    @property
    def is_numeric(self):
        """Whether or not this term is a numeric value (0 or succ of a numeric value)."""
        return False

    @property
    def is_value(self):
        """Whether or not this term is irreducible."""
        return self.is_numeric

    @classmethod
    def check_grammar(cls, token):
        """Whether or not token starts a term of this type."""
        return token is not None and token.text == cls.KEYWORD

    @classmethod
    def term_types(cls):
        """Concrete term types, in keyword-priority order."""

        def _leaves(cls):
            for subclass in cls.__subclasses__():
                if subclass.__subclasses__():
                    yield from _leaves(subclass)
                else:
                    yield subclass

        return list(_leaves(cls))

    @classmethod
    def keywords(cls):
        return [subclass.KEYWORD for subclass in cls.term_types()]

    @classmethod
    def generate_tree(cls, expr, max_depth=None):
        """Converts expr to the proper ArithTerm type, raises ArithSyntaxError if expr is not a valid term."""
        return TermParser(expr, max_depth).parse()

    def display(self, indents=0):
        """Recursively displays ArithTerm tree with readable format.

        Format:
        <ArithTerm>(expr='<expr>', nodes=[
            <ArithTerm>(expr='<expr>', nodes=[
                ...
                <ArithTerm>(expr='<expr>')  # <-- if nodes is empty
            ])
        ])
        """
        result = f"{'    ' * indents}{self._cls}(expr='{self.expr}'"
        if self.nodes:
            result += ", nodes=["
            for node in self.nodes:
                result += "\n" + node.display(indents + 1) + ","
            result = result[:-1] + f"\n{'    ' * indents}]"
        return result + ")"

    def get(self, idxs):
        """Gets node at positions specified by idxs. idxs=[] will return self."""
        if not idxs:
            return self

        this, *others = idxs
        return self.nodes[this].get(others)

    def __repr__(self):
        return f"{self._cls}('{self.expr}')"

    def __str__(self):
        return self.expr

    def __eq__(self, other):
        return isinstance(other, type(self)) and self.expr == other.expr

    def __hash__(self):
        return hash((self._cls, self.expr))


class Constant(ArithTerm):
    """Nullary terms. Constants are values, so they never step."""

    def parts(self):
        return [self.KEYWORD]

    @classmethod
    def tokenize(cls, parser):
        return cls()

    def step(self):
        return None

    @property
    def is_value(self):
        return True


class TrueTerm(Constant):
    KEYWORD = "true"


class FalseTerm(Constant):
    KEYWORD = "false"


class Zero(Constant):
    KEYWORD = "0"

    @property
    def is_numeric(self):
        return True


class IfThenElse(ArithTerm):
    """Conditional: nodes are (condition, then-branch, else-branch)."""
    KEYWORD = "if"
    THEN = "then"
    ELSE = "else"

    def parts(self):
        cond, then, otherwise = self.nodes
        return [self.KEYWORD, cond, self.THEN, then, self.ELSE, otherwise]

    @classmethod
    def tokenize(cls, parser):
        cond = parser.parse_term()
        parser.expect(cls.THEN)
        then = parser.parse_term()
        parser.expect(cls.ELSE)
        otherwise = parser.parse_term()
        return cls(cond, then, otherwise)

    def step(self):
        cond, then, otherwise = self.nodes
        if isinstance(cond, TrueTerm):
            return then, "E-IfTrue"
        elif isinstance(cond, FalseTerm):
            return otherwise, "E-IfFalse"

        reduced = cond.step()
        if reduced is None:
            return None
        return IfThenElse(reduced[0], then, otherwise), "E-If"


class PrefixOp(ArithTerm):
    """Operator applied to exactly one term."""
    CONGRUENCE = None

    @property
    def operand(self):
        return self.nodes[0]

    def parts(self):
        return [self.KEYWORD, self.operand]

    @classmethod
    def tokenize(cls, parser):
        return cls(parser.parse_term())

    @abstractmethod
    def contract(self):
        """This method should return (new term, rule name) if self is itself a redex, else None."""

    def step(self):
        contracted = self.contract()
        if contracted is not None:
            return contracted

        reduced = self.operand.step()
        if reduced is None:
            return None
        return type(self)(reduced[0]), self.CONGRUENCE


class Pred(PrefixOp):
    KEYWORD = "pred"
    CONGRUENCE = "E-Pred"

    def contract(self):
        if isinstance(self.operand, Zero):
            return Zero(), "E-PredZero"
        elif isinstance(self.operand, Succ) and self.operand.is_numeric:
            return self.operand.operand, "E-PredSucc"


class Succ(PrefixOp):
    KEYWORD = "succ"
    CONGRUENCE = "E-Succ"

    def __init__(self, operand):
        self._numeric = operand.is_numeric  # cached so numerals don't re-walk their chain
        super().__init__(operand)

    @property
    def is_numeric(self):
        return self._numeric

    def contract(self):
        """succ only reduces through its operand."""


class IsZero(PrefixOp):
    KEYWORD = "iszero"
    CONGRUENCE = "E-IsZero"

    def contract(self):
        if isinstance(self.operand, Zero):
            return TrueTerm(), "E-IsZeroZero"
        elif isinstance(self.operand, Succ) and self.operand.is_numeric:
            return FalseTerm(), "E-IsZeroSucc"


class TermParser:
    """Recursive-descent parser over the token stream of a single source string. One parser per source."""
    MAX_DEPTH = 256
    OPEN, CLOSE = Builtin.TOKENS

    def __init__(self, expr, max_depth=None):
        self.expr = expr
        self.max_depth = max_depth if max_depth is not None else TermParser.MAX_DEPTH
        self.tokens = Builtin.tokenize(expr)
        self.term_types = ArithTerm.term_types()
        self.lookahead = None
        self.pulled = False
        self.depth = 0

    @property
    def term_start(self):
        """Descriptions of every token that can start a term."""
        return [TermParser.OPEN] + [term_type.KEYWORD for term_type in self.term_types]

    def peek(self):
        """Returns the next unconsumed token, or None at end of input."""
        if not self.pulled:
            self.lookahead = next(self.tokens, None)
            self.pulled = True
        return self.lookahead

    def advance(self):
        """Consumes and returns the next token."""
        token = self.peek()
        self.pulled = False
        return token

    def fail(self, expected):
        """Raises ArithSyntaxError at the next unconsumed token."""
        token = self.peek()
        if token is None:
            raise ArithSyntaxError(self.expr, len(self.expr), expected)
        raise ArithSyntaxError(self.expr, token.start, expected, token.text)

    def expect(self, text):
        """Consumes and returns the next token if it is text."""
        token = self.peek()
        if token is None or token.text != text:
            self.fail([text])
        return self.advance()

    def parse(self):
        """Parses the whole source as a single term."""
        term = self.parse_term()
        if self.peek() is not None:
            self.fail(["<end of input>"])
        return term

    def parse_term(self):
        """Parses one term starting at the next token. Keywords take priority over grouping."""
        token = self.peek()
        if self.depth >= self.max_depth:
            position = token.start if token else len(self.expr)
            raise NestingDepthError(self.expr, position, self.max_depth, token.text if token else None)

        self.depth += 1
        try:
            for term_type in self.term_types:
                if term_type.check_grammar(token):
                    self.advance()
                    return term_type.tokenize(self)

            if token is not None and token.text == TermParser.OPEN:
                self.advance()
                term = self.parse_term()
                self.expect(TermParser.CLOSE)
                return term

            self.fail(self.term_start)
        finally:
            self.depth -= 1


def parse(expr, max_depth=None):
    """Parses expr into an ArithTerm, raising ArithSyntaxError if it isn't exactly one well-formed term."""
    return ArithTerm.generate_tree(expr, max_depth)
