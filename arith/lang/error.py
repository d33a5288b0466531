"""Error handling for the arith calculus. Only GenericExceptions should be encountered during running: if another type
of error is raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.

The core (parser and evaluator) only ever raises; printing is left to ErrorHandler.
"""

import sys

from termcolor import colored


class GenericException(Exception):
    """Templates an error message so that it can be used to throw an arith error. exprs[0] should be the source text
    that start/end index into.
    """

    def __init__(self, msg, exprs=None, start=0, end=-1, diagnosis=True, internal=False):
        """Parses args for GenericException."""
        if exprs is None:
            exprs = ""
        if isinstance(exprs, str):
            exprs = [exprs]
        exprs = [str(expr) for expr in exprs]

        self.plain_msg = msg.format(*exprs)
        self.msg = msg.format(*(colored(expr, attrs=["bold"]) for expr in exprs))  # color expr snippets
        self.expr = exprs[0] if exprs else ""
        self.end = end if end != -1 else len(self.expr)  # needed for error display

        self.start = start
        self.diagnosis = diagnosis
        self.internal = internal

        super().__init__(self.plain_msg)


class ArithSyntaxError(GenericException):
    """Source text does not conform to the grammar. position is a character offset into the source, expected the token
    descriptions that would have been accepted there, and found the offending token (None at end of input).
    """

    def __init__(self, source, position, expected, found=None):
        self.source = source
        self.position = position
        self.expected = tuple(expected)
        self.found = found

        end = position + len(found) if found else position + 1
        super().__init__(self.template(), (source, self.describe(self.expected), position, self.found_desc),
                         start=position, end=end)

    @staticmethod
    def template():
        return "'{}' expected {} at position {}, found {}"

    @property
    def found_desc(self):
        if self.found is None:
            return "end of input"
        return "'{}'".format(self.found.encode("unicode_escape").decode("ascii"))

    @staticmethod
    def describe(expected):
        """Human-readable list of expected tokens: 'then', or one of '(', 'true', ..."""
        quoted = [token if token.startswith("<") else f"'{token}'" for token in expected]
        if len(quoted) == 1:
            return quoted[0]
        return "one of " + ", ".join(quoted)


class NestingDepthError(ArithSyntaxError):
    """Terms nest deeper than the parser's configured limit."""

    def __init__(self, source, position, limit, found=None):
        self.limit = limit
        super().__init__(source, position, ["<term nested at most {} deep>".format(limit)], found)

    @staticmethod
    def template():
        return "'{}' exceeds maximum nesting depth: expected {} at position {}, found {}"


class StuckTerm(GenericException):
    """Reduction stopped at a term that is not a value: term is the whole term when no rule applied, subterm the
    innermost non-value on its reduction path.
    """

    def __init__(self, term, subterm=None, original_expr=None):
        self.term = term
        self.subterm = subterm if subterm is not None else term

        if original_expr is None:
            original_expr = term.expr
        super().__init__("'{}' is stuck: no reduction rule applies to '{}'", (original_expr, self.subterm.expr),
                         diagnosis=False)


class ErrorHandler:
    """Context manager that reports arith errors (and KeyboardInterrupt/RecursionError) instead of raising them. Any
    other exception is reported as internal and re-raised. Also prints registered reduction steps when tracing.
    """
    ERROR = "red"
    STEP = "cyan"

    def __init__(self, fatal=True, trace=False):
        self.fatal = fatal
        self.trace = trace
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

    def register_step(self, rule, expr):
        """Prints one reduction step if tracing. Steps are kept by the reducer, not here."""
        if self.trace:
            print("  " + colored(f"{rule:<14}", ErrorHandler.STEP) + expr)

    @staticmethod
    def diagnose(error):
        """Returns offending part of error.expr highlighted and bolded."""
        color = ErrorHandler.ERROR

        diagnosis = "  " + error.expr[:error.start]

        end = max(error.end, 1)
        diagnosis += colored(error.expr[error.start:end], color, attrs=["bold"])
        diagnosis += error.expr[end:] + "\n"

        diagnosis += "  " + " " * error.start
        diagnosis += colored("^" + "~" * (end - error.start - 1), color, attrs=["bold"])

        return diagnosis

    def throw(self, error):
        """Throws error using error and self.traceback. error must be a GenericException, and self.traceback must be a
        dict of file: (line, line_num) representing origination of error.
        """
        error_msg = ""
        lines = 0
        for file, (line, line_num) in self.traceback.items():  # assumes dict is insertion-ordered
            if line:
                error_msg += f"  File '{file}', line {line_num}:\n"
                error_msg += f"    {line}\n"
                lines += 1

        if lines > 1:
            error_msg = "Traceback:\n" + error_msg

        if error.internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])

        error_msg += colored("error: ", ErrorHandler.ERROR, attrs=["bold"]) + error.msg
        print(error_msg)

        if not error.internal and error.expr and error.diagnosis:
            print(ErrorHandler.diagnose(error))

        if self.fatal:
            sys.exit(1)
        self.traceback = {path: (None, None) for path in self.traceback}  # keep registered files for the next line

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(GenericException("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(GenericException("maximum recursion depth exceeded (try a smaller --max-depth)"))
        elif exc_type is not None and issubclass(exc_type, GenericException):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(GenericException(f"unknown error: '{exc_type.__name__}: {exc_val}'", internal=True))
            do_exit = True

        return not do_exit
