"""Runs the arith calculus over a file of programs, or in command-line mode. Also uses the error handling context
manager. Called from the arith console script.

Python version must be >=3.7, because error handling requires that dicts are insertion-ordered.
"""

import argparse
import sys

from arith.core.lexical import TermParser
from arith.lang.error import ErrorHandler, GenericException
from arith.lang.session import Session
from arith.lang.shell import Shell


def build_parser():
    parser = argparse.ArgumentParser(prog="arith", description="Untyped arithmetic/boolean calculus interpreter.")
    parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
    parser.add_argument("--trace", action="store_true", help="print every reduction step and the rule it used")
    parser.add_argument("--numbers", action="store_true", help="print numeric values as decimal numbers")
    parser.add_argument("--max-depth", type=int, default=TermParser.MAX_DEPTH,
                        help=f"maximum term nesting depth (default: {TermParser.MAX_DEPTH})")
    return parser


def main(argv=None):
    """Runs arith interpreter. Called from arith console script."""
    assert sys.version_info >= (3, 7), "arith cannot be run with python < 3.7"

    with ErrorHandler() as error_handler:
        args = build_parser().parse_args(argv)
        error_handler.trace = args.trace

        if args.max_depth < 1:
            raise GenericException("--max-depth must be at least 1, got '{}'", str(args.max_depth), diagnosis=False)

        if args.file is not None:
            sess = Session(error_handler, args.file, cmd_line=False, numbers=args.numbers, max_depth=args.max_depth)
            sess.run()

            for result in sess.results:
                print(result)

        else:
            sess = Session(error_handler, Session.SH_FILE, cmd_line=True, numbers=args.numbers,
                           max_depth=args.max_depth)
            Shell(sess).cmdloop()


if __name__ == "__main__":
    main()
