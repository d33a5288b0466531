"""Session control for arith programs. Runs the calculus either in command line mode or file interpretation mode, one
program per line.
"""

from arith.lang.error import GenericException
from arith.lang.lexical import ExecStmt


class Session:
    """Governs an arith session: the queued programs and the values they produced."""
    SH_FILE = "<in>"  # command-line interpreter filename
    COMMENT = ";;"

    def __init__(self, error_handler, path, cmd_line, numbers=False, max_depth=None):
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path            # used for error messages
        self.cmd_line = cmd_line    # whether or not in command-line mode
        self.numbers = numbers      # whether or not decimal numbers are read and written for numerals
        self.max_depth = max_depth  # nesting guard handed to the parser

        self.to_exec = {}  # dict of line num: ExecStmts to execute
        self.results = []

        if self.cmd_line:
            self.error_handler.fatal = False

        if path != Session.SH_FILE:
            exprs = []
            add_to_prev = False

            try:
                with open(path, "r") as file:
                    for line_num, line in enumerate(file):
                        __, add_to_prev = self.preprocess_line(line, line_num + 1, add_to_prev, exprs)
            except OSError:
                raise GenericException("'{}' could not be opened", path, diagnosis=False)

            for expr in exprs:
                self.add(*expr)

        elif not cmd_line:
            raise GenericException("'<in>' is a reserved filename", diagnosis=False)

    @staticmethod
    def preprocess_line(line, line_num, add_to_prev, exprs=None):
        """Preprocesses a line from a file or command-line. In command-line mode, exprs can be ignored (used to keep
        track of file's exprs), but add_to_prev will indicate whether a line continuation is necessary. Returns
        updated value of line and add_to_prev. Must be called before calling add.
        """
        if Session.COMMENT in line:
            line = line[:line.index(Session.COMMENT)]  # get rid of comments

        line = ExecStmt.preprocess(line)
        if exprs is not None:
            if line.strip() and not add_to_prev:
                exprs.append((line, line_num))
            elif add_to_prev:
                popped = exprs.pop()
                line = popped[0] + " " + line.strip()
                exprs.append((line, popped[1]))

        return line, line.count("(") > line.count(")")

    def add(self, expr, line_num):
        """Adds a program to the current session. Reduction is delayed until run is called."""
        self.error_handler.register_line(self.path, expr, line_num)  # in case error is raised

        self.to_exec[line_num] = ExecStmt(expr, max_depth=self.max_depth, numbers=self.numbers)

        self.error_handler.remove_line(self.path)  # error was not raised

    def run(self):
        """Runs this session's programs by reducing them to values. Will raise any errors that are encountered."""
        for line_num, exec_stmt in list(self.to_exec.items()):
            self.error_handler.register_line(self.path, str(exec_stmt), line_num)

            try:
                self.results.append(exec_stmt.execute(self.error_handler))
            finally:
                if self.cmd_line:
                    del self.to_exec[line_num]

            self.error_handler.remove_line(self.path)

    def pop(self):
        """Returns the newest result, removing it from the session."""
        return self.results.pop()
