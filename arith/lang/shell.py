"""Handles interactive/command-line mode for arith. Uses cmd as backend."""

import cmd


class Shell(cmd.Cmd):
    """Arith calculus interpreter shell."""
    intro = "Arith calculus interpreter :: Python backend\nType '?' or 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess

        self._tmp_line = ""
        self.line_num = 0

    def default(self, line):
        """Executes arbitrary arith program."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.line_num += 1
            if self._tmp_line:
                line = self._tmp_line + " " + line
            line, add_to_prev = self.sess.preprocess_line(line, self.line_num, self._tmp_line)

            if add_to_prev:
                self._tmp_line = line
                self.prompt = self.secondary_prompt
                return

            self._tmp_line = ""
            self.prompt = self._tmp_prompt
            if not line.strip():
                return  # comment-only line

            self.sess.add(line, self.line_num)
            self.sess.run()

            if self.sess.results:
                print(self.sess.pop())

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the arith interpreter!\n\n"
              "Arith is the untyped calculus of booleans and natural numbers: true, false, 0,\n"
              "succ, pred, iszero and if-then-else. Every program is reduced one step at a\n"
              "time until it is a value, or gets stuck.\n\n"
              "Try it out by typing 'if iszero 0 then succ 0 else 0'. This gives 'succ 0' as\n"
              "the result. 'succ true' is stuck: no rule applies to it.")

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
