"""Handles interactive/command-line mode for the Hezarfen interpreter. Uses cmd as backend."""

import cmd

from hezarfen.lang.session import Session


class Shell(cmd.Cmd):
    """Hezarfen interpreter shell."""
    intro = "Hezarfen interpreter :: Python backend\nType 'help' for more information, 'exit' or Ctrl+D to quit."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess
        self._tmp_line = ""

    def default(self, line):
        """Executes arbitrary Hezarfen code."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            source, add_to_prev = Session.preprocess_line(line, self._tmp_line)

            if add_to_prev:
                self._tmp_line = source
                self.prompt = self.secondary_prompt
                return

            self._tmp_line = ""
            self.prompt = self._tmp_prompt

            try:
                self.sess.run(source)
            finally:
                self.sess.error_handler.reset()  # a bad line should not poison the rest of the session

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the Hezarfen interpreter!\n\n"
              "Hezarfen is a small dynamically-typed scripting language with numbers, strings, booleans, nil, \n"
              "variables, blocks, if/while/for, and first-class functions with closures.\n\n"
              "Try it out by typing 'var greeting = \"hello\";'. Then type 'print greeting + \" world\";'. \n"
              "A bare expression such as '1 + 2' is printed. Unclosed braces continue on the next line.")

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
