"""Error handling for the Hezarfen language.

Two kinds of errors are never mixed up:
    - syntax errors, found by the scanner and the parser. They are reported as soon as they are found, scanning and
      parsing carry on, and the program is not run if there was at least one.
    - runtime errors, found by the interpreter. The first one stops the program.

Only GenericExceptions should reach the ErrorHandler: any other exception that makes it all the way up is assumed to be
an internal issue.
"""

import sys

from termcolor import colored

from hezarfen.core.tokens import TokenType

EX_USAGE = 64     # bad command line
EX_DATAERR = 65   # scan/parse errors, unreadable script
EX_SOFTWARE = 70  # runtime error


class GenericException(Exception):
    """Superclass for every Hezarfen error. token is the offending token, if there is one."""
    exit_code = EX_SOFTWARE  # used if this error ends the process

    def __init__(self, msg, token=None):
        super().__init__(msg)
        self.msg = msg
        self.token = token


class SourceError(GenericException):
    """Raised when a script cannot be read."""
    exit_code = EX_DATAERR


class ParseError(GenericException):
    """Raised by the parser to unwind to the closest statement boundary. Never leaves the parser."""
    exit_code = EX_DATAERR


class RuntimeException(GenericException):
    """Raised by the interpreter when a program does something illegal, e.g. adds a string and a bool."""

    def __init__(self, token, msg):
        super().__init__(msg, token)


class ErrorHandler:
    """Diagnostics sink shared by the scanner, the parser and the interpreter. Also works as a context manager that
    turns stray exceptions into error messages instead of Python tracebacks.
    """
    SYNTAX = "yellow"
    ERROR = "red"

    def __init__(self, fatal=True, out=None):
        self.fatal = fatal  # whether or not to exit after an error escapes the context manager
        self.out = out      # None means sys.stdout at the time of printing

        self.had_error = False
        self.had_runtime_error = False

    def report(self, line, where, message):
        """Reports a syntax error. where gives the position within the line, e.g. " at 'foo'"."""
        self._print(self._colored(f"[line {line}] Error{where}: ", ErrorHandler.SYNTAX) + message)
        self.had_error = True

    def error(self, token, message):
        """Reports a syntax error at token."""
        if token.type is TokenType.EOF:
            self.report(token.line, " at end", message)
        else:
            self.report(token.line, f" at '{token.lexeme}'", message)

    def runtime_error(self, error):
        """Reports a RuntimeException raised while interpreting."""
        self._print(self._colored("error: ", ErrorHandler.ERROR) + f"{error.msg}\n[line {error.token.line}]")
        self.had_runtime_error = True

    def reset(self):
        """Forgets previous errors. Used between lines in the interactive shell."""
        self.had_error = False
        self.had_runtime_error = False

    def throw(self, error, internal=False):
        """Reports an error that escaped the whole pipeline, then exits if fatal."""
        error_msg = ""
        if internal:
            error_msg += self._colored("[internal] ", ErrorHandler.ERROR)
        error_msg += self._colored("error: ", ErrorHandler.ERROR) + error.msg
        if error.token is not None:
            error_msg += f"\n[line {error.token.line}]"

        self._print(error_msg)
        if error.exit_code == EX_DATAERR:
            self.had_error = True
        else:
            self.had_runtime_error = True

        if self.fatal:
            sys.exit(error.exit_code)

    def _colored(self, text, color):
        """Bold colored text. Color is left to termcolor (tty, NO_COLOR, FORCE_COLOR) when printing to stdout, and
        turned off for any other stream that is not a terminal.
        """
        no_color = None
        if self.out is not None:
            isatty = getattr(self.out, "isatty", None)
            no_color = not (isatty is not None and isatty())
        return colored(text, color, attrs=["bold"], no_color=no_color)

    def _print(self, msg):
        print(msg, file=self.out if self.out is not None else sys.stdout)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(GenericException("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(GenericException("maximum recursion depth exceeded"))
        elif exc_type is not None and issubclass(exc_type, GenericException):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(GenericException(f"unknown error: '{exc_type.__name__}: {exc_val}'"), internal=True)
            do_exit = True

        return not do_exit
