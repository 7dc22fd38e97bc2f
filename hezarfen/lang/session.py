"""Session control for the Hezarfen language. Drives source text through the scanner, the parser and the interpreter,
either for a whole file or one command-line entry at a time.
"""

import io
import logging
from collections import Counter

from hezarfen.core.interpreter import Interpreter
from hezarfen.core.parser import Parser
from hezarfen.core.printer import AstPrinter
from hezarfen.core.scanner import Scanner
from hezarfen.core.tokens import TokenType
from hezarfen.lang.error import ErrorHandler, SourceError

logger = logging.getLogger(__name__)


class Session:
    """Governs a Hezarfen session. The interpreter (and so the globals) lives as long as the session does."""
    SH_FILE = "<in>"                     # command-line interpreter filename
    MODES = ("run", "tokens", "ast")     # run the program, or only dump its tokens/syntax trees

    def __init__(self, error_handler, path=SH_FILE, cmd_line=False, mode="run", out=None):
        if mode not in Session.MODES:
            raise ValueError(f"unknown mode '{mode}'")

        self.error_handler = error_handler
        self.path = path          # used for error messages
        self.cmd_line = cmd_line  # whether or not in command-line mode
        self.mode = mode
        self.out = out            # where dumps and 'print' go; None means sys.stdout

        self.interpreter = Interpreter(error_handler, out)
        self.source = ""

        if self.cmd_line:
            self.error_handler.fatal = False

        if path != Session.SH_FILE:
            try:
                with open(path, "r", encoding="utf-8") as file:
                    self.source = file.read()
            except OSError:
                raise SourceError(f"'{path}' could not be opened")

        elif not cmd_line:
            raise SourceError(f"'{Session.SH_FILE}' is a reserved filename")

    @staticmethod
    def preprocess_line(line, pending=""):
        """Joins line to the pending (unfinished) lines. Returns the joined source and whether or not it still needs
        more lines, i.e. has unclosed braces or parentheses. Brackets inside strings and comments do not count.
        """
        source = f"{pending}\n{line}" if pending else line

        # scan errors are reported for real once the source runs
        tokens = Scanner(source, ErrorHandler(fatal=False, out=io.StringIO())).scan_tokens()
        counts = Counter(token.type for token in tokens)

        add_to_prev = (counts[TokenType.LEFT_BRACE] > counts[TokenType.RIGHT_BRACE]
                       or counts[TokenType.LEFT_PAREN] > counts[TokenType.RIGHT_PAREN])
        return source, add_to_prev

    def scan(self, source):
        tokens = Scanner(source, self.error_handler).scan_tokens()
        logger.debug("%s: scanned %d tokens", self.path, len(tokens))
        return tokens

    def parse(self, source):
        tokens = self.scan(source)
        statements = Parser(tokens, self.error_handler, interactive=self.cmd_line).parse()
        logger.debug("%s: parsed %d statements", self.path, len(statements))
        return statements

    def run(self, source=None):
        """Runs source (the file's contents if None) according to self.mode. Nothing is executed if there was a
        syntax error: check self.error_handler afterwards.
        """
        if source is None:
            source = self.source

        if self.mode == "tokens":
            for token in self.scan(source):
                self._print(str(token))
            return

        statements = self.parse(source)
        if self.error_handler.had_error:
            logger.debug("%s: syntax errors, not running", self.path)
            return

        if self.mode == "ast":
            printer = AstPrinter()
            for stmt in statements:
                self._print(printer.print(stmt))
            return

        self.interpreter.interpret(statements)

    def _print(self, text):
        if self.out is not None:
            print(text, file=self.out)
        else:
            print(text)
