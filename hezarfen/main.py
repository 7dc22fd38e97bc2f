"""Runs Hezarfen scripts, or starts the interactive shell when no script is given. Also uses the error handling context
manager. Called from the hezarfen console script.

Exit status after a script: 0 on success, 65 on syntax errors or an unreadable file, 70 on a runtime error, 64 on a bad
command line. Set LOGLEVEL=DEBUG to trace the pipeline on stderr.
"""

import argparse
import logging
import os
import sys

from hezarfen.lang.error import EX_DATAERR, EX_SOFTWARE, EX_USAGE, ErrorHandler
from hezarfen.lang.session import Session
from hezarfen.lang.shell import Shell


class ArgumentParser(argparse.ArgumentParser):
    """argparse exits with 2 on usage errors; use EX_USAGE instead."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(EX_USAGE, f"{self.prog}: error: {message}\n")


def _get_log_level():
    """Log level from the LOGLEVEL environment variable. Defaults to WARNING if not set."""
    level = getattr(logging, os.getenv("LOGLEVEL", "").upper(), None)
    if isinstance(level, int):
        return level
    return logging.WARNING


def main():
    """Runs Hezarfen interpreter. Called from hezarfen executable script."""
    assert sys.version_info >= (3, 7), "hezarfen cannot be run with python < 3.7"

    logging.basicConfig(level=_get_log_level(), format="%(message)s", stream=sys.stderr)

    with ErrorHandler() as error_handler:
        parser = ArgumentParser(prog="hezarfen", description="Hezarfen tree-walking interpreter.")
        parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
        dump = parser.add_mutually_exclusive_group()
        dump.add_argument("--tokens", action="store_true", help="print the scanned tokens instead of running")
        dump.add_argument("--ast", action="store_true", help="print the parsed syntax trees instead of running")
        args = parser.parse_args()

        mode = "tokens" if args.tokens else "ast" if args.ast else "run"

        if args.file is not None:
            sess = Session(error_handler, args.file, cmd_line=False, mode=mode)
            sess.run()

            if error_handler.had_error:
                sys.exit(EX_DATAERR)
            if error_handler.had_runtime_error:
                sys.exit(EX_SOFTWARE)

        else:
            Shell(Session(error_handler, Session.SH_FILE, cmd_line=True, mode=mode)).cmdloop()


if __name__ == "__main__":
    main()
