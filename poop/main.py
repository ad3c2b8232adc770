"""Runs .poop files, or the interactive shell when no file is given. Also uses the error handling context manager.
Called from the poop executable script and from `python -m poop`.
"""

import argparse
import sys

from poop.lang.error import ErrorHandler
from poop.lang.host import ConsoleHost
from poop.lang.options import DEFAULT_MAX_STEPS, Options
from poop.lang.session import Session
from poop.lang.shell import Shell


def build_parser():
    parser = argparse.ArgumentParser(prog="poop", description="Interpreter for the poop esolang.")
    parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
    parser.add_argument("--debug", action="store_true", help="log every rewrite")
    parser.add_argument("--trace", action="store_true", help="dump the whole program before every step")
    parser.add_argument("--lazy", default="true", metavar="{true,false}", type=str,
                        help="lazy (call-by-name) evaluation, or false for the legacy eager strategy (default: true)")
    parser.add_argument("--max-steps", default=DEFAULT_MAX_STEPS, type=int, metavar="N",
                        help=f"stop after N reduction steps, 0 for no limit (default: {DEFAULT_MAX_STEPS})")
    parser.add_argument("--steps", action="store_true", help="log the total number of steps (with --debug)")
    parser.add_argument("--step-no", action="store_true", help="prefix log lines with the step number")
    parser.add_argument("--space-literal", action="store_true", help="decode the bare literal Poop as a space")
    parser.add_argument("--lenient-names", action="store_true",
                        help="allow control characters as macro names (older language versions)")
    return parser


def main(argv=None):
    """Runs poop interpreter. Called from poop executable script."""
    assert sys.version_info >= (3, 8), "poop cannot be run with python < 3.8"

    host = ConsoleHost()
    with ErrorHandler(log=host.log) as error_handler:
        parser = build_parser()
        args = parser.parse_args(argv)

        if args.lazy.lower() not in ("true", "false"):
            parser.error(f"--lazy expects true or false, got '{args.lazy}'")

        sess = Session(host, Options.from_args(args))

        if args.file is not None:
            error_handler.register_file(args.file)
            sess.run_sync(sess.load(args.file))
            host.end_line()

        else:
            Shell(sess, error_handler).cmdloop()
