"""Error handling for the poop language. Only GenericExceptions should be encountered during running: if another type
of error is raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.

There is no way for a poop program to catch an error: every error is fatal to the run that raised it.
"""

import sys

from termcolor import colored


class GenericException(Exception):
    """Templates an error/warning message so that it can be used to throw a poop error/warning. exprs are the snippets
    the message is formatted with; exprs[0] is the context that the diagnosis underlines from start to end.
    """

    def __init__(self, msg, exprs=None, start=0, end=-1, diagnosis=True, internal=False):
        """Parses args for GenericException or warning."""
        if exprs is None:
            exprs = ""
        if isinstance(exprs, str):
            exprs = [exprs]

        self.msg = msg.format(*(colored(expr, attrs=["bold"]) for expr in exprs))  # color expr snippets
        self.expr = exprs[0]  # exprs[0] should be the offending expr that caused the error
        self.end = end if end != -1 else len(self.expr)  # needed for error display

        self.start = start
        self.diagnosis = diagnosis
        self.internal = internal

        super().__init__(self.msg)


class PoopSyntaxError(GenericException):
    """Raised while parsing, before any reduction happens: bad terminators, bad names, leftover tokens."""


class ReductionError(GenericException):
    """Raised by the reducer: macro redefinition, macro callee that is not a single node, runaway macro expansion."""


class ErrorHandler:
    """Context manager that will silently suppress Python errors and report custom poop errors through log."""
    ERROR = "red"
    WARNING = "magenta"

    def __init__(self, fatal=True, log=print):
        self.fatal = fatal
        self.log = log
        self.path = None

    def register_file(self, path):
        """Registers the path of the program being run, so that reports can name it."""
        self.path = path

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

    def _location(self):
        return colored(f"{self.path}: ", attrs=["bold"]) if self.path else ""

    def throw(self, error):
        """Reports error, which must be a GenericException. Exits the process if this handler is fatal."""
        error_msg = self._location()

        if error.internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])

        error_msg += colored("error: ", ErrorHandler.ERROR, attrs=["bold"]) + error.msg
        self.log(error_msg)

        if not error.internal and error.expr and error.diagnosis:
            self.log(ErrorHandler.diagnose(error))

        if self.fatal:
            sys.exit(1)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(GenericException("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(GenericException("normal form might exist, but maximum recursion depth exceeded"))
        elif exc_type is not None and issubclass(exc_type, GenericException):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(GenericException("unknown error: '{}: {}'", [exc_type.__name__, str(exc_val)], internal=True))
            do_exit = True

        return not do_exit
