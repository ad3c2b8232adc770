"""Handles interactive/command-line mode for the poop interpreter. Uses cmd as backend."""

import cmd

from poop.pure.lexical import POOP, POOPING, QOOQ, tokenize


class Shell(cmd.Cmd):
    """poop interpreter shell. Each balanced input is run as a fresh program on the session's host."""
    intro = "poop interpreter :: Python backend\nType '?' or 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    SETTINGS = {
        "lazy": ("lazy_mode", "bool"),
        "debug": ("debug_mode", "bool"),
        "trace": ("trace_mode", "bool"),
        "steps": ("max_steps", "int"),
    }

    def __init__(self, sess, error_handler, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess
        self.error_handler = error_handler
        self.error_handler.fatal = False

        self._tmp_line = ""

    @staticmethod
    def is_open(source):
        """Whether or not source has more poop/pooping openers than qooq closers, i.e. needs another line."""
        tokens = tokenize(source)
        openers = sum(1 for token in tokens if token in (POOP, POOPING))
        return openers > tokens.count(QOOQ)

    def default(self, line):
        """Executes arbitrary poop program text."""
        with self.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            source = f"{self._tmp_line}\n{line}" if self._tmp_line else line

            if self.is_open(source):
                self._tmp_line = source
                self.prompt = self.secondary_prompt
                return

            self._tmp_line = ""
            self.prompt = self._tmp_prompt

            self.sess.run_sync(source)
            self.sess.host.end_line()

    def do_set(self, arg):
        """Changes an option for the next runs: set lazy|debug|trace true|false, set steps N (0 = no limit)."""
        try:
            name, value = arg.split()
            attr, kind = Shell.SETTINGS[name]
            value = int(value) if kind == "int" else {"true": True, "false": False}[value.lower()]
        except (KeyError, ValueError):
            print(f"usage: set {{{'|'.join(Shell.SETTINGS)}}} VALUE")
            return
        setattr(self.sess.options, attr, value)

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the poop interpreter!\n\n"
              "poop is a tiny untyped rewriting language: functions, applications, macros, Po...op literals and \n"
              "the built-ins Print and Input. Programs can span several lines: the shell waits until every \n"
              "'poop'/'pooping' is closed by a 'qooq'.\n\n"
              "Try it out by typing 'pooping Print poopy PoHiop qooq'. Macros last for one program only.\n\n"
              "Options: 'set lazy false' selects the legacy strategy, 'set debug true' and 'set trace true' log \n"
              "each rewrite, 'set steps N' changes the step limit.")

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
