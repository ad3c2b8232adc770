import io
import unittest
from contextlib import redirect_stdout

from poop.lang.error import ErrorHandler
from poop.lang.host import BufferedHost
from poop.lang.session import Session
from poop.lang.shell import Shell


class ShellTestCase(unittest.TestCase):

    def setUp(self):
        self.host = BufferedHost()
        self.logs = []
        self.shell = Shell(Session(self.host), ErrorHandler(log=self.logs.append), stdout=io.StringIO())

    def test_is_open(self):
        should_fail = ["", "a b", "poop x poops x qooq", "pooping f poopy a qooq", "a qooq qooq"]
        for case in should_fail:
            self.assertFalse(Shell.is_open(case), case)

        should_pass = ["poop Id is", "pooping Print poopy", "poop M is pooping f poopy a qooq", "poop /* qooq */ x"]
        for case in should_pass:
            self.assertTrue(Shell.is_open(case), case)

    def test_error_handler_is_not_fatal(self):
        self.assertFalse(self.shell.error_handler.fatal)

    def test_run_line(self):
        self.shell.onecmd("pooping Print poopy PoHiop qooq")
        self.assertEqual("Hi", self.host.text)

    def test_line_continuation(self):
        self.shell.onecmd("pooping Print poopy")
        self.assertEqual(Shell.secondary_prompt, self.shell.prompt)
        self.shell.onecmd("PoHiop")
        self.assertEqual("", self.host.text)

        self.shell.onecmd("qooq")
        self.assertEqual(Shell._tmp_prompt, self.shell.prompt)
        self.assertEqual("Hi", self.host.text)

    def test_each_program_is_a_fresh_run(self):
        self.shell.onecmd("poop A is PoAop qooq")
        self.shell.onecmd("poop A is PoBop qooq pooping Print poopy A qooq")
        self.assertEqual("B", self.host.text)
        self.assertEqual([], self.logs)

    def test_errors_are_reported(self):
        self.shell.onecmd("a qooq")
        self.assertTrue(any("error: " in line for line in self.logs))

        self.shell.onecmd("pooping Print poopy PoStillop qooq")
        self.assertEqual("Still", self.host.text)

    def test_set(self):
        options = self.shell.sess.options
        cases = {
            "lazy false": ("lazy_mode", False),
            "debug TRUE": ("debug_mode", True),
            "trace true": ("trace_mode", True),
            "steps 10": ("max_steps", 10),
        }
        for case, (attr, value) in cases.items():
            self.shell.onecmd(f"set {case}")
            self.assertEqual(value, getattr(options, attr), case)
        self.assertIs(options, self.shell.sess.reducer.options)

        with redirect_stdout(io.StringIO()) as out:
            for case in ["lazy maybe", "speed 3", "steps", "steps many"]:
                self.shell.onecmd(f"set {case}")
        self.assertEqual(4, out.getvalue().count("usage: set"))

    def test_exit(self):
        self.assertTrue(self.shell.onecmd("exit"))


if __name__ == '__main__':
    unittest.main()
