import unittest

from poop.lang.error import PoopSyntaxError
from poop.pure.lexical import Apply, Func, Literal, MacroDef, Token, to_code
from poop.pure.parser import parse_apply_form, parse_poop_form, parse_program, parse_sequence


class ParserTestCase(unittest.TestCase):

    def test_parse_program(self):
        cases = {
            "": [],
            "a PoHiop Poop Pop": [Token("a"), Literal("PoHiop"), Literal("Poop"), Token("Pop")],
            "poop x poops x qooq": [Func("x", [Token("x")])],
            "poop x poops qooq": [Func("x", [])],
            "poop Id is poop x poops x qooq qooq": [MacroDef("Id", [Func("x", [Token("x")])])],
            "pooping f poopy a b qooq": [Apply(Token("f"), [Token("a"), Token("b")])],
            "pooping a b poopy c qooq": [Apply(Token("a b"), [Token("c")])],
            "pooping poop x poops x qooq poopy PoYoop qooq": [
                Apply(Func("x", [Token("x")]), [Literal("PoYoop")])
            ],
            "pooping pooping f poopy a qooq poopy b qooq": [
                Apply(Apply(Token("f"), [Token("a")]), [Token("b")])
            ],
            "pooping Print poopy PoHi\\sthereop qooq // greet\n": [
                Apply(Token("Print"), [Literal("PoHi thereop")])
            ],
        }
        for case, expected in cases.items():
            self.assertEqual(expected, parse_program(case), case)

    def test_multi_node_callee(self):
        nodes = parse_program("pooping poop x poops x qooq y poopy z qooq")
        self.assertEqual([Apply(Token("poop x poops x qooq y"), [Token("z")])], nodes)

    def test_parse_program_errors(self):
        should_raise = [
            "poop",                        # end of input after poop
            "poop X",                      # no keyword after the name
            "poop X qooq",                 # wrong keyword
            "poop x is a qooq",            # macro named like a variable
            "poop X poops a qooq",         # parameter not [a-z_]+
            "poop x1 poops a qooq",
            "poop x poops a",              # missing qooq
            "poop M is a",
            "pooping f a qooq",            # missing poopy
            "pooping f poopy a",           # missing qooq
            "a qooq",                      # leftover tokens
            "poopy",
            "poop x poops x qooq qooq",
        ]
        for case in should_raise:
            self.assertRaises(PoopSyntaxError, parse_program, case)

    def test_error_messages(self):
        with self.assertRaises(PoopSyntaxError) as cm:
            parse_program("poop M is a")
        self.assertIn("qooq", cm.exception.msg)
        self.assertIn("M", cm.exception.msg)

        with self.assertRaises(PoopSyntaxError) as cm:
            parse_program("a b qooq c d e f g h")
        self.assertIn("qooq c d e f", cm.exception.msg)
        self.assertNotIn("g", cm.exception.msg)

        with self.assertRaises(PoopSyntaxError) as cm:
            parse_program("a qooq b\\sc")
        self.assertIn("qooq b\\sc", cm.exception.msg)

    def test_control_character_macro_names(self):
        # older versions of the language only rejected variable-format macro names
        for case in ["poop \\n is a qooq", "poop \\t is a qooq", "poop \\r is a qooq", "poop \\\\ is a qooq"]:
            self.assertRaises(PoopSyntaxError, parse_program, case)

        self.assertEqual([MacroDef("\n", [Token("a")])], parse_program("poop \\n is a qooq", strict=False))
        self.assertRaises(PoopSyntaxError, parse_program, "poop x is a qooq", strict=False)

        nodes = parse_program("poop \\n is a qooq", strict=False)
        self.assertEqual(nodes, parse_program(to_code(nodes), strict=False))

    def test_partial_parsers(self):
        self.assertEqual(([Token("a")], ["qooq", "b"]), parse_sequence(["a", "qooq", "b"]))
        self.assertEqual(([Token("a")], ["poopy"]), parse_sequence(["a", "poopy"]))
        self.assertEqual(([], []), parse_sequence([]))

        node, rest = parse_poop_form(["x", "poops", "x", "qooq", "rest"])
        self.assertEqual(Func("x", [Token("x")]), node)
        self.assertEqual(["rest"], rest)

        node, rest = parse_apply_form(["f", "poopy", "a", "qooq"])
        self.assertEqual(Apply(Token("f"), [Token("a")]), node)
        self.assertEqual([], rest)

    def test_round_trip(self):
        programs = [
            "pooping Print poopy PoHiop qooq",
            "poop Id is poop x poops x qooq qooq pooping Print poopy pooping Id poopy PoYoop qooq qooq",
            "poop K is poop x poops poop y poops x qooq qooq qooq pooping pooping K poopy a qooq poopy b qooq",
            "poop x poops qooq free Poop pooping f poopy qooq",
            "pooping pooping poop f poops f qooq poopy g qooq poopy pooping h poopy Input qooq qooq",
            "pooping Print poopy PoHi\\sthereop qooq",
            "poop Tab is Po\\tab\\\\op qooq pooping Print poopy Tab qooq",
            "pooping a\\sb c poopy d\\ne qooq",
        ]
        for program in programs:
            nodes = parse_program(program)
            self.assertEqual(nodes, parse_program(to_code(nodes)), program)


if __name__ == '__main__':
    unittest.main()
