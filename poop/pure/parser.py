"""Recursive-descent parser for the poop language. Turns the token list produced by `lexical.tokenize` into a list of
sibling nodes.

Every parse function returns `(result, rest)`, where rest is the list of tokens that were not consumed, or raises a
PoopSyntaxError naming the offending token. `qooq` and `poopy` end a sequence but are left for the caller to check.
"""

from poop.lang.error import PoopSyntaxError
from poop.pure.lexical import (Apply, CONTROL_NAMES, Func, IS, Literal, MacroDef, POOP, POOPING, POOPS, POOPY, QOOQ,
                               Token, collapse, escape_for_trace, is_literal_token, is_variable_name, tokenize)


TERMINATORS = (QOOQ, POOPY)


class Parser:
    """Cursor over a token list. strict also rejects the single control characters as macro names, which older
    versions of the language allowed.
    """
    CONTEXT = 3  # tokens shown on either side of the offending one in a diagnosis

    def __init__(self, tokens, strict=True):
        self.tokens = list(tokens)
        self.pos = 0
        self.strict = strict

    @property
    def rest(self):
        return self.tokens[self.pos:]

    def peek(self):
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def advance(self):
        token = self.tokens[self.pos]
        self.pos += 1
        return token

    def error(self, msg, *exprs, pos=None):
        """Returns a PoopSyntaxError whose diagnosis underlines the token at pos (default: current token). msg is
        formatted with exprs starting at {1}: {0} is the surrounding source. Token exprs must already be escaped.
        """
        if pos is None:
            pos = self.pos
        before = [escape_for_trace(token) for token in self.tokens[max(pos - Parser.CONTEXT, 0):pos]]
        after = [escape_for_trace(token) for token in self.tokens[pos:pos + Parser.CONTEXT + 1]]

        context = " ".join(before + after) if before or after else "<end of input>"
        start = len(" ".join(before)) + (1 if before and after else 0)
        end = start + len(after[0]) if after else len(context)

        return PoopSyntaxError(msg, [context, *exprs], start=start, end=end)

    def parse_sequence(self):
        """Parses sibling nodes until the tokens run out or the next token is a terminator."""
        nodes = []
        while self.peek() is not None and self.peek() not in TERMINATORS:
            token = self.advance()
            if token == POOP:
                nodes.append(self.parse_poop_form())
            elif token == POOPING:
                nodes.append(self.parse_apply_form())
            elif is_literal_token(token):
                nodes.append(Literal(token))
            else:
                nodes.append(Token(token))
        return nodes

    def expect(self, keyword, msg, *exprs):
        """Consumes keyword or raises a PoopSyntaxError with msg."""
        if self.peek() != keyword:
            raise self.error(msg, *exprs)
        self.advance()

    def parse_poop_form(self):
        """Parses what follows `poop`: a macro definition (`<name> is ... qooq`) or a func (`<param> poops ... qooq`)."""
        if self.peek() is None:
            raise self.error("unexpected end of input after '{1}'", POOP)
        name_pos = self.pos
        name = self.advance()

        keyword = self.peek()
        if keyword == IS:
            if is_variable_name(name) or (self.strict and name in CONTROL_NAMES):
                raise self.error("illegal macro name '{1}' (cannot be variable format or escape char)",
                                 escape_for_trace(name), pos=name_pos)
            self.advance()
            body = self.parse_sequence()
            self.expect(QOOQ, "missing '{1}' for macro definition '{2}'", QOOQ, escape_for_trace(name))
            return MacroDef(name, body)

        elif keyword == POOPS:
            if not is_variable_name(name):
                raise self.error("invalid parameter name '{1}' (must be [a-z_]+)", escape_for_trace(name),
                                 pos=name_pos)
            self.advance()
            body = self.parse_sequence()
            self.expect(QOOQ, "missing '{1}' for function '{2}'", QOOQ, name)
            return Func(name, body)

        raise self.error("expected '{1}' or '{2}' after 'poop {3}'", IS, POOPS, escape_for_trace(name))

    def parse_apply_form(self):
        """Parses what follows `pooping`: `<callee> poopy <args> qooq`. A multi-node callee collapses into a single
        synthetic Token named by its source.
        """
        callee = self.parse_sequence()
        self.expect(POOPY, "expected '{1}' in '{2}' structure", POOPY, POOPING)
        args = self.parse_sequence()
        self.expect(QOOQ, "missing '{1}' for '{2}' structure", QOOQ, POOPING)
        return Apply(collapse(callee), args)

    def parse_program(self):
        """Parses the whole token list. Leftover tokens (a stray qooq or poopy) are an error."""
        nodes = self.parse_sequence()
        if self.peek() is not None:
            leftover = " ".join(escape_for_trace(token) for token in self.rest[:5])
            raise self.error("unexpected tokens at end: '{1}'", leftover)
        return nodes


def parse_sequence(tokens, strict=True):
    parser = Parser(tokens, strict)
    return parser.parse_sequence(), parser.rest


def parse_poop_form(tokens, strict=True):
    """tokens start right after `poop`."""
    parser = Parser(tokens, strict)
    return parser.parse_poop_form(), parser.rest


def parse_apply_form(tokens, strict=True):
    """tokens start right after `pooping`."""
    parser = Parser(tokens, strict)
    return parser.parse_apply_form(), parser.rest


def parse_program(text, strict=True):
    """Tokenizes and parses text, returning its list of nodes."""
    return Parser(tokenize(text), strict).parse_program()
