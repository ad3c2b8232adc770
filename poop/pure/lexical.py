"""Lexical analysis and syntax nodes for the poop language.

The `pure` directory contains everything that does not depend on a running program: tokenizing, the node model and
substitution. Reduction lives in `lang`, because it needs a macro table and a host to talk to.

Formally, poop can be defined as

```
<program>  ::= <node>*
<node>     ::= <token>                                  ; "token": resolved at reduction time
           |   <literal>                                ; "literal": Po...op, opaque text
           |   "poop" <param> "poops" <node>* "qooq"    ; "func": one parameter, multi-node body
           |   "poop" <name> "is" <node>* "qooq"        ; "macro definition": named alias for a node sequence
           |   "pooping" <node>* "poopy" <node>* "qooq" ; "apply": callee applied to an argument sequence

<param>    ::= [a-z_]+
<literal>  ::= "Po" <char>* "op"                        ; length >= 4, never a reserved word
<comment>  ::= "//" <char>* "\\n" | "/*" <char>* "*/"
```

Tokens are separated by whitespace only, so `\\s`, `\\n`, `\\t`, `\\r` and `\\\\` are the way to put whitespace and
backslashes into a token. Escapes are resolved once, at lex time, and put back by `code()`.

Substitution is not capture-avoiding: there is no alpha conversion, a parameter is only shadowed by a func that binds
the same name. Free tokens in an argument can be captured by a binder inside the body, and that is the language.
"""

from abc import ABC, abstractmethod
import re


POOP = "poop"
POOPING = "pooping"
QOOQ = "qooq"
POOPS = "poops"
POOPY = "poopy"
IS = "is"
RESERVED = (POOP, POOPING, QOOQ, POOPS, POOPY, IS)

INPUT = "Input"  # built-in: reads one line and splices it in as a program
PRINT = "Print"  # built-in: identity with a side effect

CONTROL_NAMES = ("\n", "\r", "\t", "\\")  # single characters that can never name a macro

ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "s": " ", "\\": "\\"}
TRACE_ESCAPES = {"\\": "\\\\", "\n": "\\n", "\t": "\\t", "\r": "\\r", " ": "\\s"}

_COMMENT = re.compile(r"//[^\n]*|/\*.*?\*/|/\*.*", re.DOTALL)
_ESCAPE = re.compile(r"\\(.)", re.DOTALL)
_TRACE = re.compile(r"[\\\n\t\r ]")
_VARIABLE = re.compile(r"[a-z_]+")


def remove_comments(text):
    """Deletes // and /* */ comments. A closed block comment leaves a space behind so that the tokens around it do not
    merge; an unterminated one swallows the rest of the text.
    """

    def _replace(match):
        comment = match.group()
        if comment.startswith("/*") and comment.endswith("*/") and len(comment) >= 4:
            return " "
        return ""

    return _COMMENT.sub(_replace, text)


def unescape(text):
    """Resolves \\n \\t \\r \\s \\\\. Any other escaped character decodes to itself, without the backslash."""
    return _ESCAPE.sub(lambda match: ESCAPES.get(match.group(1), match.group(1)), text)


def escape_for_trace(text):
    """Inverse of unescape for the characters it produces. Used by code() and in diagnostics."""
    return _TRACE.sub(lambda match: TRACE_ESCAPES[match.group()], text)


def tokenize(text):
    """Returns the list of tokens in text: comments removed, split on whitespace, escapes resolved."""
    return [unescape(raw) for raw in remove_comments(text).split()]


def is_variable_name(name):
    """Whether or not name can be a func parameter."""
    return bool(name) and _VARIABLE.fullmatch(name) is not None


def is_literal_token(token):
    """Whether or not token is a Po...op literal. Reserved words never are."""
    if token in RESERVED:
        return False
    return token.startswith("Po") and token.endswith("op") and len(token) >= 4


def to_code(nodes):
    """Source reconstruction of a node sequence."""
    return " ".join(node.code() for node in nodes)


def to_output(nodes, empty_literal=""):
    """User-visible rendering of a node sequence: literals decoded, no separators added."""
    return "".join(node.output(empty_literal) for node in nodes)


def to_trace(nodes):
    """Diagnostic rendering of a node sequence."""
    return " ".join(node.trace() for node in nodes)


def substitute(param, args, nodes):
    """Returns a copy of nodes with every free Token(param) replaced by a fresh copy of args."""
    result = []
    for node in nodes:
        result.extend(node.sub(param, args))
    return result


def copy_nodes(nodes):
    """Structural copy of a node sequence."""
    return [node.copy() for node in nodes]


def collapse(nodes):
    """Returns the single node of nodes, or a synthetic Token named by their source when there is not exactly one.
    This is what lets a bare multi-token sequence act as a callee name.
    """
    if len(nodes) == 1:
        return nodes[0]
    return Token(to_code(nodes))


class PoopTerm(ABC):
    """Superclass of the five syntax nodes. Nodes are never mutated after construction: every rewrite builds new
    nodes, and every splice (macro body, substituted argument) is a fresh copy.
    """
    __slots__ = ()

    @abstractmethod
    def code(self):
        """This method should return the source text of this node, with whitespace and backslashes inside tokens
        escaped. Parsing the result gives back an equal node.
        """

    @abstractmethod
    def output(self, empty_literal=""):
        """This method should return the text Print emits for this node."""

    @abstractmethod
    def sub(self, param, args):
        """Given a parameter name and the argument sequence, this method should return the list of nodes that replace
        self: args itself for a matching Token, a single substituted copy for everything else.
        """

    @abstractmethod
    def copy(self):
        """This method should return a deep structural copy of self."""

    @property
    @abstractmethod
    def fields(self):
        """Tuple of the values that identify this node. Used for equality."""

    def trace(self):
        """Diagnostic rendering. Same text as code(), which is already unambiguous."""
        return self.code()

    def display(self, indents=0):
        """Recursively displays the node with a readable format.

        Format:
        <Node>(<field>, nodes=[
            <Node>(<field>),
            ...
        ])
        """
        head, *children = self.fields
        result = f"{'    ' * indents}{type(self).__name__}({head!r}"
        for child in children:
            if isinstance(child, PoopTerm):
                child = (child,)
            result += ", nodes=["
            for node in child:
                result += "\n" + node.display(indents + 1) + ","
            result = result.rstrip(",") + f"\n{'    ' * indents}]"
        return result + ")"

    def __repr__(self):
        return f"{type(self).__name__}({', '.join(repr(field) for field in self.fields)})"

    def __str__(self):
        return self.code()

    def __eq__(self, other):
        return type(other) is type(self) and other.fields == self.fields

    def __hash__(self):
        return hash((type(self).__name__, self.fields))


class Token(PoopTerm):
    """Bare identifier. Whether it is a macro, a built-in or a free name is decided at reduction time."""
    __slots__ = ("name",)

    def __init__(self, name):
        self.name = name

    def code(self):
        return escape_for_trace(self.name)

    def output(self, empty_literal=""):
        return self.name

    def sub(self, param, args):
        if self.name == param:
            return copy_nodes(args)
        return [Token(self.name)]

    def copy(self):
        return Token(self.name)

    @property
    def fields(self):
        return (self.name,)


class Literal(PoopTerm):
    """Po...op text. Opaque to substitution and expansion; only the renderings look inside it."""
    __slots__ = ("raw",)

    def __init__(self, raw):
        self.raw = raw

    def decoded(self, empty_literal=""):
        """Text between the Po and op markers. The bare literal Poop decodes to empty_literal."""
        if len(self.raw) <= 4:
            return empty_literal
        return self.raw[2:-2]

    def code(self):
        return escape_for_trace(self.raw)

    def output(self, empty_literal=""):
        return self.decoded(empty_literal)

    def sub(self, param, args):
        return [Literal(self.raw)]

    def copy(self):
        return Literal(self.raw)

    @property
    def fields(self):
        return (self.raw,)


class Func(PoopTerm):
    """poop <param> poops <body> qooq"""
    __slots__ = ("param", "body")

    def __init__(self, param, body):
        self.param = param
        self.body = tuple(body)

    def code(self):
        return f"{POOP} {self.param} {POOPS} {to_code(self.body)} {QOOQ}"

    def output(self, empty_literal=""):
        return f"{POOP} {self.param} {POOPS} {to_output(self.body, empty_literal)} {QOOQ}"

    def sub(self, param, args):
        if self.param == param:
            return [self.copy()]  # inner binder shadows param
        return [Func(self.param, substitute(param, args, self.body))]

    def copy(self):
        return Func(self.param, copy_nodes(self.body))

    @property
    def fields(self):
        return (self.param, self.body)


class MacroDef(PoopTerm):
    """poop <name> is <body> qooq"""
    __slots__ = ("name", "body")

    def __init__(self, name, body):
        self.name = name
        self.body = tuple(body)

    def code(self):
        return f"{POOP} {escape_for_trace(self.name)} {IS} {to_code(self.body)} {QOOQ}"

    def output(self, empty_literal=""):
        return f"{POOP} {self.name} {IS} {to_output(self.body, empty_literal)} {QOOQ}"

    def sub(self, param, args):
        return [MacroDef(self.name, substitute(param, args, self.body))]

    def copy(self):
        return MacroDef(self.name, copy_nodes(self.body))

    @property
    def fields(self):
        return (self.name, self.body)


class Apply(PoopTerm):
    """pooping <callee> poopy <args> qooq"""
    __slots__ = ("callee", "args")

    def __init__(self, callee, args):
        self.callee = callee
        self.args = tuple(args)

    def code(self):
        return f"{POOPING} {self.callee.code()} {POOPY} {to_code(self.args)} {QOOQ}"

    def output(self, empty_literal=""):
        return f"{POOPING} {self.callee.output(empty_literal)} {POOPY} {to_output(self.args, empty_literal)} {QOOQ}"

    def sub(self, param, args):
        callee = collapse(substitute(param, args, [self.callee]))
        return [Apply(callee, substitute(param, args, self.args))]

    def copy(self):
        return Apply(self.callee.copy(), copy_nodes(self.args))

    @property
    def fields(self):
        return (self.callee, self.args)
