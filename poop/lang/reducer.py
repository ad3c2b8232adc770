"""Single-step term rewriting for the poop language.

`Reducer.step` performs at most one rewrite, leftmost-outermost, and reports whether it changed anything. Rewrites
are tried on each node of the sequence in turn, in this order of priority:

    1. Input             read one line, parse it, splice the nodes in
    2. MacroDef          register the macro (redefinition is fatal), drop the node
    3. Token             splice in a copy of the macro body if the name is a macro
    4. Apply             reduce the callee first (a multi-node result collapses into one token); then beta-reduce
                         a Func callee (lazy or legacy), run Print once its arguments are printable, or reduce the
                         arguments of a stuck application
    5. Func              expand macros inside the body (parameters are never reduced)
    6. Literal           never reducible

A node on which nothing applies is skipped and the next one is tried, so a stuck application or a free token is a
valid normal form, not an error.
"""

from poop.lang.error import ReductionError
from poop.pure.lexical import (Apply, Func, INPUT, Literal, MacroDef, PRINT, Token, collapse, copy_nodes,
                               escape_for_trace, substitute, to_output)
from poop.pure.parser import parse_program


class MacroTable:
    """name -> body of every macro defined so far in one run. Write-once: a name is never redefined or removed."""

    def __init__(self):
        self._macros = {}

    def define(self, name, body):
        if name in self._macros:
            raise ReductionError("macro redefinition: '{}'", escape_for_trace(name))
        self._macros[name] = tuple(body)

    def expand(self, name):
        """Fresh copy of the body of macro name."""
        return copy_nodes(self._macros[name])

    def clear(self):
        self._macros = {}

    def __contains__(self, name):
        return name in self._macros

    def __len__(self):
        return len(self._macros)


def contains_print(node):
    """Whether or not node holds an application of the Print built-in, at any depth."""
    if isinstance(node, Apply):
        if isinstance(node.callee, Token) and node.callee.name == PRINT:
            return True
        return contains_print(node.callee) or any(contains_print(arg) for arg in node.args)
    if isinstance(node, (Func, MacroDef)):
        return any(contains_print(sub_node) for sub_node in node.body)
    return False


class Reducer:
    """One-step reducer. Owns nothing but references: the macro table and host belong to the run using it."""

    def __init__(self, host, options, macros=None):
        self.host = host
        self.options = options
        self.macros = macros if macros is not None else MacroTable()
        self.step_count = 0  # maintained by the driver, used for log prefixes

    def log_prefix(self, default):
        return f"[Step {self.step_count + 1}] " if self.options.show_step_no else default

    def log_debug(self, msg):
        if self.options.debug_mode:
            self.host.log(self.log_prefix("[poop] ") + msg)

    def is_printable(self, node):
        """Print only fires on literals and on tokens that cannot be reduced any further."""
        if isinstance(node, Literal):
            return True
        if isinstance(node, Token):
            return node.name != INPUT and node.name not in self.macros
        return False

    async def step(self, nodes):
        """Returns (nodes after at most one rewrite, whether a rewrite happened)."""
        nodes = list(nodes)
        for idx, node in enumerate(nodes):
            replacement = await self.reduce_node(node)
            if replacement is not None:
                return nodes[:idx] + replacement + nodes[idx + 1:], True
        return nodes, False

    async def reduce_node(self, node):
        """Returns the nodes that replace node after one rewrite inside it, or None if nothing applies."""
        if isinstance(node, Token):
            return await self._reduce_token(node)
        elif isinstance(node, MacroDef):
            return self._define(node)
        elif isinstance(node, Apply):
            return await self._reduce_apply(node)
        elif isinstance(node, Func):
            return self._reduce_func(node)
        return None

    async def _reduce_token(self, token):
        if token.name == INPUT:
            self.log_debug("[INPUT] Reading...")
            line = await self.host.read_line()
            return parse_program(line, self.options.strict_names)

        if token.name in self.macros:
            self.log_debug(f"[EXPAND] Macro: {escape_for_trace(token.name)}")
            return self.macros.expand(token.name)
        return None

    def _define(self, macro_def):
        self.macros.define(macro_def.name, macro_def.body)
        self.log_debug(f"[DEF] Macro: {escape_for_trace(macro_def.name)}")
        return []

    def _reduce_func(self, func):
        body, changed = self.expand_macros_deep(func.body)
        if changed:
            return [Func(func.param, body)]
        return None

    async def _reduce_apply(self, apply):
        callee, args = apply.callee, apply.args

        if isinstance(callee, Token) and callee.name in self.macros:
            body = self.macros.expand(callee.name)
            if len(body) != 1:
                msg = "macro '{}' used as callee must reduce to a single node, not {}"
                raise ReductionError(msg, [escape_for_trace(callee.name), str(len(body))], diagnosis=False)
            self.log_debug(f"[EXPAND] Macro in Apply: {escape_for_trace(callee.name)}")
            return [Apply(body[0], args)]

        new_callee, changed = await self.step([callee])
        if changed:
            return [Apply(collapse(new_callee), args)]

        if isinstance(callee, Func):
            return await self._apply_func(callee, args)
        elif isinstance(callee, Token) and callee.name == PRINT:
            return await self._apply_print(args)
        return await self._reduce_args(callee, args)  # free name, stuck application or literal

    async def _reduce_args(self, callee, args):
        new_args, changed = await self.step(args)
        if changed:
            return [Apply(callee, new_args)]
        return None

    async def _apply_func(self, func, args):
        if self.options.lazy_mode:
            self.log_debug(f"[APPLY-LAZY] Substitution on: {func.param}")
            return substitute(func.param, args, func.body)

        body, expanded = self.expand_macros_deep(func.body)
        if expanded:
            return [Apply(Func(func.param, body), args)]

        if any(contains_print(node) for node in func.body):
            # substituting first keeps prints in the order they are written
            self.log_debug("[APPLY-LEGACY] Func has Print. Lazy Subst.")
            return substitute(func.param, args, func.body)

        new_args, changed = await self.step(args)
        if changed:
            return [Apply(func, new_args)]

        self.log_debug("[APPLY-LEGACY] Beta-reduction (Eager).")
        return substitute(func.param, args, func.body)

    async def _apply_print(self, args):
        if all(self.is_printable(arg) for arg in args):
            output = to_output(args, self.options.empty_literal)
            self.host.write(output)
            self.log_debug(f"[PRINT] Output: {output}")
            return list(args)
        return await self._reduce_args(Token(PRINT), args)

    def expand_once(self, nodes):
        """Replaces every macro token in nodes, at any depth, by its body. Returns (nodes, whether any was replaced).
        Only one level of macros is expanded: tokens coming out of a macro body are left for the next pass.
        """
        result = []
        changed = False
        for node in nodes:
            if isinstance(node, Token) and node.name in self.macros:
                result.extend(self.macros.expand(node.name))
                changed = True

            elif isinstance(node, (Func, MacroDef)):
                body, body_changed = self.expand_once(node.body)
                if body_changed:
                    node = Func(node.param, body) if isinstance(node, Func) else MacroDef(node.name, body)
                    changed = True
                result.append(node)

            elif isinstance(node, Apply):
                callee, callee_changed = self.expand_once([node.callee])
                args, args_changed = self.expand_once(node.args)
                if callee_changed or args_changed:
                    node = Apply(collapse(callee), args)
                    changed = True
                result.append(node)

            else:
                result.append(node)
        return result, changed

    def expand_macros_deep(self, nodes):
        """Runs expand_once until nothing changes. Returns (nodes, whether anything changed at all)."""
        changed = False
        for __ in range(self.options.max_expansions):
            nodes, expanded = self.expand_once(nodes)
            if not expanded:
                return nodes, changed
            changed = True
        raise ReductionError("macro expansion did not converge after {} passes", str(self.options.max_expansions),
                             diagnosis=False)
