"""Session control for the poop language. A Session is one program run: it parses the source, then drives the
reducer one step at a time until a step changes nothing (normal form) or the step cap is hit.

Only the side effects of a run are observable: Print writes and log lines. The final sequence is returned for the
host and for tests, but the language gives it no meaning.
"""

import asyncio

from poop import __version__
from poop.lang.error import GenericException
from poop.lang.options import Options
from poop.lang.reducer import MacroTable, Reducer
from poop.pure.lexical import to_trace
from poop.pure.parser import parse_program


class Session:
    """Governs poop runs on one host. Every run starts from an empty macro table."""

    def __init__(self, host, options=None):
        self.host = host
        self.options = options if options is not None else Options()

        self.macros = MacroTable()
        self.reducer = Reducer(self.host, self.options, self.macros)

    @property
    def step_count(self):
        return self.reducer.step_count

    @staticmethod
    def load(path):
        """Returns the source text of the program at path."""
        try:
            with open(path, "r", encoding="utf-8") as file:
                return file.read()
        except OSError:
            raise GenericException("'{}' could not be opened", path, diagnosis=False)

    def parse(self, source):
        return parse_program(source, self.options.strict_names)

    def log_trace(self, nodes):
        if self.options.trace_mode:
            self.host.log(self.reducer.log_prefix("[Trace] ") + to_trace(nodes))

    def _banner(self):
        if not self.options.debug_mode:
            return
        self.host.log(f"[poop] Started interpreter v{__version__}")
        if not self.options.lazy_mode:
            self.host.warn("Legacy (strict) evaluation is deprecated. Default is lazy.")
        if self.options.trace_mode:
            self.host.log("[poop] Trace mode enabled (full AST dump).")

    async def run(self, source):
        """Parses and reduces source to normal form. Parse and reduction errors propagate to the caller. Returns the
        final node sequence.
        """
        self.macros.clear()
        self.reducer.step_count = 0

        nodes = self.parse(source)
        self._banner()
        return await self.run_nodes(nodes)

    async def run_nodes(self, nodes):
        """Driver loop: steps nodes until nothing changes. Yields to the event loop every options.yield_every steps."""
        max_steps = self.options.max_steps
        while True:
            self.log_trace(nodes)
            nodes, changed = await self.reducer.step(nodes)
            if not changed:
                break

            self.reducer.step_count += 1
            if max_steps and self.reducer.step_count >= max_steps:
                self.host.warn(f"step limit of {max_steps} reached, normal form might exist but was not reached")
                return nodes
            if self.options.yield_every and self.reducer.step_count % self.options.yield_every == 0:
                await asyncio.sleep(0)

        self.reducer.log_debug("Terminated.")
        if self.options.print_total_steps and self.options.debug_mode:
            self.host.log(f"[poop] Total reduction steps: {self.reducer.step_count}")
        return nodes

    def run_sync(self, source):
        """Runs source on a fresh event loop. For hosts that have none of their own."""
        return asyncio.run(self.run(source))
