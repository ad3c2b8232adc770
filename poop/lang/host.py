"""Hosts: the only boundary between the interpreter and the outside world.

A host gets the text of every completed Print (`write`), every diagnostic line (`log`), and is asked for one line of
text whenever the program reaches Input (`read_line`). read_line is a coroutine so that a host running an event loop
is never frozen while it waits for the user.
"""

from abc import ABC, abstractmethod
import asyncio
from collections import deque
import sys
import threading

from termcolor import colored

from poop.lang.error import ErrorHandler, GenericException


class Host(ABC):
    """Interface a Session needs from whatever runs it."""

    @abstractmethod
    def write(self, text):
        """Called once per completed Print with the decoded output."""

    @abstractmethod
    def log(self, text):
        """Diagnostic line. Never affects evaluation."""

    @abstractmethod
    async def read_line(self):
        """Returns one line of text when Input is reached."""

    def warn(self, text):
        self.log(f"warning: {text}")

    def end_line(self):
        """Called by interactive hosts after a run, so the next prompt starts on a fresh line."""


class ConsoleHost(Host):
    """Terminal host: output on stdout, diagnostics and the input prompt on stderr."""
    PROMPT = "Input> "

    def __init__(self, stdin=None, stdout=None, stderr=None):
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout
        self.stderr = stderr if stderr is not None else sys.stderr
        self._last = "\n"  # last character written to stdout

    def write(self, text):
        self.stdout.write(text)
        self.stdout.flush()
        if text:
            self._last = text[-1]

    def end_line(self):
        if self._last != "\n":
            self.write("\n")

    def log(self, text):
        print(text, file=self.stderr, flush=True)

    def warn(self, text):
        self.log(colored("warning: ", ErrorHandler.WARNING, attrs=["bold"]) + text)

    async def read_line(self):
        """Reads a line on a daemon thread so the event loop keeps running. A cancelled read returns at once; the
        thread is left to finish on its own. EOF reads as an empty line.
        """
        self.stderr.write(ConsoleHost.PROMPT)
        self.stderr.flush()

        loop = asyncio.get_running_loop()
        future = loop.create_future()

        def _settle(line, error):
            if future.done():
                return
            if error is not None:
                future.set_exception(error)
            else:
                future.set_result(line)

        def _read():
            line, error = None, None
            try:
                line = self.stdin.readline()
            except (OSError, ValueError) as e:
                error = e
            try:
                loop.call_soon_threadsafe(_settle, line, error)
            except RuntimeError:
                pass  # loop already closed, nobody is waiting

        threading.Thread(target=_read, name="poop-input", daemon=True).start()
        line = await future
        return line.rstrip("\r\n")


class BufferedHost(Host):
    """Host that keeps everything in memory: output and log lines are collected, Input lines are served from a
    script. Used by tests and by anything embedding the interpreter.
    """

    def __init__(self, inputs=()):
        self.output = []
        self.logs = []
        self.inputs = deque(inputs)

    @property
    def text(self):
        """Everything written so far."""
        return "".join(self.output)

    def write(self, text):
        self.output.append(text)

    def log(self, text):
        self.logs.append(text)

    def feed(self, line):
        """Queues another line for Input."""
        self.inputs.append(line)

    async def read_line(self):
        if not self.inputs:
            raise GenericException("input requested but no line was supplied", diagnosis=False)
        return self.inputs.popleft()
