import asyncio
import io
import threading
import time
import unittest

from poop.lang.error import GenericException
from poop.lang.host import BufferedHost, ConsoleHost


class BlockingStdin:
    """stdin whose readline only returns once released."""

    def __init__(self):
        self.release = threading.Event()

    def readline(self):
        self.release.wait()
        return "PoLateop\n"


class ConsoleHostTestCase(unittest.IsolatedAsyncioTestCase):

    async def test_read_line(self):
        stderr = io.StringIO()
        host = ConsoleHost(io.StringIO("PoHiop\r\nPoYoop\n"), io.StringIO(), stderr)

        self.assertEqual("PoHiop", await host.read_line())
        self.assertEqual("PoYoop", await host.read_line())
        self.assertEqual("", await host.read_line())  # EOF
        self.assertEqual(ConsoleHost.PROMPT * 3, stderr.getvalue())

    async def test_end_line(self):
        stdout = io.StringIO()
        host = ConsoleHost(io.StringIO(), stdout, io.StringIO())

        host.end_line()
        host.write("Hi")
        host.end_line()
        host.end_line()
        self.assertEqual("Hi\n", stdout.getvalue())


class CancelledReadTestCase(unittest.TestCase):

    def test_cancel_while_reading(self):
        stdin = BlockingStdin()
        host = ConsoleHost(stdin, io.StringIO(), io.StringIO())

        async def abandon():
            task = asyncio.ensure_future(host.read_line())
            await asyncio.sleep(0.1)
            task.cancel()
            with self.assertRaises(asyncio.CancelledError):
                await task

        start = time.monotonic()
        asyncio.run(abandon())
        self.assertLess(time.monotonic() - start, 2)
        stdin.release.set()


class BufferedHostTestCase(unittest.IsolatedAsyncioTestCase):

    async def test_inputs(self):
        host = BufferedHost(["PoAop"])
        host.feed("PoBop")

        self.assertEqual("PoAop", await host.read_line())
        self.assertEqual("PoBop", await host.read_line())
        with self.assertRaises(GenericException):
            await host.read_line()

    async def test_output(self):
        host = BufferedHost()
        host.write("A")
        host.write("B")
        host.warn("careful")

        self.assertEqual(["A", "B"], host.output)
        self.assertEqual("AB", host.text)
        self.assertEqual(["warning: careful"], host.logs)


if __name__ == '__main__':
    unittest.main()
