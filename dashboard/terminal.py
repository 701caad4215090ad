"""Raw keyboard input for the dashboard (POSIX terminals)."""

import asyncio
import os
import select
import sys
from typing import Optional

from dashboard import keys
from dashboard.keys import KeyEvent

# Escape sequence tails after \x1b
_ESCAPE_SEQUENCES = {
    "[A": keys.UP,
    "[B": keys.DOWN,
    "[C": keys.RIGHT,
    "[D": keys.LEFT,
    "OA": keys.UP,
    "OB": keys.DOWN,
    "OC": keys.RIGHT,
    "OD": keys.LEFT,
    "[Z": keys.BACKTAB,
    "[3~": keys.DELETE,
}


def decode_key(ch: str, seq: str = "") -> Optional[KeyEvent]:
    """Map one raw character (plus any escape tail) to a KeyEvent."""
    if ch == "\x1b":
        if not seq:
            return keys.ESC
        return _ESCAPE_SEQUENCES.get(seq)
    if ch in ("\r", "\n"):
        return keys.ENTER
    if ch in ("\x7f", "\x08"):
        return keys.BACKSPACE
    if ch == "\t":
        return keys.TAB
    code = ord(ch) if len(ch) == 1 else -1
    if 1 <= code <= 26:
        # Ctrl+A .. Ctrl+Z
        return KeyEvent.of(chr(code + 96), ctrl=True)
    if code < 32:
        return None
    return KeyEvent.of(ch)


class TerminalInput:
    """
    Context manager that puts stdin in raw mode and restores it on exit.

    Usage:
        with TerminalInput() as term:
            event = await term.next_event(0.1)
    """

    def __init__(self, stream=None):
        self.stream = stream or sys.stdin
        self.fd = self.stream.fileno()
        self._saved = None

    def __enter__(self) -> "TerminalInput":
        import termios
        import tty

        self._saved = termios.tcgetattr(self.fd)
        tty.setraw(self.fd)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        import termios

        if self._saved is not None:
            termios.tcsetattr(self.fd, termios.TCSADRAIN, self._saved)
            self._saved = None

    def _readable(self, timeout: float) -> bool:
        rlist, _, _ = select.select([self.fd], [], [], timeout)
        return bool(rlist)

    def _read_char(self) -> str:
        return os.read(self.fd, 1).decode("utf-8", errors="ignore")

    def read_key(self, timeout: float) -> Optional[KeyEvent]:
        """Block up to ``timeout`` seconds for one key press."""
        if not self._readable(timeout):
            return None
        ch = self._read_char()
        if not ch:
            return None

        seq = ""
        if ch == "\x1b":
            # Read the rest of the escape sequence
            while self._readable(0.01):
                seq += self._read_char()
        return decode_key(ch, seq)

    async def next_event(self, timeout: float) -> Optional[KeyEvent]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.read_key, timeout)
