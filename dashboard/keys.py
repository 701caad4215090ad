# file: dashboard/keys.py
from dataclasses import dataclass
from enum import Enum


class Key(Enum):
    CHAR = "char"
    ENTER = "enter"
    ESC = "esc"
    BACKSPACE = "backspace"
    DELETE = "delete"
    TAB = "tab"
    BACKTAB = "backtab"
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class KeyEvent:
    """A single key press. ``char`` is set only for Key.CHAR."""
    key: Key
    char: str = ""
    ctrl: bool = False

    @classmethod
    def of(cls, char: str, ctrl: bool = False) -> "KeyEvent":
        return cls(Key.CHAR, char, ctrl)

    def is_char(self, *chars: str) -> bool:
        return self.key is Key.CHAR and not self.ctrl and self.char in chars


ENTER = KeyEvent(Key.ENTER)
ESC = KeyEvent(Key.ESC)
BACKSPACE = KeyEvent(Key.BACKSPACE)
DELETE = KeyEvent(Key.DELETE)
TAB = KeyEvent(Key.TAB)
BACKTAB = KeyEvent(Key.BACKTAB)
UP = KeyEvent(Key.UP)
DOWN = KeyEvent(Key.DOWN)
LEFT = KeyEvent(Key.LEFT)
RIGHT = KeyEvent(Key.RIGHT)
CTRL_C = KeyEvent(Key.CHAR, "c", ctrl=True)
