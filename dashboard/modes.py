#!/usr/bin/env python3
"""
Mode State Machine
==================
Routes each key event to the handler for the active input mode and
performs the mode/tab transition.

Modes: Normal, CommandEntry(buffer), QuitConfirm(selection),
LeaveConfirm(selection). The Docs tab carries its own browse/view state
(DocsNavigator) alongside, not inside, the mode.

A key with no transition for the current (mode, tab) is ignored.
"""

import logging
from typing import Awaitable, Callable, Dict, Optional, Type

from dashboard.commands import CommandInterpreter
from dashboard.docs import DocsNavigator
from dashboard.keys import Key, KeyEvent
from dashboard.state import (
    CommandEntryMode,
    EngineStatus,
    InputMode,
    LeaveConfirmMode,
    LogRingBuffer,
    NormalMode,
    QuitConfirmMode,
    Selection,
    Tab,
)
from dashboard.watchlist import WatchlistManager
from execution.engine import ExecutionEngine, ExecutionError

logger = logging.getLogger("dashboard.modes")

SEARCH_PREFIX = "/search "

TOGGLE_KEYS = {Key.LEFT, Key.RIGHT, Key.TAB, Key.BACKTAB, Key.UP, Key.DOWN}

KEYBOARD_HELP = [
    "--- Keyboard Shortcuts ---",
    ":  or /  : Enter command mode",
    "S        : Quick search markets",
    "T        : Load trending markets",
    "Tab/<-/->: Navigate tabs (1-6 jump)",
    "Up/Down  : Navigate lists",
    "Enter    : Join selected market (Markets)",
    "Del/Bksp : Leave selected market (Detail)",
    "P        : Pause bot",
    "R        : Resume bot",
    "!        : PANIC mode",
    "Q        : Quit",
]


class ModeStateMachine:

    def __init__(
        self,
        watchlist: WatchlistManager,
        interpreter: CommandInterpreter,
        engine: ExecutionEngine,
        logs: LogRingBuffer,
        status: Optional[EngineStatus] = None,
        docs: Optional[DocsNavigator] = None,
    ):
        self.watchlist = watchlist
        self.interpreter = interpreter
        self.engine = engine
        self.logs = logs
        self.status = status or EngineStatus()
        self.docs = docs or DocsNavigator()

        self.current_tab = Tab.DASHBOARD
        self.mode: InputMode = NormalMode()
        self.should_quit = False

        self._handlers: Dict[Type, Callable[[KeyEvent], Awaitable[None]]] = {
            NormalMode: self._handle_normal,
            CommandEntryMode: self._handle_command_entry,
            QuitConfirmMode: self._handle_quit_confirm,
            LeaveConfirmMode: self._handle_leave_confirm,
        }

    async def handle(self, event: KeyEvent) -> None:
        await self._handlers[type(self.mode)](event)

    def focus_markets(self) -> None:
        self.current_tab = Tab.MARKETS

    # ------------------------------------------------------------------
    # Command entry
    # ------------------------------------------------------------------

    async def _handle_command_entry(self, event: KeyEvent) -> None:
        mode = self.mode
        if event.key is Key.ENTER:
            line = mode.buffer
            self.mode = NormalMode()
            await self.interpreter.execute(line)
        elif event.key is Key.ESC:
            self.mode = NormalMode()
        elif event.key is Key.BACKSPACE:
            mode.buffer = mode.buffer[:-1]
        elif event.key is Key.CHAR and not event.ctrl:
            mode.buffer += event.char

    # ------------------------------------------------------------------
    # Confirmation modals
    # ------------------------------------------------------------------

    async def _handle_quit_confirm(self, event: KeyEvent) -> None:
        mode = self.mode
        if event.key in TOGGLE_KEYS:
            mode.selection = mode.selection.toggled()
        elif event.key is Key.ENTER:
            if mode.selection is Selection.YES:
                self.should_quit = True
            self.mode = NormalMode()
        elif event.key is Key.ESC:
            self.mode = NormalMode()

    async def _handle_leave_confirm(self, event: KeyEvent) -> None:
        mode = self.mode
        if event.key in TOGGLE_KEYS:
            mode.selection = mode.selection.toggled()
        elif event.key is Key.ENTER:
            self.mode = NormalMode()
            if mode.selection is Selection.YES:
                market = self.watchlist.selected_watched()
                if market is not None:
                    await self.watchlist.leave(market.id)
                    self.watchlist.clamp_watched_selection()
        elif event.key is Key.ESC:
            self.mode = NormalMode()

    # ------------------------------------------------------------------
    # Normal mode
    # ------------------------------------------------------------------

    def _handle_docs(self, event: KeyEvent) -> bool:
        """Docs tab arrow/enter semantics. Returns True if consumed."""
        if event.key is Key.UP:
            self.docs.move(-1)
            return True
        if event.key is Key.DOWN:
            self.docs.move(1)
            return True
        if self.docs.viewing_content:
            if event.key in (Key.LEFT, Key.BACKSPACE, Key.ESC):
                self.docs.back()
                return True
            return event.key is Key.RIGHT
        if event.key is Key.ENTER:
            self.docs.enter()
            return True
        return False

    def _move_list(self, delta: int) -> None:
        if self.current_tab is Tab.MARKETS:
            self.watchlist.move_market_selection(delta)
        elif self.current_tab is Tab.MARKET_DETAIL:
            self.watchlist.move_watched_selection(delta)

    async def _handle_normal(self, event: KeyEvent) -> None:
        if event.key is Key.CHAR and event.ctrl:
            if event.char.lower() == "c":
                self.should_quit = True
            return

        if self.current_tab is Tab.DOCS and self._handle_docs(event):
            return

        key = event.key
        if key is Key.CHAR:
            await self._handle_normal_char(event.char)
        elif key is Key.UP:
            self._move_list(-1)
        elif key is Key.DOWN:
            self._move_list(1)
        elif key is Key.ENTER:
            if self.current_tab is Tab.MARKETS and self.watchlist.available_markets:
                await self.watchlist.join(str(self.watchlist.selected_market_index + 1))
        elif key in (Key.TAB, Key.RIGHT):
            self.current_tab = self.current_tab.next()
        elif key in (Key.BACKTAB, Key.LEFT):
            self.current_tab = self.current_tab.prev()
        elif key in (Key.DELETE, Key.BACKSPACE):
            if self.current_tab is Tab.MARKET_DETAIL and len(self.watchlist) > 0:
                self.mode = LeaveConfirmMode()

    async def _handle_normal_char(self, ch: str) -> None:
        if ch in (":", "/"):
            self.mode = CommandEntryMode("")
        elif ch in ("s", "S"):
            self.mode = CommandEntryMode(SEARCH_PREFIX)
            self.current_tab = Tab.MARKETS
        elif ch in ("t", "T"):
            await self.interpreter.trending()
        elif ch in ("k",):
            self._move_list(-1)
        elif ch in ("j",):
            self._move_list(1)
        elif ch in ("q", "Q"):
            self.mode = QuitConfirmMode()
        elif ch in "123456" and len(ch) == 1:
            self.current_tab = Tab.from_number(int(ch))
        elif ch in ("p", "P"):
            await self.engine.pause()
            self.status.is_paused = True
            self.logs.warning("Bot PAUSED - trading disabled")
        elif ch in ("r", "R"):
            await self.engine.resume()
            self.status.is_paused = False
            self.logs.success("Bot RESUMED - trading enabled")
        elif ch == "!":
            await self._panic()
        elif ch in ("h", "H"):
            for line in KEYBOARD_HELP:
                self.logs.info(line)

    async def _panic(self) -> None:
        self.logs.error("PANIC MODE ACTIVATED")
        try:
            count = await self.engine.cancel_all_orders()
        except ExecutionError as e:
            self.logs.error(f"Panic error: {e}")
        else:
            self.logs.error(f"Cancelled {count} orders")
            self.logs.error("Bot is now PAUSED")
        self.status.is_paused = True
