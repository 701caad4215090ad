#!/usr/bin/env python3
"""
Dashboard State Types
=====================
Tabs, input modes and the in-app log ring buffer.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Deque, List, Optional, Union

from execution.engine import OrderInfo, Portfolio

logger = logging.getLogger("dashboard.logs")

LOG_CAPACITY = 100


class Tab(Enum):
    DASHBOARD = 0
    ORDERS = 1
    MARKETS = 2
    MARKET_DETAIL = 3
    LOGS = 4
    DOCS = 5

    def next(self) -> "Tab":
        members = list(Tab)
        return members[(members.index(self) + 1) % len(members)]

    def prev(self) -> "Tab":
        members = list(Tab)
        return members[(members.index(self) - 1) % len(members)]

    @property
    def title(self) -> str:
        return TAB_TITLES[self]

    @classmethod
    def from_number(cls, number: int) -> "Tab":
        """1-based tab number as shown in the tab strip."""
        return list(cls)[number - 1]


TAB_TITLES = {
    Tab.DASHBOARD: "Dashboard",
    Tab.ORDERS: "Orders",
    Tab.MARKETS: "Markets",
    Tab.MARKET_DETAIL: "Market Detail",
    Tab.LOGS: "Logs",
    Tab.DOCS: "Docs",
}


class Selection(Enum):
    """Yes/No choice in a confirmation modal. Always starts at NO."""
    NO = "no"
    YES = "yes"

    def toggled(self) -> "Selection":
        return Selection.YES if self is Selection.NO else Selection.NO


# ==================== INPUT MODES ====================

@dataclass
class NormalMode:
    pass


@dataclass
class CommandEntryMode:
    buffer: str = ""


@dataclass
class QuitConfirmMode:
    selection: Selection = Selection.NO


@dataclass
class LeaveConfirmMode:
    selection: Selection = Selection.NO


InputMode = Union[NormalMode, CommandEntryMode, QuitConfirmMode, LeaveConfirmMode]


# ==================== LOGS ====================

class LogLevel(Enum):
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    SUCCESS = "SUCCESS"


_PY_LEVELS = {
    LogLevel.INFO: logging.INFO,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.SUCCESS: logging.INFO,
}


@dataclass(frozen=True)
class LogEntry:
    timestamp: str  # local wall clock, HH:MM:SS
    level: LogLevel
    message: str


class LogRingBuffer:
    """
    Fixed-capacity ordered log. Oldest entries are evicted first.
    Every entry is mirrored to the process log.
    """

    def __init__(self, capacity: int = LOG_CAPACITY):
        self.capacity = capacity
        self._entries: Deque[LogEntry] = deque(maxlen=capacity)

    def add(self, level: LogLevel, message: str) -> LogEntry:
        entry = LogEntry(
            timestamp=datetime.now().strftime("%H:%M:%S"),
            level=level,
            message=message,
        )
        self._entries.append(entry)
        logger.log(_PY_LEVELS[level], message)
        return entry

    def info(self, message: str) -> LogEntry:
        return self.add(LogLevel.INFO, message)

    def warning(self, message: str) -> LogEntry:
        return self.add(LogLevel.WARNING, message)

    def error(self, message: str) -> LogEntry:
        return self.add(LogLevel.ERROR, message)

    def success(self, message: str) -> LogEntry:
        return self.add(LogLevel.SUCCESS, message)

    def entries(self) -> List[LogEntry]:
        return list(self._entries)

    def count(self, level: LogLevel) -> int:
        return sum(1 for e in self._entries if e.level is level)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(list(self._entries))


# ==================== ENGINE VIEW ====================

@dataclass
class EngineStatus:
    """Last values read from the execution engine."""
    is_paused: bool = False
    last_order_id: Optional[str] = None
    portfolio: Optional[Portfolio] = None
    active_orders: List[OrderInfo] = field(default_factory=list)
