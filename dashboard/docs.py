# file: dashboard/docs.py
"""In-app documentation shown on the Docs tab."""

from dataclasses import dataclass
from typing import List, Tuple


@dataclass(frozen=True)
class DocSection:
    title: str
    preview: Tuple[str, ...]
    body: Tuple[str, ...]


DOC_SECTIONS: List[DocSection] = [
    DocSection(
        title="How to Use This Bot",
        preview=("Learn the basics of navigating and", "controlling the dashboard."),
        body=(
            "NAVIGATION",
            "  [1] Dashboard    - Portfolio, watchlist and status",
            "  [2] Orders       - Active orders",
            "  [3] Markets      - Search results and trending markets",
            "  [4] Detail       - Analytics for watched markets",
            "  [5] Logs         - Activity log",
            "  [6] Docs         - This documentation",
            "",
            "  Tab / Shift+Tab or Left / Right switch tabs.",
            "  Up / Down move through lists.",
            "",
            "COMMANDS (press ':' or '/')",
            "  /search <keyword>  - Search markets",
            "  /trending          - Show trending markets",
            "  /join <id|#>       - Join market by ID or index",
            "  /leave <id>        - Leave a market",
            "  /help              - Show command help",
            "",
            "CONTROLS",
            "  P  Pause trading     R  Resume trading",
            "  !  PANIC: cancel all orders and pause",
            "  Q  Quit (asks for confirmation)",
        ),
    ),
    DocSection(
        title="What is Polymarket?",
        preview=("Polymarket is a decentralized", "prediction market platform where", "users trade on event outcomes."),
        body=(
            "Polymarket lists binary and multi-outcome markets on",
            "real-world events. Each outcome trades as a share",
            "priced between $0.00 and $1.00.",
            "",
            "The price of a share is the market's implied",
            "probability of that outcome. A YES share at $0.63",
            "implies a 63% chance.",
            "",
            "Winning shares settle at $1.00, losing shares at $0.00.",
        ),
    ),
    DocSection(
        title="Trading Mechanics",
        preview=("Understanding shares, prices,", "order books, and how to trade."),
        body=(
            "ORDER BOOK",
            "  Bids are offers to buy, asks are offers to sell.",
            "  The spread is best ask minus best bid.",
            "",
            "ORDERS",
            "  Limit orders rest on the book at your price.",
            "  Order size is bounded by MIN_ORDER_SIZE and",
            "  MAX_ORDER_SIZE.",
            "",
            "PAUSE / PANIC",
            "  Paused: no new orders are accepted.",
            "  Panic cancels every open order and pauses.",
        ),
    ),
    DocSection(
        title="Spike Detection",
        preview=("How this bot detects volume", "spikes and market movements."),
        body=(
            "VOLUME VELOCITY",
            "  V_v = (volume_now - volume_prev) / (t_now - t_prev)",
            "  A spike event fires when |V_v| > 1000 vol/sec.",
            "",
            "ORDER BOOK IMBALANCE",
            "  OBI = (V_bids - V_asks) / (V_bids + V_asks)",
            "  Ranges from -1 (all asks) to +1 (all bids).",
            "  |OBI| > 0.3 is a significant imbalance.",
            "",
            "Without a live feed the Detail tab shows a seeded",
            "random walk of both signals.",
        ),
    ),
    DocSection(
        title="References",
        preview=("Links to API documentation.",),
        body=(
            "  Polymarket Docs: docs.polymarket.com",
            "  CLOB API Docs: docs.polymarket.com/api",
            "  Gamma API: gamma-api.polymarket.com",
        ),
    ),
]


class DocsNavigator:
    """
    Two-state machine nested inside the Docs tab.

    Browsing: Up/Down move between sections, Enter drills in.
    Viewing: Up/Down scroll the section body, Back/Left/Esc back out.
    """

    def __init__(self, sections: List[DocSection] = DOC_SECTIONS):
        self.sections = sections
        self.selected_section = 0
        self.viewing_content = False
        self.scroll_offset = 0

    @property
    def current(self) -> DocSection:
        return self.sections[self.selected_section]

    def move(self, delta: int) -> None:
        if self.viewing_content:
            max_offset = max(0, len(self.current.body) - 1)
            self.scroll_offset = max(0, min(max_offset, self.scroll_offset + delta))
        else:
            last = len(self.sections) - 1
            self.selected_section = max(0, min(last, self.selected_section + delta))

    def enter(self) -> None:
        if not self.viewing_content:
            self.viewing_content = True
            self.scroll_offset = 0

    def back(self) -> bool:
        """Returns True when it left the viewing state."""
        if self.viewing_content:
            self.viewing_content = False
            self.scroll_offset = 0
            return True
        return False
