# file: dashboard/commands.py
import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from dashboard.state import LogRingBuffer
from dashboard.watchlist import WatchlistManager

logger = logging.getLogger("dashboard.commands")

SEARCH = "search"
JOIN = "join"
LEAVE = "leave"
TRENDING = "trending"
HELP = "help"

ALIASES: Dict[str, str] = {
    "/search": SEARCH, "search": SEARCH, "/s": SEARCH, "s": SEARCH,
    "/joinmarket": JOIN, "joinmarket": JOIN, "/join": JOIN, "join": JOIN, "/j": JOIN, "j": JOIN,
    "/leavemarket": LEAVE, "leavemarket": LEAVE, "/leave": LEAVE, "leave": LEAVE, "/l": LEAVE, "l": LEAVE,
    "/trending": TRENDING, "trending": TRENDING, "/t": TRENDING, "t": TRENDING,
    "/help": HELP, "help": HELP, "/h": HELP, "?": HELP,
}

USAGE = {
    SEARCH: "Usage: /search <keyword>",
    JOIN: "Usage: /joinmarket <market_id or index>",
    LEAVE: "Usage: /leavemarket <market_id>",
}

MIN_ARGS = {SEARCH: 1, JOIN: 1, LEAVE: 1, TRENDING: 0, HELP: 0}

HELP_LINES = [
    "--- Available Commands ---",
    "/search <keyword>  - Search markets",
    "/trending          - Show trending markets",
    "/joinmarket <id|#> - Join market by ID or index",
    "/leavemarket <id>  - Leave a market",
    "/help              - Show this help",
]


@dataclass(frozen=True)
class ParsedCommand:
    verb: str  # canonical verb, or the raw lowercased token when unknown
    args: List[str]
    known: bool


def parse_command(line: str) -> Optional[ParsedCommand]:
    """Split on whitespace; first token (case-insensitive) picks the verb."""
    parts = line.strip().split()
    if not parts or parts == ["/"]:
        return None
    token = parts[0].lower()
    verb = ALIASES.get(token)
    return ParsedCommand(verb=verb or token, args=parts[1:], known=verb is not None)


class CommandInterpreter:
    """
    Dispatches typed command lines. Every failure is a logged warning;
    nothing here raises.
    """

    def __init__(
        self,
        watchlist: WatchlistManager,
        logs: LogRingBuffer,
        search_limit: int = 50,
        trending_limit: int = 20,
        focus_markets: Optional[Callable[[], None]] = None,
    ):
        self.watchlist = watchlist
        self.logs = logs
        self.search_limit = search_limit
        self.trending_limit = trending_limit
        self.focus_markets = focus_markets

    async def execute(self, line: str) -> Optional[Tuple[str, List[str]]]:
        """Run one command line. Returns (verb, args) when a known verb ran."""
        command = parse_command(line)
        if command is None:
            return None

        if not command.known:
            self.logs.warning(f"Unknown command: {command.verb}")
            self.logs.info("Type /help for available commands")
            return None

        if len(command.args) < MIN_ARGS[command.verb]:
            self.logs.warning(USAGE[command.verb])
            return None

        logger.debug(f"Dispatch {command.verb} {command.args}")
        await self._dispatch(command.verb, command.args)
        return command.verb, command.args

    async def _dispatch(self, verb: str, args: List[str]) -> None:
        if verb == SEARCH:
            self._focus_markets()
            await self.watchlist.search(" ".join(args), self.search_limit)
        elif verb == JOIN:
            await self.watchlist.join(args[0])
        elif verb == LEAVE:
            await self.watchlist.leave(args[0])
        elif verb == TRENDING:
            await self.trending()
        elif verb == HELP:
            self.show_help()

    async def trending(self) -> None:
        self._focus_markets()
        await self.watchlist.trending(self.trending_limit)

    def show_help(self) -> None:
        for line in HELP_LINES:
            self.logs.info(line)

    def _focus_markets(self) -> None:
        if self.focus_markets is not None:
            self.focus_markets()
