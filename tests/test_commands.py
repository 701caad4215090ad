# file: tests/test_commands.py
import pytest

from dashboard.commands import HELP_LINES, CommandInterpreter, parse_command
from dashboard.state import LogLevel


def test_parse_aliases_case_insensitive():
    assert parse_command("/S trump 2028").verb == "search"
    assert parse_command("s trump").args == ["trump"]
    assert parse_command("/JoinMarket 3").verb == "join"
    assert parse_command("l abc").verb == "leave"
    assert parse_command("/t").verb == "trending"
    assert parse_command("?").verb == "help"


def test_parse_empty_and_unknown():
    assert parse_command("") is None
    assert parse_command("   ") is None
    assert parse_command("/") is None
    cmd = parse_command("/frobnicate now")
    assert not cmd.known
    assert cmd.verb == "/frobnicate"


@pytest.fixture
def interpreter(watchlist, logs):
    focused = []
    interp = CommandInterpreter(watchlist, logs, focus_markets=lambda: focused.append(True))
    interp.focused = focused
    return interp


class TestExecute:

    @pytest.mark.asyncio
    async def test_unknown_command(self, interpreter, logs):
        assert await interpreter.execute("/bogus") is None
        entries = logs.entries()
        assert entries[-2].level is LogLevel.WARNING
        assert entries[-2].message == "Unknown command: /bogus"
        assert entries[-1].message == "Type /help for available commands"

    @pytest.mark.asyncio
    async def test_missing_argument_shows_usage(self, interpreter, logs):
        assert await interpreter.execute("/search") is None
        assert logs.entries()[-1].level is LogLevel.WARNING
        assert logs.entries()[-1].message == "Usage: /search <keyword>"

        await interpreter.execute("/join")
        assert logs.entries()[-1].message == "Usage: /joinmarket <market_id or index>"

        await interpreter.execute("/leavemarket")
        assert logs.entries()[-1].message == "Usage: /leavemarket <market_id>"

    @pytest.mark.asyncio
    async def test_search_joins_words_and_focuses(self, interpreter, watchlist, service):
        assert await interpreter.execute("/search us election") == ("search", ["us", "election"])
        assert service.calls == [("search", "us election", 50)]
        assert interpreter.focused == [True]
        assert watchlist.search_query == "us election"

    @pytest.mark.asyncio
    async def test_join_and_leave(self, interpreter, watchlist):
        await interpreter.execute("/s x")
        await interpreter.execute("/j 1")
        assert watchlist.watched_ids == ["m1"]
        await interpreter.execute("/l m1")
        assert watchlist.watched_ids == []

    @pytest.mark.asyncio
    async def test_trending_uses_limit(self, interpreter, service):
        await interpreter.execute("trending")
        assert service.calls == [("trending", 20)]
        assert interpreter.focused == [True]

    @pytest.mark.asyncio
    async def test_help(self, interpreter, logs):
        await interpreter.execute("/help")
        messages = [e.message for e in logs.entries()]
        assert messages == HELP_LINES

    @pytest.mark.asyncio
    async def test_empty_line_is_noop(self, interpreter, logs):
        assert await interpreter.execute("") is None
        assert len(logs) == 0
