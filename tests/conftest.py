# file: tests/conftest.py
import pytest

from dashboard.commands import CommandInterpreter
from dashboard.modes import ModeStateMachine
from dashboard.state import LogRingBuffer
from dashboard.watchlist import WatchlistManager
from execution.engine import ExecutionError, PaperExecutionEngine
from feeds.gamma_markets import MarketInfo, MarketServiceError
from storage.watchlist_store import StorageError


def make_markets(n, prefix="m"):
    return [MarketInfo(id=f"{prefix}{i}", question=f"Question {i}?", order_book_enabled=True) for i in range(1, n + 1)]


class FakeMarketService:
    def __init__(self, markets=None, fail=False):
        self.markets = markets if markets is not None else make_markets(3)
        self.fail = fail
        self.calls = []

    async def search_markets(self, keyword, limit):
        self.calls.append(("search", keyword, limit))
        if self.fail:
            raise MarketServiceError("HTTP 503")
        return list(self.markets)

    async def get_trending_markets(self, limit):
        self.calls.append(("trending", limit))
        if self.fail:
            raise MarketServiceError("HTTP 503")
        return list(self.markets)


class FakeStore:
    def __init__(self, fail=False, rows=None):
        self.fail = fail
        self.rows = {m.id: m for m in (rows or [])}
        self.saved = []
        self.deactivated = []

    async def save_market(self, market):
        if self.fail:
            raise StorageError("database is locked")
        self.saved.append(market.id)
        self.rows[market.id] = market

    async def deactivate_market(self, market_id):
        if self.fail:
            raise StorageError("database is locked")
        self.deactivated.append(market_id)
        self.rows.pop(market_id, None)

    async def load_active_markets(self):
        if self.fail:
            raise StorageError("no such table: watchlist")
        return list(self.rows.values())


class FailingEngine(PaperExecutionEngine):
    """Paper engine whose queries and panic fail."""

    async def cancel_all_orders(self):
        raise ExecutionError("venue unreachable")

    async def get_portfolio(self):
        raise ExecutionError("venue unreachable")

    async def get_active_orders(self):
        raise ExecutionError("venue unreachable")


@pytest.fixture
def logs():
    return LogRingBuffer()


@pytest.fixture
def service():
    return FakeMarketService()


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def watchlist(logs, service, store):
    return WatchlistManager(logs, service, store=store)


@pytest.fixture
def engine():
    return PaperExecutionEngine()


@pytest.fixture
def machine(watchlist, logs, engine):
    holder = {}
    interpreter = CommandInterpreter(watchlist, logs, focus_markets=lambda: holder["m"].focus_markets())
    m = ModeStateMachine(watchlist, interpreter, engine, logs)
    holder["m"] = m
    return m
