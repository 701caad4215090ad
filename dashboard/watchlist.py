#!/usr/bin/env python3
"""
Watchlist Manager
=================
Owns the markets being monitored and the last discovery result set.

The watchlist keeps insertion order for display and a parallel id set for
membership tests. Joining copies a MarketInfo out of the candidate list,
so the two containers may diverge.
"""

import logging
from typing import Callable, List, Optional, Protocol, Set

from dashboard.state import LogRingBuffer
from feeds.gamma_markets import MarketInfo, MarketServiceError
from storage.watchlist_store import StorageError, WatchlistStore

logger = logging.getLogger("dashboard.watchlist")


class MarketDiscovery(Protocol):
    async def search_markets(self, keyword: str, limit: int) -> List[MarketInfo]: ...
    async def get_trending_markets(self, limit: int) -> List[MarketInfo]: ...


class WatchlistManager:

    def __init__(
        self,
        logs: LogRingBuffer,
        market_service: MarketDiscovery,
        store: Optional[WatchlistStore] = None,
        on_leave: Optional[Callable[[str], None]] = None,
    ):
        self.logs = logs
        self.market_service = market_service
        self.store = store
        self.on_leave = on_leave

        # Discovery results
        self.available_markets: List[MarketInfo] = []
        self.search_query = ""
        self.is_loading = False
        self.selected_market_index = 0

        # Watchlist
        self.watched: List[MarketInfo] = []
        self._watched_ids: Set[str] = set()
        self.selected_watched_index = 0

    def __len__(self) -> int:
        return len(self.watched)

    def contains(self, market_id: str) -> bool:
        return market_id in self._watched_ids

    @property
    def watched_ids(self) -> List[str]:
        return [m.id for m in self.watched]

    def selected_watched(self) -> Optional[MarketInfo]:
        if not self.watched:
            return None
        return self.watched[min(self.selected_watched_index, len(self.watched) - 1)]

    def selected_available(self) -> Optional[MarketInfo]:
        if not self.available_markets:
            return None
        return self.available_markets[min(self.selected_market_index, len(self.available_markets) - 1)]

    # ------------------------------------------------------------------
    # Selection (saturating, never wraps)
    # ------------------------------------------------------------------

    @staticmethod
    def _step(index: int, delta: int, size: int) -> int:
        if size == 0:
            return 0
        return max(0, min(size - 1, index + delta))

    def move_market_selection(self, delta: int) -> None:
        self.selected_market_index = self._step(self.selected_market_index, delta, len(self.available_markets))

    def move_watched_selection(self, delta: int) -> None:
        self.selected_watched_index = self._step(self.selected_watched_index, delta, len(self.watched))

    def clamp_watched_selection(self) -> None:
        if self.selected_watched_index >= len(self.watched):
            self.selected_watched_index = max(0, len(self.watched) - 1)

    # ------------------------------------------------------------------
    # Persistence round-trip
    # ------------------------------------------------------------------

    async def restore(self) -> int:
        """Load the active watchlist from the store. Returns markets restored."""
        if self.store is None:
            return 0
        try:
            markets = await self.store.load_active_markets()
        except StorageError as e:
            self.logs.error(f"Failed to load watchlist: {e}")
            return 0

        restored = 0
        for market in markets:
            if market.id not in self._watched_ids:
                self.watched.append(market)
                self._watched_ids.add(market.id)
                restored += 1
        if restored:
            self.logs.info(f"Restored {restored} watched markets")
        return restored

    # ------------------------------------------------------------------
    # Join / leave
    # ------------------------------------------------------------------

    def _resolve(self, reference: str) -> Optional[MarketInfo]:
        """
        Index first: a bare number (optionally "+N") is a 1-based index into
        the last results. Anything else is a literal market id.
        """
        digits = reference[1:] if reference.startswith("+") else reference
        if digits.isdecimal():
            index = int(digits)
            if 0 < index <= len(self.available_markets):
                return self.available_markets[index - 1]
            self.logs.warning(f"Invalid index: {index}. Use 1-{len(self.available_markets)}")
            return None

        for market in self.available_markets:
            if market.id == reference:
                return market
        return MarketInfo.placeholder(reference)

    async def join(self, reference: str) -> bool:
        market = self._resolve(reference.strip())
        if market is None:
            return False

        if market.id in self._watched_ids:
            self.logs.warning(f"Already monitoring this market: {market.id}")
            return False

        if self.store is not None:
            try:
                await self.store.save_market(market)
            except StorageError as e:
                self.logs.error(f"Failed to save market {market.id}: {e}")
                return False

        self.watched.append(market)
        self._watched_ids.add(market.id)
        self.logs.success(f"Joined market: {market.question} (ID: {market.id})")
        return True

    async def leave(self, market_id: str) -> bool:
        if market_id not in self._watched_ids:
            self.logs.warning(f"Not monitoring market: {market_id}")
            return False

        if self.store is not None:
            try:
                await self.store.deactivate_market(market_id)
            except StorageError as e:
                self.logs.error(f"Failed to remove market {market_id}: {e}")
                return False

        self.watched = [m for m in self.watched if m.id != market_id]
        self._watched_ids.discard(market_id)
        self.clamp_watched_selection()
        self.logs.info(f"Left market: {market_id}")

        if self.on_leave is not None:
            self.on_leave(market_id)
        return True

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    async def search(self, keyword: str, limit: int = 50) -> bool:
        self.logs.info(f"Searching markets: '{keyword}'...")
        self.search_query = keyword
        self.is_loading = True
        try:
            markets = await self.market_service.search_markets(keyword, limit)
        except MarketServiceError as e:
            self.logs.error(f"Search failed: {e}")
            return False
        finally:
            self.is_loading = False

        self.available_markets = markets
        self.selected_market_index = 0
        self.logs.success(f"Found {len(markets)} markets")
        return True

    async def trending(self, limit: int = 20) -> bool:
        self.logs.info("Loading trending markets...")
        self.search_query = "Trending"
        self.is_loading = True
        try:
            markets = await self.market_service.get_trending_markets(limit)
        except MarketServiceError as e:
            self.logs.error(f"Failed to load trending: {e}")
            return False
        finally:
            self.is_loading = False

        self.available_markets = markets
        self.selected_market_index = 0
        self.logs.success(f"Loaded {len(markets)} trending markets")
        return True
