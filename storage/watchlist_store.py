# file: storage/watchlist_store.py
import asyncio
import json
import logging
import sqlite3
import time
from pathlib import Path
from typing import Any, Callable, List, Optional, Protocol

from features import VolumeVelocityEvent
from feeds.gamma_markets import MarketInfo

logger = logging.getLogger("storage.watchlist_store")


class StorageError(Exception):
    """Exception raised for storage-related errors."""
    pass


class WatchlistStore(Protocol):
    async def save_market(self, market: MarketInfo) -> None: ...
    async def deactivate_market(self, market_id: str) -> None: ...
    async def load_active_markets(self) -> List[MarketInfo]: ...


SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS watchlist (
        market_id TEXT PRIMARY KEY,
        question TEXT NOT NULL,
        volume TEXT NOT NULL DEFAULT '0',
        outcomes TEXT NOT NULL DEFAULT '[]',
        prices TEXT NOT NULL DEFAULT '[]',
        joined_at INTEGER NOT NULL,
        active BOOLEAN NOT NULL DEFAULT 1
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS volume_velocity_events (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        market_id TEXT NOT NULL,
        velocity REAL NOT NULL,
        volume_delta REAL NOT NULL,
        time_delta REAL NOT NULL,
        timestamp INTEGER NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_velocity_market ON volume_velocity_events(market_id)",
]


class SqliteWatchlistStore:
    """
    SQLite persistence for watchlist rows and velocity events.

    Features:
    - WAL journal mode
    - Soft delete on leave (active = 0); re-joining re-activates the row
    - Blocking sqlite3 calls run in the default executor behind one lock
    - Explicit error handling: every sqlite3 failure surfaces as StorageError
    """

    def __init__(self, database_path: str):
        self.database_path = database_path
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = asyncio.Lock()

    def _connect(self) -> None:
        if self.database_path != ":memory:":
            Path(self.database_path).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.database_path, check_same_thread=False)
        conn.execute("PRAGMA journal_mode=WAL")
        for statement in SCHEMA:
            conn.execute(statement)
        conn.commit()
        self._conn = conn

    async def _run(self, fn: Callable[..., Any], *args) -> Any:
        async with self._lock:
            loop = asyncio.get_running_loop()
            try:
                return await loop.run_in_executor(None, fn, *args)
            except (sqlite3.Error, OSError) as e:
                logger.error(f"SQLite operation failed: {e}")
                raise StorageError(str(e)) from e

    def _require_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StorageError("Store not initialized")
        return self._conn

    async def initialize(self) -> None:
        """Open the database and create the schema."""
        await self._run(self._connect)
        logger.info(f"Database initialized at {self.database_path}")

    async def close(self) -> None:
        if self._conn is not None:
            await self._run(self._conn.close)
            self._conn = None

    # ------------------------------------------------------------------
    # Watchlist
    # ------------------------------------------------------------------

    def _save_market(self, market: MarketInfo) -> None:
        conn = self._require_conn()
        conn.execute(
            """
            INSERT INTO watchlist (market_id, question, volume, outcomes, prices, joined_at, active)
            VALUES (?, ?, ?, ?, ?, ?, 1)
            ON CONFLICT(market_id) DO UPDATE SET
                question = excluded.question,
                volume = excluded.volume,
                outcomes = excluded.outcomes,
                prices = excluded.prices,
                joined_at = excluded.joined_at,
                active = 1
            """,
            (
                market.id,
                market.question,
                market.volume,
                json.dumps(market.outcomes),
                json.dumps(market.prices),
                int(time.time()),
            ),
        )
        conn.commit()

    async def save_market(self, market: MarketInfo) -> None:
        """Upsert a watchlist row and mark it active."""
        await self._run(self._save_market, market)

    def _deactivate_market(self, market_id: str) -> None:
        conn = self._require_conn()
        conn.execute("UPDATE watchlist SET active = 0 WHERE market_id = ?", (market_id,))
        conn.commit()

    async def deactivate_market(self, market_id: str) -> None:
        """Soft-delete a watchlist row."""
        await self._run(self._deactivate_market, market_id)

    def _load_active_markets(self) -> List[MarketInfo]:
        conn = self._require_conn()
        rows = conn.execute(
            """
            SELECT market_id, question, volume, outcomes, prices
            FROM watchlist WHERE active = 1
            ORDER BY joined_at, rowid
            """
        ).fetchall()
        markets = []
        for market_id, question, volume, outcomes, prices in rows:
            try:
                markets.append(MarketInfo(
                    id=market_id,
                    question=question,
                    volume=volume,
                    outcomes=json.loads(outcomes),
                    prices=[float(p) for p in json.loads(prices)],
                ))
            except (json.JSONDecodeError, TypeError, ValueError) as e:
                logger.warning(f"Skipping corrupt watchlist row {market_id}: {e}")
        return markets

    async def load_active_markets(self) -> List[MarketInfo]:
        """Active watchlist rows in join order."""
        return await self._run(self._load_active_markets)

    # ------------------------------------------------------------------
    # Velocity events
    # ------------------------------------------------------------------

    def _save_velocity_event(self, event: VolumeVelocityEvent) -> None:
        conn = self._require_conn()
        conn.execute(
            """
            INSERT INTO volume_velocity_events
            (market_id, velocity, volume_delta, time_delta, timestamp)
            VALUES (?, ?, ?, ?, ?)
            """,
            (event.market_id, event.velocity, event.volume_delta, event.time_delta, event.timestamp),
        )
        conn.commit()

    async def save_velocity_event(self, event: VolumeVelocityEvent) -> None:
        await self._run(self._save_velocity_event, event)

    def _recent_velocity_events(self, market_id: str, limit: int) -> List[VolumeVelocityEvent]:
        conn = self._require_conn()
        rows = conn.execute(
            """
            SELECT market_id, velocity, volume_delta, time_delta, timestamp
            FROM volume_velocity_events WHERE market_id = ?
            ORDER BY timestamp DESC, id DESC LIMIT ?
            """,
            (market_id, limit),
        ).fetchall()
        return [
            VolumeVelocityEvent(
                market_id=r[0], velocity=r[1], volume_delta=r[2], time_delta=r[3], timestamp=r[4]
            )
            for r in rows
        ]

    async def recent_velocity_events(self, market_id: str, limit: int = 10) -> List[VolumeVelocityEvent]:
        """Newest-first persisted events for a market."""
        return await self._run(self._recent_velocity_events, market_id, limit)
