# file: tests/test_store.py
import pytest

from features import VolumeVelocityEvent
from feeds.gamma_markets import MarketInfo
from storage.watchlist_store import SqliteWatchlistStore, StorageError


def _market(market_id, question="Will it rain?"):
    return MarketInfo(
        id=market_id,
        question=question,
        volume="12345.6",
        outcomes=["Yes", "No"],
        prices=[0.63, 0.37],
    )


@pytest.mark.asyncio
async def test_save_and_load_round_trip(tmp_path):
    store = SqliteWatchlistStore(str(tmp_path / "bot.db"))
    await store.initialize()
    try:
        await store.save_market(_market("0x1"))
        await store.save_market(_market("0x2", "Second?"))

        markets = await store.load_active_markets()
        assert [m.id for m in markets] == ["0x1", "0x2"]
        assert markets[0].outcomes == ["Yes", "No"]
        assert markets[0].prices == [0.63, 0.37]
        assert markets[1].question == "Second?"
    finally:
        await store.close()


@pytest.mark.asyncio
async def test_deactivate_and_rejoin(tmp_path):
    store = SqliteWatchlistStore(str(tmp_path / "bot.db"))
    await store.initialize()
    try:
        await store.save_market(_market("0x1"))
        await store.deactivate_market("0x1")
        assert await store.load_active_markets() == []

        await store.save_market(_market("0x1", "Updated?"))
        markets = await store.load_active_markets()
        assert [m.question for m in markets] == ["Updated?"]
    finally:
        await store.close()


@pytest.mark.asyncio
async def test_watchlist_survives_reopen(tmp_path):
    path = str(tmp_path / "nested" / "bot.db")
    store = SqliteWatchlistStore(path)
    await store.initialize()
    await store.save_market(_market("0xabc"))
    await store.close()

    reopened = SqliteWatchlistStore(path)
    await reopened.initialize()
    try:
        assert [m.id for m in await reopened.load_active_markets()] == ["0xabc"]
    finally:
        await reopened.close()


@pytest.mark.asyncio
async def test_velocity_events_newest_first(tmp_path):
    store = SqliteWatchlistStore(str(tmp_path / "bot.db"))
    await store.initialize()
    try:
        for ts in (100, 101, 102):
            await store.save_velocity_event(VolumeVelocityEvent(
                market_id="0x1", velocity=1500.0 + ts, volume_delta=1500.0, time_delta=1.0, timestamp=ts,
            ))
        await store.save_velocity_event(VolumeVelocityEvent(
            market_id="0x2", velocity=-2000.0, volume_delta=-2000.0, time_delta=1.0, timestamp=200,
        ))

        events = await store.recent_velocity_events("0x1", limit=2)
        assert [e.timestamp for e in events] == [102, 101]
        assert events[0].velocity == 1602.0
    finally:
        await store.close()


@pytest.mark.asyncio
async def test_operations_before_initialize_raise(tmp_path):
    store = SqliteWatchlistStore(str(tmp_path / "bot.db"))
    with pytest.raises(StorageError):
        await store.save_market(_market("0x1"))


@pytest.mark.asyncio
async def test_sqlite_errors_wrapped(tmp_path):
    store = SqliteWatchlistStore(str(tmp_path / "bot.db"))
    await store.initialize()
    try:
        await store._run(store._conn.execute, "DROP TABLE watchlist")
        with pytest.raises(StorageError):
            await store.load_active_markets()
    finally:
        await store.close()
