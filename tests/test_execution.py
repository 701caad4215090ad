# file: tests/test_execution.py
import pytest

from execution.engine import ExecutionError, PaperExecutionEngine


@pytest.mark.asyncio
async def test_place_order_records_and_tracks_last_id():
    engine = PaperExecutionEngine(min_order_size=1.0, max_order_size=100.0)
    first = await engine.place_order("0x1", "buy", 10.0, 0.55)
    second = await engine.place_order("0x1", "sell", 5.0, 0.60)

    assert first != second
    assert first.startswith("order_")
    assert await engine.get_last_order_id() == second

    orders = await engine.get_active_orders()
    assert [o.side for o in orders] == ["BUY", "SELL"]
    assert orders[0].status == "OPEN"


@pytest.mark.asyncio
@pytest.mark.parametrize("size", [0.5, 150.0])
async def test_size_bounds(size):
    engine = PaperExecutionEngine(min_order_size=1.0, max_order_size=100.0)
    with pytest.raises(ExecutionError):
        await engine.place_order("0x1", "buy", size, 0.5)
    assert await engine.get_last_order_id() is None


@pytest.mark.asyncio
async def test_paused_rejects_orders():
    engine = PaperExecutionEngine()
    await engine.pause()
    with pytest.raises(ExecutionError, match="paused"):
        await engine.place_order("0x1", "buy", 10.0, 0.5)

    await engine.resume()
    assert await engine.place_order("0x1", "buy", 10.0, 0.5)


@pytest.mark.asyncio
async def test_cancel_all_orders_pauses():
    engine = PaperExecutionEngine()
    for _ in range(3):
        await engine.place_order("0x1", "buy", 10.0, 0.5)

    assert await engine.cancel_all_orders() == 3
    assert await engine.is_paused()
    assert await engine.get_active_orders() == []
    assert await engine.cancel_all_orders() == 0


@pytest.mark.asyncio
async def test_portfolio_is_zero_valued():
    portfolio = await PaperExecutionEngine().get_portfolio()
    assert portfolio.usdc_balance == 0.0
    assert portfolio.realized_pnl == 0.0
