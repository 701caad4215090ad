#!/usr/bin/env python3
"""
Execution Engine
================
Capability surface the dashboard consumes (pause/resume/cancel/query) and
a paper implementation that keeps all state in memory. No orders leave
the process.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol

logger = logging.getLogger("execution.engine")


class ExecutionError(Exception):
    """Raised when an order is rejected."""
    pass


@dataclass
class Portfolio:
    usdc_balance: float = 0.0
    total_value: float = 0.0
    realized_pnl: float = 0.0
    unrealized_pnl: float = 0.0


@dataclass
class OrderInfo:
    order_id: str
    market_id: str
    side: str
    price: float
    size: float
    filled_size: float = 0.0
    status: str = "OPEN"
    created_at: int = 0


class ExecutionEngine(Protocol):
    async def is_paused(self) -> bool: ...
    async def pause(self) -> None: ...
    async def resume(self) -> None: ...
    async def cancel_all_orders(self) -> int: ...
    async def get_last_order_id(self) -> Optional[str]: ...
    async def get_portfolio(self) -> Portfolio: ...
    async def get_active_orders(self) -> List[OrderInfo]: ...


class PaperExecutionEngine:
    """In-memory execution engine used in demo mode."""

    def __init__(self, min_order_size: float = 1.0, max_order_size: float = 100.0):
        self.min_order_size = min_order_size
        self.max_order_size = max_order_size
        self._paused = False
        self._last_order_id: Optional[str] = None
        self._orders: Dict[str, OrderInfo] = {}
        self._lock = asyncio.Lock()

    async def place_order(self, market_id: str, side: str, size: float, price: float) -> str:
        """
        Record an order.

        Raises:
            ExecutionError: If paused or size is outside the configured bounds
        """
        async with self._lock:
            if self._paused:
                raise ExecutionError("Bot is paused - order rejected")
            if size < self.min_order_size:
                raise ExecutionError(f"Order size below minimum: {self.min_order_size}")
            if size > self.max_order_size:
                raise ExecutionError(f"Order size exceeds maximum: {self.max_order_size}")

            now_ms = int(time.time() * 1000)
            order_id = f"order_{now_ms}"
            # Keep ids unique when two orders land in the same millisecond
            while order_id in self._orders:
                now_ms += 1
                order_id = f"order_{now_ms}"

            self._orders[order_id] = OrderInfo(
                order_id=order_id,
                market_id=market_id,
                side=side.upper(),
                price=price,
                size=size,
                created_at=now_ms // 1000,
            )
            self._last_order_id = order_id

        logger.info(f"Placed {side} order on market {market_id} - Size: {size} @ Price: {price}")
        return order_id

    async def cancel_all_orders(self) -> int:
        """Cancel every open order and pause (panic mode)."""
        async with self._lock:
            count = 0
            for order in self._orders.values():
                if order.status == "OPEN":
                    order.status = "CANCELLED"
                    count += 1
            self._paused = True
        logger.warning(f"PANIC: cancelled {count} orders")
        return count

    async def get_active_orders(self) -> List[OrderInfo]:
        return [o for o in self._orders.values() if o.status == "OPEN"]

    async def get_portfolio(self) -> Portfolio:
        return Portfolio()

    async def pause(self) -> None:
        self._paused = True
        logger.info("Bot paused - entering cancel-only mode")

    async def resume(self) -> None:
        self._paused = False
        logger.info("Bot resumed - trading enabled")

    async def is_paused(self) -> bool:
        return self._paused

    async def get_last_order_id(self) -> Optional[str]:
        return self._last_order_id
