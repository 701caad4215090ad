#!/usr/bin/env python3
"""
Features Module
===============
Core data models for per-market analytics.
"""

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Optional, Tuple
from pydantic import BaseModel, ConfigDict


MAX_RECENT_EVENTS = 10
MAX_VOLUME_HISTORY = 1000


class VolumeVelocityEvent(BaseModel):
    """
    A volume velocity spike: V_v = delta_volume / delta_t.
    Immutable once created.
    """
    model_config = ConfigDict(frozen=True)

    market_id: str
    velocity: float
    volume_delta: float
    time_delta: float
    timestamp: int  # unix seconds


class OrderBookImbalance(BaseModel):
    """OBI = (V_bids - V_asks) / (V_bids + V_asks) at a point in time."""
    model_config = ConfigDict(frozen=True)

    market_id: str
    obi: float
    bids_volume: float
    asks_volume: float
    timestamp: int


@dataclass
class MarketAnalysis:
    """Per-market derived signal state."""
    volume_history: Deque[Tuple[float, float]] = field(
        default_factory=lambda: deque(maxlen=MAX_VOLUME_HISTORY)
    )  # (timestamp, volume)
    current_velocity: Optional[float] = None
    current_obi: Optional[float] = None
    recent_events: Deque[VolumeVelocityEvent] = field(
        default_factory=lambda: deque(maxlen=MAX_RECENT_EVENTS)
    )  # newest first

    def record_event(self, event: VolumeVelocityEvent) -> None:
        """Insert at the front; the oldest falls off the back past the cap."""
        self.recent_events.appendleft(event)

    @property
    def last_sample(self) -> Optional[Tuple[float, float]]:
        return self.volume_history[-1] if self.volume_history else None


__all__ = [
    "MAX_RECENT_EVENTS",
    "MAX_VOLUME_HISTORY",
    "VolumeVelocityEvent",
    "OrderBookImbalance",
    "MarketAnalysis",
]
