#!/usr/bin/env python3
"""
Spike Detection
===============
Per-market analytics: volume velocity (V_v = dVolume / dt) and order book
imbalance (OBI = (V_bids - V_asks) / (V_bids + V_asks)).

Absent a live feed, a seeded random walk advances each watched market's
velocity and OBI every refresh tick. The walk sits behind ``SampleSource``
so a real ingestion path can replace it without touching the dashboard.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Protocol, Tuple

from features import MarketAnalysis, OrderBookImbalance, VolumeVelocityEvent

logger = logging.getLogger("features.spike_detection")

# Random walk bounds
VELOCITY_STEP = 100.0
VELOCITY_LIMIT = 2000.0
OBI_STEP = 0.05
OBI_LIMIT = 1.0
SPIKE_VELOCITY = 1000.0
SPIKE_PROBABILITY_CUTOFF = 0.95


def calculate_order_book_imbalance(bids_volume: float, asks_volume: float) -> float:
    """
    OBI in [-1, 1] for non-negative volumes. Empty book yields 0.0.
    """
    total_volume = bids_volume + asks_volume
    if total_volume == 0:
        return 0.0
    return (bids_volume - asks_volume) / total_volume


def calculate_volume_velocity(
    prev: Tuple[float, float],
    new: Tuple[float, float],
) -> Optional[float]:
    """
    Velocity between two (volume, timestamp) samples.

    Returns None when elapsed time is zero or negative.
    """
    prev_volume, prev_ts = prev
    new_volume, new_ts = new
    time_delta = new_ts - prev_ts
    if time_delta <= 0:
        return None
    return (new_volume - prev_volume) / time_delta


def _clamp(value: float, limit: float) -> float:
    return max(-limit, min(limit, value))


class LcgRandom:
    """64-bit linear congruential generator (Knuth MMIX constants)."""

    MULTIPLIER = 6364136223846793005
    INCREMENT = 1442695040888963407
    MODULUS = 1 << 64

    def __init__(self, seed: int):
        self.state = seed % self.MODULUS

    def next_u64(self) -> int:
        self.state = (self.state * self.MULTIPLIER + self.INCREMENT) % self.MODULUS
        return self.state

    def next_float(self) -> float:
        """Uniform value in [0, 1)."""
        return self.next_u64() / self.MODULUS


@dataclass(frozen=True)
class MarketSample:
    velocity: float
    obi: float
    spike: bool = False


class SampleSource(Protocol):
    """Produces the next (velocity, obi) reading for a market."""

    def next_sample(self, market_id: str) -> MarketSample:
        ...

    def forget(self, market_id: str) -> None:
        ...


class RandomWalkSimulator:
    """
    Bounded random walk standing in for live velocity/OBI data.

    Velocity moves up to +/-100 per tick within [-2000, 2000]; OBI moves up
    to +/-0.05 within [-1, 1]. A spike is flagged when |velocity| > 1000 and
    a further draw exceeds 0.95.
    """

    def __init__(self, seed: Optional[int] = None):
        if seed is None:
            seed = time.time_ns()
        self.seed = seed
        self.rng = LcgRandom(seed)
        self._walk: Dict[str, Tuple[float, float]] = {}

    def next_sample(self, market_id: str) -> MarketSample:
        velocity, obi = self._walk.get(market_id, (0.0, 0.0))

        velocity = _clamp(velocity + (self.rng.next_float() * 2.0 - 1.0) * VELOCITY_STEP, VELOCITY_LIMIT)
        obi = _clamp(obi + (self.rng.next_float() * 2.0 - 1.0) * OBI_STEP, OBI_LIMIT)
        self._walk[market_id] = (velocity, obi)

        spike = abs(velocity) > SPIKE_VELOCITY and self.rng.next_float() > SPIKE_PROBABILITY_CUTOFF
        return MarketSample(velocity=velocity, obi=obi, spike=spike)

    def forget(self, market_id: str) -> None:
        self._walk.pop(market_id, None)


class VelocityEventSink(Protocol):
    async def save_velocity_event(self, event: VolumeVelocityEvent) -> None:
        ...


class AnalyticsEngine:
    """
    Owns MarketAnalysis state keyed by market id.

    Entries are created lazily on the first tick or sample for a market.
    """

    def __init__(
        self,
        volume_velocity_threshold: float = 1000.0,
        obi_threshold: float = 0.3,
        sample_source: Optional[SampleSource] = None,
        event_sink: Optional[VelocityEventSink] = None,
        tick_interval_secs: float = 0.5,
        clock: Callable[[], float] = time.time,
    ):
        self.volume_velocity_threshold = volume_velocity_threshold
        self.obi_threshold = obi_threshold
        self.sample_source = sample_source or RandomWalkSimulator()
        self.event_sink = event_sink
        self.tick_interval_secs = tick_interval_secs
        self.clock = clock
        self.analyses: Dict[str, MarketAnalysis] = {}

    def analysis_for(self, market_id: str) -> MarketAnalysis:
        """Get or create state for a market."""
        if market_id not in self.analyses:
            self.analyses[market_id] = MarketAnalysis()
        return self.analyses[market_id]

    def get(self, market_id: str) -> Optional[MarketAnalysis]:
        return self.analyses.get(market_id)

    def forget(self, market_id: str) -> None:
        """Drop all derived state for a market."""
        self.analyses.pop(market_id, None)
        self.sample_source.forget(market_id)

    # ------------------------------------------------------------------
    # Order book imbalance
    # ------------------------------------------------------------------

    def is_significant_imbalance(self, obi: float) -> bool:
        return abs(obi) > self.obi_threshold

    def record_order_book(
        self,
        market_id: str,
        bids_volume: float,
        asks_volume: float,
        timestamp: Optional[float] = None,
    ) -> OrderBookImbalance:
        obi = calculate_order_book_imbalance(bids_volume, asks_volume)
        self.analysis_for(market_id).current_obi = obi
        ts = self.clock() if timestamp is None else timestamp
        return OrderBookImbalance(
            market_id=market_id,
            obi=obi,
            bids_volume=bids_volume,
            asks_volume=asks_volume,
            timestamp=int(ts),
        )

    # ------------------------------------------------------------------
    # Volume velocity
    # ------------------------------------------------------------------

    async def check_volume_velocity(
        self,
        market_id: str,
        current_volume: float,
        timestamp: Optional[float] = None,
    ) -> Optional[VolumeVelocityEvent]:
        """
        Evaluate a new cumulative volume sample.

        Returns the spike event when |velocity| exceeds the threshold. The
        sample always becomes the market's latest history point.

        Raises:
            StorageError: If persisting an emitted event fails
        """
        now = self.clock() if timestamp is None else timestamp
        analysis = self.analysis_for(market_id)
        prev = analysis.last_sample

        event = None
        if prev is not None:
            prev_ts, prev_volume = prev
            velocity = calculate_volume_velocity((prev_volume, prev_ts), (current_volume, now))
            if velocity is not None:
                analysis.current_velocity = velocity
                if abs(velocity) > self.volume_velocity_threshold:
                    event = VolumeVelocityEvent(
                        market_id=market_id,
                        velocity=velocity,
                        volume_delta=current_volume - prev_volume,
                        time_delta=now - prev_ts,
                        timestamp=int(now),
                    )
                    analysis.record_event(event)
            else:
                logger.debug(f"Dropped stale volume sample for {market_id}")

        analysis.volume_history.append((now, current_volume))

        if event is not None and self.event_sink is not None:
            await self.event_sink.save_velocity_event(event)

        return event

    # ------------------------------------------------------------------
    # Simulation
    # ------------------------------------------------------------------

    def simulate_tick(self, market_ids: Iterable[str]) -> List[VolumeVelocityEvent]:
        """Advance every given market one step. Returns synthetic spikes."""
        now = self.clock()
        spikes = []
        for market_id in market_ids:
            analysis = self.analysis_for(market_id)
            sample = self.sample_source.next_sample(market_id)
            analysis.current_velocity = sample.velocity
            analysis.current_obi = sample.obi

            if sample.spike:
                event = VolumeVelocityEvent(
                    market_id=market_id,
                    velocity=sample.velocity,
                    volume_delta=sample.velocity * self.tick_interval_secs,
                    time_delta=self.tick_interval_secs,
                    timestamp=int(now),
                )
                analysis.record_event(event)
                spikes.append(event)
        return spikes
