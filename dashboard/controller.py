#!/usr/bin/env python3
"""
Dashboard Controller
====================
Top-level driver. Owns the log buffer, watchlist, analytics and mode
state machine, runs the cooperative poll -> route -> refresh loop, and
exposes a read-only snapshot for rendering.

Single-threaded: every mutation happens inside one loop iteration, and
refresh work always runs after event handling, never interleaved.
"""

import logging
import time
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, Optional, Protocol, Tuple

from config import DashboardSettings
from dashboard.commands import CommandInterpreter
from dashboard.docs import DocsNavigator
from dashboard.keys import KeyEvent
from dashboard.modes import ModeStateMachine
from dashboard.state import (
    CommandEntryMode,
    EngineStatus,
    InputMode,
    LeaveConfirmMode,
    LogEntry,
    LogRingBuffer,
    QuitConfirmMode,
    Tab,
)
from dashboard.watchlist import MarketDiscovery, WatchlistManager
from execution.engine import ExecutionEngine, ExecutionError, OrderInfo, Portfolio
from features import VolumeVelocityEvent
from features.spike_detection import AnalyticsEngine
from feeds.gamma_markets import MarketInfo
from storage.watchlist_store import WatchlistStore
from utils.throttle import Throttle

logger = logging.getLogger("dashboard.controller")


class InputSource(Protocol):
    async def next_event(self, timeout: float) -> Optional[KeyEvent]:
        """Wait at most ``timeout`` seconds for one key press."""
        ...


@dataclass(frozen=True)
class AnalysisView:
    current_velocity: Optional[float]
    current_obi: Optional[float]
    significant_imbalance: bool
    recent_events: Tuple[VolumeVelocityEvent, ...]


@dataclass(frozen=True)
class DashboardSnapshot:
    """Everything a renderer needs. Copies, never live references."""
    current_tab: Tab
    mode: InputMode
    should_quit: bool
    logs: Tuple[LogEntry, ...]
    watched: Tuple[MarketInfo, ...]
    selected_watched_index: int
    available_markets: Tuple[MarketInfo, ...]
    selected_market_index: int
    search_query: str
    is_loading: bool
    is_paused: bool
    last_order_id: Optional[str]
    portfolio: Optional[Portfolio]
    active_orders: Tuple[OrderInfo, ...]
    analysis: Dict[str, AnalysisView] = field(default_factory=dict)
    docs_selected_section: int = 0
    docs_viewing_content: bool = False
    docs_scroll_offset: int = 0
    velocity_threshold: float = 1000.0


class DashboardController:

    def __init__(
        self,
        engine: ExecutionEngine,
        market_service: MarketDiscovery,
        store: Optional[WatchlistStore] = None,
        analytics: Optional[AnalyticsEngine] = None,
        settings: Optional[DashboardSettings] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.settings = settings or DashboardSettings()
        self.engine = engine
        self.logs = LogRingBuffer()
        self.status = EngineStatus()
        self.analytics = analytics or AnalyticsEngine(
            tick_interval_secs=self.settings.refresh_interval_ms / 1000.0
        )

        self.watchlist = WatchlistManager(
            self.logs,
            market_service,
            store=store,
            on_leave=self.analytics.forget,
        )
        self.interpreter = CommandInterpreter(
            self.watchlist,
            self.logs,
            search_limit=self.settings.search_limit,
            trending_limit=self.settings.trending_limit,
            focus_markets=self._focus_markets,
        )
        self.machine = ModeStateMachine(
            self.watchlist,
            self.interpreter,
            engine,
            self.logs,
            status=self.status,
            docs=DocsNavigator(),
        )
        self.throttle = Throttle(self.settings.refresh_interval_ms / 1000.0, clock=clock)

    def _focus_markets(self) -> None:
        self.machine.focus_markets()

    @property
    def should_quit(self) -> bool:
        return self.machine.should_quit

    async def start(self) -> None:
        """Restore persisted state and greet the operator."""
        await self.watchlist.restore()
        self.logs.info("TUI initialized successfully")
        self.logs.info("Press ':' to enter command mode")
        self.logs.info("Press 'S' to search markets")

    async def handle_event(self, event: KeyEvent) -> None:
        await self.machine.handle(event)

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    async def refresh(self) -> bool:
        """Throttled refresh. Returns True when work ran."""
        if not self.throttle.ready():
            return False
        await self.refresh_engine_state()

        spikes = self.analytics.simulate_tick(self.watchlist.watched_ids)
        for spike in spikes:
            logger.info(f"Velocity spike {spike.market_id}: {spike.velocity:+.1f} vol/s")
        return True

    async def refresh_engine_state(self) -> None:
        try:
            self.status.is_paused = await self.engine.is_paused()
            self.status.last_order_id = await self.engine.get_last_order_id()
        except ExecutionError as e:
            logger.warning(f"Engine status refresh failed: {e}")

        try:
            self.status.portfolio = await self.engine.get_portfolio()
        except ExecutionError as e:
            logger.warning(f"Portfolio refresh failed: {e}")

        try:
            self.status.active_orders = await self.engine.get_active_orders()
        except ExecutionError as e:
            logger.warning(f"Active orders refresh failed: {e}")

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def _copy_mode(self) -> InputMode:
        mode = self.machine.mode
        if isinstance(mode, (CommandEntryMode, QuitConfirmMode, LeaveConfirmMode)):
            return replace(mode)
        return mode

    def snapshot(self) -> DashboardSnapshot:
        analysis = {}
        for market_id in self.watchlist.watched_ids:
            a = self.analytics.get(market_id)
            if a is None:
                continue
            analysis[market_id] = AnalysisView(
                current_velocity=a.current_velocity,
                current_obi=a.current_obi,
                significant_imbalance=(
                    a.current_obi is not None and self.analytics.is_significant_imbalance(a.current_obi)
                ),
                recent_events=tuple(a.recent_events),
            )

        docs = self.machine.docs
        return DashboardSnapshot(
            current_tab=self.machine.current_tab,
            mode=self._copy_mode(),
            should_quit=self.should_quit,
            logs=tuple(self.logs.entries()),
            watched=tuple(self.watchlist.watched),
            selected_watched_index=self.watchlist.selected_watched_index,
            available_markets=tuple(self.watchlist.available_markets),
            selected_market_index=self.watchlist.selected_market_index,
            search_query=self.watchlist.search_query,
            is_loading=self.watchlist.is_loading,
            is_paused=self.status.is_paused,
            last_order_id=self.status.last_order_id,
            portfolio=self.status.portfolio,
            active_orders=tuple(self.status.active_orders),
            analysis=analysis,
            docs_selected_section=docs.selected_section,
            docs_viewing_content=docs.viewing_content,
            docs_scroll_offset=docs.scroll_offset,
            velocity_threshold=self.analytics.volume_velocity_threshold,
        )

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    async def run(
        self,
        input_source: InputSource,
        render: Optional[Callable[[DashboardSnapshot], None]] = None,
    ) -> None:
        """Run until the quit flag is set."""
        tick_secs = self.settings.tick_ms / 1000.0
        iterations = 0
        while True:
            if render is not None:
                render(self.snapshot())

            event = await input_source.next_event(tick_secs)
            if event is not None:
                await self.handle_event(event)

            if self.should_quit:
                break

            await self.refresh()
            iterations += 1

        logger.info(f"Dashboard loop stopped after {iterations} iterations")
