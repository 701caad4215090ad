#!/usr/bin/env python3
"""
POLYMARKET TERMINAL DASHBOARD
=============================
Interactive market monitor with a paper execution engine.

Features:
- Gamma API market search and trending lists
- Persistent watchlist (SQLite)
- Volume velocity / order book imbalance analytics
- Pause, resume and panic controls
- Secondary line-based REPL (--repl)
"""

import logging
import sys

from config import ConfigError, Settings, load_settings, validate_settings
from dashboard.controller import DashboardController
from dashboard.terminal import TerminalInput
from execution.engine import PaperExecutionEngine
from features.spike_detection import AnalyticsEngine, RandomWalkSimulator
from feeds.gamma_markets import GammaMarketService
from storage.watchlist_store import SqliteWatchlistStore, StorageError
from tools.command_repl import CommandRepl
from tools.dashboard_term import draw_dashboard
from utils.logging import setup_logger

logger = logging.getLogger("main_dashboard")

# Packages whose loggers share the process log file
LOGGER_NAMES = ["main_dashboard", "dashboard", "features", "feeds", "execution", "storage", "tools"]


def configure_logging(settings: Settings) -> None:
    for name in LOGGER_NAMES:
        setup_logger(name, settings.logging.level, settings.logging.log_file)


class DashboardApp:
    """
    Wires settings to components and owns their lifetimes.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

        self.store = SqliteWatchlistStore(settings.storage.database_path)
        self.market_service = GammaMarketService(
            settings.markets.gamma_base_url,
            settings.markets.request_timeout_secs,
        )
        self.engine = PaperExecutionEngine(
            min_order_size=settings.trading.min_order_size,
            max_order_size=settings.trading.max_order_size,
        )
        self.analytics = AnalyticsEngine(
            volume_velocity_threshold=settings.analytics.volume_velocity_threshold,
            obi_threshold=settings.analytics.obi_threshold,
            sample_source=RandomWalkSimulator(settings.analytics.simulation_seed),
            event_sink=self.store,
            tick_interval_secs=settings.dashboard.refresh_interval_ms / 1000.0,
        )

    async def initialize(self):
        logger.info("=" * 60)
        logger.info("  POLYMARKET DASHBOARD - INITIALIZING")
        logger.info("=" * 60)

        await self.store.initialize()
        logger.info("[INIT] Watchlist store ready")

        await self.market_service.initialize()
        logger.info("[INIT] Market discovery ready")

        if not self.settings.trading.private_key:
            logger.info("[INIT] No POLYMARKET_PK set - running in demo mode")

    async def run_dashboard(self):
        controller = DashboardController(
            engine=self.engine,
            market_service=self.market_service,
            store=self.store,
            analytics=self.analytics,
            settings=self.settings.dashboard,
        )
        await controller.start()

        with TerminalInput() as term:
            sys.stdout.write("\033[?1049h\033[?25l")  # alternate screen, hide cursor
            try:
                await controller.run(term, render=draw_dashboard)
            finally:
                sys.stdout.write("\033[?25h\033[?1049l")
                sys.stdout.flush()

    async def run_repl(self):
        repl = CommandRepl(self.engine, store=self.store)
        await repl.run()

    async def shutdown(self):
        logger.info("[SHUTDOWN] Cleaning up...")
        await self.market_service.close()
        await self.store.close()
        logger.info("[SHUTDOWN] Complete")


async def main(repl: bool = False) -> int:
    """Main entry point. Returns the process exit status."""
    settings = load_settings()
    try:
        validate_settings(settings)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    configure_logging(settings)

    app = DashboardApp(settings)
    try:
        await app.initialize()
        if repl:
            await app.run_repl()
        else:
            await app.run_dashboard()
    except StorageError as e:
        print(f"Storage error: {e}", file=sys.stderr)
        return 1
    finally:
        await app.shutdown()
    return 0
