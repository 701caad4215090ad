#!/usr/bin/env python3
"""
Configuration Module
====================
Loads and validates configuration settings for the market dashboard.
"""

import os
from typing import Optional

from pydantic import BaseModel, Field
from dotenv import load_dotenv


# Load .env file if present
load_dotenv()


class ConfigError(ValueError):
    """Raised when settings fail validation."""
    pass


class TradingSettings(BaseModel):
    """Execution engine settings."""
    private_key: str = Field(default="")
    max_order_size: float = Field(default=100.0)
    min_order_size: float = Field(default=1.0)


class AnalyticsSettings(BaseModel):
    """Spike detection thresholds."""
    volume_velocity_threshold: float = Field(default=1000.0)
    obi_threshold: float = Field(default=0.3)
    simulation_seed: Optional[int] = Field(default=None)


class MarketsSettings(BaseModel):
    """Gamma market discovery API settings."""
    gamma_base_url: str = "https://gamma-api.polymarket.com"
    request_timeout_secs: float = Field(default=10.0)


class DashboardSettings(BaseModel):
    """Event loop timing and list sizes."""
    tick_ms: int = Field(default=100)
    refresh_interval_ms: int = Field(default=500)
    search_limit: int = Field(default=50)
    trending_limit: int = Field(default=20)


class StorageSettings(BaseModel):
    """Storage settings."""
    database_path: str = Field(default="./bot_history.db")


class LoggingSettings(BaseModel):
    """Process log settings. The TUI owns the terminal, so logs go to a file."""
    log_file: str = Field(default="bot.log")
    level: str = Field(default="INFO")


class Settings(BaseModel):
    """Complete application settings."""
    trading: TradingSettings = Field(default_factory=TradingSettings)
    analytics: AnalyticsSettings = Field(default_factory=AnalyticsSettings)
    markets: MarketsSettings = Field(default_factory=MarketsSettings)
    dashboard: DashboardSettings = Field(default_factory=DashboardSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


def load_settings() -> Settings:
    """
    Load settings from environment variables and defaults.

    Environment variables:
        POLYMARKET_PK: Wallet private key (optional in demo mode)
        MAX_ORDER_SIZE / MIN_ORDER_SIZE: Order size bounds
        VOLUME_VELOCITY_THRESHOLD: |vol/sec| above which a spike event fires
        OBI_THRESHOLD: |OBI| above which an imbalance is significant
        SIMULATION_SEED: Fixed seed for the analytics simulator
        GAMMA_API_BASE: Market discovery API base URL
        GAMMA_TIMEOUT: HTTP timeout in seconds
        TICK_MS: Input poll timeout in milliseconds
        REFRESH_INTERVAL_MS: Minimum interval between refreshes
        DATABASE_PATH: SQLite database file
        LOG_FILE / LOG_LEVEL: Process log destination and level

    Returns:
        Settings object with all configuration
    """
    seed_raw = os.getenv("SIMULATION_SEED", "")

    trading = TradingSettings(
        private_key=os.getenv("POLYMARKET_PK", ""),
        max_order_size=float(os.getenv("MAX_ORDER_SIZE", "100.0")),
        min_order_size=float(os.getenv("MIN_ORDER_SIZE", "1.0")),
    )

    analytics = AnalyticsSettings(
        volume_velocity_threshold=float(os.getenv("VOLUME_VELOCITY_THRESHOLD", "1000.0")),
        obi_threshold=float(os.getenv("OBI_THRESHOLD", "0.3")),
        simulation_seed=int(seed_raw) if seed_raw else None,
    )

    markets = MarketsSettings(
        gamma_base_url=os.getenv("GAMMA_API_BASE", "https://gamma-api.polymarket.com"),
        request_timeout_secs=float(os.getenv("GAMMA_TIMEOUT", "10")),
    )

    dashboard = DashboardSettings(
        tick_ms=int(os.getenv("TICK_MS", "100")),
        refresh_interval_ms=int(os.getenv("REFRESH_INTERVAL_MS", "500")),
    )

    storage = StorageSettings(
        database_path=os.getenv("DATABASE_PATH", "./bot_history.db"),
    )

    logging_settings = LoggingSettings(
        log_file=os.getenv("LOG_FILE", "bot.log"),
        level=os.getenv("LOG_LEVEL", "INFO"),
    )

    return Settings(
        trading=trading,
        analytics=analytics,
        markets=markets,
        dashboard=dashboard,
        storage=storage,
        logging=logging_settings,
    )


def validate_settings(settings: Settings) -> None:
    """
    Validate configuration values.

    Raises:
        ConfigError: On the first invalid value found
    """
    trading = settings.trading
    if trading.private_key and not trading.private_key.startswith("0x"):
        raise ConfigError("Private key must start with '0x'")

    if trading.min_order_size <= 0:
        raise ConfigError("MIN_ORDER_SIZE must be greater than 0")

    if trading.max_order_size < trading.min_order_size:
        raise ConfigError("MAX_ORDER_SIZE must be greater than MIN_ORDER_SIZE")

    obi = settings.analytics.obi_threshold
    if obi < -1.0 or obi > 1.0:
        raise ConfigError("OBI_THRESHOLD must be between -1.0 and 1.0")

    if settings.dashboard.tick_ms <= 0 or settings.dashboard.refresh_interval_ms <= 0:
        raise ConfigError("TICK_MS and REFRESH_INTERVAL_MS must be positive")
