# file: tests/test_config.py
import pytest

from config import ConfigError, Settings, load_settings, validate_settings

ENV_VARS = [
    "POLYMARKET_PK", "MAX_ORDER_SIZE", "MIN_ORDER_SIZE", "VOLUME_VELOCITY_THRESHOLD",
    "OBI_THRESHOLD", "SIMULATION_SEED", "GAMMA_API_BASE", "GAMMA_TIMEOUT", "TICK_MS",
    "REFRESH_INTERVAL_MS", "DATABASE_PATH", "LOG_FILE", "LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    s = load_settings()
    assert s.trading.private_key == ""
    assert s.trading.max_order_size == 100.0
    assert s.analytics.volume_velocity_threshold == 1000.0
    assert s.analytics.obi_threshold == 0.3
    assert s.analytics.simulation_seed is None
    assert s.dashboard.tick_ms == 100
    assert s.dashboard.refresh_interval_ms == 500
    assert s.storage.database_path == "./bot_history.db"
    assert s.logging.log_file == "bot.log"
    validate_settings(s)


def test_env_overrides(clean_env):
    clean_env.setenv("POLYMARKET_PK", "0xabc")
    clean_env.setenv("OBI_THRESHOLD", "0.5")
    clean_env.setenv("SIMULATION_SEED", "42")
    clean_env.setenv("REFRESH_INTERVAL_MS", "250")
    clean_env.setenv("DATABASE_PATH", "/tmp/x.db")

    s = load_settings()
    assert s.trading.private_key == "0xabc"
    assert s.analytics.obi_threshold == 0.5
    assert s.analytics.simulation_seed == 42
    assert s.dashboard.refresh_interval_ms == 250
    assert s.storage.database_path == "/tmp/x.db"
    validate_settings(s)


@pytest.mark.parametrize("mutate, message", [
    (lambda s: setattr(s.trading, "private_key", "abc"), "0x"),
    (lambda s: setattr(s.trading, "min_order_size", 0.0), "MIN_ORDER_SIZE"),
    (lambda s: setattr(s.trading, "max_order_size", 0.5), "MAX_ORDER_SIZE"),
    (lambda s: setattr(s.analytics, "obi_threshold", 1.5), "OBI_THRESHOLD"),
    (lambda s: setattr(s.dashboard, "tick_ms", 0), "TICK_MS"),
    (lambda s: setattr(s.dashboard, "refresh_interval_ms", -1), "REFRESH_INTERVAL_MS"),
])
def test_validation_failures(mutate, message):
    s = Settings()
    mutate(s)
    with pytest.raises(ConfigError, match=message):
        validate_settings(s)


def test_config_error_is_value_error():
    assert issubclass(ConfigError, ValueError)
