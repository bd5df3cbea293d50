from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import pytest

from bookingsync.config import (
    ConfigurationError,
    MissingConfigurationError,
    SyncConfig,
    data_dir,
    env_float,
    env_int,
    get_database_config,
    get_sync_config,
    optional_env_var,
    require_env_var,
    require_env_vars,
)


def test_require_env_vars_returns_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "value")

    assert require_env_vars(["EXAMPLE_VAR"]) == {"EXAMPLE_VAR": "value"}


def test_require_env_vars_lists_every_missing_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_B", raising=False)
    monkeypatch.setenv("MISSING_A", "   ")

    with pytest.raises(MissingConfigurationError) as excinfo:
        require_env_vars(["MISSING_B", "MISSING_A"])

    assert "MISSING_A, MISSING_B" in str(excinfo.value)


def test_require_env_var_rejects_blank(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "")

    with pytest.raises(ConfigurationError):
        require_env_var("EXAMPLE_VAR")


def test_optional_env_var_strips(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "  https://x.example  ")
    monkeypatch.delenv("ABSENT_VAR", raising=False)

    assert optional_env_var("EXAMPLE_VAR") == "https://x.example"
    assert optional_env_var("ABSENT_VAR") is None


def test_env_int_defaults_and_parses(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("EXAMPLE_INT", raising=False)
    assert env_int("EXAMPLE_INT", 7) == 7

    monkeypatch.setenv("EXAMPLE_INT", "12")
    assert env_int("EXAMPLE_INT", 7) == 12


@pytest.mark.parametrize("raw", ["twelve", "0", "-3"])
def test_env_int_rejects_invalid_values(monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
    monkeypatch.setenv("EXAMPLE_INT", raw)

    with pytest.raises(ConfigurationError, match="EXAMPLE_INT"):
        env_int("EXAMPLE_INT", 7)


@pytest.mark.parametrize("raw", ["soon", "-0.5"])
def test_env_float_rejects_invalid_values(monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
    monkeypatch.setenv("EXAMPLE_FLOAT", raw)

    with pytest.raises(ConfigurationError, match="EXAMPLE_FLOAT"):
        env_float("EXAMPLE_FLOAT", 1.0)


def test_sync_config_defaults() -> None:
    assert get_sync_config() == SyncConfig()
    assert SyncConfig().debounce_window == timedelta(minutes=5)
    assert SyncConfig().stability_window == timedelta(minutes=5)
    assert SyncConfig().fetch_concurrency == 5
    assert SyncConfig().batch_size == 500


def test_sync_config_honours_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BOOKINGSYNC_FETCH_CONCURRENCY", "2")
    monkeypatch.setenv("BOOKINGSYNC_DEBOUNCE_SECONDS", "0")
    monkeypatch.setenv("BOOKINGSYNC_STABILITY_SECONDS", "90")
    monkeypatch.setenv("BOOKINGSYNC_BATCH_SIZE", "50")
    monkeypatch.setenv("BOOKINGSYNC_INTERVAL_SECONDS", "600")

    config = get_sync_config()

    assert config.fetch_concurrency == 2
    assert config.debounce_window == timedelta(0)
    assert config.stability_window == timedelta(seconds=90)
    assert config.batch_size == 50
    assert config.sync_interval == timedelta(minutes=10)


def test_sync_config_rejects_zero_concurrency(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BOOKINGSYNC_FETCH_CONCURRENCY", "0")

    with pytest.raises(ConfigurationError):
        get_sync_config()


def test_database_defaults_to_sqlite_in_data_dir(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("BOOKINGSYNC_DATA_DIR", str(tmp_path / "store"))
    monkeypatch.delenv("DATABASE_URI", raising=False)

    database = get_database_config()

    assert data_dir() == (tmp_path / "store").resolve()
    assert database.uri.endswith("/store/bookingsync.db")
    assert (tmp_path / "store").is_dir()


def test_data_dir_follows_xdg(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("BOOKINGSYNC_DATA_DIR", raising=False)
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))

    assert data_dir() == (tmp_path / "bookingsync").resolve()


def test_database_uri_env_wins(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "postgresql+psycopg://db.example/bookings")

    assert get_database_config().uri == "postgresql+psycopg://db.example/bookings"
