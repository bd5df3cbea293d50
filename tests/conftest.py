from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from bookingsync.adapters.sqlalchemy import create_all_tables, start_mappers
from bookingsync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyBookingUnitOfWork,
    shutdown,
    startup,
)

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path


@pytest.fixture(autouse=True)
def _isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BOOKINGSYNC_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("MISSION_AUTOMATION_URL", raising=False)
    for name in (
        "BOOKINGSYNC_FETCH_CONCURRENCY",
        "BOOKINGSYNC_DEBOUNCE_SECONDS",
        "BOOKINGSYNC_STABILITY_SECONDS",
        "BOOKINGSYNC_BATCH_SIZE",
        "BOOKINGSYNC_FETCH_TIMEOUT_SECONDS",
        "BOOKINGSYNC_INTERVAL_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    # one shared connection, so worker threads see the same in-memory database
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    start_mappers()
    create_all_tables(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine, future=True)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyBookingUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyBookingUnitOfWork:
        return SqlAlchemyBookingUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()
