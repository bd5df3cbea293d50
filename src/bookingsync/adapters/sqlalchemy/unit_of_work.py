"""Engine lifecycle and the unit of work the sync engine writes bookings through."""

from __future__ import annotations

from abc import ABC, abstractmethod
from logging import getLogger
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from bookingsync.adapters.sqlalchemy.mappings import create_all_tables, start_mappers
from bookingsync.adapters.sqlalchemy.repositories import (
    SqlAlchemyBookingRepository,
    SqlAlchemyPropertyRepository,
)
from bookingsync.config.storage import get_database_config
from bookingsync.domain.ports.unit_of_work import BookingRepositories, RepositoryCollection

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the booking store is used before ``startup()`` or outside a unit of work."""


class _BookingStore:
    __slots__ = ("engine", "sessions")

    def __init__(self) -> None:
        self.engine: Engine | None = None
        self.sessions: sessionmaker[Session] | None = None


_STORE = _BookingStore()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Bind the booking store to an engine, creating the schema if needed."""

    if _STORE.engine is not None and not force:
        raise StartupError("Booking store already started. Pass force=True to rebind it.")

    bound = engine or create_engine(database_uri or get_database_config().uri)
    start_mappers()
    create_all_tables(bound)
    _STORE.engine = bound
    _STORE.sessions = sessionmaker(bind=bound, expire_on_commit=False)
    log.info("Booking store ready at %s", bound.url.render_as_string())


def is_started() -> bool:
    return _STORE.engine is not None


def shutdown() -> None:
    if _STORE.engine is not None:
        _STORE.engine.dispose()
    _STORE.engine = None
    _STORE.sessions = None


class BaseSqlAlchemyUnitOfWork[TRepositories: RepositoryCollection](ABC):
    """One session per ``with`` block; leaving the block on an error rolls back."""

    def __init__(self) -> None:
        if _STORE.sessions is None:
            raise StartupError("Booking store not started; call startup() first")
        self._sessions = _STORE.sessions
        self._session: Session | None = None
        self._repositories: TRepositories | None = None

    @abstractmethod
    def _build_repositories(self, session: Session) -> TRepositories: ...

    def __enter__(self) -> BaseSqlAlchemyUnitOfWork[TRepositories]:
        if self._session is not None:
            raise StartupError("Unit of work is already open")
        self._session = self._sessions()
        self._repositories = self._build_repositories(self._session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self.session
        try:
            if exc_type is not None:
                session.rollback()
        finally:
            session.close()
            self._session = None
            self._repositories = None
        return False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work used outside its with-block")
        return self._session

    @property
    def repositories(self) -> TRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work used outside its with-block")
        return self._repositories

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SqlAlchemyBookingUnitOfWork(BaseSqlAlchemyUnitOfWork[BookingRepositories]):
    """Reads properties and writes bookings in one session."""

    def _build_repositories(self, session: Session) -> BookingRepositories:
        return BookingRepositories(
            properties=SqlAlchemyPropertyRepository(session),
            bookings=SqlAlchemyBookingRepository(session),
        )


if TYPE_CHECKING:
    from bookingsync.domain.ports.unit_of_work import BookingUnitOfWork

    _uow_check: BookingUnitOfWork = SqlAlchemyBookingUnitOfWork()
