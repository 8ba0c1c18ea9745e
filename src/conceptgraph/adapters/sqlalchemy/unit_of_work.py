"""SQLAlchemy-backed unit of work for the concept graph store."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from conceptgraph.adapters.sqlalchemy.mappings import create_all_tables
from conceptgraph.adapters.sqlalchemy.repositories import (
    SqlAlchemyConceptGraphRepository,
    translate_store_errors,
)
from conceptgraph.config.storage import get_database_uri
from conceptgraph.domain.ports.unit_of_work import ConceptGraphRepositories

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when a unit of work is used outside of its ``with`` block."""


def startup(*, engine: Engine | None = None, database_uri: str | None = None) -> Engine:
    """Create (or adopt) the engine and ensure the store schema exists."""

    resolved_engine = engine or create_engine(database_uri or get_database_uri(), future=True)
    with translate_store_errors():
        create_all_tables(resolved_engine)
    log.info("Graph store ready at %s", resolved_engine.url.render_as_string(hide_password=True))
    return resolved_engine


def shutdown(engine: Engine) -> None:
    """Dispose ``engine`` and its connection pool."""

    engine.dispose()


def session_factory_for(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, expire_on_commit=False)


class BaseSqlAlchemyUnitOfWork[TRepositories](ABC):
    """Generic SQLAlchemy unit of work with pluggable repository collections."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self.session_factory = session_factory
        self._session: Session | None = None
        self._repositories: TRepositories | None = None

    @abstractmethod
    def _build_repositories(self, session: Session) -> TRepositories: ...

    def __enter__(self) -> BaseSqlAlchemyUnitOfWork[TRepositories]:
        self.session = self.session_factory()
        self._repositories = self._build_repositories(self.session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        self.session.close()
        self.session = None
        self._repositories = None
        return False

    def commit(self) -> None:
        with translate_store_errors():
            self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    @property
    def repositories(self) -> TRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @session.setter
    def session(self, session: Session | None) -> None:
        if self._session is not None and session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = session


class SqlAlchemyConceptGraphUnitOfWork(BaseSqlAlchemyUnitOfWork[ConceptGraphRepositories]):
    """Unit of work wrapping one store transaction per request."""

    def _build_repositories(self, session: Session) -> ConceptGraphRepositories:
        return ConceptGraphRepositories(concepts=SqlAlchemyConceptGraphRepository(session))


def unit_of_work_factory(engine: Engine) -> Callable[[], SqlAlchemyConceptGraphUnitOfWork]:
    """Return a factory producing units of work bound to ``engine``."""

    session_factory = session_factory_for(engine)

    def factory() -> SqlAlchemyConceptGraphUnitOfWork:
        return SqlAlchemyConceptGraphUnitOfWork(session_factory)

    return factory


if TYPE_CHECKING:
    from conceptgraph.domain.ports.unit_of_work import ConceptGraphUnitOfWork

    _uow_check: ConceptGraphUnitOfWork = SqlAlchemyConceptGraphUnitOfWork(sessionmaker())
