from __future__ import annotations

import os
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002

from conceptgraph.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyConceptGraphUnitOfWork,
    shutdown,
    startup,
    unit_of_work_factory,
)
from conceptgraph.domain.concordance import ConceptService

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    startup(engine=engine)
    try:
        yield engine
    finally:
        shutdown(engine)


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Callable[[], SqlAlchemyConceptGraphUnitOfWork]:
    return unit_of_work_factory(sqlite_engine)


@pytest.fixture
def concept_service(
    sqlite_unit_of_work: Callable[[], SqlAlchemyConceptGraphUnitOfWork],
) -> ConceptService:
    return ConceptService(sqlite_unit_of_work, clock=lambda: FIXED_NOW)
