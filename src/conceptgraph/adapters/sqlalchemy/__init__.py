"""SQLAlchemy adapter package for the concept graph store."""

from __future__ import annotations

from .mappings import create_all_tables, identifier_table, metadata, relationship_table, thing_table
from .repositories import SqlAlchemyConceptGraphRepository, translate_store_errors
from .unit_of_work import (
    BaseSqlAlchemyUnitOfWork,
    SqlAlchemyConceptGraphUnitOfWork,
    StartupError,
    shutdown,
    startup,
    unit_of_work_factory,
)

__all__ = [
    "BaseSqlAlchemyUnitOfWork",
    "SqlAlchemyConceptGraphRepository",
    "SqlAlchemyConceptGraphUnitOfWork",
    "StartupError",
    "create_all_tables",
    "identifier_table",
    "metadata",
    "relationship_table",
    "shutdown",
    "startup",
    "thing_table",
    "translate_store_errors",
    "unit_of_work_factory",
]
