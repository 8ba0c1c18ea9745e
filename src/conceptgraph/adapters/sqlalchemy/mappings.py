"""SQLAlchemy table metadata for the concept graph store.

The graph is stored as three tables: ``thing`` holds every node (source
records keyed by ``uuid``, canonical nodes keyed by ``pref_uuid``),
``relationship`` holds typed directed edges and ``identifier`` indexes
authority values against the nodes they identify.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    Dialect,
    Enum,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
)

from conceptgraph.domain.model import IdentifierLabel, RelationshipKind

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection, Engine

log = logging.getLogger(__name__)


class LabelListType(TypeDecorator[tuple[str, ...]]):
    """Node labels stored as a JSON array, most specific first."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: tuple[str, ...] | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps(list(value))

    def process_result_value(self, value: str | None, dialect: Dialect) -> tuple[str, ...]:
        _ = dialect
        if value is None:
            return ()
        loaded = json.loads(value)
        if not isinstance(loaded, list):
            return ()
        items = cast(list[Any], loaded)
        return tuple(item for item in items if isinstance(item, str))


def _enum_values(enum_cls: type[RelationshipKind] | type[IdentifierLabel]) -> list[str]:
    return [member.value for member in enum_cls]


metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_label)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

thing_table = Table(
    "thing",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("uuid", String(64), nullable=True, unique=True),
    Column("pref_uuid", String(64), nullable=True, unique=True),
    Column("labels", LabelListType(), nullable=False),
    Column("properties", JSON(), nullable=False),
    Column("authority_value", String(255), nullable=True),
    CheckConstraint("(uuid IS NULL) <> (pref_uuid IS NULL)", name="single_key"),
    Index("ix_thing_authority_value", "authority_value"),
)

relationship_table = Table(
    "relationship",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "kind",
        Enum(
            RelationshipKind,
            native_enum=False,
            length=32,
            values_callable=_enum_values,
            validate_strings=True,
        ),
        nullable=False,
    ),
    Column("start_id", Integer, ForeignKey("thing.id", ondelete="CASCADE"), nullable=False),
    Column("end_id", Integer, ForeignKey("thing.id", ondelete="CASCADE"), nullable=False),
    Column("properties", JSON(), nullable=False),
    UniqueConstraint("kind", "start_id", "end_id"),
    Index("ix_relationship_end_id_kind", "end_id", "kind"),
)

identifier_table = Table(
    "identifier",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "label",
        Enum(
            IdentifierLabel,
            native_enum=False,
            length=32,
            values_callable=_enum_values,
            validate_strings=True,
        ),
        nullable=False,
    ),
    Column("value", String(255), nullable=False),
    Column("thing_id", Integer, ForeignKey("thing.id", ondelete="CASCADE"), nullable=False),
    UniqueConstraint("label", "value", "thing_id"),
    Index("ix_identifier_value", "value"),
)


def create_all_tables(bind: Engine | Connection) -> None:
    """Create the store tables, uniqueness constraints and indexes if missing."""

    log.info("Creating all tables")
    metadata.create_all(bind)
