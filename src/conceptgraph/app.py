"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING
from uuid import uuid4

from conceptgraph.adapters.payload import decode_aggregate
from conceptgraph.adapters.sqlalchemy import shutdown, startup, unit_of_work_factory
from conceptgraph.config import get_database_config
from conceptgraph.domain.concordance import ConceptService

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from conceptgraph.domain.concordance.engine import Clock
    from conceptgraph.domain.model import ConceptChanges


log = getLogger(__name__)


def new_transaction_id() -> str:
    return f"tid_{uuid4().hex[:10]}"


def start_graph_store(
    *,
    database_uri: str | None = None,
    require_database_uri: bool = False,
) -> Engine:
    """Resolve the store URI from the environment when not given and start the engine."""

    if database_uri is None:
        database_uri = get_database_config(require_uri=require_database_uri).uri
    return startup(database_uri=database_uri)


def stop_graph_store(engine: Engine) -> None:
    shutdown(engine)
    log.debug("Graph store engine disposed")


def build_concept_service(engine: Engine, *, clock: Clock | None = None) -> ConceptService:
    """Return a service bound to a started graph store ``engine``."""

    factory = unit_of_work_factory(engine)
    if clock is None:
        return ConceptService(factory)
    return ConceptService(factory, clock=clock)


def write_payload(
    service: ConceptService,
    raw: bytes | str,
    *,
    transaction_id: str | None = None,
) -> ConceptChanges:
    """Decode a JSON (optionally gzip-compressed) aggregate and write it."""

    effective_transaction_id = transaction_id or new_transaction_id()
    aggregate = decode_aggregate(raw)
    log.info(
        "transaction_id=%s uuid=%s writing aggregate",
        effective_transaction_id,
        aggregate.pref_uuid,
    )
    return service.write(aggregate, effective_transaction_id)
