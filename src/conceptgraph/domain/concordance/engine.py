"""Concept write/read service.

The service composes validation, fingerprinting, concordance resolution,
mutation planning and reconstruction around one unit of work per request. It
holds no state between requests; the store dependency is injected as a unit
of work factory.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from conceptgraph.domain.fingerprint import fingerprint
from conceptgraph.domain.normalize import normalize_aggregate
from conceptgraph.domain.validation import validate_aggregate

from .contracts import StaleIssuerEdge
from .plan import plan_write
from .reconstruct import reconstruct
from .resolve import resolve_concordance

if TYPE_CHECKING:
    from conceptgraph.domain.model import AggregatedConcept, ConceptChanges
    from conceptgraph.domain.ports import ConceptGraphRepository, ConceptGraphUnitOfWork

log = logging.getLogger(__name__)

type UnitOfWorkFactory = Callable[[], ConceptGraphUnitOfWork]
type Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


class ConceptService:
    """Write and read canonical aggregates against an injected graph store."""

    def __init__(self, unit_of_work_factory: UnitOfWorkFactory, *, clock: Clock = _utc_now) -> None:
        self._unit_of_work_factory = unit_of_work_factory
        self._clock = clock

    def write(self, aggregate: AggregatedConcept, transaction_id: str) -> ConceptChanges:
        """Validate and atomically store ``aggregate``, returning what changed.

        Raises ``InvalidRequestError`` for a malformed payload or when the
        anchoring source is dropped from its own concordance,
        ``ConcordanceConflictError`` or ``DataIntegrityError`` when the write
        would corrupt stored concordances, and ``StoreError`` when the store
        fails. In every failure case nothing is applied.
        """

        normalized = normalize_aggregate(aggregate)
        policy = validate_aggregate(normalized, transaction_id)
        aggregate_hash = fingerprint(normalized)
        pref_uuid = normalized.pref_uuid

        with self._unit_of_work_factory() as uow:
            repository = uow.repositories.concepts
            existing = reconstruct(repository.aggregate_rows(pref_uuid))
            plan = resolve_concordance(
                normalized,
                existing,
                repository.equivalence,
                aggregate_hash=aggregate_hash,
                transaction_id=transaction_id,
            )
            stale_issuer_edges = _stale_issuer_edges(normalized, repository, transaction_id)
            operations = plan_write(
                normalized,
                policy,
                plan,
                aggregate_hash=aggregate_hash,
                modified_epoch=int(self._clock().timestamp()),
                stale_issuer_edges=stale_issuer_edges,
            )
            log.debug(
                "transaction_id=%s uuid=%s applying %s graph operations",
                transaction_id,
                pref_uuid,
                len(operations),
            )
            repository.apply(operations)
            uow.commit()

        log.info(
            "transaction_id=%s uuid=%s wrote %s with %s sources, %s events",
            transaction_id,
            pref_uuid,
            normalized.type,
            len(normalized.source_representations),
            len(plan.changes.changed_records),
        )
        return plan.changes

    def read(self, pref_uuid: str, transaction_id: str) -> AggregatedConcept | None:
        """Return the stored aggregate for ``pref_uuid`` or ``None`` when not found."""

        with self._unit_of_work_factory() as uow:
            aggregate = reconstruct(uow.repositories.concepts.aggregate_rows(pref_uuid))
        if aggregate is None:
            log.debug("transaction_id=%s uuid=%s no canonical node found", transaction_id, pref_uuid)
        return aggregate

    def check(self) -> None:
        """Probe the store, raising ``StoreUnavailableError`` when it cannot be reached."""

        with self._unit_of_work_factory() as uow:
            uow.repositories.concepts.check()

    def initialise(self) -> None:
        """Ensure the store's tables, uniqueness constraints and indexes exist."""

        with self._unit_of_work_factory() as uow:
            uow.repositories.concepts.ensure_schema()
            uow.commit()
        log.info("Concept graph store initialised")


def _stale_issuer_edges(
    aggregate: AggregatedConcept,
    repository: ConceptGraphRepository,
    transaction_id: str,
) -> list[StaleIssuerEdge]:
    written = {aggregate.pref_uuid, *aggregate.source_uuids}
    stale: list[StaleIssuerEdge] = []
    issuers = dict.fromkeys(s.issued_by for s in aggregate.source_representations if s.issued_by)
    for issuer_uuid in issuers:
        for instrument_uuid in repository.issued_instruments(issuer_uuid):
            if instrument_uuid in written:
                continue
            log.warning(
                "transaction_id=%s uuid=%s alert_tag=ConceptLoadingLedToDifferentIssuer "
                "issuer %s was already issuing instrument %s, removing that relationship",
                transaction_id,
                aggregate.pref_uuid,
                issuer_uuid,
                instrument_uuid,
            )
            stale.append(StaleIssuerEdge(instrument_uuid=instrument_uuid, issuer_uuid=issuer_uuid))
    return stale
