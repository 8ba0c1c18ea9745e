"""Concordance resolution.

Responsibilities of this stage:
- classify every source claimed by a write against live store state
- reject writes that would corrupt an existing concordance
- decide which events to emit, which canonical nodes become orphaned and
  which prior members are split off into their own concordance

Out of scope for this stage:
- building graph operations
- store mutation
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

from conceptgraph.domain.errors import (
    ConcordanceConflictError,
    DataIntegrityError,
    InvalidRequestError,
)
from conceptgraph.domain.model import ConceptEvent, ConcordanceEvent, Event, EventType

from .contracts import Classification, ConcordancePlan, EquivalenceStatus

if TYPE_CHECKING:
    from conceptgraph.domain.model import AggregatedConcept, EventDetails
    from conceptgraph.domain.ports import EquivalenceRecord

log = logging.getLogger(__name__)

type EquivalenceLookup = Callable[[str], Sequence[EquivalenceRecord]]


def classify(
    source_uuid: str,
    records: Sequence[EquivalenceRecord],
    pref_uuid: str,
) -> Classification:
    """Classify the stored equivalence state of ``source_uuid``.

    ``pref_uuid`` is the canonical id being written. Raises
    ``DataIntegrityError`` when the store holds more than one node for the id.
    """

    if not records:
        return Classification(source_uuid=source_uuid, status=EquivalenceStatus.ABSENT)
    if len(records) > 1:
        raise DataIntegrityError(f"Multiple source concepts found with matching uuid: {source_uuid}")

    record = records[0]
    if record.pref_uuid is None or record.member_count == 0:
        status = EquivalenceStatus.UNATTACHED
    elif record.member_count == 1:
        if record.pref_uuid == source_uuid:
            status = EquivalenceStatus.SINGLETON_ANCHOR
        else:
            status = EquivalenceStatus.SINGLETON_NON_ANCHOR
    elif record.pref_uuid == pref_uuid:
        status = EquivalenceStatus.ALREADY_MEMBER
    elif record.pref_uuid == source_uuid:
        status = EquivalenceStatus.FOREIGN_ANCHOR
    else:
        status = EquivalenceStatus.STALE_MEMBER
    return Classification(source_uuid=source_uuid, status=status, record=record)


def resolve_concordance(
    aggregate: AggregatedConcept,
    existing: AggregatedConcept | None,
    lookup: EquivalenceLookup,
    *,
    aggregate_hash: str,
    transaction_id: str,
) -> ConcordancePlan:
    """Resolve the concordance changes implied by writing ``aggregate``.

    ``existing`` is the currently stored aggregate for the same canonical id,
    ``None`` when the canonical id is new. Raises before anything is planned
    when a claimed source is in a state the write must not touch.
    """

    pref_uuid = aggregate.pref_uuid
    new_ids = aggregate.source_uuids
    old_ids = existing.source_uuids if existing is not None else ()

    to_integrate = sorted(set(new_ids) - set(old_ids))
    to_unconcord = sorted(set(old_ids) - set(new_ids))

    if pref_uuid in to_unconcord:
        log.error(
            "transaction_id=%s uuid=%s source %s anchors the concordance and cannot leave it",
            transaction_id,
            pref_uuid,
            pref_uuid,
        )
        raise InvalidRequestError(
            f"Invalid request, source {pref_uuid} cannot be removed from the concordance it anchors",
            field="sourceRepresentations",
            uuid=pref_uuid,
        )

    plan = ConcordancePlan()
    taken: Counter[str] = Counter()
    group_sizes: dict[str, int] = {}

    def emit(uuid: str, concept_type: str | None, details: EventDetails) -> None:
        plan.changes.changed_records.append(
            Event(
                concept_type=concept_type or "",
                concept_uuid=uuid,
                aggregate_hash=aggregate_hash,
                transaction_id=transaction_id,
                details=details,
            )
        )

    def added(uuid: str) -> ConcordanceEvent:
        return ConcordanceEvent(type=EventType.CONCORDANCE_ADDED, old_id=uuid, new_id=pref_uuid)

    for uuid in to_integrate:
        source = aggregate.source(uuid)
        source_type = source.type if source is not None else None
        try:
            classification = classify(uuid, lookup(uuid), pref_uuid)
        except DataIntegrityError as exc:
            log.error("transaction_id=%s uuid=%s %s", transaction_id, pref_uuid, exc)
            raise
        record = classification.record
        log.debug(
            "transaction_id=%s uuid=%s source %s is %s",
            transaction_id,
            pref_uuid,
            uuid,
            classification.status,
        )

        match classification.status:
            case EquivalenceStatus.ABSENT:
                if uuid != pref_uuid:
                    emit(uuid, source_type, ConceptEvent())
                    emit(uuid, source_type, added(uuid))
            case EquivalenceStatus.UNATTACHED | EquivalenceStatus.ALREADY_MEMBER:
                pass
            case EquivalenceStatus.SINGLETON_ANCHOR:
                if uuid != pref_uuid:
                    plan.orphaned_canonicals.append(uuid)
                    emit(uuid, source_type, added(uuid))
            case EquivalenceStatus.SINGLETON_NON_ANCHOR:
                stored_pref_uuid = record.pref_uuid if record is not None else None
                log.error(
                    "transaction_id=%s uuid=%s alert_tag=ConceptLoadingDodgyData source %s "
                    "is the only concordance to a non-matching node with prefUUID %s",
                    transaction_id,
                    pref_uuid,
                    uuid,
                    stored_pref_uuid,
                )
                raise DataIntegrityError(
                    f"This source id: {uuid} the only concordance to a non-matching node "
                    f"with prefUUID: {stored_pref_uuid}"
                )
            case EquivalenceStatus.FOREIGN_ANCHOR:
                error = ConcordanceConflictError(uuid, uuid)
                log.error(
                    "transaction_id=%s uuid=%s alert_tag=ConceptLoadingInvalidConcordance %s",
                    transaction_id,
                    pref_uuid,
                    error,
                )
                raise error
            case EquivalenceStatus.STALE_MEMBER:
                stale_pref_uuid = record.pref_uuid if record is not None else None
                log.info(
                    "transaction_id=%s uuid=%s alert_tag=ConceptLoadingStaleData need to "
                    "re-ingest concordance record for prefUUID %s as source %s has been removed",
                    transaction_id,
                    pref_uuid,
                    stale_pref_uuid,
                    uuid,
                )
                emit(
                    uuid,
                    source_type,
                    ConcordanceEvent(
                        type=EventType.CONCORDANCE_REMOVED,
                        old_id=stale_pref_uuid or "",
                        new_id=uuid,
                    ),
                )
                emit(uuid, source_type, added(uuid))
                if stale_pref_uuid is not None and record is not None:
                    taken[stale_pref_uuid] += 1
                    group_sizes[stale_pref_uuid] = record.member_count

    # A foreign concordance whose every member moved here has no sources left.
    plan.orphaned_canonicals.extend(
        foreign for foreign, count in sorted(taken.items()) if count >= group_sizes[foreign]
    )

    if existing is not None:
        leaving = [s for s in existing.source_representations if s.uuid in to_unconcord]
        for previous in sorted(leaving, key=lambda s: s.uuid):
            uuid = previous.uuid
            log.info(
                "transaction_id=%s uuid=%s source %s removed from concordance, "
                "creating its own canonical node",
                transaction_id,
                pref_uuid,
                uuid,
            )
            plan.unconcorded.append(previous)
            emit(
                uuid,
                previous.type,
                ConcordanceEvent(type=EventType.CONCORDANCE_REMOVED, old_id=pref_uuid, new_id=uuid),
            )

    emit(pref_uuid, aggregate.type, ConceptEvent())

    updated_ids = list(dict.fromkeys(new_ids))
    updated_ids.extend(uuid for uuid in to_unconcord if uuid not in updated_ids)
    plan.changes.updated_ids = updated_ids
    return plan
