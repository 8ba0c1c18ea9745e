"""Translate between wire payloads and domain aggregates."""

from __future__ import annotations

import gzip
import json
import logging
from dataclasses import asdict
from typing import TYPE_CHECKING

from pydantic import ValidationError

from conceptgraph.domain.errors import InvalidRequestError
from conceptgraph.domain.model import (
    AggregatedConcept,
    Concept,
    ConcordanceEvent,
    MembershipRole,
)

from .schema import (
    AggregatedConceptPayload,
    ConceptChangesPayload,
    ConceptPayload,
    EventDetailsPayload,
    EventPayload,
    MembershipRolePayload,
)

if TYPE_CHECKING:
    from conceptgraph.domain.model import ConceptChanges, Event

log = logging.getLogger(__name__)

_GZIP_MAGIC = b"\x1f\x8b"


def decode_aggregate(raw: bytes | str) -> AggregatedConcept:
    """Parse a JSON aggregate, gzip-compressed or not, into the domain model.

    Raises ``InvalidRequestError`` when the body is not valid JSON or does not
    match the payload shape.
    """

    if isinstance(raw, bytes) and raw[:2] == _GZIP_MAGIC:
        try:
            raw = gzip.decompress(raw)
        except (OSError, EOFError) as exc:
            raise InvalidRequestError(f"Invalid request, payload is not valid gzip: {exc}") from exc
    try:
        payload = AggregatedConceptPayload.model_validate_json(raw)
    except ValidationError as exc:
        log.debug("Rejected aggregate payload: %s", exc)
        raise InvalidRequestError(f"Invalid request, malformed payload: {exc}") from exc
    return aggregate_from_payload(payload)


def encode_aggregate(aggregate: AggregatedConcept) -> str:
    payload = payload_from_aggregate(aggregate)
    return payload.model_dump_json(by_alias=True, exclude_none=True, exclude_defaults=True)


def encode_changes(changes: ConceptChanges) -> str:
    payload = ConceptChangesPayload(
        updated_ids=list(changes.updated_ids),
        events=[_event_payload(event) for event in changes.changed_records],
    )
    return json.dumps(payload.model_dump(by_alias=True, exclude_none=True), indent=2)


def aggregate_from_payload(payload: AggregatedConceptPayload) -> AggregatedConcept:
    fields = payload.model_dump(exclude={"source_representations", "membership_roles"})
    fields["pref_uuid"] = fields["pref_uuid"] or ""
    return AggregatedConcept(
        **fields,
        source_representations=[_concept_from_payload(s) for s in payload.source_representations],
        membership_roles=[_role_from_payload(r) for r in payload.membership_roles],
    )


def payload_from_aggregate(aggregate: AggregatedConcept) -> AggregatedConceptPayload:
    return AggregatedConceptPayload.model_validate(asdict(aggregate))


def _concept_from_payload(payload: ConceptPayload) -> Concept:
    fields = payload.model_dump(exclude={"membership_roles"})
    fields["uuid"] = fields["uuid"] or ""
    return Concept(
        **fields,
        membership_roles=[_role_from_payload(r) for r in payload.membership_roles],
    )


def _role_from_payload(payload: MembershipRolePayload) -> MembershipRole:
    fields = payload.model_dump()
    fields["role_uuid"] = fields["role_uuid"] or ""
    return MembershipRole(**fields)


def _event_payload(event: Event) -> EventPayload:
    details = event.details
    return EventPayload(
        concept_type=event.concept_type,
        concept_uuid=event.concept_uuid,
        aggregate_hash=event.aggregate_hash,
        transaction_id=event.transaction_id,
        event_details=EventDetailsPayload(
            type=details.type.value,
            old_id=details.old_id if isinstance(details, ConcordanceEvent) else None,
            new_id=details.new_id if isinstance(details, ConcordanceEvent) else None,
        ),
    )
