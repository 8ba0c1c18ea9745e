"""Payload validation for aggregate writes."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Never

from conceptgraph.domain.errors import ConcordanceNotSupportedError, InvalidRequestError
from conceptgraph.domain.kinds import KindPolicy, policy_for
from conceptgraph.domain.model import WRITABLE_TYPES, ConceptType, is_recognised_authority, parse_type

if TYPE_CHECKING:
    from conceptgraph.domain.model import AggregatedConcept

log = logging.getLogger(__name__)


def validate_aggregate(aggregate: AggregatedConcept, transaction_id: str) -> KindPolicy:
    """Check mandatory fields and kind rules, returning the aggregate's kind policy.

    Raises ``InvalidRequestError`` naming the missing or invalid field and the
    id it was found on.
    """

    pref_uuid = aggregate.pref_uuid
    if not pref_uuid:
        _fail("prefUUID", pref_uuid, transaction_id)
    if not aggregate.pref_label:
        _fail("prefLabel", pref_uuid, transaction_id)
    concept_type = _writable_type(aggregate.type)
    if concept_type is None:
        _fail("type", pref_uuid, transaction_id)
    if not aggregate.source_representations:
        _fail("sourceRepresentations", pref_uuid, transaction_id)

    for source in aggregate.source_representations:
        if not source.uuid:
            _fail("sourceRepresentation.uuid", pref_uuid, transaction_id)
        if _writable_type(source.type) is None:
            _fail("sourceRepresentation.type", source.uuid, transaction_id)
        if not source.authority:
            _fail("sourceRepresentation.authority", source.uuid, transaction_id)
        if not source.authority_value:
            _fail("sourceRepresentation.authorityValue", source.uuid, transaction_id)
        if not source.pref_label:
            _fail("sourceRepresentation.prefLabel", source.uuid, transaction_id)
        if not is_recognised_authority(source.authority):
            log.debug(
                "transaction_id=%s uuid=%s unknown authority %s, no identifier will be indexed",
                transaction_id,
                source.uuid,
                source.authority,
            )

    policy = policy_for(concept_type)
    if not policy.allows_concordance and len(aggregate.source_representations) > 1:
        error = ConcordanceNotSupportedError(
            f"{concept_type.value} does not support concordance (uuid={pref_uuid})",
            field="sourceRepresentations",
            uuid=pref_uuid,
        )
        log.error("transaction_id=%s uuid=%s %s", transaction_id, pref_uuid, error)
        raise error

    for validator in policy.validators:
        validator(aggregate, transaction_id)
    return policy


def _writable_type(value: str | None) -> ConceptType | None:
    concept_type = parse_type(value)
    if concept_type not in WRITABLE_TYPES:
        return None
    return concept_type


def _fail(field: str, uuid: str | None, transaction_id: str) -> Never:
    error = InvalidRequestError.missing(field, uuid)
    log.error("transaction_id=%s uuid=%s validation of payload failed: %s", transaction_id, uuid, error)
    raise error
