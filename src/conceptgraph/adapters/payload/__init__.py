"""JSON payload codec for aggregates and change records."""

from __future__ import annotations

from .schema import AggregatedConceptPayload, ConceptChangesPayload, ConceptPayload
from .translator import (
    aggregate_from_payload,
    decode_aggregate,
    encode_aggregate,
    encode_changes,
    payload_from_aggregate,
)

__all__ = [
    "AggregatedConceptPayload",
    "ConceptChangesPayload",
    "ConceptPayload",
    "aggregate_from_payload",
    "decode_aggregate",
    "encode_aggregate",
    "encode_changes",
    "payload_from_aggregate",
]
