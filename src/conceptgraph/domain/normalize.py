"""Payload normalization applied before fingerprinting and writing."""

from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from conceptgraph.domain.model import AggregatedConcept, Concept, MembershipRole

ISO_DATE_FORMAT = "%Y-%m-%d"


def date_epoch(value: str | None) -> int | None:
    """Return the UTC-midnight epoch of an ISO ``YYYY-MM-DD`` date, ``None`` if unparseable."""

    if not value:
        return None
    try:
        parsed = datetime.strptime(value, ISO_DATE_FORMAT).replace(tzinfo=UTC)
    except ValueError:
        return None
    return int(parsed.timestamp())


def clean_membership_roles(roles: list[MembershipRole]) -> list[MembershipRole]:
    """Drop roles without a role id and derive their date epochs."""

    return [
        replace(
            role,
            inception_date_epoch=date_epoch(role.inception_date),
            termination_date_epoch=date_epoch(role.termination_date),
        )
        for role in roles
        if role.role_uuid
    ]


def normalize_source(source: Concept) -> Concept:
    return replace(
        source,
        last_modified_epoch=None,
        parent_uuids=list(source.parent_uuids),
        related_uuids=list(source.related_uuids),
        broader_uuids=list(source.broader_uuids),
        superseded_by_uuids=list(source.superseded_by_uuids),
        membership_roles=clean_membership_roles(source.membership_roles),
    )


def normalize_aggregate(aggregate: AggregatedConcept) -> AggregatedConcept:
    """Return a copy of ``aggregate`` in the shape that is hashed and written.

    The stored hash is discarded, source records lose their informational
    last-modified stamp, and membership dates gain their epoch values.
    """

    return replace(
        aggregate,
        aggregated_hash=None,
        source_representations=[normalize_source(s) for s in aggregate.source_representations],
        inception_date_epoch=date_epoch(aggregate.inception_date),
        termination_date_epoch=date_epoch(aggregate.termination_date),
        membership_roles=clean_membership_roles(aggregate.membership_roles),
    )
