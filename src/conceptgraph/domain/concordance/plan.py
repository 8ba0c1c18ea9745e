"""Graph mutation planning.

Turns a validated aggregate plus the resolution engine's decisions into the
ordered list of graph operations that the store applies atomically. Every node
touched by the write is first cleared down to a stub and then rebuilt, so a
concept may change kind, relationships or fields between writes without
leaving stale edges or labels behind.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import TYPE_CHECKING, Any, Final

from conceptgraph.domain.kinds import CANONICAL_PROPERTIES
from conceptgraph.domain.model import (
    INTERNAL_IDENTIFIER_LABEL,
    IdentifierLabel,
    RelationshipKind,
    identifier_label_for,
    label_chain,
    parse_type,
)
from conceptgraph.domain.operations import (
    ClearNode,
    DeleteNode,
    DeleteRelationship,
    MergeIdentifier,
    MergeNode,
    MergeRelationship,
    NodeKey,
)

if TYPE_CHECKING:
    from conceptgraph.domain.kinds import KindPolicy
    from conceptgraph.domain.model import AggregatedConcept, Concept, MembershipRole
    from conceptgraph.domain.operations import GraphOperation

    from .contracts import ConcordancePlan, StaleIssuerEdge

# Relationship kind -> targets of a source record, in write order.
_SOURCE_RELATIONSHIPS: Final[dict[RelationshipKind, Callable[[Concept], Iterable[str | None]]]] = {
    RelationshipKind.HAS_PARENT: lambda c: c.parent_uuids,
    RelationshipKind.IS_RELATED_TO: lambda c: c.related_uuids,
    RelationshipKind.HAS_BROADER: lambda c: c.broader_uuids,
    RelationshipKind.SUPERSEDED_BY: lambda c: c.superseded_by_uuids,
    RelationshipKind.HAS_ORGANISATION: lambda c: (c.organisation_uuid,),
    RelationshipKind.HAS_MEMBER: lambda c: (c.person_uuid,),
    RelationshipKind.ISSUED_BY: lambda c: (c.issued_by,),
    RelationshipKind.SUB_ORGANISATION_OF: lambda c: (c.parent_organisation,),
    RelationshipKind.COUNTRY_OF_RISK: lambda c: (c.country_of_risk_uuid,),
    RelationshipKind.COUNTRY_OF_INCORPORATION: lambda c: (c.country_of_incorporation_uuid,),
    RelationshipKind.COUNTRY_OF_OPERATIONS: lambda c: (c.country_of_operations_uuid,),
}

# Targets of these kinds are not given an internal identifier.
_UNIDENTIFIED_TARGETS: Final[frozenset[RelationshipKind]] = frozenset(
    {RelationshipKind.HAS_ROLE, RelationshipKind.ISSUED_BY}
)

_SOURCE_CLEARED_EDGES: Final[frozenset[RelationshipKind]] = frozenset(RelationshipKind)


def plan_write(
    aggregate: AggregatedConcept,
    policy: KindPolicy,
    plan: ConcordancePlan,
    *,
    aggregate_hash: str,
    modified_epoch: int,
    stale_issuer_edges: Sequence[StaleIssuerEdge] = (),
) -> list[GraphOperation]:
    """Build the ordered operation list for writing ``aggregate``."""

    canonical = NodeKey.canonical(aggregate.pref_uuid)
    operations: list[GraphOperation] = []

    operations.extend(
        ClearNode(key=NodeKey.source(source.uuid), outgoing=_SOURCE_CLEARED_EDGES, drop_identifiers=True)
        for source in aggregate.source_representations
    )
    operations.append(
        ClearNode(key=canonical, incoming=frozenset({RelationshipKind.EQUIVALENT_TO}))
    )

    operations.extend(
        DeleteNode(key=NodeKey.canonical(orphan))
        for orphan in plan.orphaned_canonicals
        if orphan != aggregate.pref_uuid
    )

    operations.extend(
        DeleteRelationship(
            kind=RelationshipKind.ISSUED_BY,
            start=NodeKey.source(edge.instrument_uuid),
            end=NodeKey.source(edge.issuer_uuid),
        )
        for edge in stale_issuer_edges
    )

    for previous in plan.unconcorded:
        operations.extend(unconcorded_operations(previous))

    operations.append(
        MergeNode(
            key=canonical,
            labels=_labels(aggregate.type),
            properties=canonical_properties(
                aggregate,
                policy,
                aggregate_hash=aggregate_hash,
                modified_epoch=modified_epoch,
            ),
        )
    )

    for source in aggregate.source_representations:
        operations.extend(
            source_operations(source, canonical, policy, modified_epoch=modified_epoch)
        )
    return operations


def canonical_properties(
    aggregate: AggregatedConcept,
    policy: KindPolicy,
    *,
    aggregate_hash: str,
    modified_epoch: int,
) -> dict[str, Any]:
    properties: dict[str, Any] = {
        "prefUUID": aggregate.pref_uuid,
        "prefLabel": aggregate.pref_label,
        "aggregateHash": aggregate_hash,
        "lastModifiedEpoch": modified_epoch,
    }
    for attribute in policy.canonical_fields:
        value = getattr(aggregate, attribute)
        if _is_set(value):
            properties[CANONICAL_PROPERTIES[attribute]] = value
    return properties


def source_properties(source: Concept, *, modified_epoch: int) -> dict[str, Any]:
    properties: dict[str, Any] = {
        "uuid": source.uuid,
        "prefLabel": source.pref_label,
        "authority": source.authority,
        "authorityValue": source.authority_value,
        "lastModifiedEpoch": modified_epoch,
    }
    if source.figi_code:
        properties["figiCode"] = source.figi_code
    if source.is_deprecated:
        properties["isDeprecated"] = True
    return properties


def source_operations(
    source: Concept,
    canonical: NodeKey,
    policy: KindPolicy,
    *,
    modified_epoch: int,
) -> list[GraphOperation]:
    """Rebuild one source node with its equivalence edge, identifiers and relationships."""

    key = NodeKey.source(source.uuid)
    operations: list[GraphOperation] = [
        MergeNode(
            key=key,
            labels=_labels(source.type),
            properties=source_properties(source, modified_epoch=modified_epoch),
        ),
        MergeRelationship(kind=RelationshipKind.EQUIVALENT_TO, start=key, end=canonical),
    ]

    label = identifier_label_for(source.authority)
    if policy.indexes_identifiers and label is not None and source.authority_value:
        operations.append(MergeIdentifier(key=key, label=label, value=source.authority_value))
        operations.append(MergeIdentifier(key=key, label=INTERNAL_IDENTIFIER_LABEL, value=source.uuid))

    for kind, targets in _SOURCE_RELATIONSHIPS.items():
        if not policy.allows(kind):
            continue
        for target in dict.fromkeys(t for t in targets(source) if t):
            operations.append(
                MergeRelationship(
                    kind=kind,
                    start=key,
                    end=NodeKey.source(target),
                    identify_end=kind not in _UNIDENTIFIED_TARGETS,
                )
            )

    if policy.allows(RelationshipKind.ISSUED_BY) and source.issued_by and source.figi_code:
        operations.append(
            MergeIdentifier(key=key, label=IdentifierLabel.FIGI, value=source.figi_code)
        )

    if policy.allows(RelationshipKind.HAS_ROLE):
        operations.extend(
            MergeRelationship(
                kind=RelationshipKind.HAS_ROLE,
                start=key,
                end=NodeKey.source(role.role_uuid),
                properties=role_properties(role),
            )
            for role in source.membership_roles
            if role.role_uuid
        )
    return operations


def role_properties(role: MembershipRole) -> dict[str, Any]:
    properties: dict[str, Any] = {}
    if role.inception_date:
        properties["inceptionDate"] = role.inception_date
    if role.inception_date_epoch is not None:
        properties["inceptionDateEpoch"] = role.inception_date_epoch
    if role.termination_date:
        properties["terminationDate"] = role.termination_date
    if role.termination_date_epoch is not None:
        properties["terminationDateEpoch"] = role.termination_date_epoch
    return properties


def unconcorded_operations(previous: Concept) -> list[GraphOperation]:
    """Re-anchor a source that left the written concordance as its own canonical node."""

    properties: dict[str, Any] = {"prefUUID": previous.uuid, "prefLabel": previous.pref_label}
    if previous.figi_code:
        properties["figiCode"] = previous.figi_code
    if previous.is_deprecated:
        properties["isDeprecated"] = True
    canonical = NodeKey.canonical(previous.uuid)
    return [
        MergeNode(key=canonical, labels=_labels(previous.type), properties=properties),
        MergeRelationship(
            kind=RelationshipKind.EQUIVALENT_TO,
            start=NodeKey.source(previous.uuid),
            end=canonical,
        ),
    ]


def _labels(type_name: str | None) -> tuple[str, ...]:
    concept_type = parse_type(type_name)
    if concept_type is None:
        return ("Thing",)
    return label_chain(concept_type)


def _is_set(value: object) -> bool:
    if value is None or value is False:
        return False
    if isinstance(value, str | list | tuple | Mapping):
        return len(value) > 0
    return True
