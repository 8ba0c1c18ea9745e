"""Typed graph mutations produced by the mutation planner.

Operations are plain values: the planner builds an ordered list of them and the
store adapter executes the whole list as one atomic unit. Every operation is
idempotent on its own (merges create-or-update, clears and deletes are no-ops
for missing nodes).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import Any

from conceptgraph.domain.model import IdentifierLabel, RelationshipKind

type PropertyMap = Mapping[str, Any]

_EMPTY: PropertyMap = MappingProxyType({})


class KeyField(StrEnum):
    """Which identifying property a node is matched on."""

    UUID = "uuid"
    PREF_UUID = "prefUUID"


@dataclass(frozen=True, slots=True)
class NodeKey:
    key_field: KeyField
    value: str

    @classmethod
    def source(cls, uuid: str) -> NodeKey:
        return cls(KeyField.UUID, uuid)

    @classmethod
    def canonical(cls, pref_uuid: str) -> NodeKey:
        return cls(KeyField.PREF_UUID, pref_uuid)

    def __str__(self) -> str:
        return f"{self.key_field.value}={self.value}"


@dataclass(frozen=True, slots=True, kw_only=True)
class ClearNode:
    """Strip a node down to a bare stub keyed only by its id.

    Kind labels and properties are reset, ``outgoing`` relationships and
    identifiers of the node are removed, and ``incoming`` relationships of the
    listed kinds are removed. Missing nodes are left alone.
    """

    key: NodeKey
    outgoing: frozenset[RelationshipKind] = frozenset()
    incoming: frozenset[RelationshipKind] = frozenset()
    drop_identifiers: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class DeleteNode:
    """Delete a node together with all of its edges and identifiers."""

    key: NodeKey


@dataclass(frozen=True, slots=True, kw_only=True)
class MergeNode:
    """Create the node if missing, then replace its properties and labels."""

    key: NodeKey
    labels: tuple[str, ...]
    properties: PropertyMap = field(default=_EMPTY)


@dataclass(frozen=True, slots=True, kw_only=True)
class MergeRelationship:
    """Ensure an edge ``start -[kind]-> end`` exists.

    A missing ``end`` is created as a stub; with ``identify_end`` it also gets
    an internal identifier carrying its uuid. ``properties`` are only set when
    the edge is created.
    """

    kind: RelationshipKind
    start: NodeKey
    end: NodeKey
    properties: PropertyMap = field(default=_EMPTY)
    identify_end: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class DeleteRelationship:
    kind: RelationshipKind
    start: NodeKey
    end: NodeKey


@dataclass(frozen=True, slots=True, kw_only=True)
class MergeIdentifier:
    """Ensure an identifier ``label=value`` identifies the node."""

    key: NodeKey
    label: IdentifierLabel
    value: str


type GraphOperation = (
    ClearNode | DeleteNode | MergeNode | MergeRelationship | DeleteRelationship | MergeIdentifier
)
