"""Type hierarchy of concept kinds.

Nodes carry their kind as a chain of labels (``PublicCompany:Organisation:Concept:Thing``).
The chain is built from the parent table on write and collapsed back into a
single kind on read.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from conceptgraph.domain.errors import UnrecognizedTypeError
from conceptgraph.domain.model.enums import ConceptType

if TYPE_CHECKING:
    from collections.abc import Iterable

_PARENTS: Final[dict[ConceptType, ConceptType | None]] = {
    ConceptType.THING: None,
    ConceptType.CONCEPT: ConceptType.THING,
    ConceptType.CLASSIFICATION: ConceptType.CONCEPT,
    ConceptType.SECTION: ConceptType.CLASSIFICATION,
    ConceptType.SUBJECT: ConceptType.CLASSIFICATION,
    ConceptType.SPECIAL_REPORT: ConceptType.CLASSIFICATION,
    ConceptType.GENRE: ConceptType.CLASSIFICATION,
    ConceptType.BRAND: ConceptType.CLASSIFICATION,
    ConceptType.ALPHAVILLE_SERIES: ConceptType.CLASSIFICATION,
    ConceptType.TOPIC: ConceptType.CONCEPT,
    ConceptType.LOCATION: ConceptType.CONCEPT,
    ConceptType.PERSON: ConceptType.CONCEPT,
    ConceptType.MEMBERSHIP: ConceptType.CONCEPT,
    ConceptType.MEMBERSHIP_ROLE: ConceptType.CONCEPT,
    ConceptType.BOARD_ROLE: ConceptType.CONCEPT,
    ConceptType.FINANCIAL_INSTRUMENT: ConceptType.CONCEPT,
    ConceptType.ORGANISATION: ConceptType.CONCEPT,
    ConceptType.COMPANY: ConceptType.ORGANISATION,
    ConceptType.PUBLIC_COMPANY: ConceptType.ORGANISATION,
    ConceptType.PRIVATE_COMPANY: ConceptType.ORGANISATION,
}

# Kinds accepted on write; ``Thing`` only ever marks bare stubs.
WRITABLE_TYPES: Final[frozenset[ConceptType]] = frozenset(_PARENTS) - {ConceptType.THING}


def parse_type(value: str | None) -> ConceptType | None:
    """Return the kind named by ``value`` or ``None`` when it is not a known kind."""

    if not value:
        return None
    try:
        return ConceptType(value)
    except ValueError:
        return None


def parent_of(concept_type: ConceptType) -> ConceptType | None:
    return _PARENTS[concept_type]


def depth_of(concept_type: ConceptType) -> int:
    depth = 0
    parent = parent_of(concept_type)
    while parent is not None:
        depth += 1
        parent = parent_of(parent)
    return depth


def label_chain(concept_type: ConceptType) -> tuple[str, ...]:
    """Return ``concept_type`` followed by all of its ancestors, most specific first."""

    chain: list[str] = []
    current: ConceptType | None = concept_type
    while current is not None:
        chain.append(current.value)
        current = parent_of(current)
    return tuple(chain)


def most_specific_type(labels: Iterable[str]) -> ConceptType:
    """Resolve a node's label set to the single kind it represents.

    Unknown labels are ignored. Raises ``UnrecognizedTypeError`` when no label
    is a known kind or when the known labels belong to diverging branches.
    """

    labels = tuple(labels)
    known = {parsed for label in labels if (parsed := parse_type(label)) is not None}
    if not known:
        raise UnrecognizedTypeError(f"No recognised type in labels {sorted(labels)}")

    deepest = max(known, key=depth_of)
    ancestors = set(label_chain(deepest))
    stray = sorted(kind.value for kind in known if kind.value not in ancestors)
    if stray:
        raise UnrecognizedTypeError(
            f"Labels {stray} are not ancestors of {deepest.value}; cannot resolve a single type"
        )
    return deepest
