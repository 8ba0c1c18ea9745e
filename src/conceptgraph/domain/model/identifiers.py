"""Identifier labels attached to source records per reporting authority."""

from __future__ import annotations

from typing import Final

from conceptgraph.domain.model.enums import Authority, IdentifierLabel

_AUTHORITY_IDENTIFIER_LABELS: Final[dict[str, IdentifierLabel]] = {
    Authority.TME: IdentifierLabel.TME,
    Authority.UPP: IdentifierLabel.UPP,
    Authority.SMARTLOGIC: IdentifierLabel.SMARTLOGIC,
    Authority.FACTSET: IdentifierLabel.FACTSET,
    Authority.MANAGED_LOCATION: IdentifierLabel.MANAGED_LOCATION,
}

# Every indexed source is also identified by its own uuid under this label.
INTERNAL_IDENTIFIER_LABEL: Final[IdentifierLabel] = IdentifierLabel.UPP


def identifier_label_for(authority: str | None) -> IdentifierLabel | None:
    if authority is None:
        return None
    return _AUTHORITY_IDENTIFIER_LABELS.get(authority)


def is_recognised_authority(authority: str | None) -> bool:
    return identifier_label_for(authority) is not None
