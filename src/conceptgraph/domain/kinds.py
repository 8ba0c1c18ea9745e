"""Kind policy registry.

Concept kinds share one write/read engine and differ only in the scalar fields
kept on the canonical node, the relationships their sources may carry and a
few extra validation rules. Policies are looked up through the type hierarchy,
so ``PublicCompany`` uses the ``Organisation`` policy.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Final

from conceptgraph.domain.errors import InvalidRequestError
from conceptgraph.domain.model import (
    AggregatedConcept,
    Concept,
    ConceptType,
    RelationshipKind,
    parent_of,
)

log = logging.getLogger(__name__)

type KindValidator = Callable[[AggregatedConcept, str], None]

# Aggregate attribute -> stored canonical property.
CANONICAL_PROPERTIES: Final[dict[str, str]] = {
    "aliases": "aliases",
    "description_xml": "descriptionXML",
    "image_url": "imageUrl",
    "strapline": "strapline",
    "scope_note": "scopeNote",
    "short_label": "shortLabel",
    "is_deprecated": "isDeprecated",
    "figi_code": "figiCode",
    "email_address": "emailAddress",
    "facebook_page": "facebookPage",
    "twitter_handle": "twitterHandle",
    "salutation": "salutation",
    "birth_year": "birthYear",
    "proper_name": "properName",
    "short_name": "shortName",
    "trade_names": "tradeNames",
    "former_names": "formerNames",
    "country_code": "countryCode",
    "country_of_risk": "countryOfRisk",
    "country_of_incorporation": "countryOfIncorporation",
    "country_of_operations": "countryOfOperations",
    "postal_code": "postalCode",
    "year_founded": "yearFounded",
    "lei_code": "leiCode",
    "iso31661": "iso31661",
    "inception_date": "inceptionDate",
    "termination_date": "terminationDate",
    "inception_date_epoch": "inceptionDateEpoch",
    "termination_date_epoch": "terminationDateEpoch",
}

_BASE_FIELDS: Final[tuple[str, ...]] = (
    "aliases",
    "description_xml",
    "image_url",
    "strapline",
    "scope_note",
    "short_label",
    "is_deprecated",
    "figi_code",
)

_BASE_RELATIONSHIPS: Final[frozenset[RelationshipKind]] = frozenset(
    {
        RelationshipKind.HAS_PARENT,
        RelationshipKind.IS_RELATED_TO,
        RelationshipKind.HAS_BROADER,
        RelationshipKind.SUPERSEDED_BY,
    }
)


@dataclass(frozen=True, slots=True, kw_only=True)
class KindPolicy:
    """Declarative description of how one kind is written and read."""

    concept_type: ConceptType
    relationships: frozenset[RelationshipKind] = _BASE_RELATIONSHIPS
    canonical_fields: tuple[str, ...] = _BASE_FIELDS
    allows_concordance: bool = True
    indexes_identifiers: bool = True
    validators: tuple[KindValidator, ...] = ()

    def allows(self, relationship: RelationshipKind) -> bool:
        return relationship in self.relationships


def _validate_membership(aggregate: AggregatedConcept, transaction_id: str) -> None:
    targets: list[tuple[str, AggregatedConcept | Concept]] = [(aggregate.pref_uuid, aggregate)]
    targets.extend((source.uuid, source) for source in aggregate.source_representations)
    for uuid, concept in targets:
        missing: str | None = None
        if not concept.person_uuid:
            missing = "personUUID"
        elif not concept.organisation_uuid:
            missing = "organisationUUID"
        elif not concept.membership_roles:
            missing = "membershipRoles"
        if missing is not None:
            error = InvalidRequestError.missing(missing, uuid)
            log.error(
                "transaction_id=%s uuid=%s membership validation failed: %s",
                transaction_id,
                uuid,
                error,
            )
            raise error


_POLICIES: Final[dict[ConceptType, KindPolicy]] = {
    ConceptType.CONCEPT: KindPolicy(concept_type=ConceptType.CONCEPT),
    ConceptType.PERSON: KindPolicy(
        concept_type=ConceptType.PERSON,
        canonical_fields=(
            *_BASE_FIELDS,
            "email_address",
            "facebook_page",
            "twitter_handle",
            "salutation",
            "birth_year",
        ),
    ),
    ConceptType.ORGANISATION: KindPolicy(
        concept_type=ConceptType.ORGANISATION,
        relationships=_BASE_RELATIONSHIPS
        | {
            RelationshipKind.SUB_ORGANISATION_OF,
            RelationshipKind.COUNTRY_OF_RISK,
            RelationshipKind.COUNTRY_OF_INCORPORATION,
            RelationshipKind.COUNTRY_OF_OPERATIONS,
        },
        canonical_fields=(
            *_BASE_FIELDS,
            "proper_name",
            "short_name",
            "trade_names",
            "former_names",
            "country_code",
            "country_of_risk",
            "country_of_incorporation",
            "country_of_operations",
            "postal_code",
            "year_founded",
            "lei_code",
            "email_address",
            "facebook_page",
            "twitter_handle",
        ),
    ),
    ConceptType.LOCATION: KindPolicy(
        concept_type=ConceptType.LOCATION,
        canonical_fields=(*_BASE_FIELDS, "iso31661"),
    ),
    ConceptType.MEMBERSHIP: KindPolicy(
        concept_type=ConceptType.MEMBERSHIP,
        relationships=frozenset(
            {
                RelationshipKind.HAS_MEMBER,
                RelationshipKind.HAS_ORGANISATION,
                RelationshipKind.HAS_ROLE,
                RelationshipKind.SUPERSEDED_BY,
            }
        ),
        canonical_fields=(
            *_BASE_FIELDS,
            "inception_date",
            "termination_date",
            "inception_date_epoch",
            "termination_date_epoch",
        ),
        indexes_identifiers=False,
        validators=(_validate_membership,),
    ),
    ConceptType.FINANCIAL_INSTRUMENT: KindPolicy(
        concept_type=ConceptType.FINANCIAL_INSTRUMENT,
        relationships=_BASE_RELATIONSHIPS | {RelationshipKind.ISSUED_BY},
    ),
    ConceptType.SPECIAL_REPORT: KindPolicy(
        concept_type=ConceptType.SPECIAL_REPORT,
        allows_concordance=False,
    ),
}


def policy_for(concept_type: ConceptType) -> KindPolicy:
    """Return the policy of ``concept_type`` or of its nearest ancestor with one."""

    current: ConceptType | None = concept_type
    while current is not None:
        policy = _POLICIES.get(current)
        if policy is not None:
            return policy
        current = parent_of(current)
    return _POLICIES[ConceptType.CONCEPT]
