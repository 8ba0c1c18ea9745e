"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class ConceptType(StrEnum):
    """Closed set of concept kinds stored as node labels."""

    THING = "Thing"
    CONCEPT = "Concept"
    CLASSIFICATION = "Classification"

    SECTION = "Section"
    SUBJECT = "Subject"
    SPECIAL_REPORT = "SpecialReport"
    GENRE = "Genre"
    BRAND = "Brand"
    ALPHAVILLE_SERIES = "AlphavilleSeries"

    TOPIC = "Topic"
    LOCATION = "Location"
    PERSON = "Person"
    MEMBERSHIP = "Membership"
    MEMBERSHIP_ROLE = "MembershipRole"
    BOARD_ROLE = "BoardRole"
    FINANCIAL_INSTRUMENT = "FinancialInstrument"

    ORGANISATION = "Organisation"
    COMPANY = "Company"
    PUBLIC_COMPANY = "PublicCompany"
    PRIVATE_COMPANY = "PrivateCompany"


class Authority(StrEnum):
    """External systems that report source records."""

    TME = "TME"
    UPP = "UPP"
    SMARTLOGIC = "Smartlogic"
    FACTSET = "FACTSET"
    MANAGED_LOCATION = "ManagedLocation"


class IdentifierLabel(StrEnum):
    TME = "TMEIdentifier"
    UPP = "UPPIdentifier"
    SMARTLOGIC = "SmartlogicIdentifier"
    FACTSET = "FactsetIdentifier"
    MANAGED_LOCATION = "ManagedLocationIdentifier"
    FIGI = "FIGIIdentifier"


class RelationshipKind(StrEnum):
    """Edge types between things in the concept graph."""

    EQUIVALENT_TO = "EQUIVALENT_TO"

    HAS_PARENT = "HAS_PARENT"
    IS_RELATED_TO = "IS_RELATED_TO"
    HAS_BROADER = "HAS_BROADER"
    SUPERSEDED_BY = "SUPERSEDED_BY"

    HAS_ORGANISATION = "HAS_ORGANISATION"
    HAS_MEMBER = "HAS_MEMBER"
    HAS_ROLE = "HAS_ROLE"

    ISSUED_BY = "ISSUED_BY"
    SUB_ORGANISATION_OF = "SUB_ORGANISATION_OF"
    COUNTRY_OF_RISK = "COUNTRY_OF_RISK"
    COUNTRY_OF_INCORPORATION = "COUNTRY_OF_INCORPORATION"
    COUNTRY_OF_OPERATIONS = "COUNTRY_OF_OPERATIONS"


class EventType(StrEnum):
    CONCEPT_UPDATED = "CONCEPT_UPDATED"
    CONCORDANCE_ADDED = "CONCORDANCE_ADDED"
    CONCORDANCE_REMOVED = "CONCORDANCE_REMOVED"
