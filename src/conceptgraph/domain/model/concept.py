"""Source records and canonical aggregates.

Both are plain data: an ``AggregatedConcept`` is the caller's merged view of a
concordance and is written as given, never computed from its sources.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True, kw_only=True)
class MembershipRole:
    role_uuid: str
    inception_date: str | None = None
    termination_date: str | None = None
    inception_date_epoch: int | None = None
    termination_date_epoch: int | None = None


@dataclass(slots=True, kw_only=True)
class Concept:
    """One external system's record of a concept."""

    uuid: str
    pref_label: str | None = None
    type: str | None = None
    authority: str | None = None
    authority_value: str | None = None
    last_modified_epoch: int | None = None

    parent_uuids: list[str] = field(default_factory=list[str])
    related_uuids: list[str] = field(default_factory=list[str])
    broader_uuids: list[str] = field(default_factory=list[str])
    superseded_by_uuids: list[str] = field(default_factory=list[str])

    organisation_uuid: str | None = None
    person_uuid: str | None = None
    membership_roles: list[MembershipRole] = field(default_factory=list[MembershipRole])

    issued_by: str | None = None
    figi_code: str | None = None
    is_deprecated: bool = False

    parent_organisation: str | None = None
    country_of_risk_uuid: str | None = None
    country_of_incorporation_uuid: str | None = None
    country_of_operations_uuid: str | None = None


@dataclass(slots=True, kw_only=True)
class AggregatedConcept:
    """Canonical view of a concordance group, keyed by ``pref_uuid``."""

    pref_uuid: str
    pref_label: str | None = None
    type: str | None = None
    source_representations: list[Concept] = field(default_factory=list[Concept])
    aggregated_hash: str | None = None

    aliases: list[str] = field(default_factory=list[str])
    strapline: str | None = None
    description_xml: str | None = None
    image_url: str | None = None
    scope_note: str | None = None
    short_label: str | None = None
    email_address: str | None = None
    facebook_page: str | None = None
    twitter_handle: str | None = None
    is_deprecated: bool = False
    figi_code: str | None = None

    inception_date: str | None = None
    termination_date: str | None = None
    inception_date_epoch: int | None = None
    termination_date_epoch: int | None = None

    organisation_uuid: str | None = None
    person_uuid: str | None = None
    membership_roles: list[MembershipRole] = field(default_factory=list[MembershipRole])
    issued_by: str | None = None

    # Organisations
    proper_name: str | None = None
    short_name: str | None = None
    trade_names: list[str] = field(default_factory=list[str])
    former_names: list[str] = field(default_factory=list[str])
    country_code: str | None = None
    country_of_risk: str | None = None
    country_of_incorporation: str | None = None
    country_of_operations: str | None = None
    country_of_risk_uuid: str | None = None
    country_of_incorporation_uuid: str | None = None
    country_of_operations_uuid: str | None = None
    postal_code: str | None = None
    year_founded: int | None = None
    lei_code: str | None = None
    parent_organisation: str | None = None

    # Location
    iso31661: str | None = None

    # Person
    salutation: str | None = None
    birth_year: int | None = None

    @property
    def source_uuids(self) -> tuple[str, ...]:
        return tuple(source.uuid for source in self.source_representations)

    def source(self, uuid: str) -> Concept | None:
        for source in self.source_representations:
            if source.uuid == uuid:
                return source
        return None
