"""Pydantic models for the camelCase aggregate JSON payload."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class PayloadBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class MembershipRolePayload(PayloadBaseModel):
    role_uuid: str | None = Field(default=None, alias="membershipRoleUUID")
    inception_date: str | None = Field(default=None, alias="inceptionDate")
    termination_date: str | None = Field(default=None, alias="terminationDate")
    inception_date_epoch: int | None = Field(default=None, alias="inceptionDateEpoch")
    termination_date_epoch: int | None = Field(default=None, alias="terminationDateEpoch")


class ConceptPayload(PayloadBaseModel):
    uuid: str | None = None
    pref_label: str | None = Field(default=None, alias="prefLabel")
    type: str | None = None
    authority: str | None = None
    authority_value: str | None = Field(default=None, alias="authorityValue")
    last_modified_epoch: int | None = Field(default=None, alias="lastModifiedEpoch")

    parent_uuids: list[str] = Field(default_factory=list[str], alias="parentUUIDs")
    related_uuids: list[str] = Field(default_factory=list[str], alias="relatedUUIDs")
    broader_uuids: list[str] = Field(default_factory=list[str], alias="broaderUUIDs")
    superseded_by_uuids: list[str] = Field(default_factory=list[str], alias="supersededByUUIDs")

    organisation_uuid: str | None = Field(default=None, alias="organisationUUID")
    person_uuid: str | None = Field(default=None, alias="personUUID")
    membership_roles: list[MembershipRolePayload] = Field(
        default_factory=list["MembershipRolePayload"], alias="membershipRoles"
    )

    issued_by: str | None = Field(default=None, alias="issuedBy")
    figi_code: str | None = Field(default=None, alias="figiCode")
    is_deprecated: bool = Field(default=False, alias="isDeprecated")

    parent_organisation: str | None = Field(default=None, alias="parentOrganisation")
    country_of_risk_uuid: str | None = Field(default=None, alias="countryOfRiskUUID")
    country_of_incorporation_uuid: str | None = Field(
        default=None, alias="countryOfIncorporationUUID"
    )
    country_of_operations_uuid: str | None = Field(default=None, alias="countryOfOperationsUUID")


class AggregatedConceptPayload(PayloadBaseModel):
    pref_uuid: str | None = Field(default=None, alias="prefUUID")
    pref_label: str | None = Field(default=None, alias="prefLabel")
    type: str | None = None
    source_representations: list[ConceptPayload] = Field(
        default_factory=list["ConceptPayload"], alias="sourceRepresentations"
    )
    aggregated_hash: str | None = Field(default=None, alias="aggregateHash")

    aliases: list[str] = Field(default_factory=list[str])
    strapline: str | None = None
    description_xml: str | None = Field(default=None, alias="descriptionXML")
    image_url: str | None = Field(default=None, alias="_imageUrl")
    scope_note: str | None = Field(default=None, alias="scopeNote")
    short_label: str | None = Field(default=None, alias="shortLabel")
    email_address: str | None = Field(default=None, alias="emailAddress")
    facebook_page: str | None = Field(default=None, alias="facebookPage")
    twitter_handle: str | None = Field(default=None, alias="twitterHandle")
    is_deprecated: bool = Field(default=False, alias="isDeprecated")
    figi_code: str | None = Field(default=None, alias="figiCode")

    inception_date: str | None = Field(default=None, alias="inceptionDate")
    termination_date: str | None = Field(default=None, alias="terminationDate")
    inception_date_epoch: int | None = Field(default=None, alias="inceptionDateEpoch")
    termination_date_epoch: int | None = Field(default=None, alias="terminationDateEpoch")

    organisation_uuid: str | None = Field(default=None, alias="organisationUUID")
    person_uuid: str | None = Field(default=None, alias="personUUID")
    membership_roles: list[MembershipRolePayload] = Field(
        default_factory=list["MembershipRolePayload"], alias="membershipRoles"
    )
    issued_by: str | None = Field(default=None, alias="issuedBy")

    proper_name: str | None = Field(default=None, alias="properName")
    short_name: str | None = Field(default=None, alias="shortName")
    trade_names: list[str] = Field(default_factory=list[str], alias="tradeNames")
    former_names: list[str] = Field(default_factory=list[str], alias="formerNames")
    country_code: str | None = Field(default=None, alias="countryCode")
    country_of_risk: str | None = Field(default=None, alias="countryOfRisk")
    country_of_incorporation: str | None = Field(default=None, alias="countryOfIncorporation")
    country_of_operations: str | None = Field(default=None, alias="countryOfOperations")
    country_of_risk_uuid: str | None = Field(default=None, alias="countryOfRiskUUID")
    country_of_incorporation_uuid: str | None = Field(
        default=None, alias="countryOfIncorporationUUID"
    )
    country_of_operations_uuid: str | None = Field(default=None, alias="countryOfOperationsUUID")
    postal_code: str | None = Field(default=None, alias="postalCode")
    year_founded: int | None = Field(default=None, alias="yearFounded")
    lei_code: str | None = Field(default=None, alias="leiCode")
    parent_organisation: str | None = Field(default=None, alias="parentOrganisation")

    iso31661: str | None = None

    salutation: str | None = None
    birth_year: int | None = Field(default=None, alias="birthYear")


class EventDetailsPayload(PayloadBaseModel):
    type: str
    old_id: str | None = Field(default=None, alias="oldID")
    new_id: str | None = Field(default=None, alias="newID")


class EventPayload(PayloadBaseModel):
    concept_type: str = Field(alias="type")
    concept_uuid: str = Field(alias="uuid")
    aggregate_hash: str = Field(alias="aggregateHash")
    transaction_id: str = Field(alias="transactionID")
    event_details: EventDetailsPayload = Field(alias="eventDetails")


class ConceptChangesPayload(PayloadBaseModel):
    updated_ids: list[str] = Field(default_factory=list[str], alias="updatedIDs")
    events: list[EventPayload] = Field(default_factory=list["EventPayload"])
