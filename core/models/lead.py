"""Lead domain models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class LeadSource(str, Enum):
    """Which public form produced the lead."""

    PROPERTY_FORM = "property_form"
    PROJECT_FORM = "project_form"
    CONTACT_FORM = "contact_form"
    SELLER_FORM = "seller_form"


class ListingKind(str, Enum):
    """What a lead points at."""

    PROPERTY = "property"
    PROJECT = "project"
    NONE = "none"


class LeadKind(str, Enum):
    """Back-office grouping of leads by source."""

    BUYER = "buyer"
    SELLER = "seller"
    UNKNOWN = "unknown"


DEFAULT_STATUS = "new"


class LeadCreate(BaseModel):
    """Data persisted for an accepted submission."""

    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., max_length=255)
    phone: str | None = Field(None, max_length=50)
    message: str | None = Field(None, max_length=2000)
    source: LeadSource
    property_id: int | None = Field(None, ge=1)
    project_id: int | None = Field(None, ge=1)
    agent_id: int | None = None
    preferred_language: str | None = Field(None, max_length=10)
    utm_source: str | None = Field(None, max_length=255)
    utm_medium: str | None = Field(None, max_length=255)
    utm_campaign: str | None = Field(None, max_length=255)
    utm_term: str | None = Field(None, max_length=255)
    utm_content: str | None = Field(None, max_length=255)
    referrer: str | None = Field(None, max_length=1000)
    page_path: str | None = Field(None, max_length=1000)
    ip_address: str | None = Field(None, max_length=64)
    user_agent: str | None = Field(None, max_length=1000)
    seller_neighborhood: str | None = Field(None, max_length=255)
    seller_size: str | None = Field(None, max_length=100)
    seller_rooms: str | None = Field(None, max_length=50)
    seller_occupancy_status: str | None = Field(None, max_length=100)


class LeadUpdate(BaseModel):
    """Back-office changes to a lead. All fields optional."""

    status: str | None = Field(None, min_length=1, max_length=50)
    internal_notes: str | None = Field(None, max_length=20000)
    append_note: str | None = Field(None, max_length=2000)
    last_contact_at: datetime | None = None
    agent_id: int | None = Field(None, ge=1)
    unassign: bool = Field(False, description="Clear agent_id (SuperAdmin only)")


class Lead(BaseModel):
    """Full lead entity as stored. The id is assigned by the database."""

    id: int
    name: str
    email: str
    phone: str | None = None
    message: str | None = None
    source: LeadSource
    property_id: int | None = None
    project_id: int | None = None
    agent_id: int | None = None
    status: str = DEFAULT_STATUS
    internal_notes: str | None = None
    last_contact_at: datetime | None = None
    preferred_language: str | None = None
    utm_source: str | None = None
    utm_medium: str | None = None
    utm_campaign: str | None = None
    utm_term: str | None = None
    utm_content: str | None = None
    referrer: str | None = None
    page_path: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    seller_neighborhood: str | None = None
    seller_size: str | None = None
    seller_rooms: str | None = None
    seller_occupancy_status: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @property
    def listing_kind(self) -> ListingKind:
        if self.property_id is not None:
            return ListingKind.PROPERTY
        if self.project_id is not None:
            return ListingKind.PROJECT
        return ListingKind.NONE

    @property
    def listing_id(self) -> int | None:
        return self.property_id if self.property_id is not None else self.project_id

    @property
    def first_name(self) -> str:
        return self.name.split(" ")[0] or self.name


class LeadListItem(Lead):
    """Lead row enriched with listing titles and agent name for the back office."""

    property_title: str | None = None
    property_slug: str | None = None
    project_title: str | None = None
    project_slug: str | None = None
    agent_name: str | None = None


class LeadFilters(BaseModel):
    """Back-office list filters."""

    q: str | None = Field(None, max_length=200)
    status: str | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None
    agent_id: int | None = None
    property_id: int | None = None
    project_id: int | None = None
    lead_type: ListingKind | None = None
    lead_kind: LeadKind | None = None
    page: int = Field(1, ge=1)
    page_size: int = Field(20, ge=1, le=200)
