"""Inbound lead submissions.

Browser forms post camelCase keys (listingId, countryCode, recaptchaToken);
snake_case is accepted too. Each form model normalizes into a LeadSubmission,
the one shape the intake pipeline consumes.
"""

from pydantic import AliasChoices, BaseModel, EmailStr, Field, field_validator, model_validator

from core.models.lead import ListingKind


def _alias(*names: str) -> AliasChoices:
    return AliasChoices(*names)


def _blank_to_none(value):
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


class SellerDetails(BaseModel):
    """Optional facts a seller gives about the home they want to sell."""

    neighborhood: str | None = Field(None, max_length=255)
    size: str | None = Field(None, max_length=100)
    rooms: str | None = Field(None, max_length=50)
    occupancy_status: str | None = Field(
        None, max_length=100, validation_alias=_alias("occupancy_status", "occupancyStatus", "occupancy")
    )

    @field_validator("neighborhood", "size", "rooms", "occupancy_status", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        if isinstance(value, (int, float)):
            value = str(value)
        return _blank_to_none(value)

    @property
    def is_empty(self) -> bool:
        return not any([self.neighborhood, self.size, self.rooms, self.occupancy_status])


class TrackingData(BaseModel):
    """Marketing attribution captured by the page."""

    utm_source: str | None = Field(None, max_length=255, validation_alias=_alias("utm_source", "utmSource"))
    utm_medium: str | None = Field(None, max_length=255, validation_alias=_alias("utm_medium", "utmMedium"))
    utm_campaign: str | None = Field(None, max_length=255, validation_alias=_alias("utm_campaign", "utmCampaign"))
    utm_term: str | None = Field(None, max_length=255, validation_alias=_alias("utm_term", "utmTerm"))
    utm_content: str | None = Field(None, max_length=255, validation_alias=_alias("utm_content", "utmContent"))
    referrer: str | None = Field(None, max_length=1000)
    page_path: str | None = Field(None, max_length=1000, validation_alias=_alias("page_path", "pagePath"))

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        return _blank_to_none(value)


class LeadSubmission(BaseModel):
    """
    One inbound message, validated.

    Name and email are required. Message may be empty for some channels.
    A listing id is present exactly when listing_kind is property or project.
    """

    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    phone: str | None = Field(None, max_length=50)
    message: str | None = Field(None, max_length=2000)
    listing_id: int | None = Field(None, ge=1)
    listing_kind: ListingKind = ListingKind.NONE
    preferred_language: str | None = Field(None, max_length=10)
    is_seller: bool = False
    seller_details: SellerDetails | None = None
    tracking: TrackingData = Field(default_factory=TrackingData)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("phone", "message", "preferred_language", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        return _blank_to_none(value)

    @model_validator(mode="after")
    def listing_reference_matches_kind(self) -> "LeadSubmission":
        if self.listing_kind == ListingKind.NONE and self.listing_id is not None:
            raise ValueError("listing_id given without a listing kind")
        if self.listing_kind != ListingKind.NONE and self.listing_id is None:
            raise ValueError(f"listing_id is required for {self.listing_kind.value} inquiries")
        return self


class _FormBase(BaseModel):
    """Fields every public lead form posts."""

    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    phone: str | None = Field(None, max_length=30)
    country_code: str | None = Field(None, max_length=8, validation_alias=_alias("country_code", "countryCode"))
    preferred_language: str | None = Field(
        None, max_length=10, validation_alias=_alias("preferred_language", "preferredLanguage", "language")
    )
    recaptcha_token: str | None = Field(
        None, max_length=4000, validation_alias=_alias("recaptcha_token", "recaptchaToken")
    )
    utm_source: str | None = Field(None, max_length=255, validation_alias=_alias("utm_source", "utmSource"))
    utm_medium: str | None = Field(None, max_length=255, validation_alias=_alias("utm_medium", "utmMedium"))
    utm_campaign: str | None = Field(None, max_length=255, validation_alias=_alias("utm_campaign", "utmCampaign"))
    utm_term: str | None = Field(None, max_length=255, validation_alias=_alias("utm_term", "utmTerm"))
    utm_content: str | None = Field(None, max_length=255, validation_alias=_alias("utm_content", "utmContent"))
    referrer: str | None = Field(None, max_length=1000)
    page_path: str | None = Field(None, max_length=1000, validation_alias=_alias("page_path", "pagePath"))

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("phone", "country_code", "preferred_language", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        return _blank_to_none(value)

    def combined_phone(self) -> str | None:
        """'+49' and '170 1234567' arrive separately; store them as one string."""
        combined = f"{self.country_code or ''} {self.phone or ''}".strip()
        return combined or None

    def tracking(self) -> TrackingData:
        return TrackingData(
            utm_source=self.utm_source,
            utm_medium=self.utm_medium,
            utm_campaign=self.utm_campaign,
            utm_term=self.utm_term,
            utm_content=self.utm_content,
            referrer=self.referrer,
            page_path=self.page_path,
        )


class ListingInquiryForm(_FormBase):
    """Inquiry posted from a property or project detail page."""

    message: str | None = Field(None, max_length=2000)
    listing_id: int = Field(..., ge=1, validation_alias=_alias("listing_id", "listingId", "propertyId", "projectId"))

    def to_submission(self, kind: ListingKind) -> LeadSubmission:
        return LeadSubmission(
            name=self.name,
            email=self.email,
            phone=self.combined_phone(),
            message=self.message,
            listing_id=self.listing_id,
            listing_kind=kind,
            preferred_language=self.preferred_language,
            tracking=self.tracking(),
        )


class ContactForm(_FormBase):
    """General contact page or 'For Sellers' page submission."""

    message: str = Field(..., min_length=5, max_length=2000)
    lead_type: str | None = Field(
        None, pattern="^(seller|buyer|unknown)$", validation_alias=_alias("lead_type", "leadType")
    )
    seller_details: SellerDetails | None = Field(
        None, validation_alias=_alias("seller_details", "sellerDetails")
    )

    @field_validator("message", mode="before")
    @classmethod
    def strip_message(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("lead_type", mode="before")
    @classmethod
    def blank_lead_type(cls, value):
        return _blank_to_none(value)

    def to_submission(self) -> LeadSubmission:
        details = self.seller_details if self.seller_details and not self.seller_details.is_empty else None
        return LeadSubmission(
            name=self.name,
            email=self.email,
            phone=self.combined_phone(),
            message=self.message,
            listing_kind=ListingKind.NONE,
            preferred_language=self.preferred_language,
            is_seller=self.lead_type == "seller" or details is not None,
            seller_details=details,
            tracking=self.tracking(),
        )
