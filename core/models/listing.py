"""Listing (property or project) as seen by the lead pipeline."""

from pydantic import BaseModel

from core.models.lead import ListingKind


class Listing(BaseModel):
    """A resolved property or project, with its assigned agent if any."""

    kind: ListingKind
    id: int
    title: str
    slug: str | None = None
    url: str | None = None
    owner_id: int | None = None
    owner_name: str | None = None
    owner_email: str | None = None
