"""
Duplicate suppression for lead submissions.

A resubmission of the same form within a short window (double clicks,
browser retries, impatient visitors) returns the lead that already exists
instead of creating a second one.

Windows:
- property / project inquiry: same email + same listing
- seller inquiry: same email with seller_form source
- general contact: same email with contact_form source
"""

import logging
from typing import Callable, Protocol
from datetime import datetime

from core.config import DuplicateWindows
from core.models.lead import Lead, LeadSource, ListingKind
from utils.timezone import now_utc, minutes_before

logger = logging.getLogger(__name__)


class RecentLeadLookup(Protocol):
    def find_recent(
        self,
        email: str,
        since: datetime,
        property_id: int | None = None,
        project_id: int | None = None,
        source: str | None = None,
    ) -> Lead | None: ...


class DuplicateGuard:
    """Finds an existing lead that a new submission would duplicate."""

    def __init__(
        self,
        store: RecentLeadLookup,
        windows: DuplicateWindows | None = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.store = store
        self.windows = windows or DuplicateWindows()
        self.clock = clock

    def find_duplicate(
        self,
        email: str,
        listing_kind: ListingKind,
        listing_id: int | None,
        source: LeadSource,
    ) -> Lead | None:
        """
        Return the lead this submission duplicates, or None.

        Store errors propagate.
        """
        email = email.strip().lower()
        now = self.clock()

        if listing_kind == ListingKind.PROPERTY:
            existing = self.store.find_recent(
                email,
                minutes_before(now, self.windows.listing_minutes),
                property_id=listing_id,
            )
        elif listing_kind == ListingKind.PROJECT:
            existing = self.store.find_recent(
                email,
                minutes_before(now, self.windows.listing_minutes),
                project_id=listing_id,
            )
        elif source == LeadSource.SELLER_FORM:
            existing = self.store.find_recent(
                email,
                minutes_before(now, self.windows.seller_minutes),
                source=LeadSource.SELLER_FORM.value,
            )
        else:
            existing = self.store.find_recent(
                email,
                minutes_before(now, self.windows.contact_minutes),
                source=LeadSource.CONTACT_FORM.value,
            )

        if existing is not None:
            logger.info(
                f"Duplicate {source.value} submission from {email} matches lead {existing.id}"
            )
        return existing
