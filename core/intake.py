"""
Lead intake: turns one validated submission into a lead (or nothing).

Steps, in order:
1. Resolve the listing the submission points at (must exist)
2. Duplicate guard: a recent identical submission returns the existing lead
3. Spam scorer and rental detector: flagged messages are discarded
4. Persist

Notifications are not sent here. The caller publishes a LeadCreated event
after the response has gone out, so submit() returns as soon as the lead
row exists.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from core.config import SpamPolicy
from core.duplicate_guard import DuplicateGuard
from core.exceptions import ListingNotFoundError, SubmissionRejectedError
from core.models import (
    Lead,
    LeadCreate,
    LeadSource,
    LeadSubmission,
    Listing,
    ListingKind,
    SpamVerdict,
)
from core.services.lead_service import LeadService
from core.services.listing_service import ListingService
from core.spam import SpamScorer

logger = logging.getLogger(__name__)


class IntakeStatus(str, Enum):
    CREATED = "created"
    DUPLICATE = "duplicate"
    DISCARDED = "discarded"


@dataclass(frozen=True)
class RequestContext:
    """Who sent the submission, as far as HTTP can tell."""

    ip_address: str | None = None
    user_agent: str | None = None


@dataclass(frozen=True)
class IntakeResult:
    status: IntakeStatus
    lead: Lead | None = None
    listing: Listing | None = None
    verdict: SpamVerdict | None = None
    discard_reason: str | None = None

    @property
    def created(self) -> bool:
        return self.status == IntakeStatus.CREATED


def source_for(submission: LeadSubmission) -> LeadSource:
    """Which form a submission counts as."""
    if submission.listing_kind == ListingKind.PROPERTY:
        return LeadSource.PROPERTY_FORM
    if submission.listing_kind == ListingKind.PROJECT:
        return LeadSource.PROJECT_FORM
    if submission.is_seller:
        return LeadSource.SELLER_FORM
    return LeadSource.CONTACT_FORM


class LeadIntakeService:
    """Accepts public lead submissions."""

    def __init__(
        self,
        leads: LeadService,
        listings: ListingService,
        guard: DuplicateGuard,
        scorer: SpamScorer,
        policy: SpamPolicy | None = None,
    ):
        self.leads = leads
        self.listings = listings
        self.guard = guard
        self.scorer = scorer
        self.policy = policy or SpamPolicy()

    def submit(self, submission: LeadSubmission, context: RequestContext | None = None) -> IntakeResult:
        """
        Run one submission through the pipeline.

        Raises:
            ListingNotFoundError: The referenced property/project does not exist
            SubmissionRejectedError: Flagged and silent discard is off
        """
        context = context or RequestContext()

        listing = None
        if submission.listing_kind != ListingKind.NONE:
            listing = self.listings.resolve(submission.listing_kind, submission.listing_id)
            if listing is None:
                raise ListingNotFoundError(
                    f"{submission.listing_kind.value.capitalize()} {submission.listing_id} not found"
                )

        source = source_for(submission)

        existing = self.guard.find_duplicate(
            submission.email, submission.listing_kind, submission.listing_id, source
        )
        if existing is not None:
            return IntakeResult(status=IntakeStatus.DUPLICATE, lead=existing, listing=listing)

        verdict = self.scorer.score(
            submission.message, submission.name, submission.email, submission.phone
        )
        reason = self._rejection_reason(verdict)
        if reason is not None:
            logger.info(
                f"Discarding {source.value} submission from {submission.email}: "
                f"{reason} (score {verdict.score}, rental {verdict.rental_score})"
            )
            if not self.policy.discard_silently:
                raise SubmissionRejectedError("Submission rejected", reason=reason)
            return IntakeResult(
                status=IntakeStatus.DISCARDED,
                listing=listing,
                verdict=verdict,
                discard_reason=reason,
            )

        lead = self.leads.create(self._build_lead(submission, source, listing, context))

        if verdict.is_suspicious:
            logger.info(
                f"Suspicious {source.value} submission allowed as lead {lead.id} "
                f"(score {verdict.score}, rules {verdict.rules_version})"
            )
        return IntakeResult(status=IntakeStatus.CREATED, lead=lead, listing=listing, verdict=verdict)

    def _rejection_reason(self, verdict: SpamVerdict) -> str | None:
        if verdict.is_spam:
            return "spam"
        if verdict.is_rental and self.policy.reject_rental_inquiries:
            return "rental_inquiry"
        return None

    def _build_lead(
        self,
        submission: LeadSubmission,
        source: LeadSource,
        listing: Listing | None,
        context: RequestContext,
    ) -> LeadCreate:
        tracking = submission.tracking
        seller = submission.seller_details if source == LeadSource.SELLER_FORM else None

        return LeadCreate(
            name=submission.name,
            email=submission.email,
            phone=submission.phone,
            message=submission.message,
            source=source,
            property_id=submission.listing_id if submission.listing_kind == ListingKind.PROPERTY else None,
            project_id=submission.listing_id if submission.listing_kind == ListingKind.PROJECT else None,
            agent_id=listing.owner_id if listing else None,
            preferred_language=submission.preferred_language,
            utm_source=tracking.utm_source,
            utm_medium=tracking.utm_medium,
            utm_campaign=tracking.utm_campaign,
            utm_term=tracking.utm_term,
            utm_content=tracking.utm_content,
            referrer=tracking.referrer,
            page_path=tracking.page_path,
            ip_address=context.ip_address,
            user_agent=context.user_agent,
            seller_neighborhood=seller.neighborhood if seller else None,
            seller_size=seller.size if seller else None,
            seller_rooms=seller.rooms if seller else None,
            seller_occupancy_status=seller.occupancy_status if seller else None,
        )
