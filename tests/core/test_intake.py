"""Tests for LeadIntakeService: end-to-end submission scenarios without HTTP."""

from unittest.mock import Mock

import pytest

from core.config import DuplicateWindows, SpamPolicy
from core.duplicate_guard import DuplicateGuard
from core.exceptions import ListingNotFoundError, SubmissionRejectedError
from core.intake import IntakeStatus, LeadIntakeService, RequestContext, source_for
from core.models import LeadSource, LeadSubmission, ListingKind, SellerDetails
from core.services.listing_service import ListingService

SPAM_MESSAGE = (
    "🌟🌟🌟 Google reviews guaranteed 100% satisfaction contact me on whatsapp +1234567890 🌟🌟🌟"
)


@pytest.fixture
def listings(property_listing):
    listings = Mock(spec=ListingService)
    listings.resolve.side_effect = lambda kind, listing_id: (
        property_listing if (kind, listing_id) == (ListingKind.PROPERTY, 42) else None
    )
    return listings


@pytest.fixture
def intake(lead_store, listings, scorer, clock):
    return LeadIntakeService(
        leads=lead_store,
        listings=listings,
        guard=DuplicateGuard(lead_store, DuplicateWindows(), clock),
        scorer=scorer,
        policy=SpamPolicy(),
    )


def property_submission(**overrides) -> LeadSubmission:
    data = dict(
        name="Jane Doe",
        email="jane@example.com",
        message="I'm interested in this property, please call me.",
        listing_id=42,
        listing_kind=ListingKind.PROPERTY,
    )
    data.update(overrides)
    return LeadSubmission(**data)


def seller_submission(**overrides) -> LeadSubmission:
    data = dict(
        name="Hans Meyer",
        email="hans@example.de",
        message="I would like to sell my apartment next year.",
        is_seller=True,
        seller_details=SellerDetails(
            neighborhood="Old Town", size="95 m2", rooms="3", occupancy_status="owner occupied"
        ),
    )
    data.update(overrides)
    return LeadSubmission(**data)


class TestListingInquiry:

    def test_new_property_inquiry_creates_lead(self, intake, lead_store, property_listing):
        result = intake.submit(property_submission(), RequestContext("203.0.113.7", "pytest"))

        assert result.status == IntakeStatus.CREATED
        assert result.lead.source == LeadSource.PROPERTY_FORM
        assert result.lead.property_id == 42
        assert result.lead.project_id is None
        assert result.lead.agent_id == property_listing.owner_id
        assert result.lead.ip_address == "203.0.113.7"
        assert result.lead.status == "new"
        assert result.listing == property_listing
        assert len(lead_store.leads) == 1

    def test_resubmission_returns_existing_lead(self, intake, lead_store, clock):
        first = intake.submit(property_submission())
        clock.advance(minutes=2)
        second = intake.submit(property_submission())

        assert second.status == IntakeStatus.DUPLICATE
        assert second.lead.id == first.lead.id
        assert len(lead_store.leads) == 1

    def test_resubmission_after_window_creates_new_lead(self, intake, lead_store, clock):
        first = intake.submit(property_submission())
        clock.advance(minutes=6)
        second = intake.submit(property_submission())

        assert second.status == IntakeStatus.CREATED
        assert second.lead.id != first.lead.id
        assert len(lead_store.leads) == 2

    def test_unknown_listing_raises(self, intake, lead_store):
        with pytest.raises(ListingNotFoundError):
            intake.submit(property_submission(listing_id=999))
        assert lead_store.leads == []

    def test_scored_submission_keeps_score_off_the_lead(self, intake):
        result = intake.submit(property_submission(message="We do marketing, is the villa still free?"))

        assert result.status == IntakeStatus.CREATED
        assert result.verdict.score > 0
        assert "spam_score" not in result.lead.model_dump()


class TestSpam:

    def test_spam_is_discarded_without_lead(self, intake, lead_store, property_listing):
        result = intake.submit(
            property_submission(name="Spammer", email="x@gmail.com", message=SPAM_MESSAGE)
        )

        assert result.status == IntakeStatus.DISCARDED
        assert result.lead is None
        assert result.verdict.score >= 45
        assert result.discard_reason == "spam"
        assert lead_store.leads == []

    def test_spam_on_contact_channel_is_discarded(self, intake, lead_store):
        submission = LeadSubmission(name="Spammer", email="x@gmail.com", message=SPAM_MESSAGE)
        assert intake.submit(submission).status == IntakeStatus.DISCARDED
        assert lead_store.leads == []

    def test_rental_request_is_discarded(self, intake, lead_store):
        message = "I am looking to rent an apartment for 800 EUR per month, staying until December"
        result = intake.submit(property_submission(message=message))

        assert result.status == IntakeStatus.DISCARDED
        assert result.discard_reason == "rental_inquiry"
        assert lead_store.leads == []

    def test_rental_request_kept_when_policy_allows(self, lead_store, listings, scorer, clock):
        intake = LeadIntakeService(
            lead_store, listings, DuplicateGuard(lead_store, DuplicateWindows(), clock), scorer,
            SpamPolicy(reject_rental_inquiries=False),
        )
        message = "I am looking to rent an apartment for 800 EUR per month, staying until December"
        assert intake.submit(property_submission(message=message)).status == IntakeStatus.CREATED

    def test_loud_rejection_when_silent_discard_off(self, lead_store, listings, scorer, clock):
        intake = LeadIntakeService(
            lead_store, listings, DuplicateGuard(lead_store, DuplicateWindows(), clock), scorer,
            SpamPolicy(discard_silently=False),
        )
        with pytest.raises(SubmissionRejectedError):
            intake.submit(property_submission(name="Spammer", email="x@gmail.com", message=SPAM_MESSAGE))

    def test_duplicate_is_answered_before_spam_check(self, intake, scorer, lead_store):
        first = intake.submit(property_submission())
        scorer.score = Mock(side_effect=AssertionError("spam check should not run"))

        second = intake.submit(property_submission())

        assert second.lead.id == first.lead.id


class TestSellerAndContact:

    def test_seller_submission_creates_seller_lead(self, intake, lead_store):
        result = intake.submit(seller_submission())

        assert result.status == IntakeStatus.CREATED
        lead = result.lead
        assert lead.source == LeadSource.SELLER_FORM
        assert lead.property_id is None and lead.project_id is None
        assert lead.seller_neighborhood == "Old Town"
        assert lead.seller_size == "95 m2"
        assert lead.seller_rooms == "3"
        assert lead.seller_occupancy_status == "owner occupied"
        assert result.listing is None

    def test_seller_duplicate_window_is_fifteen_minutes(self, intake, lead_store, clock):
        first = intake.submit(seller_submission())
        clock.advance(minutes=10)
        assert intake.submit(seller_submission()).lead.id == first.lead.id

        clock.advance(minutes=6)
        assert intake.submit(seller_submission()).status == IntakeStatus.CREATED
        assert len(lead_store.leads) == 2

    def test_general_contact_has_no_seller_fields(self, intake):
        submission = LeadSubmission(
            name="Ana Ruiz", email="ana@example.es", message="Do you have offices in Valencia?"
        )
        result = intake.submit(submission)

        assert result.lead.source == LeadSource.CONTACT_FORM
        assert result.lead.seller_neighborhood is None


class TestSourceMapping:

    @pytest.mark.parametrize("kind,listing_id,is_seller,expected", [
        (ListingKind.PROPERTY, 1, False, LeadSource.PROPERTY_FORM),
        (ListingKind.PROJECT, 1, False, LeadSource.PROJECT_FORM),
        (ListingKind.NONE, None, True, LeadSource.SELLER_FORM),
        (ListingKind.NONE, None, False, LeadSource.CONTACT_FORM),
    ])
    def test_source_for(self, kind, listing_id, is_seller, expected):
        submission = LeadSubmission(
            name="Jane Doe", email="jane@example.com",
            listing_kind=kind, listing_id=listing_id, is_seller=is_seller,
        )
        assert source_for(submission) == expected
