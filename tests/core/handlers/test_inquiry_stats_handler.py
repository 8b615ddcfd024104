"""Tests for the property inquiry counter handler."""

from unittest.mock import Mock

from core.events import LeadCreated
from core.handlers.inquiry_stats_handler import handle_inquiry_stats
from core.models import LeadSource
from core.services.listing_service import ListingService


def test_property_lead_bumps_counter(make_lead):
    listing_service = Mock(spec=ListingService)

    handle_inquiry_stats(listing_service)(LeadCreated.create(make_lead()))

    listing_service.record_inquiry.assert_called_once_with(42)


def test_project_and_contact_leads_are_ignored(make_lead):
    listing_service = Mock(spec=ListingService)
    handler = handle_inquiry_stats(listing_service)

    handler(LeadCreated.create(make_lead(property_id=None, project_id=9, source=LeadSource.PROJECT_FORM)))
    handler(LeadCreated.create(make_lead(property_id=None, source=LeadSource.CONTACT_FORM)))

    listing_service.record_inquiry.assert_not_called()
