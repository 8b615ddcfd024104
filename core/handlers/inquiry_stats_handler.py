"""Handler for LeadCreated events: count property inquiries."""

import logging
from typing import Callable

from core.events import LeadCreated

logger = logging.getLogger(__name__)


def handle_inquiry_stats(listing_service) -> Callable:
    """Factory for a handler that bumps property_stats.email_clicks."""

    def handler(event: LeadCreated):
        property_id = event.lead.property_id
        if property_id is None:
            return
        listing_service.record_inquiry(property_id)
        logger.debug(f"Recorded inquiry for property {property_id}")

    return handler
