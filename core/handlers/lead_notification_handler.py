"""
Handler for LeadCreated events: notification fan-out.

If the event carries no listing but the lead points at one, the listing is
looked up again so the messages can still name it; a failed lookup just
leaves the listing details out.
"""

import logging
from typing import Callable

from core.events import LeadCreated

logger = logging.getLogger(__name__)


def handle_lead_created(notifier, listing_service) -> Callable:
    """
    Factory that returns a LeadCreated handler.

    Args:
        notifier: LeadNotifier instance
        listing_service: ListingService instance

    Returns:
        Handler callable that sends the lead notifications
    """

    def handler(event: LeadCreated):
        lead = event.lead
        listing = event.listing
        if listing is None and lead.listing_id is not None:
            listing = listing_service.try_resolve(lead.listing_kind, lead.listing_id)

        notifier.notify(lead, listing)

    return handler
