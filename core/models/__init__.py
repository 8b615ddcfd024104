"""Core domain models."""

from core.models.lead import (
    Lead, LeadCreate, LeadUpdate, LeadListItem, LeadFilters,
    LeadSource, ListingKind, LeadKind, DEFAULT_STATUS,
)
from core.models.listing import Listing
from core.models.spam import SpamVerdict
from core.models.submission import (
    LeadSubmission, SellerDetails, TrackingData, ListingInquiryForm, ContactForm,
)

__all__ = [
    # Lead
    "Lead", "LeadCreate", "LeadUpdate", "LeadListItem", "LeadFilters",
    "LeadSource", "ListingKind", "LeadKind", "DEFAULT_STATUS",
    # Listing
    "Listing",
    # Spam
    "SpamVerdict",
    # Submission
    "LeadSubmission", "SellerDetails", "TrackingData", "ListingInquiryForm", "ContactForm",
]
