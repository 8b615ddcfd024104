"""
Domain events for the lead pipeline.

Immutable event objects describing what happened to a lead. Routes publish
them after the HTTP response is sent; handlers (notifications, stats, spam
log) react without the request path knowing who is listening.

Event Categories:
- LeadEvent: Lead lifecycle (created)
- SpamEvent: Submissions discarded by the spam filter

Events carry the full domain object so handlers don't need to re-fetch state.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import uuid4

from utils.timezone import now_utc


@dataclass(frozen=True, kw_only=True)
class DomainEvent:
    """Base class for all lead-pipeline events."""
    event_id: str = field(default_factory=lambda: str(uuid4()))
    occurred_at: datetime = field(default_factory=now_utc)


# =============================================================================
# LEAD EVENTS
# =============================================================================


@dataclass(frozen=True)
class LeadEvent(DomainEvent):
    """Events related to lead lifecycle."""
    pass


@dataclass(frozen=True)
class LeadCreated(LeadEvent):
    """A public submission produced a new lead."""
    lead: Any = None  # Lead
    listing: Any = None  # Listing | None

    @classmethod
    def create(cls, lead: Any, listing: Any = None) -> "LeadCreated":
        return cls(lead=lead, listing=listing)


# =============================================================================
# SPAM EVENTS
# =============================================================================


@dataclass(frozen=True)
class SpamDiscarded(DomainEvent):
    """A submission was flagged and silently dropped."""
    submission: Any = None  # LeadSubmission
    verdict: Any = None  # SpamVerdict
    reason: str = "spam"
    ip_address: str | None = None

    @classmethod
    def create(
        cls, submission: Any, verdict: Any, reason: str, ip_address: str | None = None
    ) -> "SpamDiscarded":
        return cls(submission=submission, verdict=verdict, reason=reason, ip_address=ip_address)
