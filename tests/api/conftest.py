"""API test fixtures: the real app around in-memory services.

Public routes run the real intake pipeline over InMemoryLeadStore; the
back-office LeadService is a Mock so tests can shape what Postgres returns.
Staff sessions live in FakeValkey exactly as the login flow writes them.
"""

from datetime import timedelta
from unittest.mock import Mock

import pytest
from starlette.testclient import TestClient

from api.app import create_app
from auth.rate_limiter import SubmissionRateLimiter
from auth.session import StaffSessionStore
from clients.recaptcha_client import RecaptchaVerifier
from core.config import DuplicateWindows, RateLimitConfig, SpamPolicy
from core.duplicate_guard import DuplicateGuard
from core.event_bus import EventBus
from core.intake import LeadIntakeService
from core.models import ListingKind
from core.services.lead_service import LeadService
from core.services.listing_service import ListingService
from core.services.spam_log_service import SpamLogService
from utils.timezone import now_utc


# =============================================================================
# SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def listing_service(property_listing):
    listings = Mock(spec=ListingService)
    listings.resolve.side_effect = lambda kind, listing_id: (
        property_listing if (kind, listing_id) == (ListingKind.PROPERTY, 42) else None
    )
    return listings


@pytest.fixture
def intake(lead_store, listing_service, scorer, clock):
    return LeadIntakeService(
        leads=lead_store,
        listings=listing_service,
        guard=DuplicateGuard(lead_store, DuplicateWindows(), clock),
        scorer=scorer,
        policy=SpamPolicy(),
    )


@pytest.fixture
def published():
    """Events the routes handed to the bus, in order."""
    return []


@pytest.fixture
def event_bus(published):
    bus = EventBus()
    bus.subscribe("LeadCreated", published.append)
    bus.subscribe("SpamDiscarded", published.append)
    return bus


@pytest.fixture
def rate_limiter(fake_valkey):
    return SubmissionRateLimiter(fake_valkey, RateLimitConfig(max_submissions=3, window_minutes=10))


@pytest.fixture
def recaptcha():
    verifier = Mock(spec=RecaptchaVerifier)
    verifier.passes.return_value = True
    return verifier


@pytest.fixture
def lead_service():
    return Mock(spec=LeadService)


@pytest.fixture
def spam_log_service():
    return Mock(spec=SpamLogService)


# =============================================================================
# SERVICES DICT
# =============================================================================


@pytest.fixture
def services(intake, event_bus, rate_limiter, recaptcha, lead_service, listing_service, spam_log_service):
    return {
        "intake": intake,
        "lead": lead_service,
        "listing": listing_service,
        "spam_log": spam_log_service,
        "event_bus": event_bus,
        "rate_limiter": rate_limiter,
        "recaptcha": recaptcha,
    }


# =============================================================================
# AUTH FIXTURES
# =============================================================================


def store_session(valkey, token: str, staff, approved: bool = True, expires_in=timedelta(hours=8)):
    """Write a staff session the way the site's login flow does."""
    valkey.set_json(
        f"{StaffSessionStore.KEY_PREFIX}{token}",
        {
            "user_id": staff.id,
            "name": staff.name,
            "email": staff.email,
            "role": staff.role.value,
            "approved": approved,
            "expires_at": (now_utc() + expires_in).isoformat(),
        },
    )


@pytest.fixture
def session_store(fake_valkey, agent, superadmin):
    store_session(fake_valkey, "agent-token", agent)
    store_session(fake_valkey, "superadmin-token", superadmin)
    return StaffSessionStore(fake_valkey)


# =============================================================================
# APP & CLIENT FIXTURES
# =============================================================================


@pytest.fixture
def app(services, session_store):
    return create_app(services, session_store)


@pytest.fixture
def client(app):
    """Anonymous client, as a website visitor."""
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def agent_client(app):
    """Signed-in Admin (listing agent, id 7)."""
    c = TestClient(app, raise_server_exceptions=False)
    c.cookies.set("session_token", "agent-token")
    return c


@pytest.fixture
def superadmin_client(app):
    c = TestClient(app, raise_server_exceptions=False)
    c.cookies.set("session_token", "superadmin-token")
    return c
