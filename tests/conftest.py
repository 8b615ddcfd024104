"""Shared test fixtures for the lead service test suite.

Everything here runs without Postgres, Valkey or Vault: infrastructure is
replaced by small in-memory fakes that honour the same method contracts.
"""

import itertools
import json
from datetime import datetime, timedelta
from pathlib import Path

import pytest
from dotenv import load_dotenv

# Load .env file BEFORE any other imports that might use env vars
load_dotenv(Path(__file__).parent.parent / ".env", override=False)

# Reset vault client singleton so no test inherits a cached secret
import clients.vault_client as vault_module
vault_module._vault_client_instance = None
vault_module._secret_cache.clear()

from auth.types import StaffRole, StaffUser
from core.config import DEFAULT_RULES_PATH
from core.models import Lead, LeadCreate, LeadSource, Listing, ListingKind
from core.spam import SpamRules, SpamScorer
from utils.staff_context import clear_current_staff, staff_context
from utils.timezone import now_utc


# =============================================================================
# STAFF CONSTANTS
# =============================================================================

AGENT_ID = 7
OTHER_AGENT_ID = 8
SUPERADMIN_ID = 1


# =============================================================================
# IN-MEMORY FAKES
# =============================================================================


class FakeValkey:
    """Dict-backed stand-in for ValkeyClient. TTLs are recorded but never elapse."""

    def __init__(self):
        self.store: dict[str, str] = {}
        self.expiry: dict[str, int] = {}

    def get(self, key):
        return self.store.get(key)

    def set(self, key, value, expire_seconds=None):
        self.store[key] = value
        if expire_seconds:
            self.expiry[key] = expire_seconds

    def delete(self, key):
        self.expiry.pop(key, None)
        return self.store.pop(key, None) is not None

    def incr(self, key):
        value = int(self.store.get(key, 0)) + 1
        self.store[key] = str(value)
        return value

    def expire(self, key, seconds):
        if key not in self.store:
            return False
        self.expiry[key] = seconds
        return True

    def ttl(self, key):
        if key not in self.store:
            return -2
        return self.expiry.get(key, -1)

    def get_json(self, key):
        raw = self.store.get(key)
        return json.loads(raw) if raw is not None else None

    def set_json(self, key, value, expire_seconds=None):
        self.set(key, json.dumps(value), expire_seconds)


class InMemoryLeadStore:
    """Lead store honouring create / find_recent / get_by_id."""

    def __init__(self, clock=now_utc):
        self.leads: list[Lead] = []
        self.clock = clock
        self._ids = itertools.count(1)

    def create(self, data: LeadCreate) -> Lead:
        now = self.clock()
        lead = Lead(id=next(self._ids), status="new", created_at=now, updated_at=now, **data.model_dump())
        self.leads.append(lead)
        return lead

    def find_recent(self, email, since, property_id=None, project_id=None, source=None):
        matches = [
            lead for lead in self.leads
            if lead.email.lower() == email.lower()
            and lead.created_at >= since
            and (property_id is None or lead.property_id == property_id)
            and (project_id is None or lead.project_id == project_id)
            and (source is None or lead.source.value == source)
        ]
        return max(matches, key=lambda lead: lead.created_at) if matches else None

    def get_by_id(self, lead_id):
        return next((lead for lead in self.leads if lead.id == lead_id), None)


class FrozenClock:
    """Callable clock that tests move forward explicitly."""

    def __init__(self, start: datetime | None = None):
        self.now = start or now_utc()

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


# =============================================================================
# CONTEXT FIXTURES
# =============================================================================


@pytest.fixture(autouse=True)
def reset_staff_context():
    """Ensure clean staff context before and after each test."""
    clear_current_staff()
    yield
    clear_current_staff()


@pytest.fixture
def agent() -> StaffUser:
    return StaffUser(id=AGENT_ID, name="Maria Lopez", email="maria@sweet-home.example", role=StaffRole.ADMIN)


@pytest.fixture
def other_agent() -> StaffUser:
    return StaffUser(id=OTHER_AGENT_ID, name="Tom Becker", email="tom@sweet-home.example", role=StaffRole.ADMIN)


@pytest.fixture
def superadmin() -> StaffUser:
    return StaffUser(id=SUPERADMIN_ID, name="Israel", email="boss@sweet-home.example", role=StaffRole.SUPERADMIN)


@pytest.fixture
def as_agent(agent):
    with staff_context(agent):
        yield agent


# =============================================================================
# DOMAIN FIXTURES
# =============================================================================


@pytest.fixture(scope="session")
def spam_rules() -> SpamRules:
    return SpamRules.load(DEFAULT_RULES_PATH)


@pytest.fixture
def scorer(spam_rules) -> SpamScorer:
    return SpamScorer(spam_rules)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def lead_store(clock) -> InMemoryLeadStore:
    return InMemoryLeadStore(clock)


@pytest.fixture
def fake_valkey() -> FakeValkey:
    return FakeValkey()


@pytest.fixture
def property_listing() -> Listing:
    return Listing(
        kind=ListingKind.PROPERTY,
        id=42,
        title="Sea View Apartment in Altea",
        slug="sea-view-apartment-altea",
        url="https://sweet-home.example/properties/sea-view-apartment-altea",
        owner_id=AGENT_ID,
        owner_name="Maria Lopez",
        owner_email="maria@sweet-home.example",
    )


@pytest.fixture
def make_lead():
    """Factory for stored Lead objects."""
    ids = itertools.count(1001)

    def _make(**overrides) -> Lead:
        now = now_utc()
        fields = dict(
            id=next(ids),
            name="Jane Doe",
            email="jane@example.com",
            phone=None,
            message="I'm interested in this property, please call me.",
            source=LeadSource.PROPERTY_FORM,
            property_id=42,
            agent_id=AGENT_ID,
            status="new",
            created_at=now,
            updated_at=now,
        )
        fields.update(overrides)
        return Lead(**fields)

    return _make
