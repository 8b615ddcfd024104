"""Tests for LeadService.

PostgresClient is a Mock(spec=...) returning row dicts, so these tests pin
the SQL contract (parameters, filters, audit entries) rather than Postgres
behavior.
"""

from unittest.mock import Mock

import pytest

from clients.postgres_client import PostgresClient
from core.audit import AuditAction, AuditLogger
from core.exceptions import LeadNotFoundError
from core.models import LeadCreate, LeadFilters, LeadKind, LeadSource, LeadUpdate, ListingKind
from core.services.lead_service import LeadService
from utils.timezone import now_utc


@pytest.fixture
def postgres():
    return Mock(spec=PostgresClient)


@pytest.fixture
def audit():
    return Mock(spec=AuditLogger)


@pytest.fixture
def lead_service(postgres, audit):
    return LeadService(postgres, audit)


def lead_row(**overrides) -> dict:
    now = now_utc()
    row = {
        "id": 101,
        "name": "Jane Doe",
        "email": "jane@example.com",
        "phone": None,
        "message": "I'm interested in this property, please call me.",
        "source": "property_form",
        "property_id": 42,
        "project_id": None,
        "agent_id": 7,
        "status": "new",
        "internal_notes": None,
        "created_at": now,
        "updated_at": now,
    }
    row.update(overrides)
    return row


# =============================================================================
# CREATE
# =============================================================================


class TestCreate:

    def test_inserts_with_status_new_and_database_id(self, lead_service, postgres, audit):
        postgres.execute_returning.return_value = [lead_row(id=501)]

        lead = lead_service.create(LeadCreate(
            name="Jane Doe", email="jane@example.com", source=LeadSource.PROPERTY_FORM,
            property_id=42, agent_id=7,
        ))

        assert lead.id == 501
        assert lead.status == "new"
        assert lead.source == LeadSource.PROPERTY_FORM
        query, params = postgres.execute_returning.call_args.args
        assert "INSERT INTO leads" in query
        assert "RETURNING *" in query
        assert "new" in params
        assert "property_form" in params

    def test_insert_uses_only_site_columns(self, lead_service, postgres):
        postgres.execute_returning.return_value = [lead_row()]

        lead_service.create(LeadCreate(
            name="Jane Doe", email="jane@example.com", source=LeadSource.CONTACT_FORM,
        ))

        query = postgres.execute_returning.call_args.args[0]
        columns = query.split("INSERT INTO leads (")[1].split(")")[0]
        assert not columns.startswith("id")
        assert "spam_score" not in columns

    def test_public_creation_is_not_staff_activity(self, lead_service, postgres, audit):
        postgres.execute_returning.return_value = [lead_row()]

        lead_service.create(LeadCreate(
            name="Jane Doe", email="jane@example.com", source=LeadSource.CONTACT_FORM,
        ))

        audit.log_change.assert_not_called()


# =============================================================================
# LOOKUPS
# =============================================================================


class TestFindRecent:

    def test_matches_email_case_insensitively(self, lead_service, postgres):
        postgres.execute_single.return_value = None
        since = now_utc()

        assert lead_service.find_recent("Jane@Example.com", since, property_id=42) is None

        query, params = postgres.execute_single.call_args.args
        assert "LOWER(email) = LOWER(%s)" in query
        assert "property_id = %s" in query
        assert "ORDER BY created_at DESC" in query
        assert params == ("Jane@Example.com", since, 42)

    def test_source_filter(self, lead_service, postgres):
        postgres.execute_single.return_value = lead_row(source="seller_form", property_id=None)

        lead = lead_service.find_recent("jane@example.com", now_utc(), source="seller_form")

        assert lead.source == LeadSource.SELLER_FORM
        query, params = postgres.execute_single.call_args.args
        assert "source = %s" in query
        assert params[-1] == "seller_form"


class TestGetById:

    def test_missing_returns_none(self, lead_service, postgres):
        postgres.execute_single.return_value = None
        assert lead_service.get_by_id(999) is None


# =============================================================================
# UPDATE
# =============================================================================


class TestUpdate:

    def test_missing_lead_raises(self, lead_service, postgres):
        postgres.execute_single.return_value = None
        with pytest.raises(LeadNotFoundError):
            lead_service.update(999, LeadUpdate(status="contacted"))

    def test_status_change_is_audited(self, lead_service, postgres, audit):
        row = lead_row()
        postgres.execute_single.return_value = row
        postgres.execute_returning.return_value = [dict(row, status="contacted")]

        updated = lead_service.update(row["id"], LeadUpdate(status="contacted"))

        assert updated.status == "contacted"
        query, params = postgres.execute_returning.call_args.args
        assert "status = %s" in query
        assert params[0] == "contacted"
        kwargs = audit.log_change.call_args.kwargs
        assert kwargs["entity_id"] == 101
        assert kwargs["entity_title"] == "Jane Doe"
        assert kwargs["changes"]["status"] == {"old": "new", "new": "contacted"}

    def test_no_changes_returns_current_without_write(self, lead_service, postgres, audit):
        row = lead_row()
        postgres.execute_single.return_value = row

        lead = lead_service.update(row["id"], LeadUpdate())

        assert lead.id == row["id"]
        postgres.execute_returning.assert_not_called()
        audit.log_change.assert_not_called()

    def test_unassign_clears_agent(self, lead_service, postgres):
        row = lead_row()
        postgres.execute_single.return_value = row
        postgres.execute_returning.return_value = [dict(row, agent_id=None)]

        lead_service.update(row["id"], LeadUpdate(unassign=True))

        query, params = postgres.execute_returning.call_args.args
        assert "agent_id = %s" in query
        assert params[0] is None

    def test_append_note_uses_staff_name(self, lead_service, postgres, as_agent):
        row = lead_row(internal_notes="Called once")
        postgres.execute_single.return_value = row
        postgres.execute_returning.return_value = [row]

        lead_service.update(row["id"], LeadUpdate(append_note="Sent brochure"))

        notes = postgres.execute_returning.call_args.args[1][0]
        assert notes.startswith("Called once\n\nSent brochure (by Maria Lopez on ")


class TestAppendNote:

    def test_blank_note_rejected(self, lead_service):
        with pytest.raises(ValueError, match="empty"):
            lead_service.append_note(999, "   ")

    def test_first_note_without_staff_is_unknown(self, lead_service, postgres):
        row = lead_row()
        postgres.execute_single.return_value = row
        postgres.execute_returning.return_value = [row]

        lead_service.append_note(row["id"], "Left voicemail")

        notes = postgres.execute_returning.call_args.args[1][0]
        assert notes.startswith("Left voicemail (by Unknown on ")

    def test_explicit_author(self, lead_service, postgres):
        row = lead_row()
        postgres.execute_single.return_value = row
        postgres.execute_returning.return_value = [row]

        lead_service.append_note(row["id"], "Visit booked", author="Tom")

        assert "(by Tom on " in postgres.execute_returning.call_args.args[1][0]


# =============================================================================
# DELETE
# =============================================================================


class TestDelete:

    def test_delete_existing(self, lead_service, postgres, audit):
        row = lead_row()
        postgres.execute_single.return_value = row
        postgres.execute_returning.return_value = [{"id": row["id"]}]

        assert lead_service.delete(row["id"]) is True
        assert "DELETE FROM leads" in postgres.execute_returning.call_args.args[0]
        kwargs = audit.log_change.call_args.kwargs
        assert kwargs["action"] == AuditAction.DELETE
        assert kwargs["entity_id"] == 101
        assert kwargs["entity_title"] == "Jane Doe"

    def test_delete_missing_returns_false(self, lead_service, postgres, audit):
        postgres.execute_single.return_value = None

        assert lead_service.delete(999) is False
        postgres.execute_returning.assert_not_called()
        audit.log_change.assert_not_called()


# =============================================================================
# LIST
# =============================================================================


class TestListLeads:

    def test_owner_scope_overrides_agent_filter(self, lead_service, postgres):
        postgres.execute.return_value = [dict(lead_row(), property_title="Sea View", agent_name="Maria")]
        postgres.execute_scalar.return_value = 1

        rows, total = lead_service.list_leads(LeadFilters(agent_id=99), owner_id=7)

        assert total == 1
        assert rows[0].property_title == "Sea View"
        query, params = postgres.execute.call_args.args
        assert "l.agent_id = %s" in query
        assert 7 in params and 99 not in params

    def test_pagination_parameters(self, lead_service, postgres):
        postgres.execute.return_value = []
        postgres.execute_scalar.return_value = 0

        rows, total = lead_service.list_leads(LeadFilters(page=3, page_size=10))

        assert (rows, total) == ([], 0)
        params = postgres.execute.call_args.args[1]
        assert params[-2:] == (10, 20)

    def test_search_and_kind_filters(self, lead_service, postgres):
        postgres.execute.return_value = []
        postgres.execute_scalar.return_value = 0

        lead_service.list_leads(LeadFilters(q="jane", lead_type=ListingKind.NONE, lead_kind=LeadKind.SELLER))

        query, params = postgres.execute.call_args.args
        assert params[:4] == ("%jane%",) * 4
        assert "l.property_id IS NULL AND l.project_id IS NULL" in query
        assert "l.source = 'seller_form'" in query
