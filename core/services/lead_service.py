"""
Lead service: persistence and back-office operations for leads.

Public submissions only ever create leads. Everything else (listing,
updating, appending notes, deleting) is back-office work done by staff.
Authorization (who may touch which lead) is decided by the caller; this
service trusts its inputs. Staff changes go to the activity log; lead
creation by the public form does not.
"""

import logging
from datetime import datetime

from clients.postgres_client import PostgresClient
from core.audit import AuditLogger, AuditAction, compute_changes
from core.exceptions import LeadNotFoundError
from core.models import (
    Lead,
    LeadCreate,
    LeadFilters,
    LeadKind,
    LeadListItem,
    LeadUpdate,
    ListingKind,
)
from utils.staff_context import get_current_staff
from utils.timezone import now_utc, note_stamp

logger = logging.getLogger(__name__)

# Valid columns that can be updated from the back office
_UPDATABLE_COLUMNS = {"status", "internal_notes", "last_contact_at", "agent_id"}

_INSERT_COLUMNS = (
    "name", "email", "phone", "message", "source",
    "property_id", "project_id", "agent_id", "preferred_language",
    "utm_source", "utm_medium", "utm_campaign", "utm_term", "utm_content",
    "referrer", "page_path", "ip_address", "user_agent",
    "seller_neighborhood", "seller_size", "seller_rooms", "seller_occupancy_status",
)

_BUYER_SOURCES = ("property_form", "project_form")


class LeadService:
    """Service for lead operations."""

    def __init__(self, postgres: PostgresClient, audit: AuditLogger):
        self.postgres = postgres
        self.audit = audit

    def create(self, data: LeadCreate) -> Lead:
        """
        Insert a new lead with status 'new'.

        The id comes from the leads sequence; the row is read back with
        RETURNING so defaults filled in by the database are included.

        Args:
            data: Validated lead data

        Returns:
            Created lead
        """
        now = now_utc()
        values = data.model_dump(mode="json")

        columns = _INSERT_COLUMNS + ("status", "created_at", "updated_at")
        params = tuple(values[c] for c in _INSERT_COLUMNS) + ("new", now, now)
        placeholders = ", ".join(["%s"] * len(columns))

        row = self.postgres.execute_returning(
            f"""
            INSERT INTO leads ({', '.join(columns)})
            VALUES ({placeholders})
            RETURNING *
            """,
            params
        )[0]

        lead = Lead.model_validate(row)

        logger.info(f"Lead {lead.id} created from {lead.source.value}")
        return lead

    def find_recent(
        self,
        email: str,
        since: datetime,
        property_id: int | None = None,
        project_id: int | None = None,
        source: str | None = None,
    ) -> Lead | None:
        """
        Most recent lead from this email created at or after `since`.

        Optional filters narrow the match to one property, one project or
        one source.
        """
        where = ["LOWER(email) = LOWER(%s)", "created_at >= %s"]
        params: list = [email, since]
        if property_id is not None:
            where.append("property_id = %s")
            params.append(property_id)
        if project_id is not None:
            where.append("project_id = %s")
            params.append(project_id)
        if source is not None:
            where.append("source = %s")
            params.append(source)

        row = self.postgres.execute_single(
            f"""
            SELECT * FROM leads
            WHERE {' AND '.join(where)}
            ORDER BY created_at DESC
            LIMIT 1
            """,
            tuple(params)
        )
        return Lead.model_validate(row) if row else None

    def get_by_id(self, lead_id: int) -> Lead | None:
        row = self.postgres.execute_single(
            "SELECT * FROM leads WHERE id = %s",
            (lead_id,)
        )
        if row is None:
            return None
        return Lead.model_validate(row)

    def update(self, lead_id: int, data: LeadUpdate) -> Lead:
        """
        Update lead fields.

        Args:
            lead_id: Lead id
            data: Fields to update. `append_note` is added to internal_notes
                with author and timestamp; `unassign` clears agent_id.

        Returns:
            Updated lead

        Raises:
            LeadNotFoundError: If lead not found
        """
        current = self.get_by_id(lead_id)
        if current is None:
            raise LeadNotFoundError(f"Lead {lead_id} not found")

        updates = data.model_dump(exclude_none=True, exclude={"append_note", "unassign"})
        if data.unassign:
            updates["agent_id"] = None
        if data.append_note and data.append_note.strip():
            base = updates.get("internal_notes", current.internal_notes)
            updates["internal_notes"] = _append_entry(
                base, data.append_note, _author_name(), now_utc()
            )

        for field in updates:
            if field not in _UPDATABLE_COLUMNS:
                logger.warning(f"Attempted to update unknown field '{field}' on lead {lead_id}")

        valid_updates = {k: v for k, v in updates.items() if k in _UPDATABLE_COLUMNS}
        if not valid_updates:
            return current

        return self._apply(current, valid_updates)

    def append_note(self, lead_id: int, note: str, author: str | None = None) -> Lead:
        """
        Append a note entry "<note> (by <author> on <YYYY-MM-DD HH:MM:SS>)".

        Raises:
            LeadNotFoundError: If lead not found
            ValueError: If note is blank
        """
        if not note or not note.strip():
            raise ValueError("Note cannot be empty")

        current = self.get_by_id(lead_id)
        if current is None:
            raise LeadNotFoundError(f"Lead {lead_id} not found")

        combined = _append_entry(
            current.internal_notes, note, author or _author_name(), now_utc()
        )
        return self._apply(current, {"internal_notes": combined})

    def delete(self, lead_id: int) -> bool:
        """
        Hard delete a lead.

        Returns:
            True if deleted, False if not found
        """
        current = self.get_by_id(lead_id)
        if current is None:
            return False

        self.postgres.execute_returning(
            "DELETE FROM leads WHERE id = %s RETURNING id",
            (lead_id,)
        )

        self.audit.log_change(
            entity_type="lead",
            entity_id=lead_id,
            action=AuditAction.DELETE,
            entity_title=current.name,
        )

        logger.info(f"Lead {lead_id} deleted")
        return True

    def list_leads(
        self,
        filters: LeadFilters,
        owner_id: int | None = None,
    ) -> tuple[list[LeadListItem], int]:
        """
        Filtered, paginated lead list for the back office.

        Args:
            filters: Search and filter criteria
            owner_id: When set, only leads assigned to this agent (Admin view).
                Overrides filters.agent_id.

        Returns:
            (rows, total) where total counts every match, not just this page.
        """
        where = ["TRUE"]
        params: list = []

        if filters.q:
            where.append(
                "(LOWER(l.name) LIKE LOWER(%s) OR LOWER(l.email) LIKE LOWER(%s)"
                " OR LOWER(l.phone) LIKE LOWER(%s) OR LOWER(l.message) LIKE LOWER(%s))"
            )
            pattern = f"%{filters.q}%"
            params.extend([pattern] * 4)
        if filters.status:
            where.append("l.status = %s")
            params.append(filters.status)
        if filters.date_from:
            where.append("l.created_at >= %s")
            params.append(filters.date_from)
        if filters.date_to:
            where.append("l.created_at <= %s")
            params.append(filters.date_to)

        agent_id = owner_id if owner_id is not None else filters.agent_id
        if agent_id is not None:
            where.append("l.agent_id = %s")
            params.append(agent_id)

        if filters.property_id is not None:
            where.append("l.property_id = %s")
            params.append(filters.property_id)
        if filters.project_id is not None:
            where.append("l.project_id = %s")
            params.append(filters.project_id)

        if filters.lead_type == ListingKind.PROPERTY:
            where.append("l.property_id IS NOT NULL")
        elif filters.lead_type == ListingKind.PROJECT:
            where.append("l.project_id IS NOT NULL")
        elif filters.lead_type == ListingKind.NONE:
            where.append("l.property_id IS NULL AND l.project_id IS NULL")

        if filters.lead_kind == LeadKind.BUYER:
            where.append("l.source IN %s")
            params.append(_BUYER_SOURCES)
        elif filters.lead_kind == LeadKind.SELLER:
            where.append("l.source = 'seller_form'")
        elif filters.lead_kind == LeadKind.UNKNOWN:
            where.append(
                "(l.source IS NULL OR l.source NOT IN ('property_form', 'project_form', 'seller_form'))"
            )

        clause = " AND ".join(where)
        offset = (filters.page - 1) * filters.page_size

        rows = self.postgres.execute(
            f"""
            SELECT l.*,
                   p.title AS property_title, p.slug AS property_slug,
                   pr.title AS project_title, pr.slug AS project_slug,
                   u.name AS agent_name
            FROM leads l
            LEFT JOIN properties p ON p.id = l.property_id
            LEFT JOIN projects pr ON pr.id = l.project_id
            LEFT JOIN users u ON u.id = l.agent_id
            WHERE {clause}
            ORDER BY l.created_at DESC
            LIMIT %s OFFSET %s
            """,
            tuple(params) + (filters.page_size, offset)
        )
        total = self.postgres.execute_scalar(
            f"SELECT COUNT(*) FROM leads l WHERE {clause}",
            tuple(params)
        )

        return [LeadListItem.model_validate(row) for row in rows], int(total or 0)

    def _apply(self, current: Lead, updates: dict) -> Lead:
        set_parts = []
        params = []
        for field, value in updates.items():
            set_parts.append(f"{field} = %s")
            params.append(value)

        set_parts.append("updated_at = %s")
        params.append(now_utc())
        params.append(current.id)

        row = self.postgres.execute_returning(
            f"""
            UPDATE leads
            SET {', '.join(set_parts)}
            WHERE id = %s
            RETURNING *
            """,
            tuple(params)
        )[0]

        updated = Lead.model_validate(row)

        changes = compute_changes(
            current.model_dump(mode="json"),
            updated.model_dump(mode="json")
        )
        if changes:
            self.audit.log_change(
                entity_type="lead",
                entity_id=current.id,
                action=AuditAction.UPDATE,
                entity_title=updated.name,
                changes=changes,
            )

        return updated


def _author_name() -> str:
    staff = get_current_staff()
    return staff.name if staff is not None else "Unknown"


def _append_entry(existing: str | None, note: str, author: str, at: datetime) -> str:
    entry = f"{note.strip()} (by {author} on {note_stamp(at)})"
    return f"{existing}\n\n{entry}" if existing else entry
