"""
Staff activity trail for lead changes.

Entries go to the site's activity_logs table, next to the property and
project activity the site already records there:
- Append-only (entries never modified or deleted)
- Staff-attributed (user id and name of whoever made the change)
- One row per change; the changed field names go to the service log

Public form submissions are not staff activity and are not recorded here.
"""

import logging
from enum import Enum
from typing import Any

from auth.types import StaffUser
from clients.postgres_client import PostgresClient
from utils.staff_context import get_current_staff

logger = logging.getLogger(__name__)


class AuditAction(Enum):
    """Type of change made to an entity."""

    UPDATE = "updated"
    DELETE = "deleted"


def compute_changes(
    old: dict[str, Any],
    new: dict[str, Any],
    exclude_fields: set[str] | None = None
) -> dict[str, dict[str, Any]]:
    """
    Compute changes between two entity states.

    Args:
        old: Previous state of entity
        new: New state of entity
        exclude_fields: Fields to ignore (defaults to {"updated_at"})

    Returns:
        Dict of {field: {"old": old_val, "new": new_val}} for changed fields.
    """
    exclude = exclude_fields or {"updated_at"}
    return {
        key: {"old": old.get(key), "new": new.get(key)}
        for key in sorted(set(old) | set(new))
        if key not in exclude and old.get(key) != new.get(key)
    }


class AuditLogger:
    """
    Append-only staff activity log.

    Usage:
        audit = AuditLogger(postgres)
        audit.log_change(
            entity_type="lead",
            entity_id=lead.id,
            action=AuditAction.UPDATE,
            entity_title=lead.name,
            changes=compute_changes(old.model_dump(mode="json"), new.model_dump(mode="json")),
        )
    """

    def __init__(self, postgres: PostgresClient):
        self.postgres = postgres

    def log_change(
        self,
        entity_type: str,
        entity_id: int,
        action: AuditAction,
        entity_title: str | None = None,
        changes: dict[str, Any] | None = None,
        actor: StaffUser | None = None
    ) -> None:
        """
        Record a staff change.

        Args:
            entity_type: Type of entity ("lead")
            entity_id: ID of the entity
            action: The action performed (UPDATE, DELETE)
            entity_title: Human label shown in the activity list (lead name)
            changes: compute_changes() output, logged by field name
            actor: Staff user who made the change (defaults to the
                current staff context)
        """
        staff = actor or get_current_staff()
        action_type = f"{entity_type}_{action.value}"

        if changes:
            logger.info(
                f"{action_type} {entity_id} by staff {staff.id if staff else 'unknown'}: "
                f"{', '.join(changes)}"
            )

        self.postgres.execute(
            """
            INSERT INTO activity_logs (action_type, entity_type, entity_id, entity_title, user_id, user_name)
            VALUES (%s, %s, %s, %s, %s, %s)
            """,
            (
                action_type,
                entity_type,
                entity_id,
                entity_title,
                staff.id if staff is not None else None,
                staff.name if staff is not None else None,
            )
        )
