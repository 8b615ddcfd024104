"""Back-office lead endpoints. Requires a staff session (see AuthMiddleware)."""

from datetime import datetime

from fastapi import APIRouter, Path, Query

from api.base import success_response
from auth.exceptions import PermissionDeniedError
from auth.types import StaffUser
from core.exceptions import LeadNotFoundError
from core.models import Lead, LeadFilters, LeadKind, LeadUpdate, ListingKind
from utils.staff_context import require_current_staff


def _ensure_can_manage(staff: StaffUser, lead: Lead) -> None:
    """Admins act on their own leads only; SuperAdmins on any."""
    if staff.is_superadmin:
        return
    if lead.agent_id != staff.id:
        raise PermissionDeniedError("Forbidden")


def create_admin_router(services: dict) -> APIRouter:
    router = APIRouter()

    lead_svc = services["lead"]
    spam_log_svc = services.get("spam_log")

    def load(lead_id: int) -> Lead:
        lead = lead_svc.get_by_id(lead_id)
        if lead is None:
            raise LeadNotFoundError(f"Lead {lead_id} not found")
        return lead

    @router.get("/admin/leads")
    def list_leads(
        q: str | None = Query(None, max_length=200),
        status: str | None = Query(None),
        date_from: datetime | None = Query(None),
        date_to: datetime | None = Query(None),
        agent_id: int | None = Query(None),
        property_id: int | None = Query(None),
        project_id: int | None = Query(None),
        lead_type: ListingKind | None = Query(None),
        lead_kind: LeadKind | None = Query(None),
        page: int = Query(1, ge=1),
        page_size: int = Query(20, ge=1, le=200),
    ):
        staff = require_current_staff()
        filters = LeadFilters(
            q=q,
            status=status,
            date_from=date_from,
            date_to=date_to,
            agent_id=agent_id,
            property_id=property_id,
            project_id=project_id,
            lead_type=lead_type,
            lead_kind=lead_kind,
            page=page,
            page_size=page_size,
        )
        owner_id = None if staff.is_superadmin else staff.id
        rows, total = lead_svc.list_leads(filters, owner_id=owner_id)

        return success_response({
            "leads": [row.model_dump(mode="json") for row in rows],
            "total": total,
            "page": page,
            "page_size": page_size,
        }).model_dump(mode="json")

    @router.get("/admin/leads/{lead_id}")
    def get_lead(lead_id: int = Path(ge=1)):
        staff = require_current_staff()
        lead = load(lead_id)
        _ensure_can_manage(staff, lead)
        return success_response(lead.model_dump(mode="json")).model_dump(mode="json")

    @router.post("/admin/leads/{lead_id}")
    def update_lead(body: LeadUpdate, lead_id: int = Path(ge=1)):
        staff = require_current_staff()
        lead = load(lead_id)
        _ensure_can_manage(staff, lead)

        if not staff.is_superadmin:
            # Reassignment is a SuperAdmin decision; Admin edits keep the owner
            body = body.model_copy(update={"agent_id": None, "unassign": False})

        updated = lead_svc.update(lead_id, body)
        return success_response(updated.model_dump(mode="json")).model_dump(mode="json")

    @router.delete("/admin/leads/{lead_id}")
    def delete_lead(lead_id: int = Path(ge=1)):
        staff = require_current_staff()
        lead = load(lead_id)
        _ensure_can_manage(staff, lead)

        lead_svc.delete(lead_id)
        return success_response({"deleted": True, "id": lead_id}).model_dump(mode="json")

    @router.get("/admin/spam-logs")
    def list_spam_logs(limit: int = Query(50, ge=1, le=500)):
        staff = require_current_staff()
        if not staff.is_superadmin:
            raise PermissionDeniedError("SuperAdmin only")
        if spam_log_svc is None:
            raise ValueError("Spam log not available")
        return success_response(spam_log_svc.recent(limit)).model_dump(mode="json")

    return router
