"""Pydantic models for back-office staff identity."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class StaffRole(str, Enum):
    """Back-office roles. Admins are listing agents; SuperAdmins run the office."""

    ADMIN = "Admin"
    SUPERADMIN = "SuperAdmin"


class StaffUser(BaseModel):
    """An approved staff member acting on leads."""

    id: int = Field(..., ge=1)
    name: str
    email: str | None = None
    role: StaffRole

    @property
    def is_superadmin(self) -> bool:
        return self.role == StaffRole.SUPERADMIN


class StaffSession(BaseModel):
    """A staff session issued by the site's login flow."""

    token: str = Field(..., description="Session token (opaque string)")
    staff: StaffUser
    expires_at: datetime
