"""Back-office authentication and public abuse control."""

from auth.exceptions import (
    AuthError,
    SessionExpiredError,
    PermissionDeniedError,
    RateLimitedError,
)
from auth.types import StaffRole, StaffUser, StaffSession
from auth.session import StaffSessionStore
