"""Security middleware for FastAPI - staff session validation for the back office."""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from auth.session import StaffSessionStore
from auth.exceptions import SessionExpiredError
from api.base import error_response, ErrorCodes
from utils.staff_context import set_current_staff, clear_current_staff


class AuthMiddleware(BaseHTTPMiddleware):
    """Middleware that validates staff sessions on back-office routes.

    For protected routes:
    1. Extracts session token from 'session_token' cookie
    2. Validates session via StaffSessionStore
    3. Sets staff in request.state and staff context (for audit attribution)
    4. Clears context after request completes

    Everything outside PROTECTED_PREFIXES (public lead forms, health) passes
    through untouched.
    """

    PROTECTED_PREFIXES = [
        "/api/admin/",
    ]

    def __init__(self, app, session_store: StaffSessionStore):
        super().__init__(app)
        self._session_store = session_store

    def _is_protected_path(self, path: str) -> bool:
        """Check if path requires a staff session."""
        for prefix in self.PROTECTED_PREFIXES:
            if path.startswith(prefix) or path == prefix.rstrip("/"):
                return True
        return False

    async def dispatch(self, request: Request, call_next):
        """Process request through middleware."""
        if not self._is_protected_path(request.url.path):
            return await call_next(request)

        session_token = request.cookies.get("session_token")

        if not session_token:
            return JSONResponse(
                status_code=401,
                content=error_response(
                    ErrorCodes.NOT_AUTHENTICATED,
                    "Authentication required",
                ).model_dump(mode="json"),
            )

        try:
            session = self._session_store.validate_session(session_token)
        except SessionExpiredError:
            return JSONResponse(
                status_code=401,
                content=error_response(
                    ErrorCodes.SESSION_EXPIRED,
                    "Session has expired",
                ).model_dump(mode="json"),
            )

        set_current_staff(session.staff)
        request.state.staff = session.staff

        try:
            response = await call_next(request)
            return response
        finally:
            clear_current_staff()
