"""Staff session lookup.

Sessions are issued by the site's login flow and stored in Valkey as JSON
under `staff_session:{token}` with a TTL. This service only reads them.
"""

import logging

from pydantic import ValidationError

from clients.valkey_client import ValkeyClient
from auth.exceptions import SessionExpiredError
from auth.types import StaffSession, StaffUser
from utils.timezone import now_utc, parse_iso

logger = logging.getLogger(__name__)


class StaffSessionStore:
    """Resolve staff session tokens to staff identities."""

    KEY_PREFIX = "staff_session:"

    def __init__(self, valkey: ValkeyClient):
        self._valkey = valkey

    def _key(self, token: str) -> str:
        """Generate Valkey key for session token."""
        return f"{self.KEY_PREFIX}{token}"

    def validate_session(self, token: str) -> StaffSession:
        """Validate session token and return the session.

        Raises SessionExpiredError if token is unknown, malformed, expired,
        or belongs to an unapproved account.
        """
        data = self._valkey.get_json(self._key(token))

        if data is None:
            raise SessionExpiredError("Session not found or expired")

        if not data.get("approved", False):
            raise SessionExpiredError("Account is not approved")

        try:
            session = StaffSession(
                token=token,
                staff=StaffUser(
                    id=data["user_id"],
                    name=data.get("name") or "Unknown",
                    email=data.get("email"),
                    role=data["role"],
                ),
                expires_at=parse_iso(data["expires_at"]),
            )
        except (KeyError, ValueError, ValidationError) as e:
            logger.warning(f"Malformed staff session payload: {e}")
            raise SessionExpiredError("Session is malformed")

        # Valkey TTL should already have evicted it
        if now_utc() > session.expires_at:
            self._valkey.delete(self._key(token))
            raise SessionExpiredError("Session expired")

        return session
