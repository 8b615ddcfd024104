"""Typed exceptions for auth and abuse-control failures."""


class AuthError(Exception):
    """Base class for authentication/authorization errors."""


class SessionExpiredError(AuthError):
    """Session is unknown or past its expiry; staff must sign in again."""


class PermissionDeniedError(AuthError):
    """Staff member is authenticated but may not act on this lead."""


class RateLimitedError(AuthError):
    """Too many submissions. Client should wait before retrying."""

    def __init__(self, retry_after_seconds: int):
        self.retry_after_seconds = retry_after_seconds
        super().__init__(f"Rate limited. Retry after {retry_after_seconds} seconds.")
