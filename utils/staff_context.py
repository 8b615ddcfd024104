"""Propagate the acting staff member through the call stack using contextvars."""

from contextlib import contextmanager
from contextvars import ContextVar

from auth.types import StaffUser

_current_staff: ContextVar[StaffUser | None] = ContextVar("current_staff", default=None)


def get_current_staff() -> StaffUser | None:
    """
    Get the staff member acting in this context.

    Returns None for public (anonymous) requests such as lead submissions.
    """
    return _current_staff.get()


def require_current_staff() -> StaffUser:
    """
    Get current staff member or fail.

    Raises RuntimeError if no staff context is set. Back-office code paths
    always run behind the auth middleware, so a missing context is a bug.
    """
    staff = _current_staff.get()
    if staff is None:
        raise RuntimeError(
            "No staff context set. This usually means back-office code "
            "was called outside of an authenticated request."
        )
    return staff


def set_current_staff(staff: StaffUser) -> None:
    """Set current staff member. Called by auth middleware after session lookup."""
    _current_staff.set(staff)


def clear_current_staff() -> None:
    """
    Clear staff context.

    Must be called in finally block to prevent context leakage.
    """
    _current_staff.set(None)


@contextmanager
def staff_context(staff: StaffUser):
    """
    Context manager for temporarily acting as a staff member.

    Useful for tests and maintenance scripts.
    """
    previous = _current_staff.get()
    set_current_staff(staff)
    try:
        yield staff
    finally:
        _current_staff.set(previous)
