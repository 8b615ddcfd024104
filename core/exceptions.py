"""Typed exceptions for the lead domain."""


class LeadError(Exception):
    """Base class for lead-domain errors."""


class LeadNotFoundError(LeadError):
    """No lead with the requested id."""


class ListingNotFoundError(LeadError):
    """A submission referenced a property or project that does not exist."""


class RecaptchaFailedError(LeadError):
    """The submission's reCAPTCHA token did not verify."""


class SubmissionRejectedError(LeadError):
    """Spam or rental submission refused openly (silent discard turned off)."""

    def __init__(self, message: str, reason: str):
        super().__init__(message)
        self.reason = reason
