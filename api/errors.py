"""Global exception handlers for FastAPI."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse

from api.base import error_response, ErrorCodes, FieldError
from auth.exceptions import PermissionDeniedError, RateLimitedError
from core.exceptions import (
    LeadNotFoundError,
    ListingNotFoundError,
    RecaptchaFailedError,
    SubmissionRejectedError,
)

logger = logging.getLogger(__name__)


def _error(status_code: int, code: str, message: str, fields=None, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_response(code, message, fields).model_dump(mode="json"),
        headers=headers,
    )


def _field_errors(exc: RequestValidationError) -> list[FieldError]:
    fields = []
    for err in exc.errors():
        # Drop the leading "body"/"query" segment
        loc = [str(part) for part in err.get("loc", ())]
        if loc and loc[0] in ("body", "query", "path"):
            loc = loc[1:]
        fields.append(FieldError(field=".".join(loc) or "request", message=err.get("msg", "Invalid value")))
    return fields


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the app."""

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        message = str(exc)
        if "not found" in message.lower():
            return _error(404, ErrorCodes.NOT_FOUND, message)
        return _error(400, ErrorCodes.INVALID_REQUEST, message)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return _error(
            422,
            ErrorCodes.VALIDATION_ERROR,
            "Invalid input",
            fields=_field_errors(exc),
        )

    @app.exception_handler(LeadNotFoundError)
    async def lead_not_found_handler(request: Request, exc: LeadNotFoundError):
        return _error(404, ErrorCodes.LEAD_NOT_FOUND, str(exc))

    @app.exception_handler(ListingNotFoundError)
    async def listing_not_found_handler(request: Request, exc: ListingNotFoundError):
        return _error(404, ErrorCodes.LISTING_NOT_FOUND, str(exc))

    @app.exception_handler(PermissionDeniedError)
    async def permission_denied_handler(request: Request, exc: PermissionDeniedError):
        return _error(403, ErrorCodes.PERMISSION_DENIED, str(exc) or "Forbidden")

    @app.exception_handler(RateLimitedError)
    async def rate_limited_handler(request: Request, exc: RateLimitedError):
        return _error(
            429,
            ErrorCodes.RATE_LIMITED,
            "Too many submissions. Please try again later.",
            headers={"Retry-After": str(exc.retry_after_seconds)},
        )

    @app.exception_handler(RecaptchaFailedError)
    async def recaptcha_failed_handler(request: Request, exc: RecaptchaFailedError):
        return _error(400, ErrorCodes.RECAPTCHA_FAILED, "reCAPTCHA verification failed")

    @app.exception_handler(SubmissionRejectedError)
    async def submission_rejected_handler(request: Request, exc: SubmissionRejectedError):
        return _error(400, ErrorCodes.SUBMISSION_REJECTED, "Submission rejected")

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception")
        return _error(500, ErrorCodes.INTERNAL_ERROR, "An internal error occurred")
