"""Public lead submission endpoints (no session; rate limited; reCAPTCHA checked)."""

import logging

from fastapi import APIRouter, BackgroundTasks, Request

from api.base import success_response
from core.events import LeadCreated, SpamDiscarded
from core.exceptions import RecaptchaFailedError
from core.intake import IntakeStatus, RequestContext
from core.models import ContactForm, LeadSubmission, ListingInquiryForm, ListingKind

logger = logging.getLogger(__name__)

ACKNOWLEDGEMENT = "Thank you for your message. We will get back to you soon."

_MAX_USER_AGENT = 1000


def client_ip(request: Request, trusted_hops: int = 1) -> str | None:
    """
    Client address as seen by the outermost trusted proxy.

    Each trusted proxy appends the peer it saw to X-Forwarded-For, so the
    client is `trusted_hops` entries from the right. Entries further left are
    whatever the client sent and are never used. trusted_hops=0 means no
    proxy: the socket peer is the client.
    """
    if trusted_hops > 0:
        forwarded = request.headers.get("x-forwarded-for", "")
        hops = [hop.strip() for hop in forwarded.split(",") if hop.strip()]
        if hops:
            return hops[-trusted_hops] if len(hops) >= trusted_hops else hops[0]
    return request.client.host if request.client else None


def create_leads_router(services: dict) -> APIRouter:
    router = APIRouter()

    intake = services["intake"]
    event_bus = services["event_bus"]
    rate_limiter = services.get("rate_limiter")
    recaptcha = services.get("recaptcha")
    trusted_hops = services.get("trusted_proxy_hops", 1)

    def accept(
        submission: LeadSubmission,
        recaptcha_token: str | None,
        request: Request,
        background_tasks: BackgroundTasks,
    ) -> dict:
        ip = client_ip(request, trusted_hops)

        if rate_limiter is not None:
            rate_limiter.check_rate_limit(ip)

        if recaptcha is not None and not recaptcha.passes(recaptcha_token, ip):
            raise RecaptchaFailedError("reCAPTCHA verification failed")

        user_agent = request.headers.get("user-agent")
        context = RequestContext(
            ip_address=ip,
            user_agent=user_agent[:_MAX_USER_AGENT] if user_agent else None,
        )

        result = intake.submit(submission, context)

        if result.status == IntakeStatus.CREATED:
            background_tasks.add_task(
                event_bus.publish, LeadCreated.create(result.lead, result.listing)
            )
        elif result.status == IntakeStatus.DISCARDED:
            background_tasks.add_task(
                event_bus.publish,
                SpamDiscarded.create(submission, result.verdict, result.discard_reason, ip),
            )

        # Identical body for created, duplicate and discarded
        return success_response(
            {"received": True, "message": ACKNOWLEDGEMENT}
        ).model_dump(mode="json")

    @router.post("/leads")
    def submit_property_inquiry(
        form: ListingInquiryForm, request: Request, background_tasks: BackgroundTasks
    ):
        return accept(
            form.to_submission(ListingKind.PROPERTY), form.recaptcha_token, request, background_tasks
        )

    @router.post("/leads/project")
    def submit_project_inquiry(
        form: ListingInquiryForm, request: Request, background_tasks: BackgroundTasks
    ):
        return accept(
            form.to_submission(ListingKind.PROJECT), form.recaptcha_token, request, background_tasks
        )

    @router.post("/leads/contact")
    def submit_contact(form: ContactForm, request: Request, background_tasks: BackgroundTasks):
        return accept(form.to_submission(), form.recaptcha_token, request, background_tasks)

    return router
