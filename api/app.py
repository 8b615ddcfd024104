"""
Application assembly: services, event handlers and the FastAPI app.

create_app() takes ready-made services so tests can pass fakes;
build_services() constructs the production graph from Vault secrets and
AppConfig.

Run with:
    uvicorn api.app:app_from_env --factory
"""

import logging

from fastapi import FastAPI

from api.admin import create_admin_router
from api.base import success_response
from api.errors import register_error_handlers
from api.leads import create_leads_router
from api.middleware import RequestIDMiddleware
from auth.rate_limiter import SubmissionRateLimiter
from auth.security_middleware import AuthMiddleware
from auth.session import StaffSessionStore
from clients.email_client import EmailGatewayClient
from clients.postgres_client import PostgresClient
from clients.recaptcha_client import RecaptchaVerifier
from clients.valkey_client import ValkeyClient
from clients.vault_client import (
    get_database_url,
    get_email_config,
    get_recaptcha_secret,
    get_valkey_url,
    get_webhook_url,
)
from clients.webhook_client import WebhookClient
from core.audit import AuditLogger
from core.config import AppConfig
from core.duplicate_guard import DuplicateGuard
from core.event_bus import EventBus
from core.handlers.inquiry_stats_handler import handle_inquiry_stats
from core.handlers.lead_notification_handler import handle_lead_created
from core.handlers.spam_log_handler import handle_spam_discarded
from core.intake import LeadIntakeService
from core.notifications import LeadNotifier
from core.services.lead_service import LeadService
from core.services.listing_service import ListingService
from core.services.spam_log_service import SpamLogService
from core.spam import SpamRules, SpamScorer

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Root logging setup for the service process."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


def wire_event_handlers(
    bus: EventBus,
    notifier: LeadNotifier,
    listing_service: ListingService,
    spam_log_service: SpamLogService | None,
) -> EventBus:
    """Subscribe the post-response handlers. spam_log_service=None disables the spam log."""
    bus.subscribe("LeadCreated", handle_lead_created(notifier, listing_service))
    bus.subscribe("LeadCreated", handle_inquiry_stats(listing_service))
    if spam_log_service is not None:
        bus.subscribe("SpamDiscarded", handle_spam_discarded(spam_log_service))
    return bus


def build_services(config: AppConfig) -> tuple[dict, StaffSessionStore]:
    """
    Construct the production service graph.

    Secrets come from Vault; Vault's webhook URL and reCAPTCHA secret win
    over the environment when both are set.

    Returns:
        (services dict for the routers, staff session store)
    """
    webhook_url = get_webhook_url() or config.notifications.webhook_url
    recaptcha_secret = get_recaptcha_secret() or config.recaptcha.secret
    config = config.model_copy(update={
        "notifications": config.notifications.model_copy(update={"webhook_url": webhook_url}),
        "recaptcha": config.recaptcha.model_copy(update={"secret": recaptcha_secret}),
    })

    postgres = PostgresClient(get_database_url())
    valkey = ValkeyClient(get_valkey_url())
    email_config = get_email_config()

    audit = AuditLogger(postgres)
    lead_service = LeadService(postgres, audit)
    listing_service = ListingService(postgres, config.notifications.app_url)
    spam_log_service = SpamLogService(postgres)

    scorer = SpamScorer(SpamRules.load(config.spam.rules_path))
    logger.info(f"Loaded spam rules version {scorer.rules.version}")

    intake = LeadIntakeService(
        leads=lead_service,
        listings=listing_service,
        guard=DuplicateGuard(lead_service, config.duplicates),
        scorer=scorer,
        policy=config.spam,
    )

    notifier = LeadNotifier(
        email=EmailGatewayClient(
            gateway_url=email_config["gateway_url"],
            api_key=email_config["api_key"],
            hmac_secret=email_config["hmac_secret"],
            from_name=config.notifications.brand_name,
        ),
        webhook=WebhookClient(timeout_seconds=config.notifications.webhook_timeout_seconds),
        listings=listing_service,
        config=config.notifications,
    )

    bus = wire_event_handlers(
        EventBus(),
        notifier,
        listing_service,
        spam_log_service if config.spam.record_spam_attempts else None,
    )

    services = {
        "intake": intake,
        "lead": lead_service,
        "listing": listing_service,
        "spam_log": spam_log_service,
        "event_bus": bus,
        "rate_limiter": SubmissionRateLimiter(valkey, config.rate_limit),
        "recaptcha": RecaptchaVerifier(
            recaptcha_secret,
            min_score=config.recaptcha.min_score,
            fail_open=config.recaptcha.fail_open,
        ),
        "trusted_proxy_hops": config.trusted_proxy_hops,
    }
    return services, StaffSessionStore(valkey)


def create_app(services: dict, session_store: StaffSessionStore) -> FastAPI:
    """Assemble the FastAPI app around already-built services."""
    app = FastAPI(title="Sweet Home lead service")

    register_error_handlers(app)
    app.add_middleware(AuthMiddleware, session_store=session_store)
    app.add_middleware(RequestIDMiddleware)

    app.include_router(create_leads_router(services), prefix="/api")
    app.include_router(create_admin_router(services), prefix="/api")

    @app.get("/health")
    def health():
        return success_response({"status": "ok"}).model_dump(mode="json")

    return app


def app_from_env() -> FastAPI:
    """Production entry point."""
    config = AppConfig.from_env()
    configure_logging(config.log_level)
    services, session_store = build_services(config)
    return create_app(services, session_store)
