"""
Notification fan-out for newly created leads.

Three independent channels, run concurrently:
- submitter_ack: localized thank-you to the person who submitted
- owner_alert: the listing's agent, else the default distribution list,
  else approved SuperAdmins; the extra recipient is copied when distinct
- automation_webhook: JSON POST to the marketing automation endpoint

Each channel catches and logs its own failure. Nothing is retried; the lead
already exists and can be followed up from the back office.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from enum import Enum
from typing import Callable

from clients.email_client import EmailGatewayClient, normalize_recipients
from clients.webhook_client import WebhookClient
from core.config import NotificationConfig
from core.models import Lead, Listing
from core.notification_templates import acknowledgement, owner_alert
from core.services.listing_service import ListingService
from utils.language import resolve_language
from utils.timezone import now_utc

logger = logging.getLogger(__name__)


class NotificationChannel(str, Enum):
    SUBMITTER_ACK = "submitter_ack"
    OWNER_ALERT = "owner_alert"
    AUTOMATION_WEBHOOK = "automation_webhook"


class NotificationOutcome(str, Enum):
    SENT = "sent"
    FAILED = "failed"
    SKIPPED = "skipped"


class LeadNotifier:
    """
    Sends the three lead notifications.

    Usage:
        notifier = LeadNotifier(email_client, webhook_client, listings, config.notifications)
        outcomes = notifier.notify(lead, listing)
    """

    def __init__(
        self,
        email: EmailGatewayClient,
        webhook: WebhookClient,
        listings: ListingService,
        config: NotificationConfig,
    ):
        self.email = email
        self.webhook = webhook
        self.listings = listings
        self.config = config

    def notify(self, lead: Lead, listing: Listing | None = None) -> dict[NotificationChannel, NotificationOutcome]:
        """
        Run every channel and report how each went.

        Never raises. A missing listing only drops the listing details from
        the messages.
        """
        channels: dict[NotificationChannel, Callable[[], NotificationOutcome]] = {
            NotificationChannel.SUBMITTER_ACK: lambda: self.send_acknowledgement(lead, listing),
            NotificationChannel.OWNER_ALERT: lambda: self.send_owner_alert(lead, listing),
            NotificationChannel.AUTOMATION_WEBHOOK: lambda: self.send_webhook(lead, listing),
        }

        outcomes: dict[NotificationChannel, NotificationOutcome] = {}
        with ThreadPoolExecutor(max_workers=len(channels)) as executor:
            futures = {executor.submit(run): channel for channel, run in channels.items()}
            for future in as_completed(futures):
                channel = futures[future]
                try:
                    outcomes[channel] = future.result()
                except Exception:
                    logger.exception(f"Notification channel {channel.value} failed for lead {lead.id}")
                    outcomes[channel] = NotificationOutcome.FAILED

        logger.info(
            f"Lead {lead.id} notifications: "
            + ", ".join(f"{c.value}={o.value}" for c, o in sorted(outcomes.items()))
        )
        return outcomes

    def send_acknowledgement(self, lead: Lead, listing: Listing | None) -> NotificationOutcome:
        language = resolve_language(lead.preferred_language, lead.message, self.config.default_language)
        content = acknowledgement(language, lead, listing, self.config.brand_name)
        self.email.send(to=lead.email, subject=content.subject, html=content.html, text=content.text)
        return NotificationOutcome.SENT

    def send_owner_alert(self, lead: Lead, listing: Listing | None) -> NotificationOutcome:
        to, bcc = self.owner_recipients(listing)
        if not to:
            logger.warning(f"No owner-alert recipient for lead {lead.id}; skipping")
            return NotificationOutcome.SKIPPED

        content = owner_alert(lead, listing, self.config.app_url, self.config.brand_name)
        self.email.send(
            to=to,
            subject=content.subject,
            html=content.html,
            text=content.text,
            bcc=bcc,
            reply_to=lead.email,
        )
        return NotificationOutcome.SENT

    def owner_recipients(self, listing: Listing | None) -> tuple[list[str], list[str]]:
        """
        Primary recipients and blind copies for the owner alert.

        The extra recipient is a blind copy unless it is already a primary
        (compared case-insensitively), or the sole recipient when nothing
        else is configured.
        """
        primaries: list[str] = []
        if listing is not None and listing.owner_email:
            primaries = normalize_recipients(listing.owner_email)
        if not primaries:
            primaries = normalize_recipients(self.config.default_recipients)
        if not primaries:
            primaries = normalize_recipients(self.listings.list_superadmin_emails())

        extra = self.config.extra_recipient
        if not extra:
            return primaries, []
        if not primaries:
            return [extra], []
        if any(address.lower() == extra.lower() for address in primaries):
            return primaries, []
        return primaries, [extra]

    def send_webhook(self, lead: Lead, listing: Listing | None) -> NotificationOutcome:
        url = self.config.webhook_url
        if not url:
            return NotificationOutcome.SKIPPED

        response = self.webhook.post_json(url, build_webhook_payload(lead, listing))
        if not response.ok:
            logger.warning(
                f"Automation webhook returned {response.status_code} for lead {lead.id}"
            )
            return NotificationOutcome.FAILED
        return NotificationOutcome.SENT


def build_webhook_payload(lead: Lead, listing: Listing | None) -> dict:
    """JSON body for the automation webhook."""
    return {
        "lead_id": lead.id,
        "name": lead.name,
        "email": lead.email,
        "phone": lead.phone,
        "message": lead.message,
        "source": lead.source.value,
        "status": lead.status,
        "preferred_language": lead.preferred_language,
        "property_id": lead.property_id,
        "project_id": lead.project_id,
        "agent_id": lead.agent_id,
        "listing_kind": lead.listing_kind.value,
        "listing_title": listing.title if listing else None,
        "listing_slug": listing.slug if listing else None,
        "listing_url": listing.url if listing else None,
        "agent_name": listing.owner_name if listing else None,
        "agent_email": listing.owner_email if listing else None,
        "utm_source": lead.utm_source,
        "utm_medium": lead.utm_medium,
        "utm_campaign": lead.utm_campaign,
        "created_at": lead.created_at.isoformat(),
        "timestamp": now_utc().isoformat(),
    }
