"""Lead-service configuration.

Built once at startup (AppConfig.from_env) and passed into every component
that needs it. Durations are in their natural units (minutes for windows,
seconds for network timeouts).
"""

import os
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

DEFAULT_RULES_PATH = Path(__file__).parent / "spam_rules.json"


class SpamPolicy(BaseModel):
    """What happens to submissions the spam filter flags."""

    rules_path: Path = Field(
        default=DEFAULT_RULES_PATH,
        description="Versioned JSON file with weights, caps, thresholds and patterns",
    )
    discard_silently: bool = Field(
        default=True,
        description="Answer spam with the normal success envelope instead of an error",
    )
    reject_rental_inquiries: bool = Field(
        default=True,
        description="Treat clear rental requests like spam (sales-only business)",
    )
    record_spam_attempts: bool = Field(
        default=True,
        description="Write discarded submissions to spam_logs for tuning",
    )


class DuplicateWindows(BaseModel):
    """How long a repeat submission counts as a resubmission."""

    listing_minutes: int = Field(default=5, ge=1, le=1440)
    seller_minutes: int = Field(default=15, ge=1, le=1440)
    contact_minutes: int = Field(default=5, ge=1, le=1440)


class NotificationConfig(BaseModel):
    """Fan-out recipients, branding and automation endpoint."""

    brand_name: str = Field(default="Sweet Home Real Estate Investments")
    app_url: str = Field(default="http://localhost:8000", description="Public site base URL")
    default_recipients: list[str] = Field(
        default_factory=list,
        description="Owner-alert fallback when the listing has no agent email",
    )
    extra_recipient: str | None = Field(
        default=None,
        description="Secondary address copied (bcc) on every owner alert",
    )
    webhook_url: str | None = Field(default=None, description="Automation webhook endpoint")
    webhook_timeout_seconds: float = Field(default=10, gt=0, le=60)
    default_language: str = Field(default="en", pattern="^(en|es|de)$")

    @field_validator("app_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class RateLimitConfig(BaseModel):
    """Per-IP throttle for public lead forms."""

    enabled: bool = True
    max_submissions: int = Field(default=20, ge=1, le=1000)
    window_minutes: int = Field(default=10, ge=1, le=1440)


class RecaptchaConfig(BaseModel):
    """reCAPTCHA v3 gate on public lead forms."""

    secret: str | None = None
    min_score: float = Field(default=0.5, ge=0.0, le=1.0)
    fail_open: bool = False


class AppConfig(BaseModel):
    """Top-level configuration object."""

    spam: SpamPolicy = Field(default_factory=SpamPolicy)
    duplicates: DuplicateWindows = Field(default_factory=DuplicateWindows)
    notifications: NotificationConfig = Field(default_factory=NotificationConfig)
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)
    recaptcha: RecaptchaConfig = Field(default_factory=RecaptchaConfig)
    trusted_proxy_hops: int = Field(
        default=1, ge=0, le=10,
        description="Reverse proxies in front of the app that append to X-Forwarded-For",
    )
    log_level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR)$")

    @classmethod
    def from_env(cls, env: dict[str, str] | None = None) -> "AppConfig":
        """
        Build configuration from environment variables.

        Secrets (webhook URL, reCAPTCHA secret) may also come from Vault; the
        caller passes them in afterwards with model_copy(update=...).
        Raises pydantic.ValidationError on out-of-range values.
        """
        env = os.environ if env is None else env

        def flag(name: str, default: bool) -> bool:
            raw = env.get(name)
            if raw is None or raw.strip() == "":
                return default
            return raw.strip().lower() == "true"

        def listed(name: str) -> list[str]:
            raw = env.get(name, "")
            return [part.strip() for part in raw.replace(";", ",").split(",") if part.strip()]

        spam = {
            "discard_silently": flag("SPAM_DISCARD_SILENTLY", True),
            "reject_rental_inquiries": flag("SPAM_REJECT_RENTALS", True),
            "record_spam_attempts": flag("SPAM_RECORD_ATTEMPTS", True),
        }
        if env.get("SPAM_RULES_PATH"):
            spam["rules_path"] = Path(env["SPAM_RULES_PATH"])

        duplicates = {}
        for key, name in (
            ("listing_minutes", "DUPLICATE_WINDOW_LISTING_MINUTES"),
            ("seller_minutes", "DUPLICATE_WINDOW_SELLER_MINUTES"),
            ("contact_minutes", "DUPLICATE_WINDOW_CONTACT_MINUTES"),
        ):
            if env.get(name):
                duplicates[key] = int(env[name])

        notifications = {
            "default_recipients": listed("LEAD_NOTIFY_DEFAULT_EMAILS"),
            "extra_recipient": (env.get("LEAD_EXTRA_NOTIFY_EMAIL") or "").strip() or None,
            "webhook_url": (env.get("LEAD_WEBHOOK_URL") or "").strip() or None,
        }
        if env.get("APP_URL"):
            notifications["app_url"] = env["APP_URL"]
        if env.get("BRAND_NAME"):
            notifications["brand_name"] = env["BRAND_NAME"]
        if env.get("LEAD_WEBHOOK_TIMEOUT_SECONDS"):
            notifications["webhook_timeout_seconds"] = float(env["LEAD_WEBHOOK_TIMEOUT_SECONDS"])
        if env.get("DEFAULT_LANGUAGE"):
            notifications["default_language"] = env["DEFAULT_LANGUAGE"]

        rate_limit = {"enabled": flag("LEAD_RATE_LIMIT_ENABLED", True)}
        if env.get("LEAD_RATE_LIMIT_MAX"):
            rate_limit["max_submissions"] = int(env["LEAD_RATE_LIMIT_MAX"])
        if env.get("LEAD_RATE_LIMIT_WINDOW_MINUTES"):
            rate_limit["window_minutes"] = int(env["LEAD_RATE_LIMIT_WINDOW_MINUTES"])

        recaptcha = {
            "secret": (env.get("RECAPTCHA_SECRET_KEY") or "").strip() or None,
            "fail_open": flag("RECAPTCHA_FAIL_OPEN", False),
        }
        if env.get("RECAPTCHA_MIN_SCORE"):
            recaptcha["min_score"] = float(env["RECAPTCHA_MIN_SCORE"])

        return cls(
            spam=SpamPolicy(**spam),
            duplicates=DuplicateWindows(**duplicates),
            notifications=NotificationConfig(**notifications),
            rate_limit=RateLimitConfig(**rate_limit),
            recaptcha=RecaptchaConfig(**recaptcha),
            trusted_proxy_hops=int(env.get("TRUSTED_PROXY_HOPS") or 1),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
        )
