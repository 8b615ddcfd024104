"""
reCAPTCHA v3 verification for public lead forms.

Posts the browser token to Google's siteverify endpoint, retrying once against
recaptcha.net when the primary answer is unusable.
"""

import logging
from dataclasses import dataclass, field

import requests

logger = logging.getLogger(__name__)

PRIMARY_VERIFY_URL = "https://www.google.com/recaptcha/api/siteverify"
FALLBACK_VERIFY_URL = "https://www.recaptcha.net/recaptcha/api/siteverify"


@dataclass
class RecaptchaResult:
    """Outcome of one token verification."""

    success: bool
    score: float | None = None
    action: str | None = None
    hostname: str | None = None
    error_codes: list[str] = field(default_factory=list)


class RecaptchaVerifier:
    """Verify tokens and apply the minimum-score gate."""

    def __init__(
        self,
        secret: str | None,
        min_score: float = 0.5,
        fail_open: bool = False,
        timeout_seconds: float = 5,
    ):
        self._secret = (secret or "").strip()
        self.min_score = min_score
        self.fail_open = fail_open
        self.timeout_seconds = timeout_seconds

    @property
    def configured(self) -> bool:
        return bool(self._secret)

    def _post(self, url: str, token: str, remote_ip: str | None) -> dict | None:
        data = {"secret": self._secret, "response": token}
        if remote_ip:
            data["remoteip"] = remote_ip
        try:
            response = requests.post(url, data=data, timeout=self.timeout_seconds)
            body = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.warning(f"reCAPTCHA verification call to {url} failed: {e}")
            return None
        if not isinstance(body, dict) or "success" not in body:
            return None
        return body

    def verify(self, token: str | None, remote_ip: str | None = None) -> RecaptchaResult:
        """
        Verify a token.

        An unconfigured secret verifies everything (local development).
        Unreachable endpoints yield an unsuccessful result, never an exception.
        """
        if not self.configured:
            return RecaptchaResult(success=True, score=1.0, action="unconfigured")

        body = self._post(PRIMARY_VERIFY_URL, token or "", remote_ip)
        if body is None:
            body = self._post(FALLBACK_VERIFY_URL, token or "", remote_ip)
        if body is None:
            return RecaptchaResult(success=False, error_codes=["recaptcha_verification_failed"])

        return RecaptchaResult(
            success=bool(body.get("success")),
            score=body.get("score"),
            action=body.get("action"),
            hostname=body.get("hostname"),
            error_codes=list(body.get("error-codes") or []),
        )

    def passes(self, token: str | None, remote_ip: str | None = None) -> bool:
        """True when the token verifies with at least `min_score`, or fail-open is on."""
        result = self.verify(token, remote_ip)
        ok = result.success and (result.score is None or result.score >= self.min_score)
        if ok:
            return True
        if self.fail_open:
            logger.warning("reCAPTCHA fail-open enabled; bypassing verification failure")
            return True
        logger.info(
            f"reCAPTCHA rejected submission: success={result.success} "
            f"score={result.score} errors={result.error_codes}"
        )
        return False
