"""
Email gateway client for sending lead emails via HTTP gateway.

Uses HMAC-SHA256 signature for request authentication. SMTP delivery is the
gateway's job; this client only builds, signs and posts the message.
"""

import hashlib
import hmac
import json
import logging
import re
from dataclasses import dataclass, field

import requests

logger = logging.getLogger(__name__)

_ANGLE_ADDRESS = re.compile(r"<\s*([^>\s]+)\s*>")
_RECIPIENT_SEPARATORS = re.compile(r"[;,]")


class EmailGatewayError(Exception):
    """Raised when email gateway request fails."""


@dataclass
class DeliveryInfo:
    """What the gateway reported back for one message."""

    message_id: str | None
    accepted: list[str] = field(default_factory=list)


def extract_address(value: str | None) -> str:
    """'Sweet Home <info@example.com>' -> 'info@example.com'."""
    if not value:
        return ""
    text = str(value).strip()
    match = _ANGLE_ADDRESS.search(text)
    if match:
        return match.group(1).strip()
    return text.replace("<", "").replace(">", "").strip()


def normalize_recipients(value: str | list[str] | None) -> list[str]:
    """
    Flatten a recipient value into bare addresses.

    Accepts a list or a ';'/','-separated string; strips display names and
    header-injection newlines; drops empties.
    """
    if not value:
        return []
    parts = value if isinstance(value, list) else _RECIPIENT_SEPARATORS.split(str(value))
    addresses = []
    for part in parts:
        address = extract_address(part).replace("\r", "").replace("\n", "").strip()
        if address:
            addresses.append(address)
    return addresses


class EmailGatewayClient:
    """Send emails via HTTP gateway with HMAC signature verification."""

    def __init__(
        self,
        gateway_url: str,
        api_key: str,
        hmac_secret: str,
        from_name: str = "Sweet Home Platform",
        timeout_seconds: float = 10,
    ):
        """
        Initialize with gateway credentials.

        Args:
            gateway_url: Full URL to the email gateway endpoint
            api_key: API key for X-API-Key header
            hmac_secret: Secret for HMAC-SHA256 signature
            from_name: Display name on outgoing mail
            timeout_seconds: Per-request timeout

        Raises:
            ValueError: If any credential is empty
        """
        if not gateway_url:
            raise ValueError("gateway_url is required")
        if not api_key:
            raise ValueError("api_key is required")
        if not hmac_secret:
            raise ValueError("hmac_secret is required")

        self.gateway_url = gateway_url
        self.api_key = api_key
        self.hmac_secret = hmac_secret
        self.from_name = from_name.replace("\r", "").replace("\n", "").strip()
        self.timeout_seconds = timeout_seconds

    def _sign_and_send(self, payload: dict) -> dict:
        """
        Sign payload with HMAC and send to gateway.

        Returns:
            Parsed gateway response body

        Raises:
            EmailGatewayError: On any failure
        """
        payload_json = json.dumps(payload, separators=(",", ":"))

        signature = hmac.new(
            self.hmac_secret.encode("utf-8"),
            payload_json.encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()

        headers = {
            "Content-Type": "application/json",
            "X-API-Key": self.api_key,
            "X-Signature": signature,
        }

        try:
            response = requests.post(
                self.gateway_url,
                data=payload_json,
                headers=headers,
                timeout=self.timeout_seconds,
            )
        except (requests.exceptions.RequestException, ConnectionError) as e:
            logger.error(f"Email gateway connection failed: {e}")
            raise EmailGatewayError(f"Connection failed: {e}")

        try:
            response_data = response.json()
        except ValueError:
            logger.error(f"Email gateway returned invalid JSON: {response.text}")
            raise EmailGatewayError("Invalid response from gateway")

        if response.status_code != 200 or not response_data.get("success"):
            error_msg = response_data.get("message", "Unknown error")
            logger.error(f"Email gateway error: {error_msg}")
            raise EmailGatewayError(f"Gateway error: {error_msg}")

        return response_data

    def send(
        self,
        to: str | list[str],
        subject: str,
        html: str,
        text: str,
        cc: str | list[str] | None = None,
        bcc: str | list[str] | None = None,
        reply_to: str | None = None,
    ) -> DeliveryInfo:
        """
        Send one HTML + plain-text email.

        Args:
            to: Recipient(s); list or ';'/','-separated string
            subject: Subject line
            html: HTML body
            text: Plain-text alternative
            cc: Optional carbon-copy recipient(s)
            bcc: Optional blind-copy recipient(s)
            reply_to: Optional Reply-To address

        Returns:
            DeliveryInfo with the gateway's message id

        Raises:
            ValueError: If no usable recipient remains after normalization
            EmailGatewayError: On gateway failure
        """
        to_list = normalize_recipients(to)
        if not to_list:
            raise ValueError("No recipients defined")

        payload = {
            "type": "custom",
            "from_name": self.from_name,
            "to": to_list,
            "subject": subject,
            "html": html,
            "text": text,
        }
        cc_list = normalize_recipients(cc)
        bcc_list = normalize_recipients(bcc)
        if cc_list:
            payload["cc"] = cc_list
        if bcc_list:
            payload["bcc"] = bcc_list
        reply_to_address = extract_address(reply_to)
        if reply_to_address:
            payload["reply_to"] = reply_to_address

        response_data = self._sign_and_send(payload)
        logger.info(f"Email sent to {', '.join(to_list)}: {subject}")

        return DeliveryInfo(
            message_id=response_data.get("message_id"),
            accepted=response_data.get("accepted") or to_list + cc_list + bcc_list,
        )
