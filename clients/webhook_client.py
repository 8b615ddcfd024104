"""
Outbound JSON webhook client for marketing automation (Zapier-style catch hooks).

One POST per call, bounded by a timeout, no retries. Callers decide what a
non-2xx status means; transport failures raise WebhookError.
"""

import logging

import requests

logger = logging.getLogger(__name__)


class WebhookError(Exception):
    """Raised when the webhook endpoint cannot be reached."""


class WebhookClient:
    """POST JSON payloads to externally configured endpoints."""

    def __init__(self, timeout_seconds: float = 10, user_agent: str = "sweethome-leads/1.0"):
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        self.timeout_seconds = timeout_seconds
        self.user_agent = user_agent

    def post_json(self, url: str, payload: dict) -> requests.Response:
        """
        POST `payload` as JSON.

        Returns:
            The HTTP response, whatever its status

        Raises:
            ValueError: If url is empty
            WebhookError: On connection failure or timeout
        """
        if not url:
            raise ValueError("url is required")

        try:
            response = requests.post(
                url,
                json=payload,
                headers={"User-Agent": self.user_agent},
                timeout=self.timeout_seconds,
            )
        except requests.exceptions.Timeout as e:
            logger.error(f"Webhook timed out after {self.timeout_seconds}s: {e}")
            raise WebhookError(f"Timed out: {e}")
        except (requests.exceptions.RequestException, ConnectionError) as e:
            logger.error(f"Webhook connection failed: {e}")
            raise WebhookError(f"Connection failed: {e}")

        return response
