"""Spam attempt log, kept for tuning the spam rules.

Writes the site's spam_logs table, which holds the submitter's fields and
the score. The discard reason and rules version go to the service log.
"""

import logging

from clients.postgres_client import PostgresClient

logger = logging.getLogger(__name__)


class SpamLogService:
    """Append-only record of discarded submissions."""

    def __init__(self, postgres: PostgresClient):
        self.postgres = postgres

    def record(
        self,
        name: str | None,
        email: str | None,
        phone: str | None,
        message: str | None,
        score: int,
        reason: str,
        rules_version: str | None = None,
        ip_address: str | None = None,
    ) -> None:
        logger.info(
            f"Spam attempt from {email} ({ip_address or 'unknown ip'}): "
            f"{reason}, score {score}, rules {rules_version}"
        )
        self.postgres.execute(
            """
            INSERT INTO spam_logs (name, email, phone, message, score, created_at)
            VALUES (%s, %s, %s, %s, %s, NOW())
            """,
            (name, email, phone, message, score)
        )

    def recent(self, limit: int = 50) -> list[dict]:
        """Latest attempts, newest first."""
        return self.postgres.execute(
            """
            SELECT name, email, phone, message, score, created_at
            FROM spam_logs
            ORDER BY created_at DESC
            LIMIT %s
            """,
            (limit,)
        )
