"""
Listing lookups for the lead pipeline.

Properties and projects are owned by the rest of the site; this service only
reads what leads need (title, slug, canonical URL, assigned agent) and keeps
the per-property inquiry counter.
"""

import logging

from clients.postgres_client import PostgresClient
from core.models import Listing, ListingKind

logger = logging.getLogger(__name__)

_PATHS = {
    ListingKind.PROPERTY: ("properties", "/properties"),
    ListingKind.PROJECT: ("projects", "/projects"),
}


class ListingService:
    """Read-only access to properties and projects plus inquiry stats."""

    def __init__(self, postgres: PostgresClient, app_url: str = ""):
        self.postgres = postgres
        self.app_url = app_url.rstrip("/")

    def resolve(self, kind: ListingKind, listing_id: int) -> Listing | None:
        """
        Look up a property or project with its assigned agent.

        Returns:
            Listing, or None if no such record (or kind is NONE)
        """
        if kind not in _PATHS:
            return None
        table, path = _PATHS[kind]

        row = self.postgres.execute_single(
            f"""
            SELECT t.id, t.title, t.slug, t.agent_id AS owner_id,
                   u.name AS owner_name, u.email AS owner_email
            FROM {table} t
            LEFT JOIN users u ON u.id = t.agent_id
            WHERE t.id = %s
            """,
            (listing_id,)
        )
        if row is None:
            return None

        slug = row.get("slug")
        return Listing(
            kind=kind,
            id=row["id"],
            title=row["title"],
            slug=slug,
            url=f"{self.app_url}{path}/{slug}" if slug else None,
            owner_id=row.get("owner_id"),
            owner_name=row.get("owner_name"),
            owner_email=row.get("owner_email"),
        )

    def try_resolve(self, kind: ListingKind, listing_id: int | None) -> Listing | None:
        """resolve() for enrichment paths: lookup errors are logged and yield None."""
        if listing_id is None:
            return None
        try:
            return self.resolve(kind, listing_id)
        except Exception as e:
            logger.warning(f"Listing lookup failed for {kind.value} {listing_id}: {e}")
            return None

    def list_superadmin_emails(self) -> list[str]:
        """Email addresses of approved SuperAdmins, oldest account first."""
        rows = self.postgres.execute(
            """
            SELECT email FROM users
            WHERE role = 'SuperAdmin' AND approved = TRUE AND email IS NOT NULL
            ORDER BY id
            """
        )
        return [row["email"] for row in rows if row.get("email")]

    def record_inquiry(self, property_id: int) -> None:
        """Count one email inquiry against a property."""
        self.postgres.execute(
            """
            INSERT INTO property_stats (property_id, views, email_clicks, last_updated)
            VALUES (%s, 0, 1, NOW())
            ON CONFLICT (property_id)
            DO UPDATE SET email_clicks = property_stats.email_clicks + 1,
                          last_updated = NOW()
            """,
            (property_id,)
        )
