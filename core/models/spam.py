"""Spam verdict model."""

from pydantic import BaseModel, Field


class SpamVerdict(BaseModel):
    """Result of scoring one inbound message. Not persisted."""

    score: int = Field(..., ge=0, le=100)
    is_spam: bool
    is_suspicious: bool = False
    is_rental: bool = False
    rental_score: int = 0
    components: dict[str, int] = Field(default_factory=dict)
    rules_version: str

    model_config = {"frozen": True}

    @property
    def rejected(self) -> bool:
        """Spam or rental; callers still apply policy before discarding."""
        return self.is_spam or self.is_rental
