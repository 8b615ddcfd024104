"""
Spam scoring for inbound lead messages.

Scoring is a fixed set of weighted heuristics. Weights, caps, thresholds and
every pattern come from the versioned rules file (core/spam_rules.json) so
tuning never needs a deploy of new code.

Both scorers are pure: same input, same verdict, no I/O after construction.
A rule that blows up contributes 0 and is logged; score() never raises.
"""

import json
import logging
import re
from pathlib import Path
from typing import Callable

from pydantic import BaseModel, Field

from core.models.spam import SpamVerdict

logger = logging.getLogger(__name__)


class RuleWeight(BaseModel):
    """Points per match and the most a rule may contribute."""

    per_match: int = Field(..., ge=0)
    cap: int = Field(..., ge=0)

    def apply(self, matches: int) -> int:
        return min(matches * self.per_match, self.cap)


class Thresholds(BaseModel):
    spam: int = Field(default=45, ge=1, le=100)
    suspicious: int = Field(default=31, ge=1, le=100)
    max_score: int = Field(default=100, ge=1, le=100)


class StructureRules(BaseModel):
    bullet_pattern: str
    bullet_limit: int
    bullet_points: int
    line_break_limit: int
    line_break_points: int
    caps_ratio: float
    caps_points: int


class SuspiciousEmailRules(BaseModel):
    domains: list[str]
    points: int


class LengthRules(BaseModel):
    long_over: int
    long_points: int
    short_under: int
    short_points: int


class RentalRules(BaseModel):
    threshold: int = 50
    keyword: RuleWeight
    phrase: RuleWeight
    monthly_budget_points: int
    temporary_stay_points: int
    combined_points: int
    keywords: list[str]
    monthly_budget_patterns: list[str]
    temporary_stay_pattern: str
    phrases: list[str]


class SpamRules(BaseModel):
    """Parsed contents of the spam rules file."""

    version: str
    thresholds: Thresholds = Field(default_factory=Thresholds)
    weights: dict[str, RuleWeight]
    structure: StructureRules
    suspicious_email: SuspiciousEmailRules
    length: LengthRules
    promotional_keywords: list[str]
    phone_patterns: list[str]
    emoji_patterns: list[str]
    service_patterns: list[str]
    guarantee_patterns: list[str]
    rating_patterns: list[str]
    spam_phrases: list[str]
    rental: RentalRules

    @classmethod
    def load(cls, path: Path | str) -> "SpamRules":
        """
        Read and validate a rules file.

        Raises:
            FileNotFoundError: If the file does not exist
            pydantic.ValidationError: If the contents are malformed
        """
        with open(path, encoding="utf-8") as fh:
            return cls.model_validate(json.load(fh))


def _compile(patterns: list[str]) -> list[re.Pattern]:
    return [re.compile(p, re.IGNORECASE) for p in patterns]


def _count_matches(patterns: list[re.Pattern], text: str) -> int:
    return sum(len(p.findall(text)) for p in patterns)


class SpamScorer:
    """
    Weighted heuristic scorer.

    Usage:
        scorer = SpamScorer(SpamRules.load(config.spam.rules_path))
        verdict = scorer.score(message, name, email, phone)
        if verdict.is_spam:
            ...
    """

    def __init__(self, rules: SpamRules):
        self.rules = rules
        self.rental = RentalInquiryDetector(rules.rental)

        self._keywords = [k.lower() for k in rules.promotional_keywords]
        self._phone = _compile(rules.phone_patterns)
        self._emoji = _compile(rules.emoji_patterns)
        self._service = _compile(rules.service_patterns)
        self._guarantee = _compile(rules.guarantee_patterns)
        self._rating = _compile(rules.rating_patterns)
        self._bullets = re.compile(rules.structure.bullet_pattern)
        self._phrases = [p.lower() for p in rules.spam_phrases]
        self._domains = {d.lower() for d in rules.suspicious_email.domains}

    def score(
        self,
        message: str | None,
        name: str | None = None,
        email: str | None = None,
        phone: str | None = None,
    ) -> SpamVerdict:
        """
        Score one message.

        Phone patterns also search name, email and phone so numbers stuffed
        into the contact fields count. An empty message scores 0.
        """
        if not message or not message.strip():
            return SpamVerdict(
                score=0,
                is_spam=False,
                is_suspicious=False,
                components={},
                rules_version=self.rules.version,
            )

        text = message.lower()
        full_text = " ".join((name or "", email or "", phone or "", message)).lower()
        email_lower = (email or "").lower()

        rules: list[tuple[str, Callable[[], int]]] = [
            ("promotional_keywords", lambda: self._keyword_points(text)),
            ("phone_numbers", lambda: self._pattern_points("phone_numbers", self._phone, full_text)),
            ("emoji", lambda: self._pattern_points("emoji", self._emoji, text)),
            ("service_listing", lambda: self._pattern_points("service_listing", self._service, text)),
            ("guarantee_language", lambda: self._pattern_points("guarantee_language", self._guarantee, text)),
            ("rating_manipulation", lambda: self._pattern_points("rating_manipulation", self._rating, text)),
            ("structure", lambda: self._structure_points(message)),
            ("suspicious_email", lambda: self._email_points(email_lower)),
            ("spam_phrases", lambda: self._phrase_points(text)),
            ("length", lambda: self._length_points(message)),
        ]

        components: dict[str, int] = {}
        for name_, rule in rules:
            try:
                points = rule()
            except Exception as e:
                logger.warning(f"Spam rule {name_} failed, scoring 0: {e}")
                points = 0
            if points:
                components[name_] = points

        total = min(sum(components.values()), self.rules.thresholds.max_score)
        is_spam = total >= self.rules.thresholds.spam
        is_suspicious = not is_spam and total >= self.rules.thresholds.suspicious

        rental_score = self.rental.score(message, name, email, phone)

        return SpamVerdict(
            score=total,
            is_spam=is_spam,
            is_suspicious=is_suspicious,
            is_rental=rental_score >= self.rental.rules.threshold,
            rental_score=rental_score,
            components=components,
            rules_version=self.rules.version,
        )

    def _weight(self, rule: str) -> RuleWeight:
        return self.rules.weights[rule]

    def _keyword_points(self, text: str) -> int:
        hits = sum(1 for keyword in self._keywords if keyword in text)
        return self._weight("promotional_keywords").apply(hits)

    def _pattern_points(self, rule: str, patterns: list[re.Pattern], text: str) -> int:
        return self._weight(rule).apply(_count_matches(patterns, text))

    def _structure_points(self, message: str) -> int:
        s = self.rules.structure
        points = 0
        if len(self._bullets.findall(message)) > s.bullet_limit:
            points += s.bullet_points
        if message.count("\n") > s.line_break_limit:
            points += s.line_break_points
        capitals = sum(1 for ch in message if ch.isupper())
        if capitals / len(message) > s.caps_ratio:
            points += s.caps_points
        return points

    def _email_points(self, email: str) -> int:
        if "@" not in email:
            return 0
        local, _, domain = email.rpartition("@")
        if domain not in self._domains:
            return 0
        if any(keyword in local for keyword in self._keywords):
            return self.rules.suspicious_email.points
        return 0

    def _phrase_points(self, text: str) -> int:
        hits = sum(1 for phrase in self._phrases if phrase in text)
        return self._weight("spam_phrases").apply(hits)

    def _length_points(self, message: str) -> int:
        rules = self.rules.length
        length = len(message)
        if length > rules.long_over:
            return rules.long_points
        if length < rules.short_under:
            return rules.short_points
        return 0


class RentalInquiryDetector:
    """
    Recognises people asking to rent rather than buy.

    Monthly budgets ("800 EUR a month") and temporary stays are the strongest
    signals; generic words like "rent" alone are not enough.
    """

    def __init__(self, rules: RentalRules):
        self.rules = rules
        self._keywords = [k.lower() for k in rules.keywords]
        self._budget = _compile(rules.monthly_budget_patterns)
        self._stay = re.compile(rules.temporary_stay_pattern, re.IGNORECASE)
        self._phrases = _compile(rules.phrases)

    def score(
        self,
        message: str | None,
        name: str | None = None,
        email: str | None = None,
        phone: str | None = None,
    ) -> int:
        """Rental score, 0 when the message is empty or detection fails."""
        if not message or not message.strip():
            return 0
        full_text = " ".join((name or "", email or "", phone or "", message)).lower()
        try:
            return self._score(message.lower(), full_text)
        except Exception as e:
            logger.warning(f"Rental detection failed, scoring 0: {e}")
            return 0

    def is_rental(self, message: str | None, **contact) -> bool:
        return self.score(message, **contact) >= self.rules.threshold

    def _score(self, text: str, full_text: str) -> int:
        r = self.rules
        keyword_hits = sum(1 for k in self._keywords if k in text)
        points = r.keyword.apply(keyword_hits)

        has_budget = any(p.search(full_text) for p in self._budget)
        if has_budget:
            points += r.monthly_budget_points

        has_stay = bool(self._stay.search(full_text))
        if has_stay:
            points += r.temporary_stay_points

        points += r.phrase.apply(_count_matches(self._phrases, full_text))

        if has_budget and (keyword_hits or has_stay):
            points += r.combined_points

        return points
