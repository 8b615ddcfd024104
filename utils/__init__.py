"""Utility modules for cross-cutting concerns."""

from utils.timezone import now_utc, minutes_before, parse_iso, note_stamp
from utils.language import normalize_language, detect_language, resolve_language
