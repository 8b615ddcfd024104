"""
Preferred-language helpers for lead acknowledgements.

The site is published in English, Spanish and German. A submitter's declared
language wins; otherwise the message text is sniffed for common words.
"""

import re

SUPPORTED_LANGUAGES = ("en", "es", "de")

_INDICATORS = {
    "en": {
        "the", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by",
        "is", "are", "was", "were", "be", "been", "have", "has", "had", "do", "does", "did",
        "will", "would", "could", "should", "may", "might", "can", "must",
        "this", "that", "these", "those", "here", "there", "where", "when", "why", "how",
        "property", "apartment", "house", "villa", "land", "bedroom", "bathroom", "kitchen",
        "living", "room", "space", "size", "price", "location", "city", "country",
    },
    "de": {
        "der", "die", "das", "und", "oder", "aber", "in", "auf", "an", "zu", "für", "von", "mit", "durch",
        "ist", "sind", "war", "waren", "sein", "gewesen", "haben", "hat", "hatte", "tun", "macht", "tat",
        "wird", "würde", "könnte", "sollte", "kann", "muss",
        "dieser", "diese", "dieses", "hier", "dort", "wo", "wann", "warum", "wie",
        "eigentum", "wohnung", "haus", "villa", "land", "schlafzimmer", "badezimmer", "küche",
        "wohnzimmer", "raum", "platz", "größe", "preis", "standort", "stadt",
    },
    "es": {
        "el", "la", "los", "las", "y", "o", "pero", "en", "sobre", "a", "para", "de", "con", "por",
        "es", "son", "era", "eran", "ser", "sido", "tener", "ha", "había", "hacer", "hace", "hizo",
        "será", "sería", "podría", "debería", "puede", "debe",
        "este", "esta", "estos", "estas", "aquí", "allí", "donde", "cuando", "cómo",
        "propiedad", "apartamento", "casa", "villa", "tierra", "dormitorio", "baño", "cocina",
        "sala", "habitación", "espacio", "tamaño", "precio", "ubicación", "ciudad", "país",
    },
}

_PUNCTUATION = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_language(value: str | None, default: str = "en") -> str | None:
    """
    Reduce a declared language ('es-ES', 'DE', 'en_GB') to a supported code.

    Returns None when nothing usable was declared so callers can fall back to
    detection. Unsupported codes map to `default`.
    """
    if not value or not value.strip():
        return None
    code = value.strip()[:2].lower()
    return code if code in SUPPORTED_LANGUAGES else default


def detect_language(text: str | None, default: str = "en") -> str:
    """
    Guess the language of free text by counting common words.

    Short or ambiguous text (fewer than two indicator hits) returns `default`.
    """
    if not text:
        return default

    normalized = _WHITESPACE.sub(" ", _PUNCTUATION.sub(" ", text.lower())).strip()
    if len(normalized) < 10:
        return default

    scores = {lang: 0 for lang in _INDICATORS}
    for word in normalized.split(" "):
        for lang, words in _INDICATORS.items():
            if word in words:
                scores[lang] += 1

    best = max(scores, key=lambda lang: scores[lang])
    if scores[best] < 2:
        return default
    return best


def resolve_language(declared: str | None, text: str | None, default: str = "en") -> str:
    """Declared language first, then detection from `text`, then `default`."""
    normalized = normalize_language(declared, default)
    if normalized is not None:
        return normalized
    return detect_language(text, default)
