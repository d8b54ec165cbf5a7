"""Pattern-based entity extraction.

Cheap regexes only; no model calls. Good enough to give the reply prompt a
few anchors (names, places, dates) when the AI analyzer is unavailable.
"""

import re

from smartreply.models import EntityCategories, EntityRecognition

_PATTERNS: dict[str, re.Pattern[str]] = {
    # Two capitalised words in a row, e.g. "Maria Lopez"
    "people": re.compile(r"\b[A-Z][a-z]+ [A-Z][a-z]+\b"),
    # Case-insensitive throughout, so the run after the preposition can swallow
    # lowercase words: "at the office tomorrow".
    "places": re.compile(
        r"\b(?:in|at|from|to)\s+[A-Z][a-z]+(?:\s+[A-Z][a-z]+)*\b", re.IGNORECASE
    ),
    "organizations": re.compile(
        r"\b(?:Inc|Corp|LLC|Ltd|Company|University|College|School)\b", re.IGNORECASE
    ),
    "topics": re.compile(
        r"\b(?:meeting|project|deadline|budget|plan|idea|discussion|problem|solution)\b",
        re.IGNORECASE,
    ),
    "dates": re.compile(
        r"\b(?:\d{1,2}/\d{1,2}/\d{2,4}|\d{1,2}-\d{1,2}-\d{2,4}"
        r"|tomorrow|yesterday|today|next week|last week)\b",
        re.IGNORECASE,
    ),
}

# Used to bucket entity strings that arrive without a category (AI output).
_PERSON_RE = re.compile(r"^[A-Z][a-z]+ [A-Z][a-z]+$")
_PLACE_HINT_RE = re.compile(r"\b(?:city|country|state|place|location)\b", re.IGNORECASE)
_ORG_HINT_RE = re.compile(r"\b(?:company|organization|business|group)\b", re.IGNORECASE)
_DATE_HINT_RE = re.compile(
    r"\b\d{4}|\b(?:january|february|march|april|may|june|july|august"
    r"|september|october|november|december)\b",
    re.IGNORECASE,
)


def extract_entities(text: str) -> EntityRecognition:
    """Extract entities from *text*, keeping every match in pattern order.

    Matches are not de-duplicated; a name mentioned twice appears twice.
    """
    entities: list[str] = []
    buckets: dict[str, list[str]] = {name: [] for name in _PATTERNS}

    for category, pattern in _PATTERNS.items():
        for match in pattern.finditer(text):
            value = match.group(0)
            entities.append(value)
            buckets[category].append(value)

    return EntityRecognition(entities=entities, categories=EntityCategories(**buckets))


def categorize_entities(entities: list[str]) -> EntityCategories:
    """Bucket a flat entity list using shape and keyword hints."""
    categories = EntityCategories()
    for entity in entities:
        if _PERSON_RE.match(entity):
            categories.people.append(entity)
        elif _PLACE_HINT_RE.search(entity):
            categories.places.append(entity)
        elif _ORG_HINT_RE.search(entity):
            categories.organizations.append(entity)
        elif _DATE_HINT_RE.search(entity):
            categories.dates.append(entity)
        else:
            categories.topics.append(entity)
    return categories
