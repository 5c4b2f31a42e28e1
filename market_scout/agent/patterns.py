"""Pattern tables for heuristic extraction from free-text constraints.

Vocabularies are data, not control flow: extend a table to teach the
normalizer or seed deriver a new phrase.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

# Tier indicators, matched on normalized lowercase text.
HARD_INDICATORS: tuple[str, ...] = (
    r"non-negotiable",
    r"deal-?breaker",
    r"must",
    r"only",
    r"clean title",
)
SOFT_INDICATORS: tuple[str, ...] = (
    r"nice to have",
    r"nice-to-have",
    r"nice",
)
PREFERENCE_INDICATORS: tuple[str, ...] = (
    r"avoid",
    r"prefer",
    r"preferred",
    r"ideal",
    r"ideally",
    r"acceptable",
    r"ok",
)

# Generation token families, tried in order; first family with a hit wins.
GENERATION_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\b\d{3}\.\d\b"),  # 986.2, 997.2
    re.compile(r"\b\d{3}\b"),  # 986, 996
    re.compile(r"\b[A-Z]\d{2,3}\b"),  # E92, F80
    re.compile(r"\bB\d(?:\.\d)?\b", re.IGNORECASE),  # B7, B8.5
)

_YEAR = r"(?:19|20)\d{2}"
YEAR_RANGE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(rf"\b({_YEAR})\s*[-–—]\s*({_YEAR})\b"),
    re.compile(rf"\b({_YEAR})\s*to\s*({_YEAR})\b", re.IGNORECASE),
)

# Named exterior colors. Multi-word phrases come first so "speed yellow"
# wins over "yellow".
COLOR_VOCABULARY: tuple[str, ...] = (
    "speed yellow",
    "guards red",
    "arctic silver",
    "black",
    "white",
    "yellow",
    "silver",
    "blue",
)

TRANSMISSION_MANUAL: tuple[str, ...] = ("manual",)
TRANSMISSION_AUTOMATIC: tuple[str, ...] = ("automatic", "pdk", "dsg")

SALT_HISTORY_PHRASES: tuple[str, ...] = ("salt-road", "salt road", "northern", "rust")
CLEAN_TITLE_PHRASES: tuple[str, ...] = ("clean title",)

MILEAGE_IDEAL_PATTERN = re.compile(r"under\s*(\d{2,3})k\s*ideal")
MILEAGE_ACCEPTABLE_PATTERN = re.compile(r"under\s*(\d{2,3})k\s*acceptable")
BUDGET_PATTERN = re.compile(r"\bmax budget\s*\$?\s*(\d{2,3})k\b")


def _word_alternation(words: tuple[str, ...]) -> re.Pattern[str]:
    return re.compile(r"\b(?:" + "|".join(words) + r")\b")


@dataclass(frozen=True)
class TierIndicators:
    """Compiled indicator classes used by the constraint normalizer."""

    hard: re.Pattern[str] = field(default_factory=lambda: _word_alternation(HARD_INDICATORS))
    soft: re.Pattern[str] = field(default_factory=lambda: _word_alternation(SOFT_INDICATORS))
    preference: re.Pattern[str] = field(
        default_factory=lambda: _word_alternation(PREFERENCE_INDICATORS)
    )


DEFAULT_INDICATORS = TierIndicators()


def extract_generation_token(
    text: str,
    patterns: tuple[re.Pattern[str], ...] = GENERATION_PATTERNS,
) -> str | None:
    """Return the first generation token found, upper-cased."""
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return match.group(0).upper()
    return None


def extract_year_bounds(
    text: str,
    patterns: tuple[re.Pattern[str], ...] = YEAR_RANGE_PATTERNS,
) -> tuple[int, int] | None:
    """Return ``(start, end)`` from the first ``YYYY-YYYY`` style range."""
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return int(match.group(1)), int(match.group(2))
    return None


def extract_year_range(text: str) -> str | None:
    """Return the first year range rendered as ``"YYYY-YYYY"``."""
    bounds = extract_year_bounds(text)
    if bounds is None:
        return None
    return f"{bounds[0]}-{bounds[1]}"


def match_color(text: str, vocabulary: tuple[str, ...] = COLOR_VOCABULARY) -> str | None:
    """Return the earliest vocabulary color mentioned in *text*.

    Unrecognized color phrases return None rather than a guess.
    """
    best: tuple[int, int, str] | None = None
    for rank, color in enumerate(vocabulary):
        idx = text.find(color)
        if idx < 0:
            continue
        # Earliest position wins; ties go to vocabulary order.
        key = (idx, rank, color)
        if best is None or key[:2] < best[:2]:
            best = key
    return best[2] if best else None


def contains_any(text: str, phrases: tuple[str, ...]) -> bool:
    return any(phrase in text for phrase in phrases)
