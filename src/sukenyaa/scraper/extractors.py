"""Title and cell heuristics used by the listing parser.

Quality and language detection are driven by ordered ``(pattern, tag)``
tables. The first pattern that matches a title wins, so more specific
patterns must come first.
"""

from __future__ import annotations

import hashlib
import re

QUALITY_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\b(4K|2160p)\b", re.IGNORECASE), "4K"),
    (re.compile(r"\b(1080p|1080i|FHD)\b", re.IGNORECASE), "1080P"),
    (re.compile(r"\b(720p|HD)\b", re.IGNORECASE), "720P"),
    (re.compile(r"\b(480p|SD)\b", re.IGNORECASE), "480P"),
    (re.compile(r"\b(360p)\b", re.IGNORECASE), "360P"),
)

LANGUAGE_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\[(JP|JPN|Japanese)\]", re.IGNORECASE), "JP"),
    (re.compile(r"\[(EN|ENG|English)\]", re.IGNORECASE), "EN"),
    (re.compile(r"\[(KR|KOR|Korean)\]", re.IGNORECASE), "KR"),
    (re.compile(r"\[(CN|CHN|Chinese)\]", re.IGNORECASE), "CN"),
    (re.compile(r"\[(Multi)\]", re.IGNORECASE), "MULTI"),
    (re.compile(r"\[(Dual)\]", re.IGNORECASE), "DUAL"),
)

# Search terms appended to the query when a language filter is requested.
LANGUAGE_SEARCH_TERMS: dict[str, str] = {
    "Japanese": "JP",
    "English": "EN",
    "Chinese": "CN",
    "Korean": "KR",
    "Dual Audio": "Dual",
    "Multi": "Multi",
}

_RESOLUTION_RE = re.compile(r"\b(\d{3,4}[xX]\d{3,4}|\d{3,4}p)\b")

# The site renders IEC units (GiB); plain SI-style labels are read as 1024-based too.
_SIZE_RE = re.compile(r"(\d+(?:\.\d+)?)\s*([KMGT]i?B|B)\b", re.IGNORECASE)
_SIZE_MULTIPLIERS: dict[str, int] = {
    "B": 1,
    "K": 1024,
    "M": 1024**2,
    "G": 1024**3,
    "T": 1024**4,
}

_INFO_HASH_RE = re.compile(r"btih:([a-fA-F0-9]{40}|[a-zA-Z2-7]{32})(?![a-zA-Z0-9])")
_CATEGORY_CODE_RE = re.compile(r"[?&]c=(\d+_\d+)")


def match_first(table: tuple[tuple[re.Pattern[str], str], ...], text: str) -> str | None:
    """Return the tag of the first pattern in ``table`` that matches ``text``."""
    for pattern, tag in table:
        if pattern.search(text):
            return tag
    return None


def extract_quality(title: str) -> str | None:
    return match_first(QUALITY_PATTERNS, title)


def extract_language(title: str) -> str | None:
    return match_first(LANGUAGE_PATTERNS, title)


def extract_resolution(title: str) -> str | None:
    match = _RESOLUTION_RE.search(title)
    return match.group(1) if match else None


def parse_size_to_bytes(size_text: str) -> int:
    """Convert a human size label ("1.5 GiB", "500 MB") to bytes.

    Returns 0 when no size can be recognised.
    """
    match = _SIZE_RE.search(size_text)
    if not match:
        return 0
    value = float(match.group(1))
    unit = match.group(2).upper()
    multiplier = _SIZE_MULTIPLIERS[unit[0]] if unit != "B" else 1
    return int(value * multiplier)


def split_category(label: str) -> tuple[str, str]:
    """Split "Anime - English-translated" into its category and subcategory."""
    category, _sep, subcategory = label.partition(" - ")
    return category.strip(), subcategory.strip()


def extract_category_code(href: str) -> str:
    match = _CATEGORY_CODE_RE.search(href)
    return match.group(1) if match else ""


def extract_info_hash(magnet_uri: str) -> str | None:
    """Extract the lowercase info hash from a magnet URI."""
    match = _INFO_HASH_RE.search(magnet_uri)
    if match:
        return match.group(1).lower()
    return None


def fallback_id(title: str) -> str:
    """Deterministic id for links without an info hash.

    Identical titles always map to the same id, so two distinct torrents
    sharing a title collide.
    """
    return hashlib.sha1(title.encode("utf-8")).hexdigest()[:20]


def coerce_count(text: str) -> int:
    """Parse a swarm counter cell, defaulting to 0 on invalid values."""
    try:
        return max(int(text.strip().replace(",", "")), 0)
    except (TypeError, ValueError):
        return 0
