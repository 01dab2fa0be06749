"""
Text cleanup for restock announcement strings.

Announcement titles carry retailer-style prefixes ("Pokemon Trading Card
Game: ..."), typographic dashes and shorthand like "ETB" that never appear
in catalog names. Everything here is a pure function.
"""

import re

# Prefixes retailers put in front of the actual product name.
# Anchored at the start and matched case-insensitively.
PREFIX_PATTERNS = [
    re.compile(r"^pok[eé]mon trading card game:\s*", re.IGNORECASE),
    re.compile(r"^pok[eé]mon tcg:\s*", re.IGNORECASE),
    re.compile(r"^ptcg:\s*", re.IGNORECASE),
]

DASH_PATTERN = re.compile(r"[–—]")  # en-dash, em-dash
WHITESPACE_PATTERN = re.compile(r"\s+")

# Common abbreviation expansions (whole words only)
ABBREVIATIONS = {
    "upc": "Ultra Premium Collection",
    "etb": "Elite Trainer Box",
    "bb": "Booster Box",
}

_ABBREVIATION_PATTERNS = [
    (re.compile(rf"\b{re.escape(abbrev)}\b", re.IGNORECASE), full)
    for abbrev, full in ABBREVIATIONS.items()
]


def strip_prefixes(text: str) -> str:
    """Remove known catalog-line prefixes until none apply."""
    stripped = text
    changed = True
    while changed:
        changed = False
        for pattern in PREFIX_PATTERNS:
            candidate = pattern.sub("", stripped, count=1)
            if candidate != stripped:
                stripped = candidate.lstrip()
                changed = True
    return stripped


def normalize(text: str) -> str:
    """
    Clean a free-text product string for matching.

    Replaces en/em dashes with a hyphen, collapses whitespace, and strips
    known prefixes such as "Pokemon TCG:". Idempotent.
    """
    if not text:
        return ""
    cleaned = DASH_PATTERN.sub("-", text)
    cleaned = WHITESPACE_PATTERN.sub(" ", cleaned).strip()
    return strip_prefixes(cleaned).strip()


def expand_abbreviations(text: str) -> str:
    """
    Expand shorthand like "ETB" into the catalog's wording.

    Only whole words are replaced, so "BB" expands but "BBQ" does not.
    """
    expanded = text
    for pattern, full in _ABBREVIATION_PATTERNS:
        expanded = pattern.sub(full, expanded)
    return expanded


def clean_product_name(name: str) -> str:
    """Normalize a product name pulled from a message and expand abbreviations."""
    return expand_abbreviations(normalize(name))
