"""
Message classification for restock announcements.

Cheap substring checks that decide whether a message is about Pokemon TCG
product at all, whether it should be ignored, and whether it came from a
known restock monitor.
"""

# Known restock bot identifiers
RESTOCK_BOT_NAMES = (
    "target restocks",
    "walmart restocks",
    "best buy restocks",
    "amazon restocks",
    "gamestop restocks",
    "zephyr monitors",
    "restock alerts",
)

# Terms that mean there is nothing to price (e.g. queue-only alerts)
SKIP_TERMS = ("queue",)

DOMAIN_KEYWORDS = (
    "pokémon",
    "pokemon",
    "pikachu",
    "charizard",
    "booster",
    "elite trainer box",
    "etb",
    "tcg",
    "trading card",
    "scarlet",
    "violet",
    "paldea",
    "obsidian flames",
    "paradox rift",
    "temporal forces",
    "twilight masquerade",
    "shrouded fable",
    "stellar crown",
    "surging sparks",
    "prismatic evolutions",
    "destined rivals",
)


def _contains_any(text: str | None, terms: tuple[str, ...]) -> bool:
    if not text:
        return False
    lower_text = text.lower()
    return any(term in lower_text for term in terms)


def is_domain_product(text: str | None) -> bool:
    """Check whether text mentions a Pokemon TCG product."""
    return _contains_any(text, DOMAIN_KEYWORDS)


def should_skip(text: str | None) -> bool:
    """Check whether a message should be ignored entirely."""
    return _contains_any(text, SKIP_TERMS)


def is_known_source_bot(author_name: str | None) -> bool:
    """Check whether the author is a recognized restock monitor."""
    return _contains_any(author_name, RESTOCK_BOT_NAMES)
