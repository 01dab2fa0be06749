"""
restock-price-bot: Market price lookups for trading card restock alerts.

Watches chat messages for Pokemon TCG restock announcements, fuzzy-matches
the announced product against the TCGplayer catalog (via tcgcsv.com) and
replies with current market pricing.
"""

__version__ = "0.1.0"
