"""
Reply rendering for price lookups.

Replies are plain dataclasses shaped like a chat embed (title, link,
thumbnail, fields, footer). A chat client adapter maps them onto its own
embed type; the CLI prints them with to_text().
"""

import re
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from .models import ProductWithPrice, format_money

POKEMON_YELLOW = 0xFFCB05
FOOTER_TEXT = "Data from TCGplayer via tcgcsv.com"
MAX_LISTED_RESULTS = 5


@dataclass
class ReplyField:
    """A named block of reply text."""

    name: str
    value: str
    inline: bool = False


@dataclass
class Reply:
    """A formatted reply to a chat message."""

    title: str | None = None
    description: str | None = None
    url: str | None = None
    thumbnail_url: str | None = None
    color: int = POKEMON_YELLOW
    fields: list[ReplyField] = field(default_factory=list)
    footer: str | None = None
    timestamp: datetime | None = None

    def add_field(self, name: str, value: str, inline: bool = False) -> "Reply":
        self.fields.append(ReplyField(name=name, value=value, inline=inline))
        return self

    def get_field(self, name: str) -> str | None:
        for reply_field in self.fields:
            if reply_field.name == name:
                return reply_field.value
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {"color": self.color}
        if self.title:
            result["title"] = self.title
        if self.description:
            result["description"] = self.description
        if self.url:
            result["url"] = self.url
        if self.thumbnail_url:
            result["thumbnail_url"] = self.thumbnail_url
        if self.fields:
            result["fields"] = [
                {"name": f.name, "value": f.value, "inline": f.inline} for f in self.fields
            ]
        if self.footer:
            result["footer"] = self.footer
        if self.timestamp:
            result["timestamp"] = self.timestamp.isoformat()
        return result

    def to_text(self) -> str:
        """Plain-text rendering for terminals and logs."""
        lines: list[str] = []
        if self.title:
            lines.append(self.title)
        if self.url:
            lines.append(self.url)
        if self.description:
            lines.append(self.description)
        for reply_field in self.fields:
            lines.append("")
            lines.append(f"{reply_field.name}:")
            lines.extend(f"  {line}" for line in reply_field.value.split("\n"))
        if self.footer:
            lines.append("")
            lines.append(self.footer)
        return "\n".join(lines)


@dataclass
class RetailComparison:
    """Market price relative to a retail price."""

    retail_price: float
    difference: float
    percent: float

    def describe(self) -> str:
        """E.g. "📈 Market is +$12.50 (+25.0%) vs retail"."""
        if self.difference > 0:
            indicator, sign = "📈", "+"
        elif self.difference < 0:
            indicator, sign = "📉", "-"
        else:
            indicator, sign = "➖", ""
        return (
            f"{indicator} Market is {sign}{format_money(abs(self.difference))} "
            f"({sign}{abs(self.percent):.1f}%) vs retail"
        )


def parse_retail_price(text: str | None) -> float | None:
    """Read a dollar amount like "$49.99" out of a retailer's price field."""
    if not text or "$" not in text:
        return None
    digits = re.sub(r"[^0-9.]", "", text)
    try:
        return float(digits)
    except ValueError:
        return None


def retail_comparison(market_price: float | None, retail_price: str | None) -> RetailComparison | None:
    """Compare a market price with a retail price string, if both are usable."""
    if not market_price:
        return None
    retail = parse_retail_price(retail_price)
    if not retail:
        return None
    difference = market_price - retail
    return RetailComparison(
        retail_price=retail,
        difference=difference,
        percent=difference / retail * 100,
    )


def render_price_reply(product: ProductWithPrice, retail_price: str | None = None) -> Reply:
    """Detailed reply for a single product."""
    reply = Reply(
        title=product.name,
        url=product.canonical_url(),
        thumbnail_url=product.image_url or None,
        footer=FOOTER_TEXT,
        timestamp=datetime.now(UTC),
    )

    main_price = product.primary_price()
    if main_price is not None:
        price_lines = [
            f"**{label}:** {format_money(value)}" for label, value in main_price.labelled_prices()
        ]
        if price_lines:
            reply.add_field("TCGplayer Prices", "\n".join(price_lines), inline=True)

    if retail_price and retail_price != "N/A":
        reply.add_field("Retail Price", retail_price, inline=True)

        comparison = retail_comparison(
            main_price.market_price if main_price else None,
            retail_price,
        )
        if comparison is not None:
            reply.add_field("Value Comparison", comparison.describe())

    reply.add_field("Set", product.group_name or "Unknown", inline=True)
    return reply


def render_search_results(query: str, results: list[ProductWithPrice]) -> Reply:
    """Ranked list of candidate products for an ambiguous query."""
    if results:
        description = f"Found {len(results)} matching product(s):"
    else:
        description = "No matching products found."

    reply = Reply(
        title=f'Search Results: "{query}"',
        description=description,
        footer=FOOTER_TEXT,
        timestamp=datetime.now(UTC),
    )
    for rank, product in enumerate(results[:MAX_LISTED_RESULTS], 1):
        reply.add_field(
            f"{rank}. {product.name}",
            f"{product.short_price()}\n[View on TCGplayer]({product.canonical_url()})",
        )
    return reply


def render_no_results(query: str) -> Reply:
    return Reply(
        description=f'No products found matching "{query}". Try a different search term.'
    )


def render_usage(command_prefix: str) -> Reply:
    return Reply(
        description=(
            "Please provide a product name to search. "
            f"Example: `{command_prefix} Scarlet Violet Booster Box`"
        )
    )
