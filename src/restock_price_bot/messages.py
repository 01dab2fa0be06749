"""
Chat message model and product-name extraction.

Chat client adapters convert incoming platform events into ChatMessage
objects; everything downstream works on these plain dataclasses.
"""

from dataclasses import dataclass, field
from typing import Any

from .classifier import is_domain_product

# Lines shorter than this are too short to be a product name
MIN_MENTION_LENGTH = 10


@dataclass
class EmbedField:
    """A named field inside an embed."""

    name: str
    value: str
    inline: bool = False


@dataclass
class Embed:
    """Rich content block attached to a message (restock monitors use these)."""

    title: str | None = None
    description: str | None = None
    author_name: str | None = None
    footer_text: str | None = None
    fields: list[EmbedField] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Embed":
        """Create from a dictionary (e.g., a serialized platform embed)."""
        author = data.get("author") or {}
        footer = data.get("footer") or {}
        return cls(
            title=data.get("title"),
            description=data.get("description"),
            author_name=author.get("name") if isinstance(author, dict) else author,
            footer_text=footer.get("text") if isinstance(footer, dict) else footer,
            fields=[
                EmbedField(
                    name=f.get("name", ""),
                    value=f.get("value", ""),
                    inline=f.get("inline", False),
                )
                for f in data.get("fields") or []
            ],
        )

    def get_field(self, name: str) -> str | None:
        """Value of the first field with this name (case-insensitive)."""
        wanted = name.lower()
        for embed_field in self.fields:
            if embed_field.name.lower() == wanted:
                return embed_field.value
        return None


@dataclass
class ChatMessage:
    """An incoming chat message."""

    content: str = ""
    author_id: str | None = None
    author_name: str | None = None
    channel_id: str | None = None
    embeds: list[Embed] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChatMessage":
        """Create from a dictionary."""
        return cls(
            content=data.get("content") or "",
            author_id=data.get("author_id"),
            author_name=data.get("author_name"),
            channel_id=data.get("channel_id"),
            embeds=[Embed.from_dict(e) for e in data.get("embeds") or []],
        )

    def searchable_text(self) -> str:
        """Message content plus every embed title."""
        titles = " ".join(e.title or "" for e in self.embeds)
        return f"{self.content} {titles}"


@dataclass
class ProductMention:
    """A product name found in a message, with the retail price if given."""

    name: str
    retail_price: str | None = None


@dataclass
class RestockAnnouncement:
    """Structured data from a restock monitor's embed."""

    product_name: str
    retailer: str
    price: str | None = None
    type: str | None = None
    stock: str | None = None
    tcin: str | None = None
    raw_title: str = ""


def _qualifies(line: str) -> bool:
    return len(line) > MIN_MENTION_LENGTH and is_domain_product(line)


def extract_product_mentions(message: ChatMessage) -> list[ProductMention]:
    """
    Find candidate product names in a message.

    Looks at embed titles (with the embed's Price field as retail price),
    embed description lines, then plain content lines. If the content
    mentions a product but no single line qualifies, the whole content is
    used.
    """
    mentions: list[ProductMention] = []

    for embed in message.embeds:
        if embed.title and is_domain_product(embed.title):
            mentions.append(
                ProductMention(name=embed.title, retail_price=embed.get_field("price"))
            )
        if embed.description:
            for line in embed.description.split("\n"):
                if _qualifies(line):
                    mentions.append(ProductMention(name=line.strip()))

    content = message.content.strip()
    if content and is_domain_product(content):
        for line in content.split("\n"):
            trimmed = line.strip()
            if _qualifies(trimmed):
                mentions.append(ProductMention(name=trimmed))

        if not mentions and len(content) > MIN_MENTION_LENGTH:
            mentions.append(ProductMention(name=content))

    return mentions


def parse_restock_embed(message: ChatMessage) -> RestockAnnouncement | None:
    """
    Parse the first embed of a restock monitor message.

    Returns None when there is no embed, no product name, or the product
    isn't Pokemon TCG.
    """
    if not message.embeds:
        return None

    embed = message.embeds[0]

    product_name = embed.title or ""
    if not product_name and embed.description:
        # Some monitors put the product name on the first description line
        product_name = embed.description.split("\n")[0]

    if not product_name or not is_domain_product(product_name):
        return None

    retailer = "Unknown"
    if embed.author_name:
        retailer = embed.author_name
    elif embed.footer_text:
        retailer = embed.footer_text.split("|")[0].strip()
    elif message.author_name:
        retailer = message.author_name

    return RestockAnnouncement(
        product_name=product_name,
        retailer=retailer,
        price=embed.get_field("price"),
        type=embed.get_field("type"),
        stock=embed.get_field("total stock") or embed.get_field("stock"),
        tcin=embed.get_field("tcin"),
        raw_title=product_name,
    )
