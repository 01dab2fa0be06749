"""
Data models for the TCGplayer catalog as served by tcgcsv.com.

The API returns camelCase JSON; each model parses it with from_dict() and
serializes back with to_dict().
"""

from dataclasses import dataclass, field, fields
from datetime import UTC, datetime
from typing import Any

NORMAL_SUB_TYPE = "Normal"
PRODUCT_URL_FALLBACK = "https://www.tcgplayer.com/product/{product_id}"
NO_PRICE_DATA = "No price data available"
NO_PRICE_DATA_SHORT = "No price data"


def parse_timestamp(value: str | None) -> datetime | None:
    """
    Parse an API timestamp such as "2024-01-26T00:00:00".

    Naive values are treated as UTC. Returns None for missing or
    unparseable values.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except (TypeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def format_money(value: float) -> str:
    return f"${value:.2f}"


def _optional_float(value: Any) -> float | None:
    if value is None:
        return None
    return float(value)


@dataclass
class Group:
    """A set or release period grouping catalog products."""

    group_id: int
    name: str
    abbreviation: str | None = None
    published_on: datetime | None = None
    modified_on: datetime | None = None
    category_id: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Group":
        """Create from API response dictionary."""
        return cls(
            group_id=int(data["groupId"]),
            name=data.get("name", ""),
            abbreviation=data.get("abbreviation"),
            published_on=parse_timestamp(data.get("publishedOn")),
            modified_on=parse_timestamp(data.get("modifiedOn")),
            category_id=data.get("categoryId"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "groupId": self.group_id,
            "name": self.name,
        }
        if self.abbreviation:
            result["abbreviation"] = self.abbreviation
        if self.published_on:
            result["publishedOn"] = self.published_on.isoformat()
        if self.modified_on:
            result["modifiedOn"] = self.modified_on.isoformat()
        if self.category_id is not None:
            result["categoryId"] = self.category_id
        return result


@dataclass
class Price:
    """A price quote for one product sub-type (Normal, Holofoil, ...)."""

    product_id: int
    sub_type_name: str | None = None
    low_price: float | None = None
    mid_price: float | None = None
    high_price: float | None = None
    market_price: float | None = None
    direct_low_price: float | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Price":
        """Create from API response dictionary."""
        return cls(
            product_id=int(data["productId"]),
            sub_type_name=data.get("subTypeName") or None,
            low_price=_optional_float(data.get("lowPrice")),
            mid_price=_optional_float(data.get("midPrice")),
            high_price=_optional_float(data.get("highPrice")),
            market_price=_optional_float(data.get("marketPrice")),
            direct_low_price=_optional_float(data.get("directLowPrice")),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "productId": self.product_id,
            "subTypeName": self.sub_type_name,
            "lowPrice": self.low_price,
            "midPrice": self.mid_price,
            "highPrice": self.high_price,
            "marketPrice": self.market_price,
            "directLowPrice": self.direct_low_price,
        }

    def labelled_prices(self) -> list[tuple[str, float]]:
        """Non-null prices in display order."""
        candidates = [
            ("Market", self.market_price),
            ("Low", self.low_price),
            ("Mid", self.mid_price),
            ("High", self.high_price),
        ]
        return [(label, value) for label, value in candidates if value is not None]


@dataclass
class Product:
    """A catalog entry (single card, booster box, ETB, ...)."""

    product_id: int
    name: str
    clean_name: str = ""
    image_url: str | None = None
    category_id: int | None = None
    group_id: int | None = None
    url: str | None = None
    modified_on: datetime | None = None
    extended_data: list[dict[str, str]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Product":
        """Create from API response dictionary."""
        return cls(
            product_id=int(data["productId"]),
            name=data.get("name", ""),
            clean_name=data.get("cleanName") or "",
            image_url=data.get("imageUrl"),
            category_id=data.get("categoryId"),
            group_id=data.get("groupId"),
            url=data.get("url"),
            modified_on=parse_timestamp(data.get("modifiedOn")),
            extended_data=data.get("extendedData") or [],
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "productId": self.product_id,
            "name": self.name,
            "cleanName": self.clean_name,
        }
        if self.image_url:
            result["imageUrl"] = self.image_url
        if self.category_id is not None:
            result["categoryId"] = self.category_id
        if self.group_id is not None:
            result["groupId"] = self.group_id
        if self.url:
            result["url"] = self.url
        if self.modified_on:
            result["modifiedOn"] = self.modified_on.isoformat()
        if self.extended_data:
            result["extendedData"] = self.extended_data
        return result


@dataclass
class ProductWithPrice(Product):
    """
    A product joined with all of its prices and its set name.

    This is the record the fuzzy index searches over and returns.
    """

    prices: list[Price] = field(default_factory=list)
    group_name: str = ""

    @classmethod
    def from_product(
        cls,
        product: Product,
        prices: list[Price],
        group_name: str,
    ) -> "ProductWithPrice":
        """Attach prices and group name to a product."""
        values = {f.name: getattr(product, f.name) for f in fields(Product)}
        return cls(**values, prices=list(prices), group_name=group_name)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = super().to_dict()
        result["prices"] = [p.to_dict() for p in self.prices]
        result["groupName"] = self.group_name
        return result

    def primary_price(self) -> Price | None:
        """The "Normal" price if present, otherwise the first one."""
        for price in self.prices:
            if price.sub_type_name == NORMAL_SUB_TYPE:
                return price
        return self.prices[0] if self.prices else None

    def format_price_summary(self) -> str:
        """Render the primary price as "Market: $1.00 | Low: $0.50 | ..."."""
        main_price = self.primary_price()
        if main_price is None:
            return NO_PRICE_DATA
        summary = " | ".join(
            f"{label}: {format_money(value)}" for label, value in main_price.labelled_prices()
        )
        return summary or NO_PRICE_DATA

    def short_price(self) -> str:
        """Market price only, for compact result listings."""
        main_price = self.primary_price()
        if main_price is None or main_price.market_price is None:
            return NO_PRICE_DATA_SHORT
        return f"Market: {format_money(main_price.market_price)}"

    def canonical_url(self) -> str:
        """The catalog's own product URL, or one built from the product ID."""
        return self.url or PRODUCT_URL_FALLBACK.format(product_id=self.product_id)
