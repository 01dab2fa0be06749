"""Shared pytest fixtures for restock-price-bot tests."""

from datetime import UTC, datetime

import pytest

from restock_price_bot.models import Price, ProductWithPrice


@pytest.fixture
def now():
    """A fixed 'current time' for recency and cache-window tests."""
    return datetime(2025, 6, 15, 12, 0, tzinfo=UTC)


@pytest.fixture
def sample_records():
    """A small catalog spanning a few sets and product types."""
    return [
        ProductWithPrice(
            product_id=502000,
            name="Scarlet & Violet 151 Elite Trainer Box",
            clean_name="Scarlet Violet 151 Elite Trainer Box",
            image_url="https://tcgplayer-cdn.tcgplayer.com/product/502000_200w.jpg",
            group_id=23237,
            url="https://www.tcgplayer.com/product/502000/pokemon-sv-151-elite-trainer-box",
            prices=[
                Price(product_id=502000, sub_type_name="Normal", market_price=89.99, low_price=79.5),
            ],
            group_name="SV: Scarlet & Violet 151",
        ),
        ProductWithPrice(
            product_id=565606,
            name="Surging Sparks Booster Box",
            clean_name="Surging Sparks Booster Box",
            group_id=23651,
            url="",
            prices=[
                Price(product_id=565606, sub_type_name="Normal", market_price=245.0),
            ],
            group_name="SV08: Surging Sparks",
        ),
        ProductWithPrice(
            product_id=517045,
            name="Charizard ex Super Premium Collection",
            clean_name="Charizard ex Super Premium Collection",
            group_id=1,
            prices=[],
            group_name="Miscellaneous Cards & Products",
        ),
        ProductWithPrice(
            product_id=593355,
            name="Prismatic Evolutions Elite Trainer Box",
            clean_name="Prismatic Evolutions Elite Trainer Box",
            group_id=23821,
            prices=[
                Price(product_id=593355, sub_type_name="Holofoil", market_price=120.0),
                Price(product_id=593355, sub_type_name="Normal", market_price=99.0),
            ],
            group_name="SV: Prismatic Evolutions",
        ),
    ]
