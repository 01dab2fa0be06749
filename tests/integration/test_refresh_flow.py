"""
End-to-end tests: tcgcsv responses -> catalog snapshot -> bot replies.

httpx.AsyncClient is patched with a router that serves canned tcgcsv JSON
by URL, so everything from the client down runs for real.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from restock_price_bot.cache import CacheState, CatalogCache
from restock_price_bot.config import BotConfig, CatalogConfig
from restock_price_bot.handler import PriceBot
from restock_price_bot.messages import ChatMessage, Embed, EmbedField
from restock_price_bot.tcgcsv import TcgCsvClient

BASE = "https://tcgcsv.com/tcgplayer/3"

ROUTES = {
    f"{BASE}/groups": {
        "totalItems": 4,
        "success": True,
        "errors": [],
        "results": [
            {"groupId": 604, "name": "Base Set", "publishedOn": "1999-01-09T00:00:00"},
            {"groupId": 23651, "name": "SV08: Surging Sparks", "publishedOn": "2024-11-08T00:00:00"},
            {"groupId": 23821, "name": "SV: Prismatic Evolutions", "publishedOn": "2025-01-17T00:00:00"},
            {"groupId": 24000, "name": "SV10: Destined Rivals", "publishedOn": "2025-05-30T00:00:00"},
        ],
    },
    f"{BASE}/23651/products": {
        "results": [
            {
                "productId": 565606,
                "name": "Surging Sparks Booster Box",
                "cleanName": "Surging Sparks Booster Box",
                "imageUrl": "https://tcgplayer-cdn.tcgplayer.com/product/565606_200w.jpg",
                "groupId": 23651,
                "url": "https://www.tcgplayer.com/product/565606/pokemon-sv08-surging-sparks-surging-sparks-booster-box",
            },
            {
                "productId": 565630,
                "name": "Surging Sparks Elite Trainer Box",
                "cleanName": "Surging Sparks Elite Trainer Box",
                "groupId": 23651,
            },
        ]
    },
    f"{BASE}/23651/prices": [
        {"productId": 565606, "subTypeName": "Normal", "marketPrice": 245.5, "lowPrice": 229.99},
        {"productId": 565630, "subTypeName": "Normal", "marketPrice": 58.0},
        {"productId": 999999, "subTypeName": "Normal", "marketPrice": 1.0},
    ],
    f"{BASE}/23821/products": [
        {
            "productId": 593355,
            "name": "Prismatic Evolutions Elite Trainer Box",
            "cleanName": "Prismatic Evolutions Elite Trainer Box",
            "groupId": 23821,
        }
    ],
    f"{BASE}/23821/prices": [
        {"productId": 593355, "subTypeName": "Normal", "marketPrice": 99.0},
    ],
}

# Destined Rivals is recent but its endpoints are failing
FAILING = {f"{BASE}/24000/products": 500, f"{BASE}/24000/prices": 500}


def _route(url, follow_redirects=True):
    response = MagicMock()
    if url in FAILING:
        response.status_code = FAILING[url]
        response.json.return_value = {}
    elif url in ROUTES:
        response.status_code = 200
        response.json.return_value = ROUTES[url]
    else:
        response.status_code = 404
        response.json.return_value = {}
    return response


@pytest.fixture
def mock_http():
    """Patch httpx.AsyncClient with the URL router."""
    with patch("httpx.AsyncClient") as MockClient:
        mock_client = AsyncMock()
        mock_client.__aenter__.return_value = mock_client
        mock_client.__aexit__.return_value = None
        mock_client.get.side_effect = _route
        MockClient.return_value = mock_client
        yield mock_client


@pytest.fixture
def cache(now):
    return CatalogCache(
        TcgCsvClient(),
        CatalogConfig(pacing_seconds=0),
        clock=lambda: now,
        sleep=AsyncMock(),
    )


@pytest.fixture
def bot(cache):
    return PriceBot(cache, BotConfig(token="t", monitored_channels=["100"]))


def _requested_urls(mock_http):
    return [call.args[0] for call in mock_http.get.await_args_list]


class TestRefreshFlow:
    """Test a full catalog rebuild through the real client."""

    @pytest.mark.asyncio
    async def test_refresh_loads_recent_groups(self, mock_http, cache, now):
        result = await cache.refresh()

        assert result.success
        assert result.groups_fetched == 4
        assert result.groups_retained == 2
        assert result.failed_groups == ["SV10: Destined Rivals"]
        assert result.products_loaded == 3
        assert result.orphan_prices == 1
        assert result.built_at == now
        assert cache.state == CacheState.FRESH

    @pytest.mark.asyncio
    async def test_old_groups_never_requested(self, mock_http, cache):
        await cache.refresh()

        urls = _requested_urls(mock_http)
        assert not any("/604/" in url for url in urls)
        assert urls[0] == f"{BASE}/groups"

    @pytest.mark.asyncio
    async def test_group_list_failure(self, mock_http, cache):
        mock_http.get.side_effect = lambda url, follow_redirects=True: MagicMock(status_code=503)

        result = await cache.refresh()

        assert not result.success
        assert "503" in result.error
        assert cache.state == CacheState.EMPTY


class TestBotFlow:
    """Test bot replies over a catalog built from tcgcsv data."""

    @pytest.mark.asyncio
    async def test_price_command(self, mock_http, bot):
        replies = await bot.handle_message(ChatMessage(content="!price Surging Sparks Booster Box"))

        assert len(replies) == 1
        reply = replies[0]
        assert reply.title == "Surging Sparks Booster Box"
        assert reply.url.startswith("https://www.tcgplayer.com/product/565606/")
        assert reply.get_field("TCGplayer Prices") == "**Market:** $245.50\n**Low:** $229.99"
        assert reply.get_field("Set") == "SV08: Surging Sparks"

    @pytest.mark.asyncio
    async def test_restock_announcement(self, mock_http, bot):
        message = ChatMessage(
            author_name="Target Restocks",
            channel_id="100",
            embeds=[
                Embed(
                    title="Pokémon Trading Card Game: Prismatic Evolutions ETB",
                    author_name="Target",
                    fields=[EmbedField(name="Price", value="$49.99")],
                )
            ],
        )

        replies = await bot.handle_message(message)

        assert len(replies) == 1
        assert replies[0].title == "Prismatic Evolutions Elite Trainer Box"
        assert replies[0].url == "https://www.tcgplayer.com/product/593355"
        assert replies[0].get_field("Retail Price") == "$49.99"
        assert replies[0].get_field("Value Comparison").startswith("📈 Market is +$49.01")

    @pytest.mark.asyncio
    async def test_catalog_fetched_once(self, mock_http, bot):
        await bot.handle_message(ChatMessage(content="!price Surging Sparks Booster Box"))
        await bot.handle_message(ChatMessage(content="!price Prismatic Evolutions Elite Trainer Box"))

        urls = _requested_urls(mock_http)
        assert urls.count(f"{BASE}/groups") == 1
