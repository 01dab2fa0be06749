"""
tcgcsv.com API client for restock-price-bot.

tcgcsv.com mirrors TCGplayer's catalog as plain JSON, one document per
category/group. No authentication is required.

Endpoints:
    GET {base}/{vertical}/{category}/groups
    GET {base}/{vertical}/{category}/{group_id}/products
    GET {base}/{vertical}/{category}/{group_id}/prices
"""

import logging
from collections.abc import Callable
from typing import Any, TypeVar

import httpx

from .models import Group, Price, Product

logger = logging.getLogger(__name__)

TCGCSV_BASE_URL = "https://tcgcsv.com"
TCGPLAYER_VERTICAL = "tcgplayer"
POKEMON_CATEGORY_ID = 3

T = TypeVar("T")


class RemoteFetchError(Exception):
    """A catalog request failed (non-2xx status or transport error)."""

    def __init__(self, message: str, status_code: int | None = None, url: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class MalformedResponseError(RemoteFetchError):
    """The catalog answered with JSON we don't know how to read."""


def extract_results(data: Any) -> list[Any]:
    """
    Unwrap a tcgcsv response body.

    Accepts either a bare array or an object with a "results" array.
    """
    if isinstance(data, list):
        return data
    if isinstance(data, dict) and isinstance(data.get("results"), list):
        return data["results"]
    raise MalformedResponseError(
        f"Expected a list or an object with 'results', got {type(data).__name__}"
    )


class TcgCsvClient:
    """
    Client for the tcgcsv.com catalog mirror.

    Each call opens its own HTTP client and performs a single GET. Nothing
    is retried here; callers decide what a failure means.
    """

    def __init__(
        self,
        base_url: str = TCGCSV_BASE_URL,
        vertical: str = TCGPLAYER_VERTICAL,
        category_id: int = POKEMON_CATEGORY_ID,
        timeout_seconds: float = 30.0,
    ):
        """
        Initialize the tcgcsv client.

        Args:
            base_url: API root, e.g. "https://tcgcsv.com"
            vertical: Catalog vertical ("tcgplayer")
            category_id: TCGplayer category (3 = Pokemon)
            timeout_seconds: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.vertical = vertical
        self.category_id = category_id
        self.timeout = timeout_seconds

    @property
    def category_url(self) -> str:
        return f"{self.base_url}/{self.vertical}/{self.category_id}"

    async def fetch_groups(self) -> list[Group]:
        """Fetch every group (set) in the category."""
        url = f"{self.category_url}/groups"
        return await self._fetch_list(url, Group.from_dict, "groups")

    async def fetch_products(self, group_id: int) -> list[Product]:
        """Fetch all products belonging to a group."""
        url = f"{self.category_url}/{group_id}/products"
        return await self._fetch_list(url, Product.from_dict, f"products for group {group_id}")

    async def fetch_prices(self, group_id: int) -> list[Price]:
        """Fetch all price rows for a group's products."""
        url = f"{self.category_url}/{group_id}/prices"
        return await self._fetch_list(url, Price.from_dict, f"prices for group {group_id}")

    async def _fetch_list(
        self,
        url: str,
        parse: Callable[[dict[str, Any]], T],
        what: str,
    ) -> list[T]:
        """GET a URL and parse each element of its result list."""
        logger.debug(f"Fetching {what}: {url}")

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.get(url, follow_redirects=True)
            except httpx.HTTPError as e:
                raise RemoteFetchError(f"Failed to fetch {what}: {e}", url=url) from e

        if not 200 <= response.status_code < 300:
            raise RemoteFetchError(
                f"Failed to fetch {what}: {response.status_code}",
                status_code=response.status_code,
                url=url,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponseError(f"Invalid JSON for {what}", url=url) from e

        items = extract_results(data)
        try:
            return [parse(item) for item in items]
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise MalformedResponseError(f"Unexpected record shape in {what}: {e}", url=url) from e
