"""
Catalog snapshot cache and rebuild procedure.

A CatalogSnapshot bundles every ProductWithPrice record with the fuzzy index
built over it. Snapshots are never modified: a rebuild produces a new one and
CatalogCache swaps the reference once the rebuild has finished, so queries
always see either the old snapshot or the new one.
"""

import asyncio
import json
import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any, Protocol

from .config import CatalogConfig
from .index import CatalogIndex
from .models import Group, Price, Product, ProductWithPrice
from .tcgcsv import RemoteFetchError

logger = logging.getLogger(__name__)


class CatalogFetcher(Protocol):
    """What the rebuild needs from a catalog client (see TcgCsvClient)."""

    async def fetch_groups(self) -> list[Group]: ...

    async def fetch_products(self, group_id: int) -> list[Product]: ...

    async def fetch_prices(self, group_id: int) -> list[Price]: ...


class CacheState(str, Enum):
    """Lifecycle of the cached catalog."""

    EMPTY = "empty"
    FRESH = "fresh"
    STALE = "stale"
    REBUILDING = "rebuilding"


@dataclass
class CatalogSnapshot:
    """Products, their search index and the time they were fetched."""

    records: tuple[ProductWithPrice, ...] = ()
    index: CatalogIndex = field(default_factory=lambda: CatalogIndex([]))
    groups: tuple[Group, ...] = ()
    built_at: datetime | None = None

    @property
    def is_empty(self) -> bool:
        """True until a rebuild has completed."""
        return self.built_at is None

    def search(self, query: str, limit: int = 5) -> list[ProductWithPrice]:
        return self.index.search(query, limit)


@dataclass
class RefreshResult:
    """Outcome of a refresh request."""

    success: bool
    skipped: bool = False
    message: str | None = None
    groups_fetched: int = 0
    groups_retained: int = 0  # Groups whose products made it into the snapshot
    failed_groups: list[str] = field(default_factory=list)
    products_loaded: int = 0
    orphan_prices: int = 0
    built_at: datetime | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "success": self.success,
            "skipped": self.skipped,
            "groups_fetched": self.groups_fetched,
            "groups_retained": self.groups_retained,
            "failed_groups": self.failed_groups,
            "products_loaded": self.products_loaded,
            "orphan_prices": self.orphan_prices,
        }
        if self.message:
            result["message"] = self.message
        if self.built_at:
            result["built_at"] = self.built_at.isoformat()
        if self.error:
            result["error"] = self.error
        return result

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=None)


def years_before(moment: datetime, years: int) -> datetime:
    """Same calendar day ``years`` earlier (Feb 29 falls back to Feb 28)."""
    try:
        return moment.replace(year=moment.year - years)
    except ValueError:
        return moment.replace(year=moment.year - years, day=28)


def select_recent_groups(groups: list[Group], now: datetime, recency_years: int) -> list[Group]:
    """
    Keep groups published within the recency window, newest first.

    Groups without a publish date are dropped. The sort is stable, so groups
    published at the same moment keep their fetch order.
    """
    cutoff = years_before(now, recency_years)
    recent = [g for g in groups if g.published_on is not None and g.published_on > cutoff]
    recent.sort(key=lambda g: g.published_on, reverse=True)
    return recent


def join_prices(
    products: list[Product],
    prices: list[Price],
    group_name: str,
) -> tuple[list[ProductWithPrice], int]:
    """
    Attach each product's price rows and the group name.

    Returns the joined records and the number of price rows whose product
    was not in the product list (those rows are dropped).
    """
    price_map: dict[int, list[Price]] = defaultdict(list)
    for price in prices:
        price_map[price.product_id].append(price)

    records = [
        ProductWithPrice.from_product(product, price_map.get(product.product_id, []), group_name)
        for product in products
    ]

    product_ids = {p.product_id for p in products}
    orphans = sum(len(rows) for pid, rows in price_map.items() if pid not in product_ids)
    return records, orphans


async def _fetch_group(fetcher: CatalogFetcher, group_id: int) -> tuple[list[Product], list[Price]]:
    """
    Fetch a group's products and prices together.

    Both requests finish before this returns, even when one of them fails;
    the first failure is then re-raised.
    """
    products, prices = await asyncio.gather(
        fetcher.fetch_products(group_id),
        fetcher.fetch_prices(group_id),
        return_exceptions=True,
    )
    for outcome in (products, prices):
        if isinstance(outcome, BaseException):
            raise outcome
    return products, prices


async def build_snapshot(
    fetcher: CatalogFetcher,
    config: CatalogConfig,
    now: datetime,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> tuple[CatalogSnapshot, RefreshResult]:
    """
    Fetch the catalog and build a new snapshot.

    Groups are processed one at a time with a pacing delay in between; a
    group's products and prices are fetched together. A failure for one
    group skips that group. A failure fetching the group list propagates.
    """
    logger.info("Fetching Pokemon TCG data from tcgcsv.com...")

    groups = await fetcher.fetch_groups()
    logger.info(f"Fetched {len(groups)} Pokemon TCG groups/sets")

    recent_groups = select_recent_groups(groups, now, config.recency_years)
    logger.info(f"Processing {len(recent_groups)} recent groups...")

    records: list[ProductWithPrice] = []
    retained: list[Group] = []
    failed: list[str] = []
    orphan_prices = 0

    for group in recent_groups:
        try:
            await sleep(config.pacing_seconds)
            products, prices = await _fetch_group(fetcher, group.group_id)
        except RemoteFetchError:
            logger.exception(f"Error fetching group {group.name}")
            failed.append(group.name)
            continue

        joined, orphans = join_prices(products, prices, group.name)
        if orphans:
            logger.debug(f"Dropped {orphans} price row(s) without a product in {group.name}")
        records.extend(joined)
        retained.append(group)
        orphan_prices += orphans

    logger.info(f"Loaded {len(records)} products with prices")

    index = CatalogIndex.build(
        records,
        threshold=config.fuzzy_threshold,
        min_match_char_length=config.min_match_char_length,
    )
    snapshot = CatalogSnapshot(
        records=index.records,
        index=index,
        groups=tuple(retained),
        built_at=now,
    )
    result = RefreshResult(
        success=True,
        message=f"Loaded {len(records)} products from {len(retained)} groups",
        groups_fetched=len(groups),
        groups_retained=len(retained),
        failed_groups=failed,
        products_loaded=len(records),
        orphan_prices=orphan_prices,
        built_at=now,
    )
    return snapshot, result


class CatalogCache:
    """
    Owns the current catalog snapshot and decides when to rebuild it.

    EMPTY until the first successful rebuild, FRESH within the validity
    window, STALE after it, REBUILDING while a rebuild runs. During a
    rebuild the previous snapshot keeps answering queries.
    """

    def __init__(
        self,
        fetcher: CatalogFetcher,
        config: CatalogConfig | None = None,
        clock: Callable[[], datetime] | None = None,
        sleep: Callable[[float], Awaitable[Any]] | None = None,
    ):
        """
        Initialize the cache.

        Args:
            fetcher: Catalog client (TcgCsvClient in production)
            config: Catalog configuration
            clock: Returns the current time (for testing)
            sleep: Pacing coroutine (for testing)
        """
        self.fetcher = fetcher
        self.config = config or CatalogConfig()
        self._clock = clock or (lambda: datetime.now(UTC))
        self._sleep = sleep or asyncio.sleep
        self._snapshot = CatalogSnapshot()
        self._rebuild_task: asyncio.Task | None = None

    @property
    def snapshot(self) -> CatalogSnapshot:
        return self._snapshot

    @property
    def validity_window(self) -> timedelta:
        return timedelta(hours=self.config.cache_validity_hours)

    @property
    def is_rebuilding(self) -> bool:
        return self._rebuild_task is not None and not self._rebuild_task.done()

    @property
    def state(self) -> CacheState:
        if self.is_rebuilding:
            return CacheState.REBUILDING
        if self._snapshot.is_empty:
            return CacheState.EMPTY
        if self.needs_refresh():
            return CacheState.STALE
        return CacheState.FRESH

    def needs_refresh(self, now: datetime | None = None) -> bool:
        """True when nothing is cached or the snapshot has outlived its window."""
        built_at = self._snapshot.built_at
        if built_at is None:
            return True
        now = now or self._clock()
        return now - built_at >= self.validity_window

    async def refresh(self, force: bool = False) -> RefreshResult:
        """
        Rebuild the snapshot if forced or stale.

        Joins a rebuild that is already running instead of starting another.
        """
        if self.is_rebuilding:
            logger.info("Rebuild already in progress, waiting for it")
            return await asyncio.shield(self._rebuild_task)

        if not force and not self.needs_refresh():
            logger.info("Using cached product data")
            return RefreshResult(
                success=True,
                skipped=True,
                message="Using cached product data",
                groups_retained=len(self._snapshot.groups),
                products_loaded=len(self._snapshot.records),
                built_at=self._snapshot.built_at,
            )

        self._rebuild_task = asyncio.ensure_future(self._rebuild())
        return await asyncio.shield(self._rebuild_task)

    async def search(self, query: str, limit: int | None = None) -> list[ProductWithPrice]:
        """
        Search the catalog, rebuilding first if the snapshot is stale.

        While a rebuild is already running, answers from the current snapshot.
        """
        if self.needs_refresh() and not self.is_rebuilding:
            await self.refresh()
        return self.search_cached(query, limit)

    def search_cached(self, query: str, limit: int | None = None) -> list[ProductWithPrice]:
        """Search the current snapshot without ever triggering a rebuild."""
        snapshot = self._snapshot
        if snapshot.is_empty:
            logger.warning("Product data not initialized")
            return []
        if limit is None:
            limit = self.config.search_limit
        return snapshot.search(query, limit)

    async def _rebuild(self) -> RefreshResult:
        now = self._clock()
        try:
            snapshot, result = await build_snapshot(self.fetcher, self.config, now, self._sleep)
        except RemoteFetchError as e:
            logger.exception("Catalog rebuild failed, keeping previous snapshot")
            return RefreshResult(
                success=False,
                message="Could not fetch the group list",
                error=str(e),
            )

        self._snapshot = snapshot
        logger.info(f"Catalog snapshot published: {result.products_loaded} products")
        return result
