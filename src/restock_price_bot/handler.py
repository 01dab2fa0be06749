"""
Message routing for restock-price-bot.

PriceBot turns an incoming ChatMessage into zero or more Reply objects:
explicit price commands get a detailed reply or a ranked list, restock
announcements in monitored channels get a detailed reply per product.
"""

import logging

from .cache import CatalogCache
from .classifier import is_known_source_bot, should_skip
from .config import BotConfig
from .messages import ChatMessage, ProductMention, extract_product_mentions, parse_restock_embed
from .normalizer import clean_product_name
from .replies import (
    Reply,
    render_no_results,
    render_price_reply,
    render_search_results,
    render_usage,
)

logger = logging.getLogger(__name__)

UNAVAILABLE_MESSAGE = "Price lookup is unavailable right now. Please try again later."


class PriceBot:
    """
    Chat-platform independent bot logic.

    A client adapter passes every incoming message to handle_message() and
    sends back whatever replies it returns.
    """

    def __init__(self, cache: CatalogCache, config: BotConfig):
        """
        Initialize the bot.

        Args:
            cache: Catalog cache used for all lookups
            config: Bot configuration (prefix, channels, auto-respond)
        """
        self.cache = cache
        self.config = config

    def is_monitored(self, channel_id: str | None) -> bool:
        return channel_id is not None and channel_id in self.config.monitored_channels

    async def handle_message(self, message: ChatMessage) -> list[Reply]:
        """Route a message to the command or auto-respond handler."""
        if self.config.bot_user_id and message.author_id == self.config.bot_user_id:
            return []

        if message.content.startswith(self.config.command_prefix):
            query = message.content[len(self.config.command_prefix) :].strip()
            return [await self.handle_price_command(query)]

        if self.config.auto_respond and self.is_monitored(message.channel_id):
            return await self.handle_channel_message(message)

        return []

    async def handle_price_command(self, query: str) -> Reply:
        """
        Answer an explicit price command.

        A single result, or a top result whose name contains the query,
        gets the detailed reply; otherwise the ranked candidates are listed.
        """
        if not query.strip():
            return render_usage(self.config.command_prefix)

        logger.info(f"Price search requested: {query}")

        try:
            results = await self.cache.search(query, self.config.catalog.search_limit)
        except Exception:
            logger.exception(f"Price search failed for {query!r}")
            return Reply(description=UNAVAILABLE_MESSAGE)

        if not results:
            return render_no_results(query)

        if len(results) == 1 or query.lower() in results[0].name.lower():
            return render_price_reply(results[0])
        return render_search_results(query, results)

    async def handle_channel_message(self, message: ChatMessage) -> list[Reply]:
        """Reply with the best match for each product announced in a message."""
        if should_skip(message.searchable_text()):
            logger.info("Skipping message containing skip word")
            return []

        mentions = self._find_mentions(message)
        if not mentions:
            return []

        logger.info(f"Found {len(mentions)} Pokemon product(s) in message")

        replies: list[Reply] = []
        for mention in mentions:
            cleaned_name = clean_product_name(mention.name)
            logger.info(f"Searching for: {cleaned_name}")

            try:
                results = await self.cache.search(cleaned_name, 1)
            except Exception:
                logger.exception(f"Search failed for {cleaned_name!r}")
                continue

            if not results:
                logger.info(f"No TCGplayer match found for: {cleaned_name}")
                continue

            replies.append(render_price_reply(results[0], mention.retail_price))
            logger.info(f"Matched {cleaned_name!r} to {results[0].name!r}")

        return replies

    def _find_mentions(self, message: ChatMessage) -> list[ProductMention]:
        """Use the structured embed parser for known monitors, else scan the text."""
        if is_known_source_bot(message.author_name):
            announcement = parse_restock_embed(message)
            if announcement is not None:
                return [
                    ProductMention(
                        name=announcement.product_name,
                        retail_price=announcement.price,
                    )
                ]
        return extract_product_mentions(message)
