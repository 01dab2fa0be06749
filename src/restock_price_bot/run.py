"""
CLI runner for restock-price-bot.

Usage:
    python -m restock_price_bot.run [OPTIONS]

    # Look up a product the way the !price command does
    python -m restock_price_bot.run --query "Surging Sparks Booster Box"

    # Replay a restock announcement as if posted in a monitored channel
    python -m restock_price_bot.run --message "Pokemon TCG: Prismatic Evolutions ETB"

    # Force a catalog rebuild and print the result
    python -m restock_price_bot.run --refresh

    # Connect to Discord and answer messages until stopped
    python -m restock_price_bot.run --daemon
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

import discord

from .cache import CatalogCache
from .config import BotConfig, ConfigError
from .discord_client import RestockPriceClient
from .handler import PriceBot
from .messages import ChatMessage
from .replies import Reply
from .tcgcsv import TcgCsvClient

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("restock-price-bot")


def build_bot(config: BotConfig) -> PriceBot:
    """Wire the tcgcsv client, cache and bot together from config."""
    catalog = config.catalog
    client = TcgCsvClient(
        base_url=catalog.base_url,
        vertical=catalog.vertical,
        category_id=catalog.category_id,
        timeout_seconds=catalog.timeout_seconds,
    )
    return PriceBot(CatalogCache(client, catalog), config)


def print_replies(replies: list[Reply]) -> None:
    if not replies:
        print("(no reply)")
        return
    for reply in replies:
        print(reply.to_text())
        print()


async def run_query(bot: PriceBot, query: str) -> int:
    """Refresh the catalog and answer a price command."""
    result = await bot.cache.refresh()
    if not result.success:
        logger.error(f"Could not load catalog: {result.error}")
        return 1
    reply = await bot.handle_price_command(query)
    print_replies([reply])
    return 0


async def run_message(bot: PriceBot, text: str) -> int:
    """Refresh the catalog and treat text as a monitored channel message."""
    result = await bot.cache.refresh()
    if not result.success:
        logger.error(f"Could not load catalog: {result.error}")
        return 1
    replies = await bot.handle_channel_message(ChatMessage(content=text, channel_id="cli"))
    print_replies(replies)
    return 0


async def run_refresh(bot: PriceBot) -> int:
    """Force a rebuild and print the outcome as JSON."""
    result = await bot.cache.refresh(force=True)
    print(result.to_json())
    return 0 if result.success else 1


async def run_daemon(bot: PriceBot, config: BotConfig) -> int:
    """Connect to Discord and handle messages until the connection closes."""
    logger.info("Starting restock-price-bot daemon")
    logger.info(f"Monitoring {len(config.monitored_channels)} channel(s) for restocks")
    logger.info(f"Auto-respond mode: {'ON' if config.auto_respond else 'OFF'}")
    logger.info(f"Command prefix: {config.command_prefix}")

    client = RestockPriceClient(bot)
    try:
        async with client:
            await client.start(config.token)
    except discord.LoginFailure as e:
        logger.error(f"Discord login failed: {e}")
        return 1
    return 0


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="restock-price-bot: TCGplayer prices for Pokemon TCG restock alerts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Price lookup
    python -m restock_price_bot.run --query "151 Elite Trainer Box"

    # Replay an announcement
    python -m restock_price_bot.run --message "Pokemon TCG: Surging Sparks BB"

    # Use a specific config file
    python -m restock_price_bot.run --config bot.yaml --refresh

    # Run the Discord bot (needs DISCORD_TOKEN)
    python -m restock_price_bot.run --daemon
        """,
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=Path("bot.yaml"),
        help="Path to config file (default: bot.yaml)",
    )
    parser.add_argument(
        "--query",
        type=str,
        help="Search the catalog like the price command",
    )
    parser.add_argument(
        "--message",
        type=str,
        help="Handle TEXT as a restock message in a monitored channel",
    )
    parser.add_argument(
        "--refresh",
        action="store_true",
        help="Force a catalog rebuild and print the result",
    )
    parser.add_argument(
        "--daemon",
        action="store_true",
        help="Run as a Discord bot until stopped",
    )
    parser.add_argument(
        "--limit",
        type=int,
        help="Override the number of search results",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    # Load config
    config = BotConfig.from_yaml(args.config).apply_env()
    if args.limit:
        config.catalog.search_limit = args.limit

    try:
        config.validate(require_token=args.daemon)
    except ConfigError as e:
        logger.error(f"ERROR: {e}")
        return 1

    logger.info(f"Config loaded from {args.config}")

    bot = build_bot(config)

    if args.daemon:
        try:
            return asyncio.run(run_daemon(bot, config))
        except KeyboardInterrupt:
            logger.info("Daemon stopped by user")
        return 0

    if args.refresh:
        return asyncio.run(run_refresh(bot))

    if args.query is not None:
        return asyncio.run(run_query(bot, args.query))

    if args.message is not None:
        return asyncio.run(run_message(bot, args.message))

    # Default: show help
    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
