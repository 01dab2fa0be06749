"""
Discord adapter for restock-price-bot.

Converts discord.py messages into ChatMessage objects, passes them to
PriceBot, and sends the resulting Reply objects back as embeds (or as plain
text for description-only replies such as usage hints).
"""

import logging

import discord

from .handler import PriceBot
from .messages import ChatMessage, Embed
from .replies import Reply

logger = logging.getLogger(__name__)


def to_chat_message(message: discord.Message) -> ChatMessage:
    """Build a ChatMessage from a discord.py message."""
    return ChatMessage(
        content=message.content or "",
        author_id=str(message.author.id),
        author_name=message.author.display_name,
        channel_id=str(message.channel.id),
        embeds=[Embed.from_dict(e.to_dict()) for e in message.embeds],
    )


def is_text_reply(reply: Reply) -> bool:
    """Replies with only a description are sent as plain text."""
    return bool(reply.description) and not (reply.title or reply.url or reply.fields)


def to_discord_embed(reply: Reply) -> discord.Embed:
    """Build a discord.Embed from a Reply."""
    embed = discord.Embed(
        title=reply.title,
        description=reply.description,
        url=reply.url,
        color=reply.color,
        timestamp=reply.timestamp,
    )
    if reply.thumbnail_url:
        embed.set_thumbnail(url=reply.thumbnail_url)
    for reply_field in reply.fields:
        embed.add_field(name=reply_field.name, value=reply_field.value, inline=reply_field.inline)
    if reply.footer:
        embed.set_footer(text=reply.footer)
    return embed


async def send_reply(message: discord.Message, reply: Reply) -> None:
    if is_text_reply(reply):
        await message.reply(reply.description)
    else:
        await message.reply(embed=to_discord_embed(reply))


def default_intents() -> discord.Intents:
    """Guilds, guild messages and DMs, plus message content."""
    intents = discord.Intents.none()
    intents.guilds = True
    intents.guild_messages = True
    intents.dm_messages = True
    intents.message_content = True
    return intents


class RestockPriceClient(discord.Client):
    """Discord client that feeds every message through a PriceBot."""

    def __init__(self, bot: PriceBot, **kwargs):
        kwargs.setdefault("intents", default_intents())
        super().__init__(**kwargs)
        self.bot = bot

    async def on_ready(self) -> None:
        config = self.bot.config
        if not config.bot_user_id:
            config.bot_user_id = str(self.user.id)

        logger.info(f"Logged in as {self.user}")

        # Warm the catalog so the first lookup does not wait for a rebuild
        try:
            result = await self.bot.cache.refresh()
        except Exception:
            logger.exception("Failed to initialize catalog")
            return
        if not result.success:
            logger.error(f"Failed to initialize catalog: {result.error}")

    async def on_message(self, message: discord.Message) -> None:
        try:
            replies = await self.bot.handle_message(to_chat_message(message))
        except Exception:
            logger.exception(f"Error handling message {message.id}")
            return

        for reply in replies:
            try:
                await send_reply(message, reply)
            except discord.HTTPException:
                logger.exception(f"Failed to send reply to message {message.id}")
