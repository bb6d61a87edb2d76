"""Discord implementation of the notification boundary."""

from __future__ import annotations

import logging
from typing import Optional

import discord

from raidplanner.errors import ExternalUnavailableError
from raidplanner.raids.notifications import (
    COLOR_INFO,
    COLOR_REMINDER,
    COLOR_SUCCESS,
    COLOR_URGENT,
    RaidMessage,
)


logger = logging.getLogger("raidplanner.discord_hub")

COLOR_MAP = {
    COLOR_INFO: discord.Color.blue,
    COLOR_REMINDER: discord.Color.gold,
    COLOR_URGENT: discord.Color.red,
    COLOR_SUCCESS: discord.Color.green,
}

# Discord embed limits
MAX_FIELDS = 25
MAX_FIELD_VALUE = 1024


def build_embed(message: RaidMessage) -> discord.Embed:
    """Render a RaidMessage as a Discord embed."""
    color_factory = COLOR_MAP.get(message.color, discord.Color.blurple)
    embed = discord.Embed(
        title=message.title,
        description=message.description or None,
        color=color_factory(),
        timestamp=message.timestamp,
    )
    for item in message.fields[:MAX_FIELDS]:
        value = item.value or "—"
        if len(value) > MAX_FIELD_VALUE:
            value = value[: MAX_FIELD_VALUE - 1] + "…"
        embed.add_field(name=item.name, value=value, inline=item.inline)
    if message.footer:
        embed.set_footer(text=message.footer)
    return embed


class DiscordNotificationHub:
    """Sends, edits and deletes raid messages through a discord.py client."""

    def __init__(self, bot: discord.Client):
        self.bot = bot

    async def _get_channel(self, channel_id: int) -> Optional[discord.abc.Messageable]:
        channel = self.bot.get_channel(channel_id)
        if isinstance(channel, discord.abc.Messageable):
            return channel
        try:
            channel = await self.bot.fetch_channel(channel_id)
        except Exception:
            logger.warning("Failed to fetch channel %s", channel_id, exc_info=True)
            return None
        return channel if isinstance(channel, discord.abc.Messageable) else None

    async def send(self, channel_id: int, message: RaidMessage) -> int:
        channel = await self._get_channel(channel_id)
        if channel is None:
            raise ExternalUnavailableError(f"Channel {channel_id} is not available")

        try:
            sent = await channel.send(content=message.content or None, embed=build_embed(message))
        except discord.HTTPException as exc:
            raise ExternalUnavailableError(
                f"Failed to send message to channel {channel_id}: {exc}"
            ) from exc

        for emoji in message.reactions:
            try:
                await sent.add_reaction(emoji)
            except discord.HTTPException:
                logger.warning(
                    "Failed to add reaction %s to message %s", emoji, sent.id, exc_info=True
                )
        return sent.id

    async def update(self, channel_id: int, message_id: int, message: RaidMessage) -> bool:
        channel = await self._get_channel(channel_id)
        if channel is None:
            return False
        try:
            existing = await channel.fetch_message(message_id)
            await existing.edit(content=message.content or None, embed=build_embed(message))
        except discord.NotFound:
            return False
        except discord.HTTPException:
            logger.warning("Failed to update message %s", message_id, exc_info=True)
            return False
        return True

    async def delete(self, channel_id: int, message_id: int) -> bool:
        channel = await self._get_channel(channel_id)
        if channel is None:
            return False
        try:
            existing = await channel.fetch_message(message_id)
            await existing.delete()
        except discord.HTTPException:
            logger.warning("Failed to delete message %s", message_id, exc_info=True)
            return False
        return True
