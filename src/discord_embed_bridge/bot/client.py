"""
Discord bot session for the embed bridge.

This module contains the gateway client that keeps the bot connected to
Discord. Its guild and channel cache is the bridge's view of where the bot
is present, and it is the only component that actually posts messages.

The HTTP bridge only reads from the cache; discord.py mutates it from its
own serialized event delivery.
"""

import asyncio
import sys
from typing import Any, Dict, List, Optional, Set, Union

import discord

from discord_embed_bridge.config import AppConfig
from discord_embed_bridge.utils.logging import (
    get_logger,
    log_error,
    log_discord_event,
)
from discord_embed_bridge.utils.exceptions import (
    BotPermissionError,
    ChannelNotFoundError,
)
from discord_embed_bridge.discord_api.models import ChannelSummary, EmbedPayload
from discord_embed_bridge.bot.embeds import build_embed, text_channel_summaries


def parse_snowflake(value: Any) -> Optional[int]:
    """Convert a snowflake given as string or int, or None if it is not one."""
    if isinstance(value, bool):
        return None
    try:
        snowflake = int(value)
    except (TypeError, ValueError):
        return None
    return snowflake if snowflake > 0 else None


class EmbedBridgeBot(discord.Client):
    """
    Gateway client exposing the bot's guilds and channels to the bridge.

    The bot needs only the guilds intent: it never reads messages, and its
    own member object, required for permission checks, arrives with each
    guild.

    Attributes:
        config: Application configuration
        ready_event: Set once the gateway reports ready and the cache is filled
    """

    def __init__(self, config: AppConfig) -> None:
        """
        Initialize the bot session.

        Args:
            config: Application configuration containing the bot token
        """
        intents = discord.Intents.none()
        intents.guilds = True

        super().__init__(intents=intents)

        self.config = config
        self.logger = get_logger(__name__)
        self.ready_event = asyncio.Event()

    async def on_ready(self) -> None:
        """Called when the bot is connected and its guild cache is populated."""
        log_discord_event(
            "bot_ready",
            bot_user=str(self.user),
            bot_id=self.user.id if self.user else None,
            guild_count=len(self.guilds),
        )

        for guild in self.guilds:
            self.logger.info("Bot is present in guild", guild_name=guild.name, guild_id=guild.id)

        self.ready_event.set()

    async def on_guild_join(self, guild: discord.Guild) -> None:
        """Called when the bot is added to a new guild."""
        log_discord_event("guild_join", guild_name=guild.name, guild_id=guild.id)

    async def on_error(self, event_method: str, /, *args: Any, **kwargs: Any) -> None:
        """Log errors raised by event handlers without stopping the client."""
        error = sys.exc_info()[1]
        if error is None:
            self.logger.error("Unknown error in Discord event handler", discord_event=event_method)
            return
        log_error(error, {"discord_event": event_method})

    def identity(self) -> Optional[Dict[str, Any]]:
        """
        Describe the bot account for the health endpoint.

        Returns:
            Tag, id and guild count, or None while the bot is not ready
        """
        if not self.is_ready() or self.user is None:
            return None
        return {
            "username": str(self.user),
            "id": str(self.user.id),
            "servers": len(self.guilds),
        }

    def guild_ids(self) -> Set[str]:
        """Ids of all guilds the bot is currently a member of."""
        return {str(guild.id) for guild in self.guilds}

    def text_channels(self, guild_id: Any) -> Optional[List[ChannelSummary]]:
        """
        List the text channels of a guild.

        Returns:
            Channel summaries sorted by position, or None if the bot is not
            in the guild
        """
        snowflake = parse_snowflake(guild_id)
        guild = self.get_guild(snowflake) if snowflake else None
        if guild is None:
            return None
        return text_channel_summaries(guild.channels)

    def resolve_channel(
        self, channel_id: Any
    ) -> Optional[Union[discord.abc.GuildChannel, discord.Thread]]:
        """
        Find a guild channel or thread the bot can see and could post into.

        Returns:
            The cached channel, or None
        """
        snowflake = parse_snowflake(channel_id)
        channel = self.get_channel(snowflake) if snowflake else None
        if not isinstance(channel, (discord.abc.GuildChannel, discord.Thread)):
            return None
        if not isinstance(channel, discord.abc.Messageable):
            return None
        return channel

    def bot_can_post(self, channel: discord.abc.GuildChannel) -> bool:
        """Whether the bot may send messages with embeds in ``channel``."""
        permissions = channel.permissions_for(channel.guild.me)
        return bool(permissions.send_messages and permissions.embed_links)

    async def send_embed(self, channel_id: Any, payload: EmbedPayload) -> discord.Message:
        """
        Post an embed to a channel.

        Args:
            channel_id: Target channel snowflake
            payload: Validated embed payload

        Returns:
            The message that was sent

        Raises:
            ChannelNotFoundError: If the bot cannot see the channel
            BotPermissionError: If the bot may not post embeds there
        """
        channel = self.resolve_channel(channel_id)
        if channel is None:
            raise ChannelNotFoundError(
                "Channel not found",
                context={"channel_id": channel_id},
            )

        if not self.bot_can_post(channel):
            raise BotPermissionError(
                "Bot lacks permission to send embeds in this channel",
                context={"channel_id": channel.id},
            )

        message = await channel.send(embed=build_embed(payload))

        log_discord_event(
            "embed_sent",
            channel_id=channel.id,
            channel_name=channel.name,
            guild_id=channel.guild.id,
            message_id=message.id,
        )
        return message
