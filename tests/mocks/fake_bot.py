"""In-memory stand-in for the bot session."""

from types import SimpleNamespace
from typing import Any, Optional

import discord

from discord_embed_bridge.bot.client import parse_snowflake
from discord_embed_bridge.bot.embeds import build_embed, text_channel_summaries
from discord_embed_bridge.discord_api.models import EmbedPayload


class FakeBot:
    """
    Bot session double with the same surface the HTTP bridge uses.

    Guilds and channels are plain namespaces; sent embeds are recorded in
    ``sent`` as ``(channel_id, discord.Embed)`` pairs.
    """

    def __init__(self, ready: bool = True) -> None:
        self.ready = ready
        self.user = SimpleNamespace(id=42, tag="EmbedBot#0001")
        self.guilds: dict[int, SimpleNamespace] = {}
        self.sent: list[tuple[int, discord.Embed]] = []
        self.send_error: Optional[Exception] = None

    def add_guild(self, guild_id: int, name: str) -> SimpleNamespace:
        guild = SimpleNamespace(id=guild_id, name=name, channels=[])
        self.guilds[guild_id] = guild
        return guild

    def add_channel(
        self,
        guild_id: int,
        channel_id: int,
        name: str,
        position: int = 0,
        channel_type: discord.ChannelType = discord.ChannelType.text,
        can_post: bool = True,
    ) -> SimpleNamespace:
        guild = self.guilds[guild_id]
        channel = SimpleNamespace(
            id=channel_id,
            name=name,
            position=position,
            type=channel_type,
            guild=guild,
            can_post=can_post,
        )
        guild.channels.append(channel)
        return channel

    def identity(self) -> Optional[dict[str, Any]]:
        if not self.ready:
            return None
        return {
            "username": self.user.tag,
            "id": str(self.user.id),
            "servers": len(self.guilds),
        }

    def guild_ids(self) -> set[str]:
        return {str(guild_id) for guild_id in self.guilds}

    def text_channels(self, guild_id: Any):
        guild = self.guilds.get(parse_snowflake(guild_id))
        if guild is None:
            return None
        return text_channel_summaries(guild.channels)

    def resolve_channel(self, channel_id: Any) -> Optional[SimpleNamespace]:
        snowflake = parse_snowflake(channel_id)
        for guild in self.guilds.values():
            for channel in guild.channels:
                if channel.id == snowflake:
                    return channel
        return None

    def bot_can_post(self, channel: SimpleNamespace) -> bool:
        return channel.can_post

    async def send_embed(self, channel_id: Any, payload: EmbedPayload) -> SimpleNamespace:
        if self.send_error:
            raise self.send_error
        self.sent.append((channel_id, build_embed(payload)))
        return SimpleNamespace(id=len(self.sent))
