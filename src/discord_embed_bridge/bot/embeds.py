"""
Embed and channel helpers for the bot session.

These functions translate between dashboard payloads and discord.py
objects. They have no side effects, so they are shared by the real bot
and by test doubles.
"""

from datetime import datetime, timezone
from typing import Iterable, List, Optional

import discord

from discord_embed_bridge.discord_api.models import (
    DEFAULT_EMBED_COLOR,
    ChannelSummary,
    EmbedPayload,
)


def build_embed(payload: EmbedPayload, timestamp: Optional[datetime] = None) -> discord.Embed:
    """
    Build a Discord embed from a dashboard payload.

    Only fields that are present and non-empty are applied. The color falls
    back to DEFAULT_EMBED_COLOR and the timestamp is always set.

    Args:
        payload: Validated embed payload
        timestamp: Send time (defaults to now, UTC)

    Returns:
        The embed ready to be sent
    """
    embed = discord.Embed(
        color=payload.color or DEFAULT_EMBED_COLOR,
        timestamp=timestamp or datetime.now(timezone.utc),
    )

    if payload.title:
        embed.title = payload.title
    if payload.description:
        embed.description = payload.description
    if payload.thumbnail and payload.thumbnail.url:
        embed.set_thumbnail(url=payload.thumbnail.url)
    if payload.image and payload.image.url:
        embed.set_image(url=payload.image.url)

    if payload.author and payload.author.name:
        embed.set_author(name=payload.author.name, icon_url=payload.author.icon_url)

    if payload.footer and payload.footer.text:
        embed.set_footer(text=payload.footer.text, icon_url=payload.footer.icon_url)

    return embed


def text_channel_summaries(channels: Iterable) -> List[ChannelSummary]:
    """
    Summarize the plain text channels of a guild, in display order.

    Announcement, voice, forum and category channels are left out.
    """
    text_channels = [
        channel for channel in channels
        if channel.type == discord.ChannelType.text
    ]
    text_channels.sort(key=lambda channel: channel.position)

    return [
        ChannelSummary(
            id=str(channel.id),
            name=channel.name,
            type=channel.type.value,
            position=channel.position,
        )
        for channel in text_channels
    ]
