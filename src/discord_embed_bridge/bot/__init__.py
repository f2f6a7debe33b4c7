"""Discord bot session for the embed bridge."""

from discord_embed_bridge.bot.client import EmbedBridgeBot
from discord_embed_bridge.bot.embeds import build_embed, text_channel_summaries

__all__ = ["EmbedBridgeBot", "build_embed", "text_channel_summaries"]
