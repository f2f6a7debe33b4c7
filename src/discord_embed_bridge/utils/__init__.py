"""Utility modules for the Discord Embed Bridge."""

from discord_embed_bridge.utils.exceptions import (
    EmbedBridgeError,
    ConfigurationError,
    DiscordAPIError,
    ChannelNotFoundError,
    BotPermissionError,
)
from discord_embed_bridge.utils.logging import setup_logging

__all__ = [
    "EmbedBridgeError",
    "ConfigurationError",
    "DiscordAPIError",
    "ChannelNotFoundError",
    "BotPermissionError",
    "setup_logging",
]
