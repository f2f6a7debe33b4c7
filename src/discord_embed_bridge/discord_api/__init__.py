"""Discord REST API integration for the embed bridge."""

from discord_embed_bridge.discord_api.client import DiscordRESTClient
from discord_embed_bridge.discord_api.models import (
    ADMINISTRATOR,
    DEFAULT_EMBED_COLOR,
    ChannelSummary,
    EmbedPayload,
    UserGuild,
)

__all__ = [
    "DiscordRESTClient",
    "ADMINISTRATOR",
    "DEFAULT_EMBED_COLOR",
    "ChannelSummary",
    "EmbedPayload",
    "UserGuild",
]
