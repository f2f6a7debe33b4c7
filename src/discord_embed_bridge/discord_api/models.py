"""
Data models for Discord API interactions.

This module defines Pydantic models for the data exchanged with the
Discord REST API and with the dashboard frontend: the caller's partial
guilds, channel summaries, and the embed payload posted by the dashboard.
"""

from typing import Any, Optional, Union

from pydantic import BaseModel, Field, validator


# Permission flag for administrators in Discord's permission bitfield
ADMINISTRATOR = 0x8

# Color applied to embeds sent without one
DEFAULT_EMBED_COLOR = 0x9B59B6


class UserGuild(BaseModel):
    """
    A partial guild as returned by ``GET /users/@me/guilds``.

    Only the fields the bridge inspects are declared; anything else Discord
    sends is kept so the guild can be forwarded to the dashboard unchanged.
    ``id`` and ``permissions`` keep the type they arrived with.

    Attributes:
        id: Guild snowflake
        name: Guild name
        icon: Icon hash
        owner: Whether the caller owns the guild
        permissions: The caller's permission bitfield, usually a decimal string
    """

    id: Union[str, int]
    name: Optional[str] = None
    icon: Optional[str] = None
    owner: bool = False
    permissions: Union[str, int] = "0"

    class Config:
        extra = "allow"

    @validator("id", "permissions", pre=True)
    def reject_booleans(cls, v: Any) -> Any:
        """Discord sends snowflakes and bitfields as strings; integers pass through too."""
        if isinstance(v, bool):
            raise ValueError("Expected a string or integer")
        return v

    @property
    def guild_id(self) -> str:
        """The guild snowflake as a string, for comparison with the bot's guilds."""
        return str(self.id)

    @property
    def is_admin(self) -> bool:
        """Whether the caller holds the administrator permission in this guild."""
        try:
            bits = int(self.permissions)
        except ValueError:
            return False
        return (bits & ADMINISTRATOR) == ADMINISTRATOR


class ChannelSummary(BaseModel):
    """A text channel as exposed by the channels endpoint."""

    id: str
    name: str
    type: int
    position: int


class EmbedMedia(BaseModel):
    """Thumbnail or image reference."""

    url: Optional[str] = None


class EmbedAuthor(BaseModel):
    """Embed author block."""

    name: Optional[str] = Field(default=None, max_length=256)
    icon_url: Optional[str] = None


class EmbedFooter(BaseModel):
    """Embed footer block."""

    text: Optional[str] = Field(default=None, max_length=2048)
    icon_url: Optional[str] = None


class EmbedPayload(BaseModel):
    """
    Embed description posted by the dashboard.

    Every field is optional. Fields that are missing or empty are simply
    not applied when the Discord embed is built. Text fields are capped at
    Discord's embed limits so oversized input is rejected up front.

    Attributes:
        title: Embed title
        description: Embed body text
        color: Embed color as an integer or a ``#rrggbb`` string
        thumbnail: Thumbnail image
        image: Main image
        author: Author name and icon
        footer: Footer text and icon
    """

    title: Optional[str] = Field(default=None, max_length=256)
    description: Optional[str] = Field(default=None, max_length=4096)
    color: Optional[int] = Field(default=None, ge=0, le=0xFFFFFF)
    thumbnail: Optional[EmbedMedia] = None
    image: Optional[EmbedMedia] = None
    author: Optional[EmbedAuthor] = None
    footer: Optional[EmbedFooter] = None

    class Config:
        extra = "ignore"

    @validator("color", pre=True)
    def parse_color(cls, v: Union[int, str, None]) -> Optional[int]:
        """Accept ``#9b59b6``, ``0x9b59b6`` and plain integers."""
        if isinstance(v, str):
            text = v.strip()
            if not text:
                return None
            if text.startswith("#"):
                return int(text[1:], 16)
            return int(text, 0)
        return v
