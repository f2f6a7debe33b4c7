"""
Custom exceptions for the Discord Embed Bridge.

This module defines a hierarchy of custom exceptions that provide clear
error handling and debugging information throughout the application.
All exceptions inherit from a base EmbedBridgeError class for easy
catching and handling.
"""

from typing import Optional, Any, Dict


class EmbedBridgeError(Exception):
    """
    Base exception class for all Discord Embed Bridge errors.

    This is the root exception that all other custom exceptions inherit from.
    It provides a consistent interface and allows catching all bridge-related
    errors with a single except clause.

    Attributes:
        message: Human-readable error message
        context: Additional context information about the error
        original_error: The original exception that caused this error (if any)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error message
            context: Additional context information
            original_error: The original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.original_error = original_error

    def __str__(self) -> str:
        """Return string representation of the error."""
        error_str = self.message
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            error_str += f" (Context: {context_str})"
        if self.original_error:
            error_str += f" (Caused by: {self.original_error})"
        return error_str


class ConfigurationError(EmbedBridgeError):
    """
    Raised when there's an error in configuration.

    This exception is raised when:
    - The bot token is missing
    - Configuration values are invalid

    Example:
        ```python
        if not config.discord.bot_token:
            raise ConfigurationError(
                "Discord bot token is required",
                context={"env_var": "BOT_TOKEN"}
            )
        ```
    """
    pass


class DiscordAPIError(EmbedBridgeError):
    """
    Raised when a Discord REST API call fails.

    This exception is raised when:
    - The OAuth2 code exchange is rejected
    - Fetching the caller's guilds fails
    - The API is unreachable or the request times out

    The upstream error payload is kept in ``details`` so that the HTTP
    bridge can forward it to the caller unchanged.

    Attributes:
        status: HTTP status returned by Discord (None for transport errors)
        details: Parsed upstream error body, or an error message
    """

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        details: Any = None,
        context: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        super().__init__(message, context=context, original_error=original_error)
        self.status = status
        self.details = details if details is not None else message


class ChannelNotFoundError(EmbedBridgeError):
    """Raised when the bot cannot see the requested channel."""
    pass


class BotPermissionError(EmbedBridgeError):
    """
    Raised when the bot lacks permission to post embeds in a channel.

    Posting an embed needs both the ``send_messages`` and ``embed_links``
    permissions on the target channel.
    """
    pass
