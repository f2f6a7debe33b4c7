"""
Discord Embed Bridge - a small backend between a web dashboard and a Discord bot.

The bridge exchanges OAuth2 codes for access tokens, lists the guilds a
dashboard user administers where the bot is present, lists their text
channels, and posts embeds on the user's behalf after checking both the
bot's and the user's permissions.

Example:
    Basic usage:

    ```python
    from discord_embed_bridge.main import main

    if __name__ == "__main__":
        main()
    ```
"""

__version__ = "1.0.0"

# Only import main function to avoid circular dependencies during development
def main():
    """Main entry point for the Discord Embed Bridge."""
    from discord_embed_bridge.main import main as _main
    return _main()

__all__ = ["main", "__version__"]
