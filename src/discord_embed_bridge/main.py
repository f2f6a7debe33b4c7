"""
Main entry point for the Discord Embed Bridge.

This module provides the main function for starting the bridge. It handles
configuration loading, logging setup, startup ordering (the HTTP listener
only opens once the bot is ready) and graceful shutdown handling.

Exit codes:
    0: graceful shutdown after SIGINT/SIGTERM
    1: the bot failed to log in, or configuration is invalid
"""

import asyncio
import signal
import sys
from typing import Optional

import discord

from discord_embed_bridge import __version__
from discord_embed_bridge.config import load_config, AppConfig
from discord_embed_bridge.utils.logging import setup_logging, get_logger
from discord_embed_bridge.utils.exceptions import ConfigurationError, EmbedBridgeError
from discord_embed_bridge.bot.client import EmbedBridgeBot
from discord_embed_bridge.discord_api.client import DiscordRESTClient
from discord_embed_bridge.api.server import BridgeAPIServer


async def wait_until_ready(
    bot: EmbedBridgeBot,
    bot_task: "asyncio.Task[None]",
    shutdown_event: asyncio.Event,
) -> bool:
    """
    Wait for the bot to become ready.

    Returns:
        True once the bot is ready, False if shutdown was requested first

    Raises:
        discord.LoginFailure: If the bot token is rejected
        EmbedBridgeError: If the bot stopped before becoming ready
    """
    ready_task = asyncio.create_task(bot.ready_event.wait())
    shutdown_task = asyncio.create_task(shutdown_event.wait())

    done, _ = await asyncio.wait(
        [bot_task, ready_task, shutdown_task],
        return_when=asyncio.FIRST_COMPLETED,
    )

    for task in (ready_task, shutdown_task):
        if task not in done:
            task.cancel()

    if ready_task in done:
        return True
    if bot_task in done:
        # Re-raises login failures
        bot_task.result()
        raise EmbedBridgeError("Bot disconnected before becoming ready")
    return False


async def run_bridge(config: AppConfig, shutdown_event: Optional[asyncio.Event] = None) -> None:
    """
    Run the bot and the HTTP bridge until a shutdown signal arrives.

    Args:
        config: Application configuration
        shutdown_event: Event ending the run (installed on SIGINT/SIGTERM)

    Raises:
        ConfigurationError: If no bot token is configured
        discord.LoginFailure: If the bot token is rejected
    """
    logger = get_logger(__name__)

    if not config.discord.bot_token:
        raise ConfigurationError(
            "Discord bot token is required",
            context={"env_var": "BOT_TOKEN"},
        )

    shutdown_event = shutdown_event or asyncio.Event()
    loop = asyncio.get_running_loop()

    def signal_handler(signum: int) -> None:
        logger.info("Received shutdown signal", signal=signum)
        shutdown_event.set()

    installed_signals = []
    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, signal_handler, signum)
            installed_signals.append(signum)
        except (NotImplementedError, RuntimeError):
            # Not available on this platform or outside the main thread
            pass

    bot = EmbedBridgeBot(config)
    rest_client = DiscordRESTClient(config.discord_api, config.discord)
    server = BridgeAPIServer(bot, rest_client, config)

    logger.info("Logging in to Discord",
                token_prefix=config.discord.bot_token[:10] + "...")
    bot_task = asyncio.create_task(bot.start(config.discord.bot_token))

    try:
        if not await wait_until_ready(bot, bot_task, shutdown_event):
            return

        logger.info("Bot logged in", bot=bot.identity())
        await server.start()

        shutdown_task = asyncio.create_task(shutdown_event.wait())
        done, _ = await asyncio.wait(
            [bot_task, shutdown_task],
            return_when=asyncio.FIRST_COMPLETED,
        )
        if shutdown_task not in done:
            shutdown_task.cancel()
        if bot_task in done:
            bot_task.result()
            logger.warning("Bot connection closed unexpectedly")

    finally:
        logger.info("Shutting down bot")
        await server.stop()
        await rest_client.close()

        try:
            await asyncio.wait_for(bot.close(), timeout=5.0)
            logger.info("Bot shutdown completed successfully")
        except asyncio.TimeoutError:
            logger.warning("Bot shutdown timed out after 5 seconds, forcing close")
        except Exception as e:
            logger.error("Error during bot shutdown", error=str(e))

        if not bot_task.done():
            bot_task.cancel()
            try:
                await bot_task
            except asyncio.CancelledError:
                pass

        for signum in installed_signals:
            loop.remove_signal_handler(signum)


async def main_async() -> None:
    """
    Async main function that handles the complete bridge lifecycle.

    This function:
    1. Loads configuration
    2. Sets up logging
    3. Logs the bot in, then starts the HTTP bridge
    4. Handles shutdown gracefully
    """
    try:
        config = load_config()
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(config.logging)
    logger = get_logger(__name__)

    logger.info("Discord Embed Bridge starting up",
                version=__version__,
                debug_mode=config.debug)

    try:
        await run_bridge(config)
    except discord.LoginFailure as e:
        logger.error("Bot login failed", error=str(e))
        sys.exit(1)
    except ConfigurationError as e:
        logger.error("Configuration error", error=str(e))
        sys.exit(1)
    except Exception as e:
        logger.error("Bridge encountered fatal error", error=str(e))
        sys.exit(1)

    logger.info("Discord Embed Bridge shutdown complete")


def main() -> None:
    """
    Main entry point for the Discord Embed Bridge.

    Example:
        Command line usage:
        ```bash
        discord-embed-bridge
        ```
    """
    try:
        asyncio.run(main_async())
    except KeyboardInterrupt:
        print("\nBridge shutdown requested", file=sys.stderr)
        sys.exit(0)


if __name__ == "__main__":
    main()
