"""
HTTP bridge between the web dashboard and the Discord bot.

This module provides the aiohttp server the dashboard talks to. Each
handler is stateless: it validates the request, reads the bot session's
cache and/or calls the Discord REST API with the caller's bearer token,
and answers with JSON.

Security:
- Data endpoints require the caller's own Discord OAuth2 bearer token
- The token is forwarded to Discord and never stored
- Guilds are only listed where the caller is an administrator
"""

import json
from typing import Any, Dict, Optional, TYPE_CHECKING

import aiohttp_cors
from aiohttp import web
from aiohttp.web import Request, Response
from pydantic import ValidationError

from discord_embed_bridge import __version__
from discord_embed_bridge.config import AppConfig
from discord_embed_bridge.discord_api.models import EmbedPayload
from discord_embed_bridge.utils.exceptions import (
    BotPermissionError,
    ChannelNotFoundError,
    DiscordAPIError,
)
from discord_embed_bridge.utils.logging import get_logger, log_error

if TYPE_CHECKING:
    from discord_embed_bridge.bot.client import EmbedBridgeBot
    from discord_embed_bridge.discord_api.client import DiscordRESTClient


def error_response(status: int, error: str, details: Any = None, hint: Optional[str] = None) -> Response:
    """Build the JSON error body shared by every endpoint."""
    body: Dict[str, Any] = {"error": error}
    if details is not None:
        body["details"] = details
    if hint is not None:
        body["hint"] = hint
    return web.json_response(body, status=status)


def extract_bearer_token(request: Request) -> Optional[str]:
    """Return the token of a well-formed ``Authorization: Bearer`` header."""
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return None
    token = auth_header[7:].strip()  # Remove 'Bearer ' prefix
    return token or None


async def read_json_object(request: Request) -> Dict[str, Any]:
    """Read the request body as a JSON object; anything else counts as empty."""
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return {}
    return body if isinstance(body, dict) else {}


@web.middleware
async def request_logging_middleware(request: Request, handler) -> Response:
    """Log each incoming request."""
    logger = get_logger(__name__)
    logger.info("Incoming request", method=request.method, path=request.path)
    return await handler(request)


@web.middleware
async def error_middleware(request: Request, handler) -> Response:
    """Turn unhandled exceptions into a JSON 500 without stopping the server."""
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except Exception as e:
        log_error(e, {"method": request.method, "path": request.path})
        return error_response(500, "Internal server error", details=str(e))


class BridgeAPIServer:
    """
    HTTP bridge server for the dashboard.

    Provides endpoints for:
    - Health checks
    - OAuth2 code exchange
    - Listing administered guilds shared with the bot
    - Listing a guild's text channels
    - Sending embeds on the caller's behalf

    The bot session and REST client are passed in rather than imported, so
    tests can run the server against doubles.
    """

    def __init__(
        self,
        bot: "EmbedBridgeBot",
        rest_client: "DiscordRESTClient",
        config: AppConfig,
    ) -> None:
        """
        Initialize the bridge server.

        Args:
            bot: The bot session whose cache backs guild and channel lookups
            rest_client: Client for Discord REST calls made with caller tokens
            config: Application configuration
        """
        self.bot = bot
        self.rest_client = rest_client
        self.config = config
        self.logger = get_logger(__name__)

        self.app: Optional[web.Application] = None
        self.runner: Optional[web.AppRunner] = None
        self.site: Optional[web.TCPSite] = None

    def create_app(self) -> web.Application:
        """Build the aiohttp application with routes, middlewares and CORS."""
        app = web.Application(
            middlewares=[request_logging_middleware, error_middleware],
        )

        app.router.add_get('/', self._health_check)
        app.router.add_post('/auth/token', self._exchange_token)
        app.router.add_get('/guilds', self._list_guilds)
        app.router.add_get('/guilds/{guild_id}/channels', self._list_channels)
        app.router.add_post('/send-embed', self._send_embed)

        cors = aiohttp_cors.setup(app, defaults={
            self.config.server.cors_origin: aiohttp_cors.ResourceOptions(
                allow_credentials=True,
                expose_headers="*",
                allow_headers="*",
            )
        })
        for route in list(app.router.routes()):
            cors.add(route)

        return app

    async def start(self) -> None:
        """Start listening for dashboard requests."""
        self.app = self.create_app()

        self.runner = web.AppRunner(self.app)
        await self.runner.setup()

        host = self.config.server.host
        port = self.config.server.port
        self.site = web.TCPSite(self.runner, host, port)
        await self.site.start()

        self.logger.info("HTTP bridge started",
                         host=host, port=port,
                         url=f"http://localhost:{port}",
                         cors_origin=self.config.server.cors_origin)

    async def stop(self) -> None:
        """Stop the HTTP bridge; in-flight requests are not drained."""
        if self.site:
            await self.site.stop()
        if self.runner:
            await self.runner.cleanup()

        self.logger.info("HTTP bridge stopped")

    async def _health_check(self, request: Request) -> Response:
        """Report whether the bridge and the bot are up."""
        identity = self.bot.identity()
        return web.json_response({
            'status': 'online',
            'bot': identity if identity is not None else 'offline',
            'version': __version__,
        })

    async def _exchange_token(self, request: Request) -> Response:
        """Exchange an OAuth2 authorization code for an access token."""
        body = await read_json_object(request)
        code = body.get('code')
        if isinstance(code, int) and not isinstance(code, bool):
            code = str(code)

        if not code or not isinstance(code, str):
            return error_response(400, 'Missing authorization code')

        try:
            self.logger.info("Exchanging OAuth2 code for token")
            token_data = await self.rest_client.exchange_code(code)
        except DiscordAPIError as e:
            self.logger.error("OAuth2 token exchange failed",
                              status=e.status, details=e.details)
            return error_response(500, 'Discord authorization failed', details=e.details)

        self.logger.info("OAuth2 token received")
        return web.json_response(token_data)

    async def _list_guilds(self, request: Request) -> Response:
        """List guilds the caller administers and the bot is a member of."""
        token = extract_bearer_token(request)
        if token is None:
            return error_response(401, 'Missing authorization token')

        try:
            user_guilds = await self.rest_client.get_user_guilds(token)
        except DiscordAPIError as e:
            self.logger.error("Failed to fetch user guilds",
                              status=e.status, details=e.details)
            return error_response(500, 'Failed to fetch guilds', details=e.details)

        bot_guild_ids = self.bot.guild_ids()
        guilds = [
            guild.dict(exclude_unset=True)
            for guild in user_guilds
            if guild.is_admin and guild.guild_id in bot_guild_ids
        ]

        self.logger.info("Found accessible guilds",
                         accessible=len(guilds), total=len(user_guilds))
        return web.json_response(guilds)

    async def _list_channels(self, request: Request) -> Response:
        """List a guild's text channels, ordered by position."""
        token = extract_bearer_token(request)
        if token is None:
            return error_response(401, 'Missing authorization token')

        guild_id = request.match_info['guild_id']
        self.logger.info("Fetching channels", guild_id=guild_id)

        channels = self.bot.text_channels(guild_id)
        if channels is None:
            return error_response(
                404,
                'Bot is not a member of this guild',
                hint='Make sure the bot has been added to this server',
            )

        self.logger.info("Found text channels", guild_id=guild_id, count=len(channels))
        return web.json_response([channel.dict() for channel in channels])

    async def _send_embed(self, request: Request) -> Response:
        """Send an embed to a channel on the caller's behalf."""
        token = extract_bearer_token(request)
        if token is None:
            return error_response(401, 'Missing authorization token')

        body = await read_json_object(request)
        channel_id = body.get('channelId')
        embed_data = body.get('embed')

        if not channel_id or embed_data is None:
            return error_response(400, 'Missing required data (channelId, embed)')

        if not isinstance(embed_data, dict):
            return error_response(400, 'Embed must be a JSON object')

        try:
            payload = EmbedPayload(**embed_data)
        except ValidationError as e:
            return error_response(400, 'Invalid embed', details=json.loads(e.json()))

        self.logger.info("Sending embed", channel_id=channel_id)

        channel = self.bot.resolve_channel(channel_id)
        if channel is None:
            return error_response(
                404,
                'Channel not found',
                hint='Make sure the bot has access to this channel',
            )

        if not self.bot.bot_can_post(channel):
            return error_response(
                403,
                'Bot lacks permission to send messages or embeds in this channel',
            )

        try:
            user_guilds = await self.rest_client.get_user_guilds(token)
        except DiscordAPIError as e:
            self.logger.error("Failed to verify caller guild access",
                              status=e.status, details=e.details)
            return error_response(500, 'Failed to send embed', details=e.details)

        guild_id = str(channel.guild.id)
        if not any(guild.guild_id == guild_id for guild in user_guilds):
            return error_response(403, 'You do not have access to this server')

        try:
            await self.bot.send_embed(channel.id, payload)
        except ChannelNotFoundError as e:
            return error_response(404, 'Channel not found', details=e.message)
        except BotPermissionError as e:
            return error_response(403, e.message)
        except Exception as e:
            log_error(e, {"channel_id": channel_id, "operation": "send_embed"})
            return error_response(500, 'Failed to send embed', details=str(e))

        self.logger.info("Embed sent", channel_id=channel.id, channel_name=channel.name)

        return web.json_response({
            'success': True,
            'message': 'Embed sent successfully!',
            'channel': {
                'id': str(channel.id),
                'name': channel.name,
            },
        })
