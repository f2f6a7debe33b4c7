"""
Discord REST API client used on behalf of dashboard users.

This module provides an HTTP client for the two Discord REST calls the
bridge makes itself: exchanging an OAuth2 authorization code for an access
token, and listing the guilds of the user who owns a bearer token.
Everything else goes through the bot's gateway connection.

Failures are never retried. Any non-2xx answer, transport failure or
timeout is raised as a DiscordAPIError carrying the upstream payload.
"""

import asyncio
import json
import time
from typing import Any, Dict, List, Optional

import aiohttp

from discord_embed_bridge.config import DiscordAPIConfig, DiscordConfig
from discord_embed_bridge.utils.logging import (
    get_logger,
    log_http_request,
    log_http_response,
    generate_correlation_id,
)
from discord_embed_bridge.utils.exceptions import DiscordAPIError
from discord_embed_bridge.discord_api.models import UserGuild


class DiscordRESTClient:
    """
    HTTP client for Discord REST API communication.

    The client holds no user state: the caller's bearer token is passed to
    each call and forwarded as-is.

    Attributes:
        api_config: REST API base URL and timeout
        credentials: OAuth2 application credentials
        session: Async HTTP session for API calls
    """

    def __init__(self, api_config: DiscordAPIConfig, credentials: DiscordConfig) -> None:
        """
        Initialize the REST client.

        Args:
            api_config: REST API settings
            credentials: OAuth2 client id, secret and redirect URI
        """
        self.api_config = api_config
        self.credentials = credentials
        self.logger = get_logger(__name__)
        self.session: Optional[aiohttp.ClientSession] = None
        self._closed = False

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """
        Ensure that we have an active HTTP session.

        Raises:
            DiscordAPIError: If the client has been closed
        """
        if self._closed:
            raise DiscordAPIError("Discord REST client has been closed")

        if self.session is None or self.session.closed:
            timeout = aiohttp.ClientTimeout(total=self.api_config.timeout)
            self.session = aiohttp.ClientSession(
                headers={"User-Agent": "DiscordEmbedBridge/1.0.0"},
                timeout=timeout,
                raise_for_status=False,
            )
            self.logger.debug("Created new HTTP session for Discord REST client")

        return self.session

    async def exchange_code(self, code: str) -> Dict[str, Any]:
        """
        Exchange an OAuth2 authorization code for an access token.

        Args:
            code: Authorization code received by the dashboard's redirect

        Returns:
            Discord's token response, unchanged

        Raises:
            DiscordAPIError: If Discord rejects the exchange or cannot be reached
        """
        form = {
            "client_id": self.credentials.client_id,
            "client_secret": self.credentials.client_secret,
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self.credentials.redirect_uri,
        }
        return await self._request(
            "POST",
            "/oauth2/token",
            data=form,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )

    async def get_user_guilds(self, access_token: str) -> List[UserGuild]:
        """
        List the guilds of the user owning ``access_token``.

        Args:
            access_token: The caller's OAuth2 bearer token

        Returns:
            The caller's partial guilds, including their permission bitfield

        Raises:
            DiscordAPIError: If the call fails or the body is not a guild list
        """
        data = await self._request(
            "GET",
            "/users/@me/guilds",
            headers={"Authorization": f"Bearer {access_token}"},
        )
        if not isinstance(data, list):
            raise DiscordAPIError(
                "Unexpected response from Discord guild list",
                details=data,
            )
        try:
            return [UserGuild(**guild) for guild in data]
        except (TypeError, ValueError) as e:
            raise DiscordAPIError(
                "Failed to parse Discord guild list",
                details=str(e),
                original_error=e,
            )

    async def _request(
        self,
        method: str,
        path: str,
        *,
        data: Optional[Dict[str, str]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Send one request and return the decoded JSON body."""
        url = f"{self.api_config.base}{path}"
        correlation_id = generate_correlation_id()

        log_http_request(
            method=method,
            url=url,
            headers=headers,
            body=data,
            service="discord",
            correlation_id=correlation_id,
        )

        start_time = time.time()

        try:
            session = await self._ensure_session()
            async with session.request(method, url, data=data, headers=headers) as response:
                response_time_ms = (time.time() - start_time) * 1000
                response_text = await response.text()

                log_http_response(
                    status_code=response.status,
                    response_time_ms=response_time_ms,
                    response_size=len(response_text.encode("utf-8")),
                    error=None if response.status < 400 else f"HTTP {response.status} error",
                    service="discord",
                    correlation_id=correlation_id,
                )

                payload = _decode_body(response_text)

                if response.status >= 400:
                    raise DiscordAPIError(
                        f"Discord API error: HTTP {response.status}",
                        status=response.status,
                        details=payload,
                        context={"path": path, "correlation_id": correlation_id},
                    )

                if isinstance(payload, str):
                    raise DiscordAPIError(
                        "Failed to parse Discord API response",
                        status=response.status,
                        details=payload[:500],
                        context={"path": path, "correlation_id": correlation_id},
                    )

                return payload

        except aiohttp.ClientError as e:
            log_http_response(
                status_code=0,
                response_time_ms=(time.time() - start_time) * 1000,
                error=f"Failed to communicate with Discord API: {e}",
                service="discord",
                correlation_id=correlation_id,
            )
            raise DiscordAPIError(
                "Failed to communicate with Discord API",
                details=str(e) or type(e).__name__,
                context={"path": path, "correlation_id": correlation_id},
                original_error=e,
            )
        except asyncio.TimeoutError as e:
            log_http_response(
                status_code=0,
                response_time_ms=(time.time() - start_time) * 1000,
                error="Discord API request timed out",
                service="discord",
                correlation_id=correlation_id,
            )
            raise DiscordAPIError(
                "Discord API request timed out",
                details="Discord API request timed out",
                context={"timeout": self.api_config.timeout, "path": path},
                original_error=e,
            )

    async def close(self) -> None:
        """Close the HTTP session."""
        self._closed = True
        if self.session and not self.session.closed:
            await self.session.close()
            self.logger.debug("Discord REST client session closed")


def _decode_body(text: str) -> Any:
    """Decode a JSON body, falling back to the raw text."""
    if not text:
        return {}
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text
