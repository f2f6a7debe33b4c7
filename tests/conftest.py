"""Test configuration and utilities."""

import pytest
from discord import ChannelType
from aiohttp.test_utils import TestClient, TestServer

from discord_embed_bridge.config import (
    AppConfig,
    DiscordAPIConfig,
    DiscordConfig,
    LoggingConfig,
    ServerConfig,
)
from discord_embed_bridge.api.server import BridgeAPIServer
from discord_embed_bridge.discord_api.client import DiscordRESTClient
from tests.mocks.discord_api_server import MockDiscordAPIServer
from tests.mocks.fake_bot import FakeBot


ADMIN_TOKEN = "admin-user-token"


@pytest.fixture
async def discord_api():
    """Start a mock Discord REST API and yield it."""
    server = MockDiscordAPIServer()
    await server.start()
    yield server
    await server.stop()


@pytest.fixture
def test_config(discord_api) -> AppConfig:
    """Create a test configuration pointing at the mock Discord API."""
    config = AppConfig()

    # Override with test-specific settings
    config.discord = DiscordConfig(
        bot_token="test_bot_token_" + "x" * 50,
        client_id="123456789",
        client_secret="test-client-secret",
        redirect_uri="http://localhost:5173/callback",
    )
    config.discord_api = DiscordAPIConfig(base=discord_api.base_url, timeout=5)
    config.server = ServerConfig(host="127.0.0.1", port=3000, frontend_url="http://localhost:5173")
    config.logging = LoggingConfig(level="DEBUG", format="text")

    return config


@pytest.fixture
async def rest_client(test_config):
    """REST client wired to the mock Discord API."""
    client = DiscordRESTClient(test_config.discord_api, test_config.discord)
    yield client
    await client.close()


@pytest.fixture
def fake_bot() -> FakeBot:
    """
    A ready bot in two guilds.

    Guild 1 has text channels in shuffled positions plus a voice channel and
    an announcement channel; channel 103 denies the bot's embed permission.
    """
    bot = FakeBot()
    bot.add_guild(1, "Admin Guild")
    bot.add_guild(3, "Other Guild")

    bot.add_channel(1, 101, "general", position=2)
    bot.add_channel(1, 102, "announcements", position=0)
    bot.add_channel(1, 103, "read-only", position=1, can_post=False)
    bot.add_channel(1, 104, "Voice", position=3, channel_type=ChannelType.voice)
    bot.add_channel(1, 105, "news", position=4, channel_type=ChannelType.news)
    bot.add_channel(3, 301, "lobby", position=0)
    return bot


@pytest.fixture
async def bridge_client(fake_bot, rest_client, test_config, discord_api):
    """HTTP test client for the bridge, backed by the fake bot and mock API."""
    discord_api.user_guilds[ADMIN_TOKEN] = [
        {"id": "1", "name": "Admin Guild", "icon": None, "owner": True, "permissions": "2147483647"},
        {"id": "2", "name": "Bot-less Guild", "icon": None, "owner": True, "permissions": "8"},
        {"id": "3", "name": "Other Guild", "icon": None, "owner": False, "permissions": "0"},
    ]

    server = BridgeAPIServer(fake_bot, rest_client, test_config)
    client = TestClient(TestServer(server.create_app()))
    await client.start_server()
    yield client
    await client.close()
