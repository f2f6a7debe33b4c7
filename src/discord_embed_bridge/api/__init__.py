"""
HTTP API module for the dashboard.

This module provides the aiohttp server that bridges the web dashboard to
the Discord bot: OAuth2 code exchange, guild and channel listing, and
embed posting.
"""
