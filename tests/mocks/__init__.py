"""Test doubles for the Discord REST API and the bot session."""
