"""Adapters for Discord, storage and the web."""
