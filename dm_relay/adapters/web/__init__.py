"""Web adapters (FastAPI)."""

from dm_relay.adapters.web.feed import LiveFeed
from dm_relay.adapters.web.server import create_app

__all__ = ["LiveFeed", "create_app"]
