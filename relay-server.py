"""Discord DM relay server entry point."""

import uvicorn

from dm_relay.adapters.web.server import create_app
from dm_relay.config import AppConfig

config = AppConfig.from_env()
app = create_app(config)


if __name__ == "__main__":
    uvicorn.run(app, host=config.host, port=config.port, log_level="info")
