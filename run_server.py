#!/usr/bin/env python3
"""Entry point — starts the HTTP server (port 8080 unless WEBAPP_PORT is set)."""

import logging

from webapp.config import ServerConfig
from webapp.server import start

if __name__ == "__main__":
    config = ServerConfig()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    start(host=config.host, port=config.port)
