"""Entry point for serving the Group Membership API.

Host and port are read from the ``API_HOST`` and ``API_PORT``
environment variables; other settings (database path, secret key, log
level) are documented in ``group_membership_api/app/core/config.py``.

Usage:
    python run.py
"""
import asyncio
import logging
import os

from uvicorn import Config, Server

from group_membership_api.app.main import app


async def run_api() -> None:
    """Start the API using Uvicorn.

    Defaults are ``0.0.0.0`` and ``8000``.
    """
    host = os.getenv("API_HOST", "0.0.0.0")
    port = int(os.getenv("API_PORT", "8000"))
    config = Config(app=app, host=host, port=port, reload=False, log_level="info")
    server = Server(config)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(run_api())
    except (KeyboardInterrupt, SystemExit):
        logging.getLogger(__name__).info("Shutting down")
