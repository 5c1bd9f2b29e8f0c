"""Entry point for the Pages API server.

This script launches the FastAPI application with Uvicorn.  It is
intended to be executed from the project root, for example under
Docker or a process manager, where you only specify a single Python
file to run.

Configuration such as DATABASE_URL, CLOUDINARY_* credentials, HOST
and PORT should be placed in a `.env` file in the same directory or
exported in the environment.

Usage:
    python run.py
"""
import asyncio
import logging

from uvicorn import Config, Server

from pages_api.app.core.config import settings
from pages_api.app.main import app


async def main() -> None:
    """Serve the API until interrupted."""
    config = Config(app=app, host=settings.host, port=settings.port, reload=False, log_level=settings.log_level.lower())
    server = Server(config)
    logging.getLogger(__name__).info("Starting %s on %s:%s", settings.project_name, settings.host, settings.port)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
