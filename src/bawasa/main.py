"""Main entry point for the BAWASA API server."""

import logging

import uvicorn

from bawasa.api.app import create_app
from bawasa.config import settings

logger = logging.getLogger(__name__)


def main():
    """Configures logging and serves the API."""
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )
    logger.info("Starting BAWASA API...")
    uvicorn.run(create_app(), host=settings.HOST, port=settings.PORT, log_config=None)


if __name__ == "__main__":
    try:
        main()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Server stopped manually.")
