"""HTTP server entry point for MediaInspector."""

import sys

import uvicorn

from mediainspector.api.app import create_app
from mediainspector.config import Config
from mediainspector.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


def start_daemon(config: Config):
    """Serve the API with uvicorn until interrupted.

    Args:
        config: Application configuration
    """
    setup_logging(config.logging)

    app = create_app(config)

    logger.info("Starting server", host=config.api.host, port=config.api.port)

    try:
        uvicorn.run(
            app,
            host=config.api.host,
            port=config.api.port,
            log_level=config.logging.level,
            access_log=False,  # RequestLoggingMiddleware logs requests
        )
    except KeyboardInterrupt:
        logger.info("Server interrupted by user")
    except Exception as e:
        logger.exception("Server error", error=str(e))
        sys.exit(1)
    finally:
        logger.info("Server stopped")
