"""
Run the launchpad HTTP server

    python -m launchpad
"""

import uvicorn

from .config import config, setup_logging
from .client import LaunchpadClient
from .api import create_app


def main():
    logger = setup_logging()
    client = LaunchpadClient.from_config()
    app = create_app(client)

    logger.info(f"Starting server on {config.api.host}:{config.api.port} ({client.cluster})")
    try:
        uvicorn.run(app, host=config.api.host, port=config.api.port, log_config=None)
    finally:
        client.close()


if __name__ == "__main__":
    main()
