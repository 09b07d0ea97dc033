"""
FastAPI application factory
"""

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..client import LaunchpadClient
from ..config import ApiConfig, config
from .errors import register_error_handlers
from .routes import api_router

logger = logging.getLogger(__name__)


def create_app(client: Optional[LaunchpadClient] = None, api_config: Optional[ApiConfig] = None) -> FastAPI:
    """
    Build the HTTP application

    Args:
        client: Launchpad client serving the routes (default: from global config)
        api_config: Server settings (default: global config)
    """
    api_config = api_config or config.api
    if client is None:
        client = LaunchpadClient.from_config()

    app = FastAPI(
        title="Raydium Launchpad",
        description="Token, market and pool launch backend",
        version="0.1.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=api_config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.client = client
    app.state.max_upload_bytes = api_config.max_upload_bytes

    app.include_router(api_router, prefix=api_config.prefix)
    register_error_handlers(app)

    @app.get("/health")
    def health_check():
        return {"status": "ok"}

    logger.info(f"API ready: cluster={client.cluster}, wallet={client.pubkey}, prefix={api_config.prefix}")
    return app
