"""
HTTP surface of the launchpad
"""

from .app import create_app
from .routes import api_router
from .errors import register_error_handlers

__all__ = [
    "create_app",
    "api_router",
    "register_error_handlers",
]
