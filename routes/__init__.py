"""Route registration package."""

from .api_routes import register_api_routes
from .error_handlers import register_error_handlers
from .match_routes import register_match_routes
from .settings_routes import register_settings_routes

__all__ = [
    "register_api_routes",
    "register_error_handlers",
    "register_match_routes",
    "register_settings_routes",
]
