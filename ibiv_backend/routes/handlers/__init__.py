"""
Route handler registration functions.
"""
from .configs import register_config_routes
from .exec import register_exec_routes
from .health import register_health_routes
from .media import register_media_routes

__all__ = [
    "register_config_routes",
    "register_exec_routes",
    "register_health_routes",
    "register_media_routes",
]
