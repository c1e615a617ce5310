"""
HTTP layer: route handlers, middlewares and application assembly.
"""
from .registry import build_app, default_defaults_path, register_all_routes

__all__ = ["build_app", "default_defaults_path", "register_all_routes"]
