"""
Core utilities for route handlers.
"""
from .request_json import _read_json
from .response import _empty_response, _json_response
from .security import _check_token, _extract_request_token, generate_token
from .services import APP_CONFIG_KEY, EXIT_EVENT_KEY, SERVICES_KEY, get_app_config, get_services

__all__ = [
    "_json_response",
    "_empty_response",
    "_read_json",
    "_check_token",
    "_extract_request_token",
    "generate_token",
    "APP_CONFIG_KEY",
    "SERVICES_KEY",
    "EXIT_EVENT_KEY",
    "get_app_config",
    "get_services",
]
