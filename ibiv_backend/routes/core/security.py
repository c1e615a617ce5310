"""
Token gate for the API routes.

The token is a static random value generated at startup (or passed on the
command line). The front end receives it in the URL fragment and sends it back
as the `token` cookie; scripts may use `Authorization: Bearer <token>` or
`X-Ibiv-Token` instead.
"""
from __future__ import annotations

import hmac
import secrets
from collections.abc import Mapping

from aiohttp import web

TOKEN_COOKIE_NAME = "token"
TOKEN_HEADER_NAME = "X-Ibiv-Token"
TOKEN_BYTES = 16


def generate_token() -> str:
    return secrets.token_hex(TOKEN_BYTES)


def _extract_bearer_token(headers: Mapping[str, str]) -> str:
    auth = str(headers.get("Authorization") or "").strip()
    if not auth:
        return ""
    prefix = "bearer "
    if auth.lower().startswith(prefix):
        return auth[len(prefix):].strip()
    return ""


def _extract_request_token(request: web.Request) -> str:
    """
    Extract the client token.

    Accepted, in order:
      - Cookie: token=<token>
      - Authorization: Bearer <token>
      - X-Ibiv-Token: <token>
    """
    cookie = str(request.cookies.get(TOKEN_COOKIE_NAME) or "").strip()
    if cookie:
        return cookie
    bearer = _extract_bearer_token(request.headers)
    if bearer:
        return bearer
    return str(request.headers.get(TOKEN_HEADER_NAME) or "").strip()


def _token_matches(provided: str, expected: str) -> bool:
    if not provided or not expected:
        return False
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


def _check_token(request: web.Request, expected: str) -> bool:
    return _token_matches(_extract_request_token(request), expected)
