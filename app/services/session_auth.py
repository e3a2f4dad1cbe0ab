"""Verification of session tokens issued by the faculty portal."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import Request
from jose import JWTError, jwt

from app.config import Settings, settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthUser:
    id: str
    email: str
    user_type: int | None
    role_id: int | None
    faculty_id: int | None = None
    dept_id: int | None = None


@dataclass(frozen=True)
class AuthResult:
    user: AuthUser | None = None
    error: str | None = None


def _optional_int(value) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def get_session_token(request: Request, config: Settings | None = None) -> str | None:
    """Extract session token from cookie or Authorization header."""
    config = config or settings
    cookie_token = request.cookies.get(config.session_cookie_name)
    if cookie_token:
        return cookie_token

    auth_header = request.headers.get("authorization")
    if auth_header:
        parts = auth_header.split(" ", 1)
        if len(parts) == 2 and parts[0].lower() == "bearer":
            return parts[1].strip()
    return None


def decode_session_token(token: str, config: Settings | None = None) -> AuthUser | None:
    config = config or settings
    try:
        payload = jwt.decode(token, config.jwt_secret, algorithms=[config.jwt_algorithm])
    except JWTError:
        return None
    if payload.get("id") is None:
        return None
    return AuthUser(
        id=str(payload.get("id")),
        email=str(payload.get("email") or ""),
        user_type=_optional_int(payload.get("user_type")),
        role_id=_optional_int(payload.get("role_id")),
        faculty_id=_optional_int(payload.get("faculty_id")),
        dept_id=_optional_int(payload.get("dept_id")),
    )


def authenticate_request(request: Request, config: Settings | None = None) -> AuthResult:
    token = get_session_token(request, config)
    if not token:
        return AuthResult(error="Unauthorized - Missing session")
    user = decode_session_token(token, config)
    if user is None:
        return AuthResult(error="Unauthorized - Invalid or expired session")
    return AuthResult(user=user)
