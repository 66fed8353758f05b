from __future__ import annotations

import logging

import jwt
from starlette.requests import Request

from src.gateway.api.models import AuthResult
from src.gateway.config import AuthConfig

logger = logging.getLogger(__name__)


JWT_ALGORITHM = "HS256"


def authenticate(request: Request, config: AuthConfig) -> AuthResult:
    if config.mode == "api-key":
        return authenticate_api_key(request, config)
    if config.mode == "jwt":
        return authenticate_jwt(request, config)
    return AuthResult(authenticated=True)


def authenticate_api_key(request: Request, config: AuthConfig) -> AuthResult:
    """Check the API key header against ``MCP_API_KEYS``.

    With no keys configured any non-empty key is accepted.
    """
    header_name = config.api_key_header or "X-API-Key"
    api_key = request.headers.get(header_name)
    if not api_key:
        return AuthResult(authenticated=False, error=f"Missing {header_name} header")

    if config.api_keys and api_key not in config.api_keys:
        return AuthResult(authenticated=False, error="Invalid API key")

    return AuthResult(authenticated=True, user_id="api-key-user")


def authenticate_jwt(request: Request, config: AuthConfig) -> AuthResult:
    auth_header = request.headers.get("Authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return AuthResult(authenticated=False, error="Missing Bearer token")

    try:
        payload = jwt.decode(token.strip(), config.jwt_secret, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        return AuthResult(authenticated=False, error="Token expired")
    except jwt.InvalidTokenError as e:
        logger.info(f"Rejected bearer token: {e}")
        return AuthResult(authenticated=False, error="Invalid token")

    user_id = payload.get("sub")
    return AuthResult(
        authenticated=True, user_id=str(user_id) if user_id is not None else None
    )
