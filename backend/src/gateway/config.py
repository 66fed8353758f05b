from __future__ import annotations

import os
from typing import List, Mapping, Optional

from pydantic import BaseModel, Field
from typing_extensions import Literal

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
]

DEFAULT_MAX_BODY_BYTES = 10 * 1024 * 1024

AuthMode = Literal["none", "api-key", "jwt"]
AUTH_MODES = ("none", "api-key", "jwt")


class AuthConfig(BaseModel):
    enabled: bool = False
    mode: AuthMode = "none"
    api_key_header: str = "X-API-Key"
    api_keys: List[str] = Field(default_factory=list)
    jwt_secret: Optional[str] = None
    exclude_paths: List[str] = Field(default_factory=lambda: ["/health"])

    @property
    def active(self) -> bool:
        return self.enabled and self.mode != "none"


class GatewayConfig(BaseModel):
    host: str = "127.0.0.1"
    port: int = 3000
    session_timeout_minutes: float = 30
    max_body_bytes: int = DEFAULT_MAX_BODY_BYTES
    cors_origins: List[str] = Field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    server_name: str = "mcp-gateway"
    server_version: str = "1.0.0"
    log_level: str = "INFO"
    auth: AuthConfig = Field(default_factory=AuthConfig)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "GatewayConfig":
        env = os.environ if environ is None else environ

        mode = env.get("MCP_AUTH_MODE", "none").strip().lower() or "none"
        if mode not in AUTH_MODES:
            raise ValueError(
                f"MCP_AUTH_MODE must be one of {', '.join(AUTH_MODES)}, got {mode!r}"
            )
        auth = AuthConfig(
            enabled=env.get("MCP_AUTH_ENABLED", "").strip().lower() == "true",
            mode=mode,
            api_key_header=env.get("MCP_AUTH_API_KEY_HEADER") or "X-API-Key",
            api_keys=parse_list(env.get("MCP_API_KEYS")),
            jwt_secret=env.get("MCP_JWT_SECRET") or None,
        )
        if auth.active and auth.mode == "jwt" and not auth.jwt_secret:
            raise ValueError("MCP_JWT_SECRET is required when MCP_AUTH_MODE=jwt")

        return cls(
            host=env.get("MCP_HTTP_HOST") or "127.0.0.1",
            port=_parse_int(env, "MCP_HTTP_PORT", 3000),
            session_timeout_minutes=_parse_float(env, "MCP_SESSION_TIMEOUT", 30),
            max_body_bytes=_parse_int(
                env, "MCP_MAX_BODY_BYTES", DEFAULT_MAX_BODY_BYTES, minimum=1
            ),
            cors_origins=parse_list(env.get("MCP_CORS_ORIGINS"))
            or list(DEFAULT_CORS_ORIGINS),
            server_name=env.get("MCP_SERVER_NAME") or "mcp-gateway",
            server_version=env.get("MCP_SERVER_VERSION") or "1.0.0",
            log_level=(env.get("MCP_LOG_LEVEL") or "INFO").upper(),
            auth=auth,
        )


def parse_list(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _parse_int(
    env: Mapping[str, str], key: str, default: int, minimum: Optional[int] = None
) -> int:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{key} must be an integer, got {raw!r}") from None
    if minimum is not None and value < minimum:
        raise ValueError(f"{key} must be at least {minimum}")
    return value


def _parse_float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{key} must be a number, got {raw!r}") from None
    if value < 0:
        raise ValueError(f"{key} must not be negative")
    return value
