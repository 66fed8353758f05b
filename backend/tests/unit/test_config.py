import pytest

from src.gateway.config import (
    DEFAULT_CORS_ORIGINS,
    DEFAULT_MAX_BODY_BYTES,
    GatewayConfig,
    parse_list,
)


class TestGatewayConfig:
    def test_defaults(self):
        config = GatewayConfig.from_env({})

        assert config.host == "127.0.0.1"
        assert config.port == 3000
        assert config.session_timeout_minutes == 30
        assert config.cors_origins == DEFAULT_CORS_ORIGINS
        assert config.server_name == "mcp-gateway"
        assert config.log_level == "INFO"
        assert config.auth.enabled is False
        assert config.auth.active is False
        assert config.auth.exclude_paths == ["/health"]

    def test_reads_environment(self):
        config = GatewayConfig.from_env(
            {
                "MCP_HTTP_HOST": "0.0.0.0",
                "MCP_HTTP_PORT": "8080",
                "MCP_SESSION_TIMEOUT": "5",
                "MCP_CORS_ORIGINS": "https://a.example, https://b.example ,",
                "MCP_SERVER_NAME": "azure-devops-mcp",
                "MCP_LOG_LEVEL": "debug",
                "MCP_AUTH_ENABLED": "true",
                "MCP_AUTH_MODE": "api-key",
                "MCP_API_KEYS": "k1,k2",
            }
        )

        assert config.host == "0.0.0.0"
        assert config.port == 8080
        assert config.session_timeout_minutes == 5
        assert config.cors_origins == ["https://a.example", "https://b.example"]
        assert config.server_name == "azure-devops-mcp"
        assert config.log_level == "DEBUG"
        assert config.auth.active is True
        assert config.auth.api_keys == ["k1", "k2"]

    def test_empty_cors_falls_back_to_localhost(self):
        config = GatewayConfig.from_env({"MCP_CORS_ORIGINS": " , "})
        assert config.cors_origins == DEFAULT_CORS_ORIGINS

    def test_invalid_port(self):
        with pytest.raises(ValueError, match="MCP_HTTP_PORT"):
            GatewayConfig.from_env({"MCP_HTTP_PORT": "abc"})

    def test_negative_timeout(self):
        with pytest.raises(ValueError, match="MCP_SESSION_TIMEOUT"):
            GatewayConfig.from_env({"MCP_SESSION_TIMEOUT": "-1"})

    def test_max_body_bytes(self):
        assert GatewayConfig.from_env({}).max_body_bytes == DEFAULT_MAX_BODY_BYTES
        config = GatewayConfig.from_env({"MCP_MAX_BODY_BYTES": "2048"})
        assert config.max_body_bytes == 2048

    @pytest.mark.parametrize("value", ["0", "-5", "ten"])
    def test_invalid_max_body_bytes(self, value):
        with pytest.raises(ValueError, match="MCP_MAX_BODY_BYTES"):
            GatewayConfig.from_env({"MCP_MAX_BODY_BYTES": value})

    def test_unknown_auth_mode(self):
        with pytest.raises(ValueError, match="MCP_AUTH_MODE"):
            GatewayConfig.from_env({"MCP_AUTH_MODE": "azure-ad"})

    def test_jwt_requires_secret(self):
        with pytest.raises(ValueError, match="MCP_JWT_SECRET"):
            GatewayConfig.from_env({"MCP_AUTH_ENABLED": "true", "MCP_AUTH_MODE": "jwt"})

    def test_auth_enabled_flag_is_strict(self):
        config = GatewayConfig.from_env({"MCP_AUTH_ENABLED": "yes", "MCP_AUTH_MODE": "api-key"})
        assert config.auth.active is False


def test_parse_list():
    assert parse_list(None) == []
    assert parse_list("") == []
    assert parse_list("a, b,,c ") == ["a", "b", "c"]
