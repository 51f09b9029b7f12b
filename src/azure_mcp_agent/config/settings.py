"""Application settings via environment variables."""

import json
from functools import lru_cache
from typing import Annotated, Any

from pydantic import Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, NoDecode

from azure_mcp_agent.core.exceptions import ConfigurationError


DEFAULT_NAMESPACES = ["storage", "resources", "resourcegraph"]


class Settings(BaseSettings):
    """Application settings via environment variables."""

    # Azure OpenAI (completion API)
    azure_openai_endpoint: str
    azure_openai_api_key: SecretStr
    azure_openai_deployment: str
    azure_openai_api_version: str = "2024-08-01-preview"

    # Azure MCP server (tool provider)
    azure_client_id: str
    azure_client_secret: SecretStr
    azure_tenant_id: str
    azure_subscription_id: str
    azure_mcp_namespaces: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_NAMESPACES)
    )
    azure_mcp_read_only: bool = True
    azure_mcp_command: str = "npx"
    azure_mcp_package: str = "@azure/mcp@latest"

    # Agent
    system_prompt: str | None = None
    max_tool_rounds: int = Field(default=10, ge=1)

    # Timeouts (seconds)
    completion_timeout_seconds: float = 120.0
    tool_call_timeout_seconds: float = 60.0
    mcp_connect_timeout_seconds: float = 60.0

    # Startup warm-up connection
    mcp_connect_on_startup: bool = True
    mcp_connect_attempts: int = Field(default=1, ge=1)

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    frontend_url: str = "http://localhost:5173"

    # Logging
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @field_validator("azure_mcp_namespaces", mode="before")
    @classmethod
    def _split_namespaces(cls, value: Any) -> Any:
        if isinstance(value, str):
            text = value.strip()
            if text.startswith("["):
                return json.loads(text)
            return [part.strip() for part in text.split(",") if part.strip()]
        return value


def load_settings(**overrides: Any) -> Settings:
    """
    Build settings, converting validation failures into ConfigurationError.

    Only variable names are reported, never their values.
    """
    try:
        return Settings(**overrides)
    except ValidationError as e:
        missing = [
            str(error["loc"][0]).upper()
            for error in e.errors()
            if error["type"] == "missing" and error["loc"]
        ]
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}",
                missing=missing,
            ) from e
        invalid = sorted({str(error["loc"][0]).upper() for error in e.errors() if error["loc"]})
        raise ConfigurationError(
            f"Invalid environment variables: {', '.join(invalid)}"
        ) from e


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return load_settings()
