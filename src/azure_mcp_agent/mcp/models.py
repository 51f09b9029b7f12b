"""MCP data models for tool discovery and server launch."""

import os
from typing import Any

from pydantic import BaseModel, Field, SecretStr


class ToolDescriptor(BaseModel):
    """
    A tool exposed by the MCP server.

    The input schema is kept as an opaque JSON-schema dict; tools are
    discovered at runtime so their arguments are never statically typed.
    """

    model_config = {"frozen": True}

    name: str = Field(..., description="Tool name, unique within the catalog")
    description: str = Field("", description="Human-readable description")
    input_schema: dict[str, Any] = Field(
        default_factory=dict, description="JSON Schema for tool inputs"
    )

    @classmethod
    def from_mcp(cls, tool: Any) -> "ToolDescriptor":
        """Build from an ``mcp.types.Tool``."""
        return cls(
            name=tool.name,
            description=tool.description or "",
            input_schema=dict(tool.inputSchema or {}),
        )

    def to_openai_tool(self) -> dict[str, Any]:
        """Format as a chat-completion function tool."""
        parameters = self.input_schema or {"type": "object", "properties": {}}
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": parameters,
            },
        }


class MCPServerConfig(BaseModel):
    """Launch configuration for the Azure MCP server subprocess."""

    client_id: str
    client_secret: SecretStr
    tenant_id: str
    subscription_id: str
    namespaces: list[str] = Field(
        default_factory=lambda: ["storage", "resources", "resourcegraph"]
    )
    read_only: bool = True
    command: str = "npx"
    package: str = "@azure/mcp@latest"

    def build_args(self) -> list[str]:
        """Command-line arguments for the server process."""
        args = ["-y", self.package, "server", "start"]
        for namespace in self.namespaces:
            args.extend(["--namespace", namespace])
        if self.read_only:
            args.append("--read-only")
        return args

    def build_env(self, base: dict[str, str] | None = None) -> dict[str, str]:
        """Environment for the server process: inherited env plus credentials."""
        env = dict(os.environ if base is None else base)
        env.update(
            {
                "AZURE_CLIENT_ID": self.client_id,
                "AZURE_CLIENT_SECRET": self.client_secret.get_secret_value(),
                "AZURE_TENANT_ID": self.tenant_id,
                "AZURE_SUBSCRIPTION_ID": self.subscription_id,
                "NODE_NO_WARNINGS": "1",
            }
        )
        return env
