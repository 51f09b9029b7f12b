"""Azure MCP Agent - LLM tool-calling agent backed by the Azure MCP server."""

__version__ = "1.0.0"
