"""Domain exceptions for the Azure MCP agent."""


class AgentError(Exception):
    """Base exception for all agent errors."""

    def __init__(self, message: str, recoverable: bool = True):
        super().__init__(message)
        self.message = message
        self.recoverable = recoverable


class ConfigurationError(AgentError):
    """Required configuration is missing or invalid."""

    def __init__(self, message: str, missing: list[str] | None = None):
        super().__init__(message, recoverable=False)
        self.missing = missing or []


class MCPConnectionError(AgentError, ConnectionError):
    """Handshake with the MCP tool provider did not complete."""

    def __init__(self, message: str):
        super().__init__(message, recoverable=False)


class CompletionError(AgentError):
    """Chat completion request failed or timed out."""

    def __init__(self, message: str, model: str | None = None):
        super().__init__(message, recoverable=False)
        self.model = model


class ToolInvocationError(AgentError):
    """A single tool call failed."""

    def __init__(self, message: str, tool_name: str | None = None):
        super().__init__(message, recoverable=True)
        self.tool_name = tool_name


class ChatRequestError(AgentError):
    """Inbound chat request is malformed."""

    def __init__(self, message: str = "Message is required"):
        super().__init__(message, recoverable=True)
