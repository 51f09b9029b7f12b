"""API module."""

from .routes import router
from .models import ChatRequest, ChatResponse, ErrorResponse, HealthResponse, ToolsResponse

__all__ = ["router", "ChatRequest", "ChatResponse", "ErrorResponse", "HealthResponse", "ToolsResponse"]
