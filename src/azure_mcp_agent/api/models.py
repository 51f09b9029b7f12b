"""API request/response models."""

from typing import Literal

from pydantic import BaseModel, Field, StrictStr


class HistoryMessage(BaseModel):
    """A prior conversation message supplied by the caller."""

    role: Literal["user", "assistant"]
    content: StrictStr


class ChatRequest(BaseModel):
    """Request model for chat endpoints."""

    message: StrictStr = Field(min_length=1, description="User message")
    history: list[HistoryMessage] = Field(
        default_factory=list, description="Optional prior conversation"
    )

    def history_messages(self) -> list[dict[str, str]]:
        return [item.model_dump() for item in self.history]


class ChatResponse(BaseModel):
    """Response model for non-streaming chat."""

    response: str


class ErrorResponse(BaseModel):
    """Error body."""

    error: str
    details: str | None = None


class ToolInfo(BaseModel):
    """Information about an available tool."""

    name: str
    description: str


class ToolsResponse(BaseModel):
    """Response model for tools endpoint."""

    tools: list[ToolInfo]
    count: int
    connected: bool


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str
    timestamp: str
    version: str
    tools_connected: bool
    tool_count: int
