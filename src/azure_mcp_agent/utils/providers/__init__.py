"""Chat-completion provider implementations.

Usage:
    from azure_mcp_agent.utils.providers import create_provider

    provider = create_provider(settings)
"""

from azure_mcp_agent.config.settings import Settings
from azure_mcp_agent.utils.providers.base import (
    TOOL_CALL_FINISH_REASONS,
    BaseCompletionProvider,
    StreamEvent,
    StreamFinished,
    TextDelta,
    ToolCallFragment,
)
from azure_mcp_agent.utils.providers.azure_openai import AzureOpenAIProvider
from azure_mcp_agent.utils.providers.mock import MockCompletionProvider


def create_provider(settings: Settings) -> BaseCompletionProvider:
    """
    Create the Azure OpenAI provider from settings.

    Args:
        settings: Application settings

    Returns:
        Configured provider instance
    """
    return AzureOpenAIProvider(
        endpoint=settings.azure_openai_endpoint,
        api_key=settings.azure_openai_api_key.get_secret_value(),
        api_version=settings.azure_openai_api_version,
        timeout=settings.completion_timeout_seconds,
    )


__all__ = [
    "TOOL_CALL_FINISH_REASONS",
    "BaseCompletionProvider",
    "StreamEvent",
    "StreamFinished",
    "TextDelta",
    "ToolCallFragment",
    "AzureOpenAIProvider",
    "MockCompletionProvider",
    "create_provider",
]
