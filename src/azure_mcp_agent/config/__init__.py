"""Configuration module."""

from azure_mcp_agent.config.settings import Settings, get_settings, load_settings
from azure_mcp_agent.config.prompts import DEFAULT_SYSTEM_PROMPT, TOOL_ROUND_MARKER

__all__ = [
    "Settings",
    "get_settings",
    "load_settings",
    "DEFAULT_SYSTEM_PROMPT",
    "TOOL_ROUND_MARKER",
]
