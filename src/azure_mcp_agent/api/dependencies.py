"""FastAPI dependency injection."""

from typing import Annotated

from fastapi import Depends, Request

from azure_mcp_agent.app import Application
from azure_mcp_agent.core.agent import AzureMCPAgent


async def get_application(request: Request) -> Application:
    """Get the application from app state."""
    return request.app.state.application


async def get_agent(
    application: Annotated[Application, Depends(get_application)],
) -> AzureMCPAgent:
    """Get the shared agent."""
    return application.agent


# Type aliases for dependency injection
ApplicationDep = Annotated[Application, Depends(get_application)]
AgentDep = Annotated[AzureMCPAgent, Depends(get_agent)]
