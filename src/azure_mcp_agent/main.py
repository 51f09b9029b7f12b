"""FastAPI application entry point."""

import sys
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from azure_mcp_agent import __version__
from azure_mcp_agent.api.models import ErrorResponse
from azure_mcp_agent.api.routes import router
from azure_mcp_agent.app import Application
from azure_mcp_agent.config.settings import Settings, get_settings
from azure_mcp_agent.core.agent import AzureMCPAgent
from azure_mcp_agent.core.exceptions import ChatRequestError, ConfigurationError
from azure_mcp_agent.utils.logging import configure_logging, get_logger


logger = get_logger(__name__)


def create_app(
    settings: Settings | None = None,
    agent: AzureMCPAgent | None = None,
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        settings: Validated settings; loaded from the environment when omitted
        agent: Prebuilt agent; built from settings when omitted

    Returns:
        Configured FastAPI application

    Raises:
        ConfigurationError: If required environment variables are missing
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    application = Application(settings, agent=agent)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await application.startup()
        yield
        await application.shutdown()

    app = FastAPI(
        title="Azure MCP Agent API",
        description="Chat agent answering Azure questions through MCP tools",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.application = application

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ChatRequestError)
    async def chat_request_error_handler(request: Request, exc: ChatRequestError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(error=exc.message).model_dump(exclude_none=True),
        )

    app.include_router(router)

    @app.get("/")
    async def root():
        return {
            "name": "Azure MCP Agent API",
            "version": __version__,
            "docs": "/docs",
        }

    return app


def main() -> None:
    """Entry point for running the application."""
    import uvicorn

    try:
        settings = get_settings()
    except ConfigurationError as e:
        configure_logging("INFO")
        logger.error("Invalid configuration", error=e.message, missing=e.missing)
        sys.exit(1)

    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
