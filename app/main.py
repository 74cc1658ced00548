"""
FastAPI application entrypoint for the marketplace add-on backend.
"""

from __future__ import annotations

import uvicorn
from fastapi import FastAPI

from app.api.routes import router as api_router
from app.core.config import get_settings
from app.core.logging import configure_logging


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Marketplace Add-on Backend",
        version="0.1.0",
        description=(
            "Lifecycle webhooks, single sign-on and OAuth token brokering for a "
            "marketplace add-on."
        ),
    )
    app.include_router(api_router)
    return app


app = create_app()


def run() -> None:
    """Serve the application with uvicorn."""
    settings = get_settings()
    uvicorn.run(app, host=settings.server_host, port=settings.server_port)


if __name__ == "__main__":  # pragma: no cover - script entry point
    run()

__all__ = ["app", "create_app", "run"]
