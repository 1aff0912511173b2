"""FastAPI application factory and configuration."""

from fastapi import FastAPI

from golf_configurator import __version__
from golf_configurator.api.routes import config, selection, sessions, transform


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    app = FastAPI(
        title="golf-configurator API",
        description="Golf iron set configurator and bundle consolidation",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.include_router(config.router, prefix="/api/config", tags=["config"])
    app.include_router(selection.router, prefix="/api/selection", tags=["selection"])
    app.include_router(transform.router, prefix="/api/transform", tags=["transform"])
    app.include_router(sessions.router, prefix="/api/sessions", tags=["sessions"])

    @app.get("/health", tags=["health"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


# Create app instance for uvicorn
app = create_app()
