"""
Recommandateur - FastAPI Application

Main entry point for the API server.
Environment-agnostic: configuration reads from settings (.env file).
"""

import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from recommandateur.config.defaults import APP_VERSION
from recommandateur.logging_setup import setup_logging
from recommandateur.settings import get_settings
from api.dependencies import lifespan_handler
from api.routers import backup, cache, config, health, lists, recommendations

# Get settings
cfg = get_settings()

# Configure logging
setup_logging(cfg.log_level)
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """
    Application factory for creating FastAPI app.

    Configuration is loaded from settings (reads from .env file).

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title="Recommandateur API",
        description="Film/series lists and one-shot recommendations",
        version=APP_VERSION,
        lifespan=lifespan_handler  # Builds the store and candidate source
    )

    logger.info(f"Configuring CORS with origins: {cfg.cors_origins}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Api-Token", "Accept", "X-Requested-With"],
        max_age=86400,
    )

    # Mount routers
    app.include_router(lists.router, prefix="/api/v1", tags=["lists"])
    app.include_router(cache.router, prefix="/api/v1", tags=["cache"])
    app.include_router(recommendations.router, prefix="/api/v1", tags=["recommendations"])
    app.include_router(config.router, prefix="/api/v1", tags=["config"])
    app.include_router(backup.router, prefix="/api/v1", tags=["backup"])
    app.include_router(health.router, prefix="/api/v1", tags=["health"])

    logger.info(f"FastAPI application created (env={cfg.env})")

    return app


# Create app instance
app = create_app()


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint - API info"""
    return {
        "name": "Recommandateur API",
        "version": APP_VERSION,
        "environment": cfg.env,
        "status": "running",
        "docs": "/docs",
        "health": "/api/v1/health"
    }


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting API server on {cfg.api_host}:{cfg.api_port}")
    logger.info(f"Environment: {cfg.env}")

    uvicorn.run(
        "api.main:app",
        host=cfg.api_host,
        port=cfg.api_port,
        reload=cfg.api_reload,
        workers=cfg.api_workers if not cfg.api_reload else 1,  # Workers only work without reload
        log_level=cfg.log_level.lower()
    )
