"""
REST API main application.
Entry point for the FastAPI REST server.

Run with:
    uvicorn rest_api.main:app --reload --port 8080
or:
    viewset serve
"""

from fastapi import FastAPI

from shared.config.settings import settings
from rest_api.core.cors import configure_cors
from rest_api.core.errors import register_exception_handlers
from rest_api.core.lifespan import lifespan
from rest_api.core.middlewares import register_middlewares
from rest_api.routers.health import router as health_router
from rest_api.routers.users import router as users_router


def create_app() -> FastAPI:
    """Build the FastAPI application with middlewares, handlers and routers."""
    app = FastAPI(
        title="ViewSet REST API",
        description="Generic CRUD ViewSet service",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Middlewares (CORS registered last so it wraps everything)
    register_middlewares(app)
    configure_cors(app)

    register_exception_handlers(app)

    # Routers
    app.include_router(health_router)
    app.include_router(users_router)

    return app


app = create_app()
