"""Application configuration and router setup."""

import fastapi
from fastapi.middleware import cors
from fastapi.openapi.utils import get_openapi

from components.core import init_db
from components.core.config import get_settings
from components.core.logging_config import configure_logging
from restapi.endpoints import admin, health_check, obligation, period, summary, transaction


def create_app() -> fastapi.FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL, settings.LOG_JSON)

    app = fastapi.FastAPI(
        title="Recurring Obligations",
        description="Scheduling and aggregation of recurring bills and income",
        version="1.0.0",
        debug=settings.DEBUG,
    )

    # Initialize database
    init_db.init_db(app)

    # Add CORS middleware
    app.add_middleware(
        cors.CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(health_check.router)
    app.include_router(obligation.router)
    app.include_router(period.router)
    app.include_router(summary.router)
    app.include_router(transaction.router)
    app.include_router(admin.router)

    def custom_openapi():
        if app.openapi_schema:
            return app.openapi_schema
        openapi_schema = get_openapi(
            title="Recurring Obligations",
            version="1.0.0",
            description="Scheduling and aggregation of recurring bills and income",
            routes=app.routes,
        )
        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi

    return app
