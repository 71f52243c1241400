"""Database initialization and dependency injection."""

from typing import AsyncGenerator

import fastapi
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.database import DatabaseManager
from components.core.models import register_models

# Import all models to ensure they're registered
register_models()

# Create a single instance of DatabaseManager
db_manager = DatabaseManager()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for getting database sessions."""
    async with db_manager.get_db() as session:
        yield session


def init_db(app: fastapi.FastAPI) -> None:
    """Initialize database connection."""
    app.dependency_overrides[AsyncSession] = get_db
