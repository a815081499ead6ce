"""Health check endpoints for API and database monitoring."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, text
from plantcare.core.database import get_db
from plantcare.models import User, Group
import logging

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/health")
async def health_check():
    """Basic health check endpoint."""
    return {"status": "healthy", "service": "plantcare-bot"}


@router.get("/health/db")
async def check_database_health(db: AsyncSession = Depends(get_db)):
    """
    Database health check.

    Example response:
    {
        "status": "healthy",
        "database": "sqlite",
        "users": 12,
        "groups": 30
    }
    """
    logger.debug("Starting database health check")

    try:
        await db.execute(text("SELECT 1"))
        logger.debug("✓ Database connection successful")

        users_count = (await db.execute(select(func.count(User.id)))).scalar_one()
        groups_count = (await db.execute(select(func.count(Group.id)))).scalar_one()

        return {
            "status": "healthy",
            "database": db.bind.dialect.name,
            "users": users_count,
            "groups": groups_count
        }

    except Exception as e:
        logger.error(f"Database health check failed: {e}", exc_info=True)
        return {
            "status": "unhealthy",
            "error": str(e),
            "error_type": type(e).__name__
        }
