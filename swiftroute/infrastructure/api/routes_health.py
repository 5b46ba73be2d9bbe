"""Health check endpoint."""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from swiftroute.infrastructure.api.dependencies import Storage, get_storage

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(storage: Storage = Depends(get_storage)):
    """Check API and storage connectivity."""
    if storage.session is None:
        db_status = "in-memory"
    else:
        try:
            result = await storage.session.execute(text("SELECT 1"))
            result.scalar()
            db_status = "connected"
        except (SQLAlchemyError, OSError, TimeoutError) as e:
            db_status = f"error: {type(e).__name__}"

    return {
        "status": "degraded" if db_status.startswith("error") else "ok",
        "database": db_status,
        "service": "SwiftRoute dispatch API",
    }
