from typing import Any, Dict

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.setting import get_settings
from ..deps import DatabaseDep

router = APIRouter()


@router.get("/health")
async def health_check(session: AsyncSession = DatabaseDep) -> Dict[str, Any]:
    """Health check endpoint with an order store ping."""
    settings = get_settings()
    await session.execute(text("SELECT 1"))
    return {
        "service": "order_query_service",
        "version": settings.APP_VERSION,
        "status": "healthy",
        "checks": {"database": {"status": "healthy"}},
    }
