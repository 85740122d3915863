"""
FastAPI dependency injection for Order Query Service

Provides database sessions, the order query service and request paging /
filter parameters.
"""

from typing import AsyncGenerator, Optional

from fastapi import Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db_session
from ..core.setting import get_settings
from ..models.order import OrderStatus
from ..schemas.order import OrderSearch, Page
from ..services.order_query_service import OrderQueryService

settings = get_settings()

# =====================================================
# DATABASE DEPENDENCIES
# =====================================================


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide async database session"""
    async for session in get_db_session():
        yield session


# =====================================================
# SERVICE DEPENDENCIES
# =====================================================


def get_order_query_service(
    session: AsyncSession = Depends(get_async_session),
) -> OrderQueryService:
    """Provide an OrderQueryService bound to the request session"""
    return OrderQueryService(session)


# =====================================================
# REQUEST PARAMETER DEPENDENCIES
# =====================================================


def get_order_search(
    member_name: Optional[str] = Query(
        None, alias="memberName", description="Substring of the member name"
    ),
    order_status: Optional[OrderStatus] = Query(
        None, alias="orderStatus", description="ORDERED or CANCELLED"
    ),
) -> OrderSearch:
    return OrderSearch(member_name=member_name, order_status=order_status)


def get_page(
    offset: Optional[int] = Query(None, ge=0, description="Orders to skip"),
    limit: Optional[int] = Query(
        None, ge=1, le=settings.MAX_PAGE_LIMIT, description="Orders to return"
    ),
) -> Optional[Page]:
    """A page only when the caller sent offset or limit"""
    if offset is None and limit is None:
        return None
    if limit is None:
        return Page(offset=offset or 0)
    return Page(offset=offset or 0, limit=limit)


# =====================================================
# COMMON DEPENDENCY ALIASES
# =====================================================

DatabaseDep = Depends(get_async_session)
OrderQueryServiceDep = Depends(get_order_query_service)
OrderSearchDep = Depends(get_order_search)
PageDep = Depends(get_page)
