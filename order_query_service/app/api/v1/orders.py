from typing import Optional

from fastapi import APIRouter, status

from ...schemas.order import OrderSearch, Page, Result
from ...services.order_query_service import OrderQueryService
from ..deps import OrderQueryServiceDep, OrderSearchDep, PageDep

router = APIRouter(prefix="/api/{version}")


@router.get("/orders", status_code=status.HTTP_200_OK)
async def list_orders(
    version: str,
    root_filter: OrderSearch = OrderSearchDep,
    page: Optional[Page] = PageDep,
    order_query_service: OrderQueryService = OrderQueryServiceDep,
) -> Result:
    """List orders with member, delivery and order items.

    The version selects how the order graph is read: v1, v2, v3, v3.1, v4,
    v5 or v6. v3 and v6 join the order items collection and refuse
    ``offset``/``limit``.
    """
    return await order_query_service.find_orders(version, root_filter, page)
