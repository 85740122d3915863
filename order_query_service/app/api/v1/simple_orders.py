from typing import Optional

from fastapi import APIRouter, status

from ...schemas.order import OrderSearch, Page, Result
from ...services.order_query_service import OrderQueryService
from ..deps import OrderQueryServiceDep, OrderSearchDep, PageDep

router = APIRouter(prefix="/api/{version}")


@router.get("/simple-orders", status_code=status.HTTP_200_OK)
async def list_simple_orders(
    version: str,
    root_filter: OrderSearch = OrderSearchDep,
    page: Optional[Page] = PageDep,
    order_query_service: OrderQueryService = OrderQueryServiceDep,
) -> Result:
    """List orders with member and delivery only (v1 to v4).

    Only to-one associations are joined, so every version accepts
    ``offset``/``limit``.
    """
    return await order_query_service.find_simple_orders(version, root_filter, page)
