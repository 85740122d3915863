"""
Order query service: strategy selection, graph reading and shaping for one
request.
"""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.setting import get_settings
from ..repository.order_graph_reader import OrderGraphReader
from ..repository.order_store import CancellationToken, OrderStore
from ..schemas.order import OrderSearch, Page, Result
from ..utils.logging import setup_order_query_logging as setup_logging
from .shape_projector import ShapeProjector
from .strategy_selector import StrategySelector

logger = setup_logging("order_query_service", log_level=get_settings().LOG_LEVEL)


class OrderQueryService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.store = OrderStore(session)
        self.reader = OrderGraphReader(self.store)
        self.projector = ShapeProjector()
        self.selector = StrategySelector()

    @property
    def query_count(self) -> int:
        """Store round trips issued through this service so far"""
        return self.store.query_count

    async def find_orders(
        self,
        version: str,
        root_filter: Optional[OrderSearch] = None,
        page: Optional[Page] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Result:
        """Orders with member, delivery and order items, read the ``version`` way."""
        strategy = self.selector.select(version, page)
        raw = await self.reader.fetch(
            root_filter or OrderSearch(), strategy, page, cancel_token
        )
        data = self.projector.project(raw)

        logger.info(
            "Orders read",
            extra={
                "api_version": version,
                "strategy": strategy.name,
                "order_count": len(data),
                "query_count": raw.query_count,
                "paged": page is not None,
            },
        )
        return Result.of(data)

    async def find_simple_orders(
        self,
        version: str,
        root_filter: Optional[OrderSearch] = None,
        page: Optional[Page] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Result:
        """Orders with member and delivery only."""
        strategy = self.selector.select_simple(version)
        raw = await self.reader.fetch_simple(
            root_filter or OrderSearch(), strategy, page, cancel_token
        )
        data = self.projector.project_simple(raw)

        logger.info(
            "Simple orders read",
            extra={
                "api_version": version,
                "strategy": strategy.name,
                "order_count": len(data),
                "query_count": raw.query_count,
                "paged": page is not None,
            },
        )
        return Result.of(data)
