"""
Strategy selection and request validation.
"""

from typing import Optional

from ..core.exceptions import PaginationNotSupportedError, UnknownStrategyError
from ..core.strategies import FetchStrategy
from ..schemas.order import Page


class StrategySelector:
    """Maps an API version to a fetch strategy and validates paging.

    Row-multiplying strategies join the order items collection, so a store
    LIMIT would count joined rows instead of orders. Paging them is refused
    here, before any query runs.
    """

    def select(self, version: str, page: Optional[Page] = None) -> FetchStrategy:
        strategy = FetchStrategy.from_version(version)
        if page is not None and strategy.row_multiplying:
            raise PaginationNotSupportedError(strategy.api_version)
        return strategy

    def select_simple(self, version: str) -> FetchStrategy:
        """Simple-order reads only join to-one associations; any page is safe."""
        strategy = FetchStrategy.from_version(version)
        if not strategy.supports_simple:
            raise UnknownStrategyError(version)
        return strategy
