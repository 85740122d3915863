"""
Order schemas package
"""

from .order import (
    AddressDto,
    OrderDto,
    OrderFlatDto,
    OrderItemDto,
    OrderItemQueryDto,
    OrderQueryDto,
    OrderSearch,
    Page,
    ResponseModel,
    Result,
    SimpleOrderDto,
    SimpleOrderQueryDto,
)

__all__ = [
    "ResponseModel",
    "AddressDto",
    # Entity-mapped shapes
    "OrderItemDto",
    "SimpleOrderDto",
    "OrderDto",
    # Projection shapes
    "OrderItemQueryDto",
    "SimpleOrderQueryDto",
    "OrderQueryDto",
    "OrderFlatDto",
    "Result",
    # Request shapes
    "OrderSearch",
    "Page",
]
