"""
Shape projector: raw graph reader output to response DTOs.
"""

from typing import Any, Dict, List

from ..models import Order, OrderItem
from ..models.base import loaded_association
from ..repository.order_graph_reader import RawResult, RawResultKind
from ..schemas.order import (
    OrderDto,
    OrderFlatDto,
    OrderItemQueryDto,
    OrderQueryDto,
    SimpleOrderDto,
)
from ..utils.grouping import group_by_root


class ShapeProjector:
    def project(self, raw: RawResult) -> List[Any]:
        """Nested order DTOs, one per distinct order, in first-seen order."""
        if raw.kind is RawResultKind.ENTITY_GRAPH:
            return self.project_entities(raw.rows)
        if raw.kind is RawResultKind.FLAT_ROWS:
            return self.project_flat_rows(raw.rows)
        return list(raw.rows)

    def project_simple(self, raw: RawResult) -> List[Any]:
        if raw.kind is RawResultKind.ENTITY_GRAPH:
            return [SimpleOrderDto.from_entity(order) for order in raw.rows]
        return list(raw.rows)

    def project_entities(self, orders: List[Order]) -> List[OrderDto]:
        """Deduplicate orders repeated by a collection join and merge their items."""
        grouped = group_by_root(orders, key=lambda order: order.id)
        dtos = []
        for occurrences in grouped.values():
            simple = SimpleOrderDto.from_entity(occurrences[0])
            dtos.append(OrderDto.from_simple(simple, self._merge_items(occurrences)))
        return dtos

    def project_flat_rows(self, rows: List[OrderFlatDto]) -> List[OrderQueryDto]:
        grouped = group_by_root(rows, key=lambda row: row.order_id)
        dtos = []
        for order_id, order_rows in grouped.items():
            first = order_rows[0]
            dtos.append(
                OrderQueryDto(
                    order_id=order_id,
                    name=first.name,
                    order_date=first.order_date,
                    order_status=first.order_status,
                    address=first.address,
                    order_items=[
                        OrderItemQueryDto(
                            order_id=order_id,
                            item_name=row.item_name,
                            order_price=row.order_price,
                            count=row.count,
                        )
                        for row in order_rows
                    ],
                )
            )
        return dtos

    @staticmethod
    def _merge_items(occurrences: List[Order]) -> List[OrderItem]:
        merged: Dict[int, OrderItem] = {}
        seen_orders = set()
        for order in occurrences:
            # The identity map hands back the same Order for every repeated row
            if id(order) in seen_orders:
                continue
            seen_orders.add(id(order))
            for order_item in loaded_association(order, "order_items"):
                merged.setdefault(order_item.id, order_item)
        return list(merged.values())
