"""
Graph reader for the order graph.

    Order -> Member      (many-to-one)
    Order -> Delivery    (one-to-one)
    Order -> OrderItem   (one-to-many) -> Item (many-to-one)

Associations are never loaded on attribute access. Each strategy states up
front which store queries it issues; resolving a single association is the
explicit ``resolve_*`` call and costs exactly one query.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import bindparam
from sqlalchemy.orm.attributes import set_committed_value

from ..core.strategies import FetchStrategy
from ..models import Delivery, Item, Member, Order, OrderItem
from ..schemas.order import (
    OrderDto,
    OrderFlatDto,
    OrderItemQueryDto,
    OrderQueryDto,
    OrderSearch,
    Page,
    SimpleOrderDto,
    SimpleOrderQueryDto,
)
from ..utils.grouping import group_by_root
from ..utils.logging import get_logger
from .order_store import CancellationToken, OrderStore
from .query import JoinSpec, QueryDescriptor

logger = get_logger("graph_reader")


class RawResultKind(Enum):
    ENTITY_GRAPH = "entity_graph"
    FLAT_ROWS = "flat_rows"
    DTO_LIST = "dto_list"


@dataclass
class RawResult:
    kind: RawResultKind
    rows: List[Any]
    strategy: FetchStrategy
    query_count: int


ORDER_COLUMNS = (
    Order.id.label("order_id"),
    Member.name.label("name"),
    Order.order_date.label("order_date"),
    Order.status.label("order_status"),
    Delivery.city.label("city"),
    Delivery.street.label("street"),
    Delivery.zipcode.label("zipcode"),
)

ORDER_ITEM_COLUMNS = (
    OrderItem.order_id.label("order_id"),
    Item.name.label("item_name"),
    OrderItem.order_price.label("order_price"),
    OrderItem.count.label("count"),
)

TO_ONE_JOINS = (JoinSpec((Order.member,)), JoinSpec((Order.delivery,)))
TO_ONE_FETCH_JOINS = (
    JoinSpec((Order.member,), fetch=True),
    JoinSpec((Order.delivery,), fetch=True),
)
ORDER_ITEMS_JOIN = JoinSpec((Order.order_items, OrderItem.item))
ORDER_ITEMS_FETCH_JOIN = JoinSpec((Order.order_items, OrderItem.item), fetch=True)

MEMBER_BY_ID = QueryDescriptor(
    name="member_by_id",
    root=Member,
    where=(Member.id == bindparam("member_id"),),
)
DELIVERY_BY_ID = QueryDescriptor(
    name="delivery_by_id",
    root=Delivery,
    where=(Delivery.id == bindparam("delivery_id"),),
)
ORDER_ITEMS_BY_ORDER = QueryDescriptor(
    name="order_items_by_order",
    root=OrderItem,
    joins=(JoinSpec((OrderItem.item,), fetch=True),),
    where=(OrderItem.order_id == bindparam("order_id"),),
    order_by=(OrderItem.id,),
)
ORDER_ITEMS_BY_ORDERS = QueryDescriptor(
    name="order_items_by_orders",
    root=OrderItem,
    joins=(JoinSpec((OrderItem.item,), fetch=True),),
    where=(OrderItem.order_id.in_(bindparam("order_ids", expanding=True)),),
    order_by=(OrderItem.id,),
)
ORDER_ITEM_DTOS_BY_ORDER = QueryDescriptor(
    name="order_item_dtos_by_order",
    root=OrderItem,
    columns=ORDER_ITEM_COLUMNS,
    joins=(JoinSpec((OrderItem.item,)),),
    where=(OrderItem.order_id == bindparam("order_id"),),
    order_by=(OrderItem.id,),
    projection=OrderItemQueryDto.from_row,
)
ORDER_ITEM_DTOS_BY_ORDERS = QueryDescriptor(
    name="order_item_dtos_by_orders",
    root=OrderItem,
    columns=ORDER_ITEM_COLUMNS,
    joins=(JoinSpec((OrderItem.item,)),),
    where=(OrderItem.order_id.in_(bindparam("order_ids", expanding=True)),),
    order_by=(OrderItem.id,),
    projection=OrderItemQueryDto.from_row,
)


def _filter_clauses(root_filter: OrderSearch) -> Tuple[Any, ...]:
    clauses: List[Any] = []
    if root_filter.member_name:
        clauses.append(
            Member.name.contains(root_filter.member_name, autoescape=True)
        )
    if root_filter.order_status is not None:
        clauses.append(Order.status == root_filter.order_status)
    return tuple(clauses)


def _filter_joins(root_filter: OrderSearch) -> Tuple[JoinSpec, ...]:
    return (JoinSpec((Order.member,)),) if root_filter.member_name else ()


def _paging(page: Optional[Page]) -> Dict[str, Any]:
    if page is None:
        return {}
    return {"limit": page.limit, "offset": page.offset}


class OrderGraphReader:
    """Reads the order graph from the store with one of the fetch strategies."""

    def __init__(self, store: OrderStore):
        self.store = store

    async def fetch(
        self,
        root_filter: OrderSearch,
        strategy: FetchStrategy,
        page: Optional[Page] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> RawResult:
        handlers = {
            FetchStrategy.NAIVE_ENTITY: self._naive_entity,
            FetchStrategy.DTO_POST_MAP: self._dto_post_map,
            FetchStrategy.FETCH_JOIN: self._fetch_join,
            FetchStrategy.BATCH_FETCH: self._batch_fetch,
            FetchStrategy.PROJECTION_LOOP: self._projection_loop,
            FetchStrategy.PROJECTION_BATCH: self._projection_batch,
            FetchStrategy.FLAT_JOIN: self._flat_join,
        }
        return await self._run(
            handlers[strategy], strategy, root_filter, page, cancel_token
        )

    async def fetch_simple(
        self,
        root_filter: OrderSearch,
        strategy: FetchStrategy,
        page: Optional[Page] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> RawResult:
        """Read orders with their member and delivery only."""
        handlers = {
            FetchStrategy.NAIVE_ENTITY: self._simple_naive_entity,
            FetchStrategy.DTO_POST_MAP: self._simple_dto_post_map,
            FetchStrategy.FETCH_JOIN: self._simple_fetch_join,
            FetchStrategy.PROJECTION_LOOP: self._simple_projection,
        }
        return await self._run(
            handlers[strategy], strategy, root_filter, page, cancel_token
        )

    async def _run(self, handler, strategy, root_filter, page, cancel_token) -> RawResult:
        start = self.store.query_count
        kind, rows = await handler(root_filter, page, cancel_token)
        result = RawResult(
            kind=kind,
            rows=rows,
            strategy=strategy,
            query_count=self.store.query_count - start,
        )
        logger.info(
            "Order graph fetched",
            extra={
                "strategy": strategy.name,
                "api_version": strategy.api_version,
                "result_kind": kind.value,
                "row_count": len(rows),
                "query_count": result.query_count,
            },
        )
        return result

    # Explicit association resolution

    async def resolve_member(
        self, order: Order, cancel_token: Optional[CancellationToken] = None
    ) -> Member:
        rows = await self.store.query(
            MEMBER_BY_ID, {"member_id": order.member_id}, cancel_token
        )
        set_committed_value(order, "member", rows[0])
        return rows[0]

    async def resolve_delivery(
        self, order: Order, cancel_token: Optional[CancellationToken] = None
    ) -> Delivery:
        rows = await self.store.query(
            DELIVERY_BY_ID, {"delivery_id": order.delivery_id}, cancel_token
        )
        set_committed_value(order, "delivery", rows[0])
        return rows[0]

    async def resolve_order_items(
        self, order: Order, cancel_token: Optional[CancellationToken] = None
    ) -> List[OrderItem]:
        order_items = await self.store.query(
            ORDER_ITEMS_BY_ORDER, {"order_id": order.id}, cancel_token
        )
        set_committed_value(order, "order_items", order_items)
        return order_items

    async def prefetch_order_items(
        self, orders: List[Order], cancel_token: Optional[CancellationToken] = None
    ) -> None:
        """Load the order items of every order in one grouped query."""
        pending_ids = [order.id for order in orders]
        if not pending_ids:
            return
        order_items = await self.store.query(
            ORDER_ITEMS_BY_ORDERS, {"order_ids": pending_ids}, cancel_token
        )
        grouped = group_by_root(order_items, key=lambda oi: oi.order_id)
        for order in orders:
            set_committed_value(order, "order_items", grouped.get(order.id, []))

    # Root queries

    def _order_roots(
        self,
        root_filter: OrderSearch,
        page: Optional[Page],
        joins: Tuple[JoinSpec, ...] = (),
        name: str = "orders",
    ) -> QueryDescriptor:
        return QueryDescriptor(
            name=name,
            root=Order,
            joins=joins + _filter_joins(root_filter),
            where=_filter_clauses(root_filter),
            order_by=(Order.id,),
            **_paging(page),
        )

    def _order_projection(
        self, root_filter: OrderSearch, page: Optional[Page], projection
    ) -> QueryDescriptor:
        return QueryDescriptor(
            name="order_dtos",
            root=Order,
            columns=ORDER_COLUMNS,
            joins=TO_ONE_JOINS,
            where=_filter_clauses(root_filter),
            order_by=(Order.id,),
            projection=projection,
            **_paging(page),
        )

    # Order graph strategies

    async def _naive_entity(self, root_filter, page, cancel_token):
        orders = await self.store.query(
            self._order_roots(root_filter, page), cancel_token=cancel_token
        )
        for order in orders:
            await self.resolve_member(order, cancel_token)
            await self.resolve_delivery(order, cancel_token)
            await self.resolve_order_items(order, cancel_token)
        return RawResultKind.ENTITY_GRAPH, orders

    async def _dto_post_map(self, root_filter, page, cancel_token):
        orders = await self.store.query(
            self._order_roots(root_filter, page), cancel_token=cancel_token
        )
        dtos = []
        for order in orders:
            await self.resolve_member(order, cancel_token)
            await self.resolve_delivery(order, cancel_token)
            await self.resolve_order_items(order, cancel_token)
            dtos.append(OrderDto.from_entity(order))
        return RawResultKind.DTO_LIST, dtos

    async def _fetch_join(self, root_filter, page, cancel_token):
        descriptor = QueryDescriptor(
            name="orders_fetch_join",
            root=Order,
            joins=TO_ONE_FETCH_JOINS + (ORDER_ITEMS_FETCH_JOIN,),
            where=_filter_clauses(root_filter),
            order_by=(Order.id, OrderItem.id),
            unique=True,
            **_paging(page),
        )
        orders = await self.store.query(descriptor, cancel_token=cancel_token)
        return RawResultKind.ENTITY_GRAPH, orders

    async def _batch_fetch(self, root_filter, page, cancel_token):
        orders = await self.store.query(
            self._order_roots(
                root_filter, page, TO_ONE_FETCH_JOINS, name="orders_member_delivery"
            ),
            cancel_token=cancel_token,
        )
        await self.prefetch_order_items(orders, cancel_token)
        return RawResultKind.ENTITY_GRAPH, orders

    async def _projection_loop(self, root_filter, page, cancel_token):
        dtos = await self.store.query(
            self._order_projection(root_filter, page, OrderQueryDto.from_row),
            cancel_token=cancel_token,
        )
        for dto in dtos:
            dto.order_items = await self.store.query(
                ORDER_ITEM_DTOS_BY_ORDER, {"order_id": dto.order_id}, cancel_token
            )
        return RawResultKind.DTO_LIST, dtos

    async def _projection_batch(self, root_filter, page, cancel_token):
        dtos = await self.store.query(
            self._order_projection(root_filter, page, OrderQueryDto.from_row),
            cancel_token=cancel_token,
        )
        pending_ids = [dto.order_id for dto in dtos]
        if pending_ids:
            item_dtos = await self.store.query(
                ORDER_ITEM_DTOS_BY_ORDERS, {"order_ids": pending_ids}, cancel_token
            )
            grouped = group_by_root(item_dtos, key=lambda item: item.order_id)
            for dto in dtos:
                dto.order_items = grouped.get(dto.order_id, [])
        return RawResultKind.DTO_LIST, dtos

    async def _flat_join(self, root_filter, page, cancel_token):
        descriptor = QueryDescriptor(
            name="order_flat_dtos",
            root=Order,
            columns=ORDER_COLUMNS + ORDER_ITEM_COLUMNS[1:],
            joins=TO_ONE_JOINS + (ORDER_ITEMS_JOIN,),
            where=_filter_clauses(root_filter),
            order_by=(Order.id, OrderItem.id),
            projection=OrderFlatDto.from_row,
            **_paging(page),
        )
        rows = await self.store.query(descriptor, cancel_token=cancel_token)
        return RawResultKind.FLAT_ROWS, rows

    # Simple order strategies

    async def _simple_naive_entity(self, root_filter, page, cancel_token):
        orders = await self.store.query(
            self._order_roots(root_filter, page), cancel_token=cancel_token
        )
        for order in orders:
            await self.resolve_member(order, cancel_token)
            await self.resolve_delivery(order, cancel_token)
        return RawResultKind.ENTITY_GRAPH, orders

    async def _simple_dto_post_map(self, root_filter, page, cancel_token):
        orders = await self.store.query(
            self._order_roots(root_filter, page), cancel_token=cancel_token
        )
        dtos = []
        for order in orders:
            await self.resolve_member(order, cancel_token)
            await self.resolve_delivery(order, cancel_token)
            dtos.append(SimpleOrderDto.from_entity(order))
        return RawResultKind.DTO_LIST, dtos

    async def _simple_fetch_join(self, root_filter, page, cancel_token):
        # Only to-one joins: rows match roots one to one, so paging is safe
        orders = await self.store.query(
            self._order_roots(
                root_filter, page, TO_ONE_FETCH_JOINS, name="orders_member_delivery"
            ),
            cancel_token=cancel_token,
        )
        return RawResultKind.ENTITY_GRAPH, orders

    async def _simple_projection(self, root_filter, page, cancel_token):
        dtos = await self.store.query(
            self._order_projection(root_filter, page, SimpleOrderQueryDto.from_row),
            cancel_token=cancel_token,
        )
        return RawResultKind.DTO_LIST, dtos
