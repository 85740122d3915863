"""
Pytest configuration and fixtures for Order Query Service tests.
"""

import os
from datetime import datetime
from typing import Any, AsyncGenerator, Awaitable, Callable, List, Tuple

import pytest

# Set up test environment before the service reads its settings
os.environ["ENVIRONMENT"] = "test"
os.environ["ORDER_QUERY_DATABASE_URL"] = "sqlite+aiosqlite:///./test_order_query.db"

from order_query_service.app.core.database import OrderQueryDatabaseManager
from order_query_service.app.core.init_db import build_order, seed_sample_data
from order_query_service.app.models import (
    Delivery,
    Item,
    ItemKind,
    Member,
    Order,
    OrderItem,
    OrderStatus,
)
from order_query_service.app.schemas.order import Result
from order_query_service.app.services.order_query_service import OrderQueryService


@pytest.fixture
async def database(tmp_path) -> AsyncGenerator[OrderQueryDatabaseManager, None]:
    """Empty order store in a temporary SQLite file."""
    manager = OrderQueryDatabaseManager(f"sqlite+aiosqlite:///{tmp_path / 'orders.db'}")
    await manager.create_tables()
    yield manager
    await manager.close()


@pytest.fixture
async def seeded_database(database) -> OrderQueryDatabaseManager:
    """userA orders JPA1 x1 and JPA2 x2; userB orders SPRING1 x3 and SPRING2 x4."""
    async with database.async_session_maker() as session:
        await seed_sample_data(session)
    return database


@pytest.fixture
def create_orders(database) -> Callable[..., Awaitable[None]]:
    """Insert one order per entry of ``item_counts``, e.g. ``[2, 1]``.

    Order n belongs to member ``member{n}`` and holds items ``item{n}-{k}``.
    """

    async def _create(item_counts: List[int]) -> None:
        async with database.async_session_maker() as session:
            for n, item_count in enumerate(item_counts, start=1):
                member = Member(
                    name=f"member{n}", city="Seoul", street=f"{n}", zipcode=f"{n:05d}"
                )
                lines = [
                    (
                        Item(
                            kind=ItemKind.BOOK,
                            name=f"item{n}-{k}",
                            price=1000 * k,
                            stock_quantity=10,
                        ),
                        k,
                    )
                    for k in range(1, item_count + 1)
                ]
                session.add(build_order(member, lines))
            await session.commit()

    return _create


@pytest.fixture
def read_orders(database) -> Callable[..., Awaitable[Tuple[Result, int]]]:
    """Run one order read in a fresh session; returns the result and its query count."""

    async def _read(version: str, simple: bool = False, **kwargs: Any):
        async with database.async_session_maker() as session:
            service = OrderQueryService(session)
            if simple:
                result = await service.find_simple_orders(version, **kwargs)
            else:
                result = await service.find_orders(version, **kwargs)
            return result, service.query_count

    return _read


@pytest.fixture
def order_graph() -> Callable[..., Order]:
    """Build a detached order graph with every association already set."""

    def _build(order_id: int, item_names: List[str], member_name: str = "userA") -> Order:
        return Order(
            id=order_id,
            member_id=order_id,
            delivery_id=order_id,
            order_date=datetime(2024, 1, order_id, 12, 0, 0),
            status=OrderStatus.ORDERED,
            member=Member(
                id=order_id, name=member_name, city="Seoul", street="1", zipcode="1111"
            ),
            delivery=Delivery(id=order_id, city="Seoul", street="1", zipcode="1111"),
            order_items=[
                OrderItem(
                    id=order_id * 100 + position,
                    order_price=1000,
                    count=position + 1,
                    item=Item(
                        id=order_id * 100 + position,
                        kind=ItemKind.BOOK,
                        name=name,
                        price=1000,
                        stock_quantity=1,
                    ),
                )
                for position, name in enumerate(item_names)
            ],
        )

    return _build
