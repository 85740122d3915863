"""
Sample data for local development: two members, each with one order of two
books.
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Delivery, Item, ItemKind, Member, Order, OrderItem
from ..utils.logging import get_logger

logger = get_logger("init_db")

SAMPLE_ORDERS = [
    {
        "member": ("userA", "Seoul", "1", "1111"),
        "items": [("JPA1 BOOK", 10000, 1), ("JPA2 BOOK", 20000, 2)],
    },
    {
        "member": ("userB", "Jinju", "2", "2222"),
        "items": [("SPRING1 BOOK", 20000, 3), ("SPRING2 BOOK", 40000, 4)],
    },
]


def build_order(member: Member, lines: list[tuple[Item, int]]) -> Order:
    """New order delivered to the member's address, priced at current item prices."""
    delivery = Delivery(city=member.city, street=member.street, zipcode=member.zipcode)
    return Order(
        member=member,
        delivery=delivery,
        order_items=[
            OrderItem(item=item, order_price=item.price, count=count)
            for item, count in lines
        ],
    )


async def seed_sample_data(session: AsyncSession) -> int:
    """Insert the sample orders unless members already exist.

    Returns the number of orders created.
    """
    existing = await session.execute(select(func.count(Member.id)))
    if existing.scalar():
        logger.info("Sample data already present, skipping seed")
        return 0

    for sample in SAMPLE_ORDERS:
        name, city, street, zipcode = sample["member"]
        member = Member(name=name, city=city, street=street, zipcode=zipcode)
        lines = []
        for item_name, price, count in sample["items"]:
            item = Item(
                kind=ItemKind.BOOK,
                name=item_name,
                price=price,
                stock_quantity=100,
            )
            lines.append((item, count))
        session.add(build_order(member, lines))

    await session.commit()
    logger.info("Sample data seeded", extra={"order_count": len(SAMPLE_ORDERS)})
    return len(SAMPLE_ORDERS)
