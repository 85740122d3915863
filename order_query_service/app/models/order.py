from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import OrderQueryBaseModel

if TYPE_CHECKING:
    from .delivery import Delivery
    from .item import Item
    from .member import Member


class OrderStatus(Enum):
    ORDERED = "ORDERED"
    CANCELLED = "CANCELLED"


class Order(OrderQueryBaseModel):
    __tablename__ = "orders"

    member_id: Mapped[int] = mapped_column(ForeignKey("members.id"), nullable=False)
    delivery_id: Mapped[int] = mapped_column(
        ForeignKey("deliveries.id"), unique=True, nullable=False
    )
    order_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        default=lambda: datetime.now(timezone.utc).replace(tzinfo=None),
        nullable=False,
    )
    status: Mapped[OrderStatus] = mapped_column(
        SQLEnum(OrderStatus, name="order_status"),
        default=OrderStatus.ORDERED,
        nullable=False,
    )

    # Associations never load on attribute access; see OrderGraphReader
    member: Mapped["Member"] = relationship(back_populates="orders", lazy="raise")
    delivery: Mapped["Delivery"] = relationship(back_populates="order", lazy="raise")
    order_items: Mapped[list["OrderItem"]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
        lazy="raise",
    )


class OrderItem(OrderQueryBaseModel):
    __tablename__ = "order_items"

    order_id: Mapped[int] = mapped_column(
        ForeignKey("orders.id"), index=True, nullable=False
    )
    item_id: Mapped[int] = mapped_column(ForeignKey("items.id"), nullable=False)
    order_price: Mapped[int] = mapped_column(Integer, nullable=False)
    count: Mapped[int] = mapped_column(Integer, nullable=False)

    order: Mapped["Order"] = relationship(back_populates="order_items", lazy="raise")
    item: Mapped["Item"] = relationship(lazy="raise")
