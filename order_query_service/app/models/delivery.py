from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import Enum as SQLEnum
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Address, OrderQueryBaseModel

if TYPE_CHECKING:
    from .order import Order


class DeliveryStatus(Enum):
    READY = "READY"
    COMP = "COMP"


class Delivery(OrderQueryBaseModel):
    __tablename__ = "deliveries"

    city: Mapped[str] = mapped_column(String(100), nullable=False)
    street: Mapped[str] = mapped_column(String(255), nullable=False)
    zipcode: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[DeliveryStatus] = mapped_column(
        SQLEnum(DeliveryStatus, name="delivery_status"),
        default=DeliveryStatus.READY,
        nullable=False,
    )

    order: Mapped["Order"] = relationship(back_populates="delivery", lazy="raise")

    @property
    def address(self) -> Address:
        return Address(city=self.city, street=self.street, zipcode=self.zipcode)
