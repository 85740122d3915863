from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Address, OrderQueryBaseModel

if TYPE_CHECKING:
    from .order import Order


class Member(OrderQueryBaseModel):
    __tablename__ = "members"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    street: Mapped[str] = mapped_column(String(255), nullable=False)
    zipcode: Mapped[str] = mapped_column(String(20), nullable=False)

    # Inverse side, not loaded by any read strategy
    orders: Mapped[list["Order"]] = relationship(
        back_populates="member", lazy="raise"
    )

    @property
    def address(self) -> Address:
        return Address(city=self.city, street=self.street, zipcode=self.zipcode)
