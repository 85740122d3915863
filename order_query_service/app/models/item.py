from enum import Enum
from typing import Optional

from sqlalchemy import Enum as SQLEnum
from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import OrderQueryBaseModel

class ItemKind(Enum):
    BOOK = "BOOK"
    ALBUM = "ALBUM"
    MOVIE = "MOVIE"


class Item(OrderQueryBaseModel):
    """Sellable item stored as a tagged variant in a single table."""

    __tablename__ = "items"

    kind: Mapped[ItemKind] = mapped_column(
        SQLEnum(ItemKind, name="item_kind"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    price: Mapped[int] = mapped_column(Integer, nullable=False)
    stock_quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    author: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    isbn: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    artist: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    etc: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    director: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    actor: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
