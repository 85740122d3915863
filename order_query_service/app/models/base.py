from dataclasses import dataclass
from typing import Any

from sqlalchemy import Integer, inspect
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from ..core.exceptions import UnresolvedReferenceError


class OrderQueryBase(DeclarativeBase):
    """Base class for all Order Query Service database models."""

    pass


class OrderQueryBaseModel(OrderQueryBase):
    """Base model with the surrogate primary key."""

    __abstract__ = True
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)


@dataclass(frozen=True)
class Address:
    """Postal address value object shared by members and deliveries."""

    city: str
    street: str
    zipcode: str


def loaded_association(entity: OrderQueryBase, attribute: str) -> Any:
    """Read an association that must already have been loaded explicitly."""
    if attribute in inspect(entity).unloaded:
        raise UnresolvedReferenceError(type(entity).__name__, attribute)
    return getattr(entity, attribute)
