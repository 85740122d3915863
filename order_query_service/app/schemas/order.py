"""
Response and request shapes for the order read API.

Response DTOs only hold scalars, value objects and other DTOs. Every DTO
derives from ``ResponseModel`` which refuses mapped entities at construction
time, so an entity can never reach the serializer.
"""

from datetime import datetime
from typing import Any, Generic, Iterable, List, Mapping, Optional, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from ..core.exceptions import EntityLeakError
from ..core.setting import get_settings
from ..models.base import Address, OrderQueryBase, loaded_association
from ..models.order import Order, OrderItem, OrderStatus

T = TypeVar("T")


def _find_entity(value: Any) -> Optional[OrderQueryBase]:
    """Return the first mapped entity reachable from ``value``, if any."""
    if isinstance(value, OrderQueryBase):
        return value
    if isinstance(value, BaseModel):
        value = list(vars(value).values())
    elif isinstance(value, Mapping):
        value = list(value.values())
    if isinstance(value, (list, tuple, set, frozenset)):
        for element in value:
            found = _find_entity(element)
            if found is not None:
                return found
    return None


class ResponseModel(BaseModel):
    """Base for every response DTO, serialised with camelCase keys.

    Field values are checked on construction and on assignment.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, validate_assignment=True
    )

    @model_validator(mode="before")
    @classmethod
    def reject_entity_root(cls, data: Any) -> Any:
        if isinstance(data, OrderQueryBase):
            raise EntityLeakError(cls.__name__, "<root>", type(data).__name__)
        return data

    @field_validator("*", mode="before")
    @classmethod
    def reject_entities(cls, value: Any, info: ValidationInfo) -> Any:
        entity = _find_entity(value)
        if entity is not None:
            raise EntityLeakError(cls.__name__, info.field_name, type(entity).__name__)
        return value


class AddressDto(ResponseModel):
    city: str
    street: str
    zipcode: str

    @classmethod
    def from_address(cls, address: Address) -> "AddressDto":
        return cls(city=address.city, street=address.street, zipcode=address.zipcode)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "AddressDto":
        return cls(city=row["city"], street=row["street"], zipcode=row["zipcode"])


# Entity-mapped shapes (v1 to v3.1)


class OrderItemDto(ResponseModel):
    item_name: str
    order_price: int
    count: int

    @classmethod
    def from_entity(cls, order_item: OrderItem) -> "OrderItemDto":
        item = loaded_association(order_item, "item")
        return cls(
            item_name=item.name,
            order_price=order_item.order_price,
            count=order_item.count,
        )


class SimpleOrderDto(ResponseModel):
    order_id: int
    name: str
    order_date: datetime
    order_status: OrderStatus
    address: AddressDto

    @classmethod
    def from_entity(cls, order: Order) -> "SimpleOrderDto":
        member = loaded_association(order, "member")
        delivery = loaded_association(order, "delivery")
        return cls(
            order_id=order.id,
            name=member.name,
            order_date=order.order_date,
            order_status=order.status,
            address=AddressDto.from_address(delivery.address),
        )


class OrderDto(SimpleOrderDto):
    order_items: List[OrderItemDto]

    @classmethod
    def from_entity(cls, order: Order) -> "OrderDto":
        """Map a resolved order, to-one associations first."""
        simple = SimpleOrderDto.from_entity(order)
        return cls.from_simple(simple, loaded_association(order, "order_items"))

    @classmethod
    def from_simple(
        cls, simple: SimpleOrderDto, order_items: Iterable[OrderItem]
    ) -> "OrderDto":
        return cls(
            order_id=simple.order_id,
            name=simple.name,
            order_date=simple.order_date,
            order_status=simple.order_status,
            address=simple.address,
            order_items=[OrderItemDto.from_entity(oi) for oi in order_items],
        )


# Query projection shapes (v4 to v6)


class OrderItemQueryDto(ResponseModel):
    order_id: int = Field(exclude=True)
    item_name: str
    order_price: int
    count: int

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "OrderItemQueryDto":
        return cls(
            order_id=row["order_id"],
            item_name=row["item_name"],
            order_price=row["order_price"],
            count=row["count"],
        )


class SimpleOrderQueryDto(ResponseModel):
    order_id: int
    name: str
    order_date: datetime
    order_status: OrderStatus
    address: AddressDto

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "SimpleOrderQueryDto":
        return cls(
            order_id=row["order_id"],
            name=row["name"],
            order_date=row["order_date"],
            order_status=row["order_status"],
            address=AddressDto.from_row(row),
        )


class OrderQueryDto(SimpleOrderQueryDto):
    order_items: List[OrderItemQueryDto] = Field(default_factory=list)


class OrderFlatDto(ResponseModel):
    """One row of the flat order/order-item join."""

    order_id: int
    name: str
    order_date: datetime
    order_status: OrderStatus
    address: AddressDto
    item_name: str
    order_price: int
    count: int

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "OrderFlatDto":
        return cls(
            order_id=row["order_id"],
            name=row["name"],
            order_date=row["order_date"],
            order_status=row["order_status"],
            address=AddressDto.from_row(row),
            item_name=row["item_name"],
            order_price=row["order_price"],
            count=row["count"],
        )


class Result(ResponseModel, Generic[T]):
    """Response envelope: ``{"count": n, "data": [...]}``"""

    count: int
    data: List[T]

    @classmethod
    def of(cls, data: List[T]) -> "Result[T]":
        return cls(count=len(data), data=data)


# Request shapes


class OrderSearch(BaseModel):
    """Root filter applied to every strategy."""

    member_name: Optional[str] = None
    order_status: Optional[OrderStatus] = None


class Page(BaseModel):
    offset: int = Field(0, ge=0)
    limit: int = Field(
        default_factory=lambda: get_settings().DEFAULT_PAGE_LIMIT,
        ge=1,
        le=get_settings().MAX_PAGE_LIMIT,
    )
