"""
Unit tests for response DTOs: wire naming and entity leak detection.
"""

from datetime import datetime

import pytest
from pydantic import ValidationError

from order_query_service.app.core.exceptions import EntityLeakError
from order_query_service.app.core.setting import get_settings
from order_query_service.app.models import Address, Delivery, Item, ItemKind, OrderStatus
from order_query_service.app.schemas.order import (
    AddressDto,
    OrderItemDto,
    OrderItemQueryDto,
    OrderQueryDto,
    Page,
    Result,
    SimpleOrderDto,
)

ORDER_DATE = datetime(2024, 1, 1, 12, 0, 0)


def make_item() -> Item:
    return Item(id=1, kind=ItemKind.BOOK, name="JPA1 BOOK", price=10000, stock_quantity=5)


def make_order_query_dto() -> OrderQueryDto:
    return OrderQueryDto(
        order_id=1,
        name="userA",
        order_date=ORDER_DATE,
        order_status=OrderStatus.ORDERED,
        address=AddressDto(city="Seoul", street="1", zipcode="1111"),
    )


class TestEntityLeak:
    def test_entity_field_rejected(self):
        with pytest.raises(EntityLeakError) as exc_info:
            OrderItemDto(item_name=make_item(), order_price=10000, count=1)

        assert exc_info.value.error_type == "entity_leak"
        assert exc_info.value.details == {
            "model": "OrderItemDto",
            "field": "item_name",
            "entity_type": "Item",
        }

    def test_entity_nested_in_list_rejected(self):
        with pytest.raises(EntityLeakError) as exc_info:
            Result.of([make_item()])

        assert exc_info.value.details["field"] == "data"

    def test_entity_in_place_of_value_object_rejected(self):
        delivery = Delivery(id=1, city="Seoul", street="1", zipcode="1111")

        with pytest.raises(EntityLeakError):
            SimpleOrderDto(
                order_id=1,
                name="userA",
                order_date=ORDER_DATE,
                order_status=OrderStatus.ORDERED,
                address=delivery,
            )

    def test_entity_as_whole_dto_rejected(self):
        with pytest.raises(EntityLeakError):
            OrderItemDto.model_validate(make_item())

    def test_entity_assigned_after_construction_rejected(self):
        dto = make_order_query_dto()

        with pytest.raises(EntityLeakError) as exc_info:
            dto.order_items = [make_item()]

        assert exc_info.value.details == {
            "model": "OrderQueryDto",
            "field": "order_items",
            "entity_type": "Item",
        }
        assert dto.order_items == []

    def test_entity_hidden_in_nested_dto_rejected(self):
        # model_construct skips validation, so the envelope has to look inside
        dto = OrderQueryDto.model_construct(
            order_id=1,
            name="userA",
            order_date=ORDER_DATE,
            order_status=OrderStatus.ORDERED,
            address=AddressDto(city="Seoul", street="1", zipcode="1111"),
            order_items=[make_item()],
        )

        with pytest.raises(EntityLeakError) as exc_info:
            Result.of([dto])

        assert exc_info.value.details["field"] == "data"

    def test_value_object_accepted(self):
        address = AddressDto.from_address(Address(city="Seoul", street="1", zipcode="1111"))
        assert address.model_dump() == {"city": "Seoul", "street": "1", "zipcode": "1111"}


class TestWireShape:
    def test_camel_case_keys(self):
        dto = OrderQueryDto(
            order_id=1,
            name="userA",
            order_date=ORDER_DATE,
            order_status=OrderStatus.ORDERED,
            address=AddressDto(city="Seoul", street="1", zipcode="1111"),
            order_items=[
                OrderItemQueryDto(
                    order_id=1, item_name="JPA1 BOOK", order_price=10000, count=1
                )
            ],
        )

        payload = Result.of([dto]).model_dump(mode="json", by_alias=True)

        assert payload["count"] == 1
        order = payload["data"][0]
        assert set(order) == {
            "orderId",
            "name",
            "orderDate",
            "orderStatus",
            "address",
            "orderItems",
        }
        assert order["orderStatus"] == "ORDERED"
        assert order["orderDate"] == "2024-01-01T12:00:00"
        # The owning order id is only a grouping key
        assert order["orderItems"] == [
            {"itemName": "JPA1 BOOK", "orderPrice": 10000, "count": 1}
        ]

    def test_populate_by_field_or_alias(self):
        by_alias = OrderItemDto.model_validate(
            {"itemName": "JPA1 BOOK", "orderPrice": 10000, "count": 1}
        )
        assert by_alias == OrderItemDto(item_name="JPA1 BOOK", order_price=10000, count=1)

    def test_dto_assignment_accepted(self):
        dto = make_order_query_dto()

        dto.order_items = [
            OrderItemQueryDto(
                order_id=1, item_name="JPA1 BOOK", order_price=10000, count=1
            )
        ]

        assert [item.item_name for item in dto.order_items] == ["JPA1 BOOK"]


class TestPage:
    def test_default_limit_from_settings(self):
        page = Page()

        assert page.offset == 0
        assert page.limit == get_settings().DEFAULT_PAGE_LIMIT

    def test_limit_bounds(self):
        max_limit = get_settings().MAX_PAGE_LIMIT
        assert Page(limit=max_limit).limit == max_limit

        with pytest.raises(ValidationError):
            Page(limit=max_limit + 1)
        with pytest.raises(ValidationError):
            Page(limit=0)
        with pytest.raises(ValidationError):
            Page(offset=-1)
