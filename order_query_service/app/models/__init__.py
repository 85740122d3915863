"""
Order Query Service Models

This module contains all database models for the Order Query Service.
All models inherit from OrderQueryBaseModel which provides the primary key.
"""

from .base import Address, OrderQueryBase, OrderQueryBaseModel
from .delivery import Delivery, DeliveryStatus
from .item import Item, ItemKind
from .member import Member
from .order import Order, OrderItem, OrderStatus

__all__ = [
    # Base classes
    "OrderQueryBase",
    "OrderQueryBaseModel",
    "Address",
    # Order graph
    "Order",
    "OrderItem",
    "OrderStatus",
    "Member",
    "Delivery",
    "DeliveryStatus",
    "Item",
    "ItemKind",
]
