"""
Query descriptors for the order store.

A descriptor names one store round trip: the root entity or projected
columns, the joins to walk, filters, ordering and paging. Join shapes that
would corrupt results are refused when the descriptor is built, before any
statement exists.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, Tuple

from sqlalchemy import Select, select
from sqlalchemy.orm import (
    InstrumentedAttribute,
    RelationshipProperty,
    configure_mappers,
    contains_eager,
)

from ..core.exceptions import QueryDescriptorError


def _attribute_name(attribute: InstrumentedAttribute) -> str:
    return f"{attribute.class_.__name__}.{attribute.key}"


def is_to_many(attribute: InstrumentedAttribute) -> bool:
    prop = attribute.property
    if not isinstance(prop, RelationshipProperty):
        raise QueryDescriptorError(
            f"{_attribute_name(attribute)} is not a relationship",
            details={"attribute": _attribute_name(attribute)},
        )
    # uselist is only settled once the mappers are configured
    configure_mappers()
    return bool(prop.uselist)


@dataclass(frozen=True)
class JoinSpec:
    """Relationship chain joined in order, e.g. ``(Order.order_items, OrderItem.item)``.

    With ``fetch`` set the joined rows also populate the association on the
    loaded entities.
    """

    path: Tuple[InstrumentedAttribute, ...]
    fetch: bool = False

    def __post_init__(self) -> None:
        if not self.path:
            raise QueryDescriptorError("Join path must name at least one relationship")
        for attribute in self.path:
            is_to_many(attribute)

    @property
    def to_many(self) -> Tuple[InstrumentedAttribute, ...]:
        return tuple(attribute for attribute in self.path if is_to_many(attribute))


@dataclass(frozen=True)
class QueryDescriptor:
    name: str
    root: type
    columns: Tuple[Any, ...] = ()
    joins: Tuple[JoinSpec, ...] = ()
    where: Tuple[Any, ...] = ()
    order_by: Tuple[Any, ...] = ()
    limit: Optional[int] = None
    offset: int = 0
    unique: bool = False
    projection: Optional[Callable[[Mapping[str, Any]], Any]] = field(
        default=None, compare=False
    )

    def __post_init__(self) -> None:
        to_many = {
            _attribute_name(attribute)
            for join in self.joins
            for attribute in join.to_many
        }
        if len(to_many) > 1:
            raise QueryDescriptorError(
                f"Query {self.name} joins more than one collection",
                details={"query": self.name, "collections": sorted(to_many)},
            )
        if to_many and self.is_paged:
            raise QueryDescriptorError(
                f"Query {self.name} pages over a collection join",
                details={"query": self.name, "collections": sorted(to_many)},
            )
        if self.projection is not None and not self.columns:
            raise QueryDescriptorError(
                f"Query {self.name} has a projection but no columns",
                details={"query": self.name},
            )

    @property
    def is_paged(self) -> bool:
        return self.limit is not None or self.offset > 0

    @property
    def joins_collection(self) -> bool:
        return any(join.to_many for join in self.joins)

    def to_statement(self) -> Select:
        if self.columns:
            stmt = select(*self.columns).select_from(self.root)
        else:
            stmt = select(self.root)

        joined = set()
        for join in self.joins:
            for attribute in join.path:
                key = _attribute_name(attribute)
                if key not in joined:
                    stmt = stmt.join(attribute)
                    joined.add(key)
            if join.fetch and not self.columns:
                loader = contains_eager(join.path[0])
                for attribute in join.path[1:]:
                    loader = loader.contains_eager(attribute)
                stmt = stmt.options(loader)

        if self.where:
            stmt = stmt.where(*self.where)
        if self.order_by:
            stmt = stmt.order_by(*self.order_by)
        if self.offset:
            stmt = stmt.offset(self.offset)
        if self.limit is not None:
            stmt = stmt.limit(self.limit)
        return stmt
