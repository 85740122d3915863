"""Fetch strategies for reading the order graph, keyed by API version."""

from enum import Enum

from .exceptions import UnknownStrategyError


class FetchStrategy(Enum):
    NAIVE_ENTITY = "v1"
    DTO_POST_MAP = "v2"
    FETCH_JOIN = "v3"
    BATCH_FETCH = "v3.1"
    PROJECTION_LOOP = "v4"
    PROJECTION_BATCH = "v5"
    FLAT_JOIN = "v6"

    @property
    def api_version(self) -> str:
        return self.value

    @property
    def row_multiplying(self) -> bool:
        """Whether the order graph query joins the order items collection."""
        return self in (FetchStrategy.FETCH_JOIN, FetchStrategy.FLAT_JOIN)

    @property
    def supports_simple(self) -> bool:
        """Whether the strategy also serves the to-one only simple-order read."""
        return self in (
            FetchStrategy.NAIVE_ENTITY,
            FetchStrategy.DTO_POST_MAP,
            FetchStrategy.FETCH_JOIN,
            FetchStrategy.PROJECTION_LOOP,
        )

    @classmethod
    def from_version(cls, version: str) -> "FetchStrategy":
        try:
            return cls(version)
        except ValueError:
            raise UnknownStrategyError(version) from None
