"""
Exceptions raised by the order query core.

Every error carries an ``error_type`` used as the ``type`` field of the
error envelope and the HTTP status the error handler answers with.
"""

from typing import Any, Dict, Optional


class OrderQueryError(Exception):
    """Base class for all order query failures."""

    error_type = "order_query_error"
    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class PaginationNotSupportedError(OrderQueryError):
    """Offset/limit requested together with a row-multiplying fetch strategy."""

    error_type = "pagination_not_supported"
    status_code = 400

    def __init__(self, strategy: str):
        super().__init__(
            f"Pagination incompatible with fetch strategy {strategy}",
            details={"strategy": strategy},
        )
        self.strategy = strategy


class UnknownStrategyError(OrderQueryError):
    error_type = "unknown_strategy"
    status_code = 404

    def __init__(self, version: str):
        super().__init__(
            f"No fetch strategy for API version {version}",
            details={"version": version},
        )
        self.version = version


class EntityLeakError(OrderQueryError):
    """A mapped entity reached a response shape."""

    error_type = "entity_leak"

    def __init__(self, model: str, field: str, entity_type: str):
        super().__init__(
            f"Entity leaked into response shape: {model}.{field} holds {entity_type}",
            details={"model": model, "field": field, "entity_type": entity_type},
        )


class UnresolvedReferenceError(OrderQueryError):
    """An association was read before it was explicitly loaded."""

    error_type = "unresolved_reference"

    def __init__(self, entity: str, attribute: str):
        super().__init__(
            f"Association {entity}.{attribute} has not been loaded",
            details={"entity": entity, "attribute": attribute},
        )


class QueryDescriptorError(OrderQueryError):
    """A query descriptor combines joins or paging in an unsupported way."""

    error_type = "query_descriptor_error"


class QueryCancelledError(OrderQueryError):
    error_type = "query_cancelled"
    status_code = 499

    def __init__(self, query_name: str):
        super().__init__(
            f"Query {query_name} was cancelled", details={"query": query_name}
        )
        self.query_name = query_name
