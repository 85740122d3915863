"""
Unit tests for Order Query Service Error Handler.
"""

import json
from unittest.mock import Mock

import pytest
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from order_query_service.app.core.exceptions import (
    EntityLeakError,
    OrderQueryError,
    PaginationNotSupportedError,
    QueryCancelledError,
    UnresolvedReferenceError,
)
from order_query_service.app.middleware.error.error_handler import (
    OrderQueryErrorHandler,
    setup_order_query_error_handling,
)


class TestOrderQueryErrorHandler:
    """Test cases for error handler."""

    @pytest.fixture
    def app(self):
        """Create FastAPI app with the error handlers registered."""
        app = FastAPI()
        OrderQueryErrorHandler.setup_error_handlers(app)
        return app

    @pytest.fixture
    def mock_request(self):
        request = Mock(spec=Request)
        request.url.path = "/api/v3/orders"
        request.method = "GET"
        request.state.correlation_id = "test-correlation-id"
        return request

    def test_setup_error_handlers(self, app):
        """Test that error handlers are properly set up."""
        assert StarletteHTTPException in app.exception_handlers
        assert RequestValidationError in app.exception_handlers
        assert ValidationError in app.exception_handlers
        assert OrderQueryError in app.exception_handlers
        assert SQLAlchemyError in app.exception_handlers
        assert Exception in app.exception_handlers

    @pytest.mark.asyncio
    async def test_http_exception_handler(self, app, mock_request):
        exc = StarletteHTTPException(status_code=404, detail="Not found")

        handler = app.exception_handlers[StarletteHTTPException]
        response = await handler(mock_request, exc)

        assert response.status_code == 404
        response_data = json.loads(response.body)
        assert response_data["error"]["type"] == "http_error"
        assert response_data["error"]["message"] == "Not found"
        assert response_data["error"]["correlation_id"] == "test-correlation-id"
        assert response_data["error"]["path"] == "/api/v3/orders"
        assert "details" not in response_data["error"]

    @pytest.mark.asyncio
    async def test_request_validation_error_handler(self, app, mock_request):
        exc = RequestValidationError(
            [
                {
                    "loc": ["query", "limit"],
                    "msg": "Input should be greater than or equal to 1",
                    "type": "greater_than_equal",
                }
            ]
        )

        handler = app.exception_handlers[RequestValidationError]
        response = await handler(mock_request, exc)

        assert response.status_code == 422
        response_data = json.loads(response.body)
        assert response_data["error"]["type"] == "validation_error"
        assert response_data["error"]["details"]["validation_errors"] == [
            {
                "field": "query.limit",
                "message": "Input should be greater than or equal to 1",
                "type": "greater_than_equal",
            }
        ]

    @pytest.mark.asyncio
    async def test_pagination_conflict(self, app, mock_request):
        handler = app.exception_handlers[OrderQueryError]
        response = await handler(mock_request, PaginationNotSupportedError("v3"))

        assert response.status_code == 400
        response_data = json.loads(response.body)
        assert response_data["error"]["type"] == "pagination_not_supported"
        assert response_data["error"]["details"] == {"strategy": "v3"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "exc,status_code,error_type",
        [
            (EntityLeakError("OrderDto", "member", "Member"), 500, "entity_leak"),
            (UnresolvedReferenceError("Order", "member"), 500, "unresolved_reference"),
            (QueryCancelledError("orders"), 499, "query_cancelled"),
        ],
    )
    async def test_order_query_errors(
        self, app, mock_request, exc, status_code, error_type
    ):
        handler = app.exception_handlers[OrderQueryError]
        response = await handler(mock_request, exc)

        assert response.status_code == status_code
        assert json.loads(response.body)["error"]["type"] == error_type

    @pytest.mark.asyncio
    async def test_data_access_error_handler(self, app, mock_request):
        exc = OperationalError("SELECT 1", {}, Exception("connection refused"))

        handler = app.exception_handlers[SQLAlchemyError]
        response = await handler(mock_request, exc)

        assert response.status_code == 503
        response_data = json.loads(response.body)
        assert response_data["error"]["type"] == "data_access_error"
        assert response_data["error"]["details"] == {
            "exception_type": "OperationalError"
        }

    @pytest.mark.asyncio
    async def test_generic_exception_handler(self, app, mock_request):
        handler = app.exception_handlers[Exception]
        response = await handler(mock_request, RuntimeError("Unexpected error"))

        assert response.status_code == 500
        response_data = json.loads(response.body)
        assert response_data["error"]["type"] == "internal_server_error"
        assert response_data["error"]["message"] == "An internal server error occurred"

    @pytest.mark.asyncio
    async def test_missing_correlation_id(self, app):
        request = Mock(spec=Request)
        request.url.path = "/api/v1/orders"
        request.method = "GET"
        request.state = Mock(spec=[])

        handler = app.exception_handlers[OrderQueryError]
        response = await handler(request, PaginationNotSupportedError("v6"))

        assert json.loads(response.body)["error"]["correlation_id"] == "unknown"


def test_setup_order_query_error_handling():
    app = FastAPI()

    setup_order_query_error_handling(app)

    assert OrderQueryError in app.exception_handlers
