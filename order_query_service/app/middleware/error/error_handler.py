"""
Error handling for the order read API.

Every failure is answered with the same envelope::

    {"error": {"type", "message", "correlation_id", "timestamp", "path",
               "method", "details"?}}

Order query errors carry their own ``error_type`` and status. Store
failures become 503 and are never retried here.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from ...core.exceptions import OrderQueryError
from ...utils.logging import get_logger

logger = get_logger("error_handler")


def _correlation_id(request: Request) -> str:
    return getattr(request.state, "correlation_id", "unknown")


def _describe_errors(errors: Any) -> List[Dict[str, Any]]:
    return [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in errors
    ]


class OrderQueryErrorHandler:
    """Registers the exception handlers that produce the error envelope."""

    @staticmethod
    def setup_error_handlers(app: FastAPI) -> None:
        handlers = {
            StarletteHTTPException: OrderQueryErrorHandler.handle_http_error,
            RequestValidationError: OrderQueryErrorHandler.handle_request_validation,
            ValidationError: OrderQueryErrorHandler.handle_data_validation,
            OrderQueryError: OrderQueryErrorHandler.handle_order_query_error,
            SQLAlchemyError: OrderQueryErrorHandler.handle_data_access_error,
            Exception: OrderQueryErrorHandler.handle_unexpected_error,
        }
        for exc_class, handler in handlers.items():
            app.add_exception_handler(exc_class, handler)

    @staticmethod
    async def handle_http_error(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return OrderQueryErrorHandler._create_error_response(
            request, exc.status_code, "http_error", str(exc.detail)
        )

    @staticmethod
    async def handle_request_validation(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Bad query parameters, e.g. ``limit=0`` or an unknown ``orderStatus``."""
        return OrderQueryErrorHandler._create_error_response(
            request,
            422,
            "validation_error",
            "Request validation failed",
            {"validation_errors": _describe_errors(exc.errors())},
        )

    @staticmethod
    async def handle_data_validation(
        request: Request, exc: ValidationError
    ) -> JSONResponse:
        return OrderQueryErrorHandler._create_error_response(
            request,
            400,
            "data_validation_error",
            "Data validation failed",
            {"validation_errors": _describe_errors(exc.errors())},
        )

    @staticmethod
    async def handle_order_query_error(
        request: Request, exc: OrderQueryError
    ) -> JSONResponse:
        if exc.status_code >= 500:
            # Entity leaks and unresolved references are programming errors
            logger.error(
                "Order query failed",
                extra={
                    "correlation_id": _correlation_id(request),
                    "path": request.url.path,
                    "error_type": exc.error_type,
                    "details": exc.details,
                    "event_type": "order_query_error",
                },
            )
        return OrderQueryErrorHandler._create_error_response(
            request, exc.status_code, exc.error_type, exc.message, exc.details
        )

    @staticmethod
    async def handle_data_access_error(
        request: Request, exc: SQLAlchemyError
    ) -> JSONResponse:
        logger.error(
            "Order store unavailable",
            extra={
                "correlation_id": _correlation_id(request),
                "path": request.url.path,
                "exception_type": type(exc).__name__,
                "event_type": "data_access_error",
            },
        )
        return OrderQueryErrorHandler._create_error_response(
            request,
            503,
            "data_access_error",
            "Order store unavailable",
            {"exception_type": type(exc).__name__},
        )

    @staticmethod
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "Unhandled exception occurred",
            exc_info=exc,
            extra={
                "correlation_id": _correlation_id(request),
                "path": request.url.path,
                "method": request.method,
                "exception_type": type(exc).__name__,
                "event_type": "unhandled_exception",
            },
        )
        return OrderQueryErrorHandler._create_error_response(
            request,
            500,
            "internal_server_error",
            "An internal server error occurred",
            {"exception_type": type(exc).__name__},
        )

    @staticmethod
    def _create_error_response(
        request: Request,
        status_code: int,
        error_type: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> JSONResponse:
        error: Dict[str, Any] = {
            "type": error_type,
            "message": message,
            "correlation_id": _correlation_id(request),
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "path": request.url.path,
            "method": request.method,
        }
        if details:
            error["details"] = details

        if status_code < 500:
            logger.warning(
                "Client error: %s",
                error_type,
                extra={
                    "correlation_id": error["correlation_id"],
                    "status_code": status_code,
                    "path": error["path"],
                    "event_type": "client_error",
                },
            )

        return JSONResponse(status_code=status_code, content={"error": error})


def setup_order_query_error_handling(app: FastAPI) -> None:
    OrderQueryErrorHandler.setup_error_handlers(app)
    logger.info(
        "Error handling configured", extra={"event_type": "error_handler_setup"}
    )
