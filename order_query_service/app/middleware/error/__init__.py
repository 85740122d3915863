"""
Error middleware for Order Query Service.
"""

from .error_handler import OrderQueryErrorHandler, setup_order_query_error_handling

__all__ = ["OrderQueryErrorHandler", "setup_order_query_error_handling"]
