"""
Error taxonomy for the product API.

Each error carries the HTTP status it maps to; the exception handlers in
``product_api.main`` render them as ``{"error": message}``.
"""

from typing import Optional

from fastapi import status


class ProductAPIError(Exception):
    """Base class for errors that map directly to an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal Server Error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ProductAPIError):
    """Malformed identifier or missing/invalid request field."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad Request"


class AuthError(ProductAPIError):
    """Missing or incorrect API key."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class NotFoundError(ProductAPIError):
    """No document matches the identifier."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Product not found"


class StoreError(ProductAPIError):
    """Any failure raised by the collection access layer."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal Server Error"

    def __init__(self, message: Optional[str] = None, details: Optional[str] = None):
        super().__init__(message)
        self.details = details
