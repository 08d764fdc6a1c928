"""
Product identifier validation.
"""

from bson import ObjectId
from fastapi import Path

from product_api.errors import ValidationError

INVALID_ID_MESSAGE = "Invalid ID format"


def is_valid_product_id(value) -> bool:
    """Return True if value is a 24 character hex ObjectId string."""
    return isinstance(value, str) and len(value) == 24 and ObjectId.is_valid(value)


def parse_product_id(value: str) -> ObjectId:
    """
    Convert a caller supplied identifier to an ObjectId.

    Args:
        value: Identifier taken from the request path

    Returns:
        ObjectId for use in store filters

    Raises:
        ValidationError: If the identifier is malformed
    """
    if not is_valid_product_id(value):
        raise ValidationError(INVALID_ID_MESSAGE)
    return ObjectId(value)


async def product_id_param(product_id: str = Path(..., description="Product identifier")) -> ObjectId:
    """FastAPI dependency resolving the ``{product_id}`` path segment."""
    return parse_product_id(product_id)
