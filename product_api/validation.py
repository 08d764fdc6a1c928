"""
Request body validation for the write endpoints.
"""

import math
from typing import Any, Dict

from fastapi import Request
from pydantic import ValidationError as PydanticValidationError

from product_api.errors import ValidationError
from product_api.models import ProductWrite

MISSING_FIELDS_MESSAGE = "Missing required fields"
INVALID_PRICE_MESSAGE = "Price must be a non-negative number"
INVALID_FIELDS_MESSAGE = "name and category must be strings"
EMPTY_PATCH_MESSAGE = "No fields to update"
INVALID_BODY_MESSAGE = "Invalid request body"
INVALID_FIELD_NAME_MESSAGE = "Field names must not start with '$' or contain '.'"

# Never writable through a patch body
IMMUTABLE_FIELDS = ("_id", "id")

TEXT_FIELDS = ("name", "category")


def _is_top_level_name(key: str) -> bool:
    return bool(key) and not key.startswith("$") and "." not in key


def _is_missing(value: Any) -> bool:
    return value is None or value == ""


def parse_price(value: Any) -> float:
    """
    Coerce a price from its JSON representation to a float.

    Numbers and numeric strings are accepted. Booleans, unparseable strings,
    non-finite and negative values are rejected.

    Raises:
        ValidationError: If the value is not a non-negative number
    """
    if isinstance(value, bool):
        raise ValidationError(INVALID_PRICE_MESSAGE)
    try:
        price = float(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(INVALID_PRICE_MESSAGE)
    if not math.isfinite(price) or price < 0:
        raise ValidationError(INVALID_PRICE_MESSAGE)
    return price


def _check_text_fields(fields: Dict[str, Any]) -> None:
    for name in TEXT_FIELDS:
        if name in fields and not isinstance(fields[name], str):
            raise ValidationError(INVALID_FIELDS_MESSAGE)


def _build(name: Any, price: Any, category: Any) -> ProductWrite:
    fields = {"name": name, "price": parse_price(price), "category": category}
    _check_text_fields(fields)
    try:
        return ProductWrite(**fields)
    except PydanticValidationError:
        raise ValidationError(INVALID_FIELDS_MESSAGE)


def validate_create(
    payload: Dict[str, Any],
    category_required: bool = False,
    default_category: str = "general"
) -> ProductWrite:
    """
    Validate a create body.

    Args:
        payload: Decoded JSON body
        category_required: Require category instead of defaulting it
        default_category: Category used when it is optional and absent

    Returns:
        ProductWrite with a float price
    """
    name = payload.get("name")
    price = payload.get("price")
    category = payload.get("category")

    required = [name, price]
    if category_required:
        required.append(category)
    if any(_is_missing(value) for value in required):
        raise ValidationError(MISSING_FIELDS_MESSAGE)

    if _is_missing(category):
        category = default_category

    return _build(name, price, category)


def validate_replace(payload: Dict[str, Any]) -> ProductWrite:
    """Validate a full replace body, every field is required."""
    name = payload.get("name")
    price = payload.get("price")
    category = payload.get("category")

    if any(_is_missing(value) for value in (name, price, category)):
        raise ValidationError(MISSING_FIELDS_MESSAGE)

    return _build(name, price, category)


def validate_patch(payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Prepare a merge-patch body.

    Identifier fields are stripped and a supplied price is coerced to float.
    Every other top-level field is passed through unchanged. Operator keys
    and dotted paths are rejected so only top-level fields are written.

    Returns:
        Fields to ``$set`` on the stored document
    """
    fields = {key: value for key, value in payload.items() if key not in IMMUTABLE_FIELDS}
    if not fields:
        raise ValidationError(EMPTY_PATCH_MESSAGE)

    if not all(_is_top_level_name(key) for key in fields):
        raise ValidationError(INVALID_FIELD_NAME_MESSAGE)

    if "price" in fields:
        fields["price"] = parse_price(fields["price"])
    _check_text_fields(fields)

    return fields


async def json_object_body(request: Request) -> Dict[str, Any]:
    """
    Decode the request body as a JSON object.

    Used as a dependency listed after the auth gate so that an unauthorized
    request is rejected before its body is read.

    Raises:
        ValidationError: If the body is not valid JSON or not an object
    """
    try:
        payload = await request.json()
    except ValueError:
        raise ValidationError(INVALID_BODY_MESSAGE)
    if not isinstance(payload, dict):
        raise ValidationError(INVALID_BODY_MESSAGE)
    return payload
