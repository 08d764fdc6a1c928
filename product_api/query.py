"""
Query construction for the product list endpoint.
"""

import math
from typing import Dict, List, Optional, Tuple

import structlog

from product_api.models import ProductQuery, ProductQueryParams

logger = structlog.get_logger(__name__)

SORTABLE_FIELDS = {"price": 1}


def parse_min_price(raw: Optional[str]) -> Optional[float]:
    """Parse the minPrice parameter, None when absent or not a finite number."""
    if raw is None or raw.strip() == "":
        return None
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring unparseable minPrice", min_price=raw)
        return None
    if not math.isfinite(value):
        logger.warning("Ignoring non-finite minPrice", min_price=raw)
        return None
    return value


def build_filter(category: Optional[str], min_price: Optional[float]) -> Dict:
    """Combine category equality and price lower bound into one filter."""
    filter_query = {}
    if category:
        filter_query["category"] = category
    if min_price is not None:
        filter_query["price"] = {"$gte": min_price}
    return filter_query


def build_sort(sort: Optional[str]) -> List[Tuple[str, int]]:
    """Sort specification, empty unless the key is recognised."""
    if sort in SORTABLE_FIELDS:
        return [(sort, SORTABLE_FIELDS[sort])]
    return []


def build_projection(fields: Optional[str]) -> Optional[Dict[str, int]]:
    """
    Build an inclusion projection from a comma-separated field list.

    Args:
        fields: Raw ``fields`` parameter, e.g. ``"name, price"``

    Returns:
        ``{field: 1}`` mapping, or None to return every field
    """
    if not fields:
        return None
    names = [name.strip() for name in fields.split(",")]
    projection = {name: 1 for name in names if name}
    return projection or None


def build_product_query(params: ProductQueryParams) -> ProductQuery:
    """Translate list parameters into filter, sort and projection."""
    return ProductQuery(
        filter_query=build_filter(params.category, parse_min_price(params.min_price)),
        sort=build_sort(params.sort),
        projection=build_projection(params.fields),
    )
