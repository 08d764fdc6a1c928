"""
API models and schemas for the FastAPI application.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field


class ProductWrite(BaseModel):
    """Validated product body for create and full replace."""
    name: str = Field(..., description="Product name")
    price: float = Field(..., ge=0, description="Product price")
    category: str = Field(..., description="Product category")


class ProductQueryParams(BaseModel):
    """Raw query parameters for product listing."""
    category: Optional[str] = Field(None, description="Exact category match")
    min_price: Optional[str] = Field(None, description="Inclusive lower price bound")
    sort: Optional[str] = Field(None, description="Sort key, only 'price' is recognised")
    fields: Optional[str] = Field(None, description="Comma-separated projection")


class ProductQuery(BaseModel):
    """Store query built from list parameters."""
    filter_query: Dict[str, Any] = Field(default_factory=dict)
    sort: List[Tuple[str, int]] = Field(default_factory=list)
    projection: Optional[Dict[str, int]] = None


class ProductListResponse(BaseModel):
    """Envelope for the product list."""
    count: int = Field(..., description="Number of products returned")
    products: List[Dict[str, Any]] = Field(..., description="Matching products")


class ProductCreatedResponse(BaseModel):
    """Response for a created product."""
    message: str = "Product created"
    productId: str = Field(..., description="Identifier assigned by the store")


class MessageResponse(BaseModel):
    """Plain confirmation message."""
    message: str


class ErrorResponse(BaseModel):
    """Error response model."""
    error: str = Field(..., description="Error message")
    details: Optional[str] = Field(None, description="Underlying failure message")


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Current timestamp")
    version: str = Field(..., description="API version")
    database_status: str = Field(..., description="Database connection status")
