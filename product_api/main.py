"""
FastAPI main application for the Product Catalog API.
"""

import time
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Dict, Optional

from bson import ObjectId
from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from product_api.auth import require_api_key
from product_api.config import config
from product_api.database import ProductService, connect_product_service
from product_api.errors import NotFoundError, ProductAPIError, StoreError
from product_api.identifiers import product_id_param
from product_api.models import (
    ErrorResponse, HealthResponse, MessageResponse,
    ProductCreatedResponse, ProductListResponse, ProductQueryParams
)
from product_api.query import build_product_query
from product_api.validation import (
    json_object_body, validate_create, validate_patch, validate_replace
)
from utilities.logger import get_logger

# Setup logging
logger = get_logger(__name__)

LANDING_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="utf-8">
    <title>Product Catalog API</title>
</head>
<body>
    <h1>Welcome to the Product Catalog API</h1>
    <p>Browse the catalog at <a href="/api/products">/api/products</a>.</p>
    <ul>
        <li><code>GET /api/products?category=&amp;minPrice=&amp;sort=price&amp;fields=name,price</code></li>
        <li><code>GET /api/products/{id}</code></li>
        <li><code>POST /api/products</code></li>
        <li><code>PUT /api/products/{id}</code></li>
        <li><code>PATCH /api/products/{id}</code></li>
        <li><code>DELETE /api/products/{id}</code></li>
    </ul>
</body>
</html>
"""


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Connect to the store before the listener accepts connections."""
    logger.info("Starting Product Catalog API")

    try:
        client, service = await connect_product_service(
            config.mongodb_url,
            config.mongodb_database,
            config.mongodb_collection
        )
    except StoreError as e:
        logger.error("Failed to connect to database", error=e.details)
        raise

    app.state.product_service = service
    logger.info("Database connection established")

    yield

    logger.info("Shutting down Product Catalog API")
    app.state.product_service = None
    client.close()


app = FastAPI(
    title=config.api_title,
    description="""
    REST API for a MongoDB backed product catalog.

    * **Listing**: filter by category and minimum price, sort by price, project fields
    * **CRUD**: create, read, replace, patch and delete single products
    * **Authentication**: optional `x-api-key` header on mutating endpoints
    """,
    version=config.api_version,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=config.cors_allow_credentials,
    allow_methods=config.cors_allow_methods,
    allow_headers=config.cors_allow_headers,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every request with its outcome and duration."""
    started = time.perf_counter()
    response = await call_next(request)
    logger.info(
        "Request handled",
        method=request.method,
        path=request.url.path,
        query=str(request.url.query) or None,
        status_code=response.status_code,
        duration_ms=round((time.perf_counter() - started) * 1000, 2)
    )
    return response


def get_product_service(request: Request) -> ProductService:
    """Product service established at startup."""
    service = getattr(request.app.state, "product_service", None)
    if service is None:
        raise StoreError(details="Database service not available")
    return service


# Exception handlers
@app.exception_handler(ProductAPIError)
async def product_api_exception_handler(request: Request, exc: ProductAPIError):
    """Render domain errors as {"error": message}."""
    details = None
    if isinstance(exc, StoreError) and config.expose_error_details:
        details = exc.details
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=exc.message, details=details).model_dump(exclude_none=True)
    )


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies are client errors, reported as 400."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse(error="Invalid request body").model_dump(exclude_none=True)
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=str(exc.detail)).model_dump(exclude_none=True),
        headers=exc.headers
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions."""
    logger.error("Unhandled exception", error=str(exc), path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            error="Internal Server Error",
            details=str(exc) if config.expose_error_details else None
        ).model_dump(exclude_none=True)
    )


@app.get("/", response_class=HTMLResponse, include_in_schema=False)
async def landing_page():
    """Static welcome page."""
    if not config.serve_landing_page:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")
    return HTMLResponse(content=LANDING_PAGE)


# Health check endpoint (no authentication required)
@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(request: Request):
    """Health check endpoint."""
    db_status = "unavailable"
    service = getattr(request.app.state, "product_service", None)
    if service is not None:
        health_info = await service.health_check()
        db_status = health_info.get("status", "unknown")

    return HealthResponse(
        status="healthy" if db_status == "healthy" else "degraded",
        timestamp=datetime.utcnow(),
        version=config.api_version,
        database_status=db_status
    )


# Products endpoints
@app.get("/api/products", tags=["Products"])
async def list_products(
    category: Optional[str] = None,
    min_price: Optional[str] = Query(None, alias="minPrice"),
    sort: Optional[str] = None,
    fields: Optional[str] = None,
    service: ProductService = Depends(get_product_service)
):
    """
    List products. The whole matching set is returned, there is no pagination.

    - **category**: Exact category match
    - **minPrice**: Inclusive lower price bound
    - **sort**: `price` sorts ascending by price, anything else is ignored
    - **fields**: Comma-separated list of fields to return
    """
    query = build_product_query(ProductQueryParams(
        category=category,
        min_price=min_price,
        sort=sort,
        fields=fields
    ))
    products = await service.list_products(query)

    if config.uses_envelope():
        return ProductListResponse(count=len(products), products=products).model_dump()
    return products


@app.get("/api/products/{product_id}", tags=["Products"])
async def get_product(
    object_id: ObjectId = Depends(product_id_param),
    service: ProductService = Depends(get_product_service)
):
    """Get a single product by ID."""
    product = await service.get_product(object_id)
    if not product:
        raise NotFoundError()
    return product


@app.post(
    "/api/products",
    status_code=status.HTTP_201_CREATED,
    response_model=ProductCreatedResponse,
    dependencies=[Depends(require_api_key)],
    tags=["Products"]
)
async def create_product(
    payload: Dict[str, Any] = Depends(json_object_body),
    service: ProductService = Depends(get_product_service)
):
    """Create a product. The store assigns its identifier."""
    product = validate_create(
        payload,
        category_required=config.category_required,
        default_category=config.default_category
    )
    product_id = await service.create_product(product)
    logger.info("Product created", product_id=product_id)
    return ProductCreatedResponse(productId=product_id)


@app.put(
    "/api/products/{product_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_api_key)],
    tags=["Products"]
)
async def replace_product(
    object_id: ObjectId = Depends(product_id_param),
    payload: Dict[str, Any] = Depends(json_object_body),
    service: ProductService = Depends(get_product_service)
):
    """Replace every field of a product except its identifier."""
    product = validate_replace(payload)
    if not await service.replace_product(object_id, product):
        raise NotFoundError()
    return MessageResponse(message="Product replaced")


@app.patch(
    "/api/products/{product_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_api_key)],
    tags=["Products"]
)
async def patch_product(
    object_id: ObjectId = Depends(product_id_param),
    payload: Dict[str, Any] = Depends(json_object_body),
    service: ProductService = Depends(get_product_service)
):
    """Overwrite only the supplied fields of a product."""
    update_data = validate_patch(payload)
    if not await service.update_product(object_id, update_data):
        raise NotFoundError()
    return MessageResponse(message="Product updated")


@app.delete(
    "/api/products/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_api_key)],
    tags=["Products"]
)
async def delete_product(
    object_id: ObjectId = Depends(product_id_param),
    service: ProductService = Depends(get_product_service)
):
    """Delete a product."""
    if not await service.delete_product(object_id):
        raise NotFoundError()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "product_api.main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level=config.log_level.lower()
    )
