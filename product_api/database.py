"""
Database service layer for the FastAPI application.
"""

from typing import Any, Dict, List, Optional, Tuple

import structlog
from bson import Decimal128, ObjectId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from product_api.errors import StoreError
from product_api.models import ProductQuery, ProductWrite

logger = structlog.get_logger(__name__)


def _serialize_value(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, Decimal128):
        return float(value.to_decimal())
    if isinstance(value, dict):
        return {key: _serialize_value(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_serialize_value(item) for item in value]
    return value


def serialize_product(product_doc: Dict[str, Any]) -> Dict[str, Any]:
    """
    Convert BSON-only values of a stored document to JSON friendly ones.

    ObjectIds become hex strings and Decimal128 values become floats, at any
    nesting depth.
    """
    return _serialize_value(product_doc)


class ProductService:
    """Collection access for product operations, one store call per method."""

    def __init__(self, database: AsyncIOMotorDatabase, collection_name: str = "products"):
        self.database = database
        self.collection: AsyncIOMotorCollection = database[collection_name]

    async def create_indexes(self) -> None:
        """Create the indexes backing the list query."""
        try:
            await self.collection.create_index("category")
            await self.collection.create_index("price")
            logger.info("Successfully created MongoDB indexes")
        except PyMongoError as e:
            logger.error("Failed to create indexes", error=str(e))
            raise StoreError(details=str(e))

    async def list_products(self, query: ProductQuery) -> List[Dict[str, Any]]:
        """
        Get every product matching the query. The result set is not paginated.

        Args:
            query: Filter, sort and projection built from list parameters

        Returns:
            List of serialized product documents
        """
        try:
            cursor = self.collection.find(query.filter_query, query.projection)
            if query.sort:
                cursor = cursor.sort(query.sort)
            products = await cursor.to_list(length=None)
        except PyMongoError as e:
            logger.error("Failed to get products", error=str(e), filter_query=query.filter_query)
            raise StoreError(details=str(e))

        return [serialize_product(product) for product in products]

    async def get_product(self, product_id: ObjectId) -> Optional[Dict[str, Any]]:
        """
        Get a single product by ID.

        Returns:
            Serialized product if found, None otherwise
        """
        try:
            product = await self.collection.find_one({"_id": product_id})
        except PyMongoError as e:
            logger.error("Failed to get product by ID", product_id=str(product_id), error=str(e))
            raise StoreError(details=str(e))

        return serialize_product(product) if product else None

    async def create_product(self, product: ProductWrite) -> str:
        """
        Insert a product.

        Returns:
            Identifier assigned by the store
        """
        try:
            result = await self.collection.insert_one(product.model_dump())
        except PyMongoError as e:
            logger.error("Failed to insert product", name=product.name, error=str(e))
            raise StoreError("Could not create product", details=str(e))

        logger.debug("Successfully inserted product", product_id=str(result.inserted_id))
        return str(result.inserted_id)

    async def replace_product(self, product_id: ObjectId, product: ProductWrite) -> bool:
        """
        Overwrite a stored product, keeping its identifier.

        Returns:
            True if a document matched, False if not found
        """
        try:
            result = await self.collection.replace_one({"_id": product_id}, product.model_dump())
        except PyMongoError as e:
            logger.error("Failed to replace product", product_id=str(product_id), error=str(e))
            raise StoreError(details=str(e))

        return result.matched_count > 0

    async def update_product(self, product_id: ObjectId, update_data: Dict[str, Any]) -> bool:
        """
        Apply a merge-patch to a stored product.

        Args:
            product_id: Identifier of the product
            update_data: Top-level fields to overwrite

        Returns:
            True if a document matched, False if not found
        """
        try:
            result = await self.collection.update_one({"_id": product_id}, {"$set": update_data})
        except PyMongoError as e:
            logger.error("Failed to update product", product_id=str(product_id), error=str(e))
            raise StoreError(details=str(e))

        return result.matched_count > 0

    async def delete_product(self, product_id: ObjectId) -> bool:
        """Delete a product, False if nothing matched."""
        try:
            result = await self.collection.delete_one({"_id": product_id})
        except PyMongoError as e:
            logger.error("Failed to delete product", product_id=str(product_id), error=str(e))
            raise StoreError(details=str(e))

        return result.deleted_count > 0

    async def health_check(self) -> Dict:
        """
        Perform database health check.

        Returns:
            Dictionary with health status
        """
        try:
            await self.database.command("ping")
            products_count = await self.collection.count_documents({})
            return {
                "status": "healthy",
                "products_count": products_count
            }
        except PyMongoError as e:
            logger.error("Database health check failed", error=str(e))
            return {
                "status": "unhealthy",
                "error": str(e)
            }


async def connect_product_service(
    mongodb_url: str,
    database_name: str,
    collection_name: str
) -> Tuple[AsyncIOMotorClient, ProductService]:
    """
    Open the store connection and verify it before serving.

    Raises:
        StoreError: If the server cannot be reached or indexed
    """
    client = AsyncIOMotorClient(mongodb_url)
    try:
        await client.admin.command("ping")
    except PyMongoError as e:
        client.close()
        logger.error("Failed to connect to MongoDB", error=str(e))
        raise StoreError("Could not connect to MongoDB", details=str(e))

    logger.info("Successfully connected to MongoDB", database=database_name, collection=collection_name)

    service = ProductService(client[database_name], collection_name)
    try:
        await service.create_indexes()
    except StoreError:
        client.close()
        raise

    return client, service
