"""
Pytest configuration and shared fixtures.
"""

import copy
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from product_api.config import config
from product_api.database import ProductService, serialize_product
from product_api.main import app, get_product_service
from product_api.models import ProductQuery, ProductWrite


class InMemoryProductService:
    """
    Dict backed stand-in for ProductService.

    Understands the subset of MongoDB filters the query builder emits:
    equality and ``$gte``.
    """

    def __init__(self):
        self.documents: Dict[ObjectId, Dict[str, Any]] = {}
        self.calls: List[str] = []

    @staticmethod
    def _matches(document: Dict[str, Any], filter_query: Dict[str, Any]) -> bool:
        for field, condition in filter_query.items():
            value = document.get(field)
            if isinstance(condition, dict):
                if "$gte" in condition and (value is None or value < condition["$gte"]):
                    return False
            elif value != condition:
                return False
        return True

    @staticmethod
    def _project(document: Dict[str, Any], projection: Optional[Dict[str, int]]) -> Dict[str, Any]:
        if not projection:
            return document
        fields = set(projection) | {"_id"}
        return {key: value for key, value in document.items() if key in fields}

    async def list_products(self, query: ProductQuery) -> List[Dict[str, Any]]:
        self.calls.append("list_products")
        results = [
            copy.deepcopy(doc) for doc in self.documents.values()
            if self._matches(doc, query.filter_query)
        ]
        for field, direction in reversed(query.sort):
            results.sort(key=lambda doc: doc.get(field), reverse=direction < 0)
        return [serialize_product(self._project(doc, query.projection)) for doc in results]

    async def get_product(self, product_id: ObjectId) -> Optional[Dict[str, Any]]:
        self.calls.append("get_product")
        document = self.documents.get(product_id)
        return serialize_product(copy.deepcopy(document)) if document else None

    async def create_product(self, product: ProductWrite) -> str:
        self.calls.append("create_product")
        product_id = ObjectId()
        self.documents[product_id] = {"_id": product_id, **product.model_dump()}
        return str(product_id)

    async def replace_product(self, product_id: ObjectId, product: ProductWrite) -> bool:
        self.calls.append("replace_product")
        if product_id not in self.documents:
            return False
        self.documents[product_id] = {"_id": product_id, **product.model_dump()}
        return True

    async def update_product(self, product_id: ObjectId, update_data: Dict[str, Any]) -> bool:
        self.calls.append("update_product")
        if product_id not in self.documents:
            return False
        self.documents[product_id].update(update_data)
        return True

    async def delete_product(self, product_id: ObjectId) -> bool:
        self.calls.append("delete_product")
        return self.documents.pop(product_id, None) is not None

    async def health_check(self) -> Dict:
        return {"status": "healthy", "products_count": len(self.documents)}


@pytest.fixture
def mock_product_service():
    """Mocked product service injected into the app."""
    service = AsyncMock(spec=ProductService)
    app.dependency_overrides[get_product_service] = lambda: service
    yield service
    app.dependency_overrides.pop(get_product_service, None)


@pytest.fixture
def memory_service():
    """In-memory product service injected into the app."""
    service = InMemoryProductService()
    app.dependency_overrides[get_product_service] = lambda: service
    yield service
    app.dependency_overrides.pop(get_product_service, None)


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def auth_enabled(monkeypatch):
    """Turn the API key gate on with a known secret."""
    monkeypatch.setattr(config, "auth_enabled", True)
    monkeypatch.setattr(config, "api_key", "test-secret")
    return "test-secret"


@pytest.fixture
def sample_product_id():
    """A well-formed product identifier."""
    return ObjectId("64b7f0c2a1b2c3d4e5f60718")


@pytest.fixture
def sample_product(sample_product_id):
    """Serialized product as returned by the service."""
    return {
        "_id": str(sample_product_id),
        "name": "Mechanical Keyboard",
        "price": 89.99,
        "category": "electronics"
    }
