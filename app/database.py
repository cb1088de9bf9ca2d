import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from pymongo import ASCENDING, AsyncMongoClient, ReturnDocument
from pymongo.errors import DuplicateKeyError

from .config import Settings
from .errors import ConflictError, NotFoundError
from .models import Product, ProductIn, make_product

# This file holds the product stores: the in-memory list and the Mongo collection.

logger = logging.getLogger(__name__)

SEED_PRODUCTS: List[Dict[str, Any]] = [
    {
        "id": "1",
        "name": "Laptop",
        "description": "High-performance laptop with 16GB RAM",
        "price": 1200,
        "category": "electronics",
        "inStock": True,
    },
    {
        "id": "2",
        "name": "Smartphone",
        "description": "Latest model with 128GB storage",
        "price": 800,
        "category": "electronics",
        "inStock": True,
    },
    {
        "id": "3",
        "name": "Coffee Maker",
        "description": "Programmable coffee maker with timer",
        "price": 50,
        "category": "kitchen",
        "inStock": False,
    },
]


def _not_found(product_id: str) -> NotFoundError:
    return NotFoundError(f"Product with id '{product_id}' not found")


class ProductStore(ABC):
    """Authoritative holder of product records.

    Every method returns copies; callers change stored state only through
    ``insert``, ``replace`` and ``delete``.
    """

    name = "store"

    @abstractmethod
    async def list(self) -> List[Product]:
        """Return all products in insertion order."""

    @abstractmethod
    async def find_by_id(self, product_id: str) -> Optional[Product]:
        """Return the product with this id, or None."""

    @abstractmethod
    async def insert(self, product: Product) -> Product:
        """Append a product. Raises ConflictError if the id is taken."""

    @abstractmethod
    async def replace(self, product_id: str, fields: ProductIn) -> Product:
        """Swap the stored record for ``product_id``. Raises NotFoundError."""

    @abstractmethod
    async def delete(self, product_id: str) -> Product:
        """Remove and return the record. Raises NotFoundError."""

    async def close(self) -> None:
        pass


# ---------------------------
# In-memory store (session)
# ---------------------------
class InMemoryProductStore(ProductStore):
    name = "memory"

    def __init__(self, products: Optional[List[Dict[str, Any]]] = None):
        self._products: List[Product] = [Product.model_validate(p) for p in products or []]

    def _index_of(self, product_id: str) -> int:
        for i, p in enumerate(self._products):
            if p.id == product_id:
                return i
        return -1

    async def list(self) -> List[Product]:
        return [p.model_copy() for p in self._products]

    async def find_by_id(self, product_id: str) -> Optional[Product]:
        i = self._index_of(product_id)
        return self._products[i].model_copy() if i != -1 else None

    async def insert(self, product: Product) -> Product:
        if self._index_of(product.id) != -1:
            raise ConflictError(f"Product with id '{product.id}' already exists")
        self._products.append(product.model_copy())
        return product.model_copy()

    async def replace(self, product_id: str, fields: ProductIn) -> Product:
        i = self._index_of(product_id)
        if i == -1:
            raise _not_found(product_id)
        updated = make_product(product_id, fields)
        self._products[i] = updated
        return updated.model_copy()

    async def delete(self, product_id: str) -> Product:
        i = self._index_of(product_id)
        if i == -1:
            raise _not_found(product_id)
        return self._products.pop(i)


# ---------------------------
# Mongo store
# ---------------------------
_PROJECTION = {"_id": 0}


def _to_document(product: Product) -> Dict[str, Any]:
    return product.model_dump(by_alias=True)


class MongoProductStore(ProductStore):
    """Products kept in a Mongo collection, keyed by the ``id`` field.

    ``collection`` is any async collection exposing pymongo's
    ``find``/``find_one``/``insert_one``/``find_one_and_replace``/
    ``find_one_and_delete``/``create_index`` API.
    """

    name = "mongo"

    def __init__(self, collection, client: Optional[AsyncMongoClient] = None):
        self.collection = collection
        self.client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "MongoProductStore":
        client = AsyncMongoClient(settings.mongodb_uri)
        collection = client[settings.mongodb_db][settings.mongodb_collection]
        return cls(collection, client=client)

    async def ensure_indexes(self) -> None:
        await self.collection.create_index([("id", ASCENDING)], unique=True)

    async def list(self) -> List[Product]:
        cursor = self.collection.find({}, _PROJECTION).sort("_id", ASCENDING)
        docs = await cursor.to_list(length=None)
        return [Product.model_validate(d) for d in docs]

    async def find_by_id(self, product_id: str) -> Optional[Product]:
        doc = await self.collection.find_one({"id": product_id}, _PROJECTION)
        return Product.model_validate(doc) if doc else None

    async def insert(self, product: Product) -> Product:
        if await self.collection.find_one({"id": product.id}, _PROJECTION):
            raise ConflictError(f"Product with id '{product.id}' already exists")
        try:
            await self.collection.insert_one(_to_document(product))
        except DuplicateKeyError:
            raise ConflictError(f"Product with id '{product.id}' already exists")
        return product.model_copy()

    async def replace(self, product_id: str, fields: ProductIn) -> Product:
        updated = make_product(product_id, fields)
        doc = await self.collection.find_one_and_replace(
            {"id": product_id},
            _to_document(updated),
            projection=_PROJECTION,
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            raise _not_found(product_id)
        return Product.model_validate(doc)

    async def delete(self, product_id: str) -> Product:
        doc = await self.collection.find_one_and_delete({"id": product_id}, projection=_PROJECTION)
        if doc is None:
            raise _not_found(product_id)
        return Product.model_validate(doc)

    async def close(self) -> None:
        if self.client is not None:
            await self.client.close()


def build_store(settings: Settings) -> ProductStore:
    if settings.store_backend == "mongo":
        logger.info("Using Mongo store %s/%s", settings.mongodb_db, settings.mongodb_collection)
        return MongoProductStore.from_settings(settings)
    logger.info("Using in-memory store (seeded=%s)", settings.seed_products)
    return InMemoryProductStore(SEED_PRODUCTS if settings.seed_products else None)
