# tests/conftest.py
import copy
import itertools

import pytest
from fastapi.testclient import TestClient
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from app.config import Settings
from app.database import SEED_PRODUCTS, InMemoryProductStore
from app.main import create_app

API_KEY = "test-key"


@pytest.fixture
def settings():
    return Settings(api_key=API_KEY)


@pytest.fixture
def store():
    return InMemoryProductStore(SEED_PRODUCTS)


@pytest.fixture
def client(settings, store):
    return TestClient(create_app(settings, store))


@pytest.fixture
def auth():
    return {"x-api-key": API_KEY}


@pytest.fixture
def new_product():
    return {"name": "Desk Lamp", "description": "LED lamp", "price": 25.5, "category": "home", "inStock": True}


# ---------------------------
# Async stand-in for a pymongo collection
# ---------------------------
def _project(doc, projection):
    doc = copy.deepcopy(doc)
    for key, keep in (projection or {}).items():
        if not keep:
            doc.pop(key, None)
    return doc


def _matches(doc, filter):
    return all(doc.get(k) == v for k, v in filter.items())


class FakeCursor:
    def __init__(self, docs, projection=None):
        self.docs = docs
        self.projection = projection

    def sort(self, key, direction):
        self.docs = sorted(self.docs, key=lambda d: d[key], reverse=direction < 0)
        return self

    async def to_list(self, length=None):
        return [_project(d, self.projection) for d in self.docs][:length]


class FakeCollection:
    def __init__(self):
        self.docs = []
        self.unique = set()
        self._ids = itertools.count(1)

    async def create_index(self, keys, unique=False):
        if unique:
            self.unique.update(k for k, _ in keys)

    def find(self, filter, projection=None):
        return FakeCursor([d for d in self.docs if _matches(d, filter)], projection)

    async def find_one(self, filter, projection=None):
        for d in self.docs:
            if _matches(d, filter):
                return _project(d, projection)
        return None

    async def insert_one(self, doc):
        for key in self.unique:
            if any(d.get(key) == doc.get(key) for d in self.docs):
                raise DuplicateKeyError(f"duplicate {key}")
        self.docs.append(dict(doc, _id=next(self._ids)))

    async def find_one_and_replace(self, filter, replacement, projection=None, return_document=ReturnDocument.BEFORE):
        for i, d in enumerate(self.docs):
            if _matches(d, filter):
                self.docs[i] = dict(replacement, _id=d["_id"])
                return _project(self.docs[i] if return_document == ReturnDocument.AFTER else d, projection)
        return None

    async def find_one_and_delete(self, filter, projection=None):
        for i, d in enumerate(self.docs):
            if _matches(d, filter):
                return _project(self.docs.pop(i), projection)
        return None


@pytest.fixture
def collection():
    return FakeCollection()
