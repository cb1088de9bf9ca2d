# tests/test_database.py
import asyncio

import pytest
from fastapi.testclient import TestClient

from app.database import SEED_PRODUCTS, InMemoryProductStore, MongoProductStore
from app.errors import ConflictError, NotFoundError
from app.main import create_app
from app.models import Product, ProductIn

LAMP = Product(id="lamp-1", name="Lamp", description="LED", price=20, category="home")
FIELDS = ProductIn(name="Lamp XL", description="Bigger", price=30, category="home", in_stock=False)


def run(coro):
    return asyncio.run(coro)


@pytest.fixture(params=["memory", "mongo"])
def any_store(request, collection):
    if request.param == "memory":
        return InMemoryProductStore()
    store = MongoProductStore(collection)
    run(store.ensure_indexes())
    return store


def test_insert_then_find(any_store):
    run(any_store.insert(LAMP))
    assert run(any_store.find_by_id("lamp-1")).model_dump() == LAMP.model_dump()
    assert run(any_store.find_by_id("nope")) is None


def test_insert_duplicate_id_conflicts(any_store):
    run(any_store.insert(LAMP))
    with pytest.raises(ConflictError):
        run(any_store.insert(LAMP))


def test_list_keeps_insertion_order(any_store):
    for n in range(3):
        run(any_store.insert(LAMP.model_copy(update={"id": f"p{n}"})))
    assert [p.id for p in run(any_store.list())] == ["p0", "p1", "p2"]


def test_replace_uses_path_id(any_store):
    run(any_store.insert(LAMP))
    updated = run(any_store.replace("lamp-1", FIELDS))
    assert updated.id == "lamp-1"
    assert updated.name == "Lamp XL"
    assert run(any_store.find_by_id("lamp-1")).in_stock is False


def test_replace_missing(any_store):
    with pytest.raises(NotFoundError):
        run(any_store.replace("nope", FIELDS))


def test_delete_returns_record_and_removes_it(any_store):
    run(any_store.insert(LAMP))
    assert run(any_store.delete("lamp-1")).model_dump() == LAMP.model_dump()
    assert run(any_store.list()) == []
    with pytest.raises(NotFoundError):
        run(any_store.delete("lamp-1"))


def test_memory_store_hands_out_copies():
    store = InMemoryProductStore(SEED_PRODUCTS)
    product = run(store.find_by_id("1"))
    product.name = "Hacked"
    assert run(store.find_by_id("1")).name == "Laptop"


def test_mongo_documents_hide_internal_id(collection):
    store = MongoProductStore(collection)
    run(store.insert(LAMP))
    assert "_id" in collection.docs[0]
    assert collection.docs[0]["inStock"] is True
    assert run(store.find_by_id("lamp-1")).model_dump(by_alias=True) == LAMP.model_dump(by_alias=True)


def test_app_over_mongo_store(settings, collection, auth):
    store = MongoProductStore(collection)
    with TestClient(create_app(settings, store)) as client:
        assert collection.unique == {"id"}
        body = {"name": "Kettle", "description": "", "price": 35, "category": "Kitchen"}
        created = client.post("/api/products", json=body, headers=auth).json()
        assert client.get(f"/api/products/{created['id']}").json() == created
        assert client.get("/api/products", params={"category": "kitchen"}).json()["total"] == 1
        assert client.get("/health").json()["store"] == "mongo"
