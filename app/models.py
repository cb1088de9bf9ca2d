# app/models.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Union


class ProductIn(BaseModel):
    """Client-supplied product fields, already validated and trimmed."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    description: str
    price: Union[int, float]
    category: str
    in_stock: bool = Field(default=True, alias="inStock")


class Product(ProductIn):
    id: str


class ProductPage(BaseModel):
    page: int
    limit: int
    total: int
    data: List[Product]


class ProductStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total: int
    in_stock: int = Field(alias="inStock")
    by_category: Dict[str, int] = Field(alias="byCategory")


class HealthResponse(BaseModel):
    status: str
    service: str
    store: str


def make_product(product_id: str, p: ProductIn) -> Product:
    return Product(id=product_id, **p.model_dump())
