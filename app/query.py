# app/query.py
import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from .models import Product, ProductPage, ProductStats

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


class ProductQuery(BaseModel):
    category: Optional[str] = None
    q: Optional[str] = None
    page: Optional[str] = None
    limit: Optional[str] = None

    def is_empty(self) -> bool:
        return all(v is None for v in (self.category, self.q, self.page, self.limit))


_LEADING_INT = re.compile(r"\s*([+-]?[0-9]+)", re.ASCII)


def _parse_int(raw: Any, default: int) -> int:
    # leading digits only: "2.5" -> 2, "7abc" -> 7, "1_0" -> 1
    if raw is None:
        return default
    m = _LEADING_INT.match(str(raw))
    return int(m.group(1)) if m else default


def parse_page(raw: Any) -> int:
    return max(DEFAULT_PAGE, _parse_int(raw, DEFAULT_PAGE))


def parse_limit(raw: Any) -> int:
    return min(MAX_LIMIT, max(1, _parse_int(raw, DEFAULT_LIMIT)))


def query_products(products: List[Product], params: ProductQuery) -> ProductPage:
    """Filter by category, then by name search, then slice out one page.

    ``total`` counts the filtered set, not the page.
    """
    out = list(products)
    if params.category:
        category = params.category.lower()
        out = [p for p in out if p.category.lower() == category]
    if params.q:
        term = params.q.lower()
        out = [p for p in out if term in p.name.lower()]

    page = parse_page(params.page)
    limit = parse_limit(params.limit)
    start = (page - 1) * limit
    return ProductPage(page=page, limit=limit, total=len(out), data=out[start:start + limit])


def compute_stats(products: List[Product]) -> ProductStats:
    by_category: Dict[str, int] = {}
    for p in products:
        by_category[p.category] = by_category.get(p.category, 0) + 1
    return ProductStats(
        total=len(products),
        in_stock=sum(1 for p in products if p.in_stock is True),
        by_category=by_category,
    )
