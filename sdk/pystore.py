# sdk/pystore.py
import requests
import httpx
from typing import Any, Dict, Optional


class StoreAPIError(Exception):
    """Raised for any non-2xx answer; mirrors the API's error body."""

    def __init__(self, status_code: int, name: str, message: str):
        super().__init__(f"{status_code} {name}: {message}")
        self.status_code = status_code
        self.name = name
        self.message = message


def _raise_for_error(r) -> None:
    # works for both requests.Response and httpx.Response
    if r.status_code < 400:
        return
    try:
        err = r.json().get("error", {})
    except ValueError:
        err = {}
    raise StoreAPIError(r.status_code, err.get("name", "HTTPError"), err.get("message", r.text))


def _product_body(name: str, description: str, price: float, category: str, in_stock: Optional[bool]) -> Dict[str, Any]:
    body: Dict[str, Any] = {"name": name, "description": description, "price": price, "category": category}
    if in_stock is not None:
        body["inStock"] = in_stock
    return body


class StoreClient:
    def __init__(self, base_url: str = "http://localhost:3000", api_key: Optional[str] = None, timeout: int = 10):
        self.base_url = base_url.rstrip("/")
        self.api_url = f"{self.base_url}/api"
        self.session = requests.Session()
        self.timeout = timeout
        self.api_key = api_key
        if api_key:
            self.session.headers.update({"x-api-key": api_key})

    # Reads
    def list_products(self):
        r = self.session.get(f"{self.api_url}/products", timeout=self.timeout)
        _raise_for_error(r)
        return r.json()

    def query_products(self, category: Optional[str] = None, q: Optional[str] = None,
                       page: int = 1, limit: int = 10):
        params: Dict[str, Any] = {"page": page, "limit": limit}
        if category:
            params["category"] = category
        if q:
            params["q"] = q
        r = self.session.get(f"{self.api_url}/products", params=params, timeout=self.timeout)
        _raise_for_error(r)
        return r.json()

    def search_products(self, name: str):
        return self.query_products(q=name, limit=100)["data"]

    def get_product(self, product_id: str):
        r = self.session.get(f"{self.api_url}/products/{product_id}", timeout=self.timeout)
        _raise_for_error(r)
        return r.json()

    def product_stats(self):
        r = self.session.get(f"{self.api_url}/products/stats", timeout=self.timeout)
        _raise_for_error(r)
        return r.json()

    # Writes (need api_key)
    def create_product(self, name: str, description: str, price: float, category: str,
                       in_stock: Optional[bool] = None):
        r = self.session.post(f"{self.api_url}/products",
                              json=_product_body(name, description, price, category, in_stock),
                              timeout=self.timeout)
        _raise_for_error(r)
        return r.json()

    def replace_product(self, product_id: str, name: str, description: str, price: float, category: str,
                        in_stock: Optional[bool] = None):
        r = self.session.put(f"{self.api_url}/products/{product_id}",
                             json=_product_body(name, description, price, category, in_stock),
                             timeout=self.timeout)
        _raise_for_error(r)
        return r.json()

    def delete_product(self, product_id: str):
        r = self.session.delete(f"{self.api_url}/products/{product_id}", timeout=self.timeout)
        _raise_for_error(r)
        return r.json()

    # Async create (example)
    async def create_product_async(self, name: str, description: str, price: float, category: str,
                                   in_stock: Optional[bool] = None):
        headers = {"x-api-key": self.api_key} if self.api_key else {}
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            r = await client.post(f"{self.api_url}/products",
                                  json=_product_body(name, description, price, category, in_stock),
                                  headers=headers)
            _raise_for_error(r)
            return r.json()
