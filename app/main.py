# app/main.py
import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import List, Optional, Union

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from .config import Settings
from .core import get_store, product_payload, require_api_key
from .database import MongoProductStore, ProductStore, build_store
from .errors import NotFoundError, install_error_handlers
from .log import setup_logging
from .models import HealthResponse, Product, ProductIn, ProductPage, ProductStats, make_product
from .query import ProductQuery, compute_stats, query_products

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


# ---------------------------
# Read endpoints (no auth)
# ---------------------------
@router.get("/products", response_model=Union[ProductPage, List[Product]])
async def list_products(params: ProductQuery = Depends(), store: ProductStore = Depends(get_store)):
    products = await store.list()
    if params.is_empty():
        return products
    return query_products(products, params)


@router.get("/products/stats", response_model=ProductStats)
async def product_stats(store: ProductStore = Depends(get_store)):
    return compute_stats(await store.list())


@router.get("/products/{product_id}", response_model=Product)
async def get_product(product_id: str, store: ProductStore = Depends(get_store)):
    p = await store.find_by_id(product_id)
    if p is None:
        raise NotFoundError(f"Product with id '{product_id}' not found")
    return p


# ---------------------------
# Write endpoints (auth + validation)
# ---------------------------
@router.post("/products", response_model=Product, status_code=201, dependencies=[Depends(require_api_key)])
async def create_product(payload: ProductIn = Depends(product_payload), store: ProductStore = Depends(get_store)):
    product = await store.insert(make_product(str(uuid.uuid4()), payload))
    logger.info("Created product %s (%s)", product.id, product.name)
    return product


@router.put("/products/{product_id}", response_model=Product, dependencies=[Depends(require_api_key)])
async def replace_product(
    product_id: str,
    payload: ProductIn = Depends(product_payload),
    store: ProductStore = Depends(get_store),
):
    product = await store.replace(product_id, payload)
    logger.info("Replaced product %s", product_id)
    return product


@router.delete("/products/{product_id}", response_model=Product, dependencies=[Depends(require_api_key)])
async def delete_product(product_id: str, store: ProductStore = Depends(get_store)):
    product = await store.delete(product_id)
    logger.info("Deleted product %s", product_id)
    return product


# ---------------------------
# App factory
# ---------------------------
def create_app(settings: Optional[Settings] = None, store: Optional[ProductStore] = None) -> FastAPI:
    """Build the API with one store for the lifetime of the app.

    ``store`` defaults to whatever ``settings.store_backend`` names.
    """
    settings = (settings or Settings.from_env()).validate()
    if store is None:
        store = build_store(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.log_level)
        if isinstance(store, MongoProductStore):
            await store.ensure_indexes()
        logger.info("Product API ready (store=%s, env=%s)", store.name, settings.environment)
        yield
        await store.close()

    app = FastAPI(title="api-store (products)", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info("%s %s -> %s (%.1f ms)", request.method, request.url.path, response.status_code, elapsed_ms)
        return response

    install_error_handlers(app, production=settings.production)

    @app.get("/", response_class=PlainTextResponse)
    async def root():
        return "Hello World!"

    @app.get("/health", response_model=HealthResponse)
    async def health():
        return HealthResponse(status="ok", service="product-api", store=store.name)

    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=app.state.settings.port, log_config=None)
