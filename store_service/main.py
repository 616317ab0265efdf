"""
store_service/main.py - Products and Shopping Carts Service

PURPOSE:
    Small HTTP service exposing CRUD over two record collections, products
    and carts, each persisted as one JSON document.

RESPONSIBILITIES:
    - List, get, create, merge-update and delete products
    - Create carts and list their lines
    - Add a product to a cart (increment the line if already present)
    - Initialize empty collections on startup

API ENDPOINTS:
    GET    /api/products                 - List products
    GET    /api/products/{pid}           - Get one product
    POST   /api/products                 - Create product (201)
    PUT    /api/products/{pid}           - Merge-update product
    DELETE /api/products/{pid}           - Delete product, returns it
    GET    /api/carts/{cid}              - List cart lines
    POST   /api/carts                    - Create cart (201)
    POST   /api/carts/{cid}/product/{pid} - Add product to cart
    GET    /                             - Route listing (HTML)
    GET    /health                       - Health check

ERRORS:
    - Unknown product/cart id: 404 plain text "Product not found" / "Cart not found"
    - Unreadable or corrupt collection document: 500 plain text

DATA STORAGE:
    - file (default): DATA_DIR/products.json, DATA_DIR/carts.json
    - redis: keys "{REDIS_KEY_PREFIX}products", "{REDIS_KEY_PREFIX}carts"

TESTING COMMANDS:
    1. Create a product:
        curl -X POST http://localhost:8080/api/products \
          -H "Content-Type: application/json" \
          -d '{"name": "pen", "price": 1.5}'

    2. Create a cart:
        curl -X POST http://localhost:8080/api/carts \
          -H "Content-Type: application/json" -d '{}'

    3. Add 3 pens to cart 1:
        curl -X POST http://localhost:8080/api/carts/1/product/1 \
          -H "Content-Type: application/json" -d '{"quantity": 3}'

    4. View cart lines:
        curl -X GET http://localhost:8080/api/carts/1

USAGE:
    python -m store_service.main
    uvicorn store_service.main:create_app --factory --port 8080
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

import redis
from fastapi import FastAPI, Request, status
from fastapi.responses import HTMLResponse, PlainTextResponse
from pydantic_settings import BaseSettings

from shared.logging_config import setup_logging
from shared.record_store import JsonFileRecordStore, RecordStore, RedisRecordStore, StorageUnavailable

from .base_repository import NotFound
from .cart_repository import CartRepository
from .product_repository import ProductRepository
from .routes import router
from .schemas import HealthResponse

logger = logging.getLogger(__name__)

VERSION = "1.0.0"

ROUTE_LISTING = """
<h1>Available Routes</h1>
<ul>
    <li>GET /api/products - List all products</li>
    <li>GET /api/products/:pid - Get a product by id</li>
    <li>POST /api/products - Add a new product</li>
    <li>PUT /api/products/:pid - Update a product by id</li>
    <li>DELETE /api/products/:pid - Delete a product by id</li>
    <li>GET /api/carts/:cid - List the products in a cart</li>
    <li>POST /api/carts - Create a new cart</li>
    <li>POST /api/carts/:cid/product/:pid - Add a product to a cart</li>
</ul>
"""


class Settings(BaseSettings):
    """Application settings."""

    service_name: str = os.getenv("SERVICE_NAME", "store-service")
    service_port: int = int(os.getenv("SERVICE_PORT", "8080"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_timezone: str = os.getenv("LOG_TIMEZONE", "UTC")
    storage_backend: str = os.getenv("STORAGE_BACKEND", "file")
    data_dir: str = os.getenv("DATA_DIR", "data")
    products_file: str = os.getenv("PRODUCTS_FILE", "products.json")
    carts_file: str = os.getenv("CARTS_FILE", "carts.json")
    redis_host: str = os.getenv("REDIS_HOST", "localhost")
    redis_port: int = int(os.getenv("REDIS_PORT", "6379"))
    redis_key_prefix: str = os.getenv("REDIS_KEY_PREFIX", "store:")


def build_store(settings: Settings) -> RecordStore:
    """Create the record store selected by ``settings.storage_backend``."""
    if settings.storage_backend == "file":
        return JsonFileRecordStore(
            settings.data_dir,
            {
                ProductRepository.collection: settings.products_file,
                CartRepository.collection: settings.carts_file,
            },
        )
    if settings.storage_backend == "redis":
        client = redis.Redis(
            host=settings.redis_host,
            port=settings.redis_port,
            decode_responses=True,
        )
        return RedisRecordStore(client, key_prefix=settings.redis_key_prefix)
    raise ValueError(f"Unknown storage backend: {settings.storage_backend}")


def create_app(settings: Optional[Settings] = None, store: Optional[RecordStore] = None) -> FastAPI:
    """Build the FastAPI app around a record store.

    Passing ``store`` skips backend selection, which is how tests inject
    an in-memory or temporary-directory store.
    """
    settings = settings or Settings()
    setup_logging(settings.service_name, level=settings.log_level, tz=settings.log_timezone)
    if store is None:
        store = build_store(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Manage app lifecycle."""
        logger.info(f"Starting {settings.service_name} with {type(store).__name__}")

        for collection in (ProductRepository.collection, CartRepository.collection):
            try:
                store.ensure_collection(collection)
            except StorageUnavailable as e:
                logger.error(f"Failed to initialize collection {collection}: {e}")
                raise

        yield

        logger.info(f"Shutting down {settings.service_name}...")

    app = FastAPI(title="Store Service", version=VERSION, lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store

    @app.exception_handler(NotFound)
    async def not_found_handler(request: Request, exc: NotFound) -> PlainTextResponse:
        return PlainTextResponse(exc.message, status_code=status.HTTP_404_NOT_FOUND)

    @app.exception_handler(StorageUnavailable)
    async def storage_unavailable_handler(request: Request, exc: StorageUnavailable) -> PlainTextResponse:
        logger.error(
            f"Storage failure on {request.method} {request.url.path}: {exc}",
            exc_info=exc,
            extra={"collection": exc.collection},
        )
        return PlainTextResponse("Internal Server Error", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    @app.get("/", response_class=HTMLResponse)
    async def index() -> str:
        """Human-readable list of the available routes."""
        return ROUTE_LISTING

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="ok", service=settings.service_name, version=VERSION)

    app.include_router(router)
    return app


if __name__ == "__main__":
    import uvicorn

    settings = Settings()
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.service_port)
