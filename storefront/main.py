"""
Storefront Application

Cart and catalog service for a client-rendered storefront. Products,
categories and orders come from static JSON fixtures; carts live in
per-session stores persisted to a key-value file.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .core.config import Settings, get_settings
from .core.errors import DataSourceUnavailable, InvalidArgument, NotFound, StorefrontError
from .core.session import SessionManager
from .database.carts import PricingPolicy
from .database.fixtures import CatalogService, FixtureSource
from .database.orders import OrderService
from .database.persistence import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
)
from .routes import products_router, categories_router, cart_router, orders_router

logger = logging.getLogger(__name__)

RETRY_AFTER_SECONDS = 5


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    settings = app.state.settings
    logger.info(f"{settings.app_name} starting up...")
    logger.info(f"Data source: {settings.data_source}")
    logger.info(f"Cart storage: {settings.cart_storage_path or 'in-memory'}")

    try:
        await app.state.catalog.load()
    except DataSourceUnavailable:
        logger.warning("Catalog unavailable at startup; will retry on first request")

    yield

    logger.info(f"{settings.app_name} shutting down...")
    app.state.sessions.close_all()
    await app.state.catalog.source.close()


def _error_response(status_code: int, exc: StorefrontError, headers: Optional[dict] = None):
    content = {"detail": exc.message, "retryable": exc.retryable}
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotFound)
    async def not_found_handler(request: Request, exc: NotFound):
        return _error_response(404, exc)

    @app.exception_handler(InvalidArgument)
    async def invalid_argument_handler(request: Request, exc: InvalidArgument):
        return _error_response(400, exc)

    @app.exception_handler(DataSourceUnavailable)
    async def unavailable_handler(request: Request, exc: DataSourceUnavailable):
        logger.error(f"{request.method} {request.url.path}: {exc}")
        return _error_response(503, exc, headers={"Retry-After": str(RETRY_AFTER_SECONDS)})


def create_app(
    settings: Optional[Settings] = None,
    source: Optional[FixtureSource] = None,
    storage: Optional[KeyValueStore] = None,
) -> FastAPI:
    """
    Build the application with its services.

    Args:
        settings: Configuration; defaults to the environment
        source: Fixture source; defaults to settings.data_source
        storage: Cart snapshot storage; defaults to settings.cart_storage_path
    """
    settings = settings or get_settings()

    if source is None:
        source = FixtureSource(settings.data_source, timeout=settings.request_timeout)
    if storage is None:
        if settings.cart_storage_path:
            storage = JsonFileKeyValueStore(settings.cart_storage_path)
        else:
            storage = InMemoryKeyValueStore()

    app = FastAPI(
        title=settings.app_name,
        description="Cart and catalog API for the storefront",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.catalog = CatalogService(source)
    app.state.orders = OrderService(source)
    app.state.sessions = SessionManager(storage)
    app.state.pricing = PricingPolicy.from_settings(settings)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # In production, restrict this
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(products_router)
    app.include_router(categories_router)
    app.include_router(cart_router)
    app.include_router(orders_router)

    @app.get("/")
    async def home():
        """API index"""
        return {
            "message": f"{settings.app_name} API",
            "docs": "/docs",
            "endpoints": {
                "products": "/api/products",
                "categories": "/api/categories",
                "cart": "/api/cart",
                "orders": "/api/users/{user_id}/orders",
            },
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        catalog: CatalogService = app.state.catalog
        return {
            "status": "healthy" if catalog.loaded else "degraded",
            "service": "storefront",
            "catalog_loaded": catalog.loaded,
            "catalog_loading": catalog.loading,
            "catalog_error": catalog.last_error.message if catalog.last_error else None,
            "active_carts": len(app.state.sessions.sessions),
        }

    return app


configure_logging(get_settings())
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "storefront.main:app",
        host=get_settings().host,
        port=get_settings().port,
        reload=get_settings().debug,
    )
