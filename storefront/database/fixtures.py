"""
Static data sources

Products, categories and orders are read from JSON fixtures, either from a
local directory or from an HTTP(S) base URL serving the same files. Every
failure to reach or decode a fixture surfaces as DataSourceUnavailable.
"""

import asyncio
import json
import logging
import os
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from ..core.errors import DataSourceUnavailable
from ..models.order import Order
from ..models.product import Category, Product
from .products import CatalogQueryEngine

logger = logging.getLogger(__name__)

PRODUCTS_FILE = "products.json"
CATEGORIES_FILE = "categories.json"
ORDERS_FILE = "orders.json"


class FixtureSource:
    """Reads fixture collections from a directory or a base URL"""

    def __init__(
        self,
        location: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize fixture source.

        Args:
            location: Directory path or http(s) base URL
            timeout: HTTP timeout in seconds
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        self.location = location.rstrip("/")
        self.remote = location.startswith(("http://", "https://"))
        self._timeout = timeout
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    async def close(self) -> None:
        """Close HTTP client"""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def _fetch_json(self, name: str) -> Any:
        if self.remote:
            return await self._fetch_remote(name)
        return self._read_local(name)

    async def _fetch_remote(self, name: str) -> Any:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

        url = f"{self.location}/{name}"
        try:
            response = await self._http_client.get(url)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Fixture request failed: {e.response.status_code} - {url}")
            raise DataSourceUnavailable(name, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error(f"Fixture request failed: {url} - {e}")
            raise DataSourceUnavailable(name, str(e)) from e
        except ValueError as e:
            raise DataSourceUnavailable(name, "invalid JSON") from e

    def _read_local(self, name: str) -> Any:
        path = os.path.join(self.location, name)
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except OSError as e:
            logger.error(f"Fixture read failed: {path} - {e}")
            raise DataSourceUnavailable(name, e.strerror or str(e)) from e
        except ValueError as e:
            raise DataSourceUnavailable(name, "invalid JSON") from e

    async def _load_collection(self, name: str, envelope: str, model):
        data = await self._fetch_json(name)
        if not isinstance(data, dict) or not isinstance(data.get(envelope), list):
            raise DataSourceUnavailable(name, f"missing '{envelope}' list")
        try:
            return [model.model_validate(entry) for entry in data[envelope]]
        except ValidationError as e:
            raise DataSourceUnavailable(name, f"invalid record: {e.error_count()} errors") from e

    async def load_products(self) -> list[Product]:
        """Full product collection, unfiltered"""
        return await self._load_collection(PRODUCTS_FILE, "products", Product)

    async def load_categories(self) -> list[Category]:
        return await self._load_collection(CATEGORIES_FILE, "categories", Category)

    async def load_orders(self) -> list[Order]:
        return await self._load_collection(ORDERS_FILE, "orders", Order)


class CatalogService:
    """
    Lazily loaded catalog.

    The engine is built on first use (or at startup) and kept for the life
    of the service. A failed load leaves the service empty so the next call
    tries again.
    """

    def __init__(self, source: FixtureSource):
        self.source = source
        self.engine: Optional[CatalogQueryEngine] = None
        self.last_error: Optional[DataSourceUnavailable] = None
        self._lock = asyncio.Lock()

    @property
    def loaded(self) -> bool:
        return self.engine is not None

    @property
    def loading(self) -> bool:
        return self._lock.locked()

    async def load(self) -> CatalogQueryEngine:
        """Fetch products and categories and build the engine once"""
        async with self._lock:
            if self.engine is not None:
                return self.engine
            try:
                products, categories = await asyncio.gather(
                    self.source.load_products(),
                    self.source.load_categories(),
                )
            except DataSourceUnavailable as e:
                self.last_error = e
                logger.error(f"Catalog load failed: {e}")
                raise

            self.engine = CatalogQueryEngine(products, categories)
            self.last_error = None
            logger.info(f"Catalog loaded: {len(products)} products, {len(categories)} categories")
            return self.engine

    async def get_engine(self) -> CatalogQueryEngine:
        if self.engine is not None:
            return self.engine
        return await self.load()
