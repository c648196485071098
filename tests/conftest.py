"""Pytest configuration and fixtures"""
import json
import os
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from storefront.core.config import DEFAULT_DATA_DIR, Settings
from storefront.database.carts import CartStore
from storefront.database.persistence import InMemoryKeyValueStore
from storefront.database.products import CatalogQueryEngine
from storefront.main import create_app
from storefront.models.cart import CartLineItem
from storefront.models.product import Category, Product


def load_fixture(name: str, envelope: str) -> list[dict]:
    with open(os.path.join(DEFAULT_DATA_DIR, name), "r", encoding="utf-8") as f:
        return json.load(f)[envelope]


@pytest.fixture
def data_dir():
    return DEFAULT_DATA_DIR


@pytest.fixture
def products():
    """The 14 fixture products"""
    return [Product.model_validate(p) for p in load_fixture("products.json", "products")]


@pytest.fixture
def categories():
    return [Category.model_validate(c) for c in load_fixture("categories.json", "categories")]


@pytest.fixture
def catalog(products, categories):
    return CatalogQueryEngine(products, categories)


@pytest.fixture
def storage():
    return InMemoryKeyValueStore()


@pytest.fixture
def cart(storage):
    return CartStore(storage=storage, storage_key="cart:test")


@pytest.fixture
def make_item():
    """Factory for cart line items"""
    def _make_item(product_id="p1", variant_key="default", unit_price="10.00", **kwargs):
        return CartLineItem(
            product_id=product_id,
            variant_key=variant_key,
            name=kwargs.pop("name", f"Product {product_id}"),
            unit_price=Decimal(unit_price),
            **kwargs,
        )
    return _make_item


@pytest.fixture
def settings(data_dir):
    return Settings(data_source=data_dir, cart_storage_path=None)


@pytest.fixture
def client(settings, storage):
    """Test client with the lifespan running"""
    app = create_app(settings=settings, storage=storage)
    with TestClient(app) as test_client:
        yield test_client
