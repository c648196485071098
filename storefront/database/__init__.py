# Database modules

from .carts import CartStore, PricingPolicy
from .products import CatalogQueryEngine, sort_products, paginate
from .persistence import KeyValueStore, InMemoryKeyValueStore, JsonFileKeyValueStore
from .fixtures import FixtureSource, CatalogService
from .orders import OrderHistory, OrderService

__all__ = [
    "CartStore",
    "PricingPolicy",
    "CatalogQueryEngine",
    "sort_products",
    "paginate",
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "FixtureSource",
    "CatalogService",
    "OrderHistory",
    "OrderService",
]
