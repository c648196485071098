"""Request dependencies resolving the app's explicitly constructed services"""

from fastapi import HTTPException, Request

from ..core.config import Settings
from ..core.session import CartSession, SessionManager
from ..database.carts import PricingPolicy
from ..database.orders import OrderHistory
from ..database.products import CatalogQueryEngine


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_sessions(request: Request) -> SessionManager:
    return request.app.state.sessions


def get_pricing(request: Request) -> PricingPolicy:
    return request.app.state.pricing


async def get_catalog(request: Request) -> CatalogQueryEngine:
    """Catalog engine, loading the fixtures on first use"""
    return await request.app.state.catalog.get_engine()


async def get_order_history(request: Request) -> OrderHistory:
    return await request.app.state.orders.get_history()


async def get_cart_session(cart_id: str, request: Request) -> CartSession:
    """Live cart session, reopened from its persisted snapshot if needed"""
    session = get_sessions(request).restore_session(cart_id)
    if not session:
        raise HTTPException(status_code=404, detail="Cart not found")
    return session
