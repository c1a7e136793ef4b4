"""API layer module.

Contains FastAPI routers and request/response schemas.
"""

from app.api.cart import router as cart_router
from app.api.health import router as health_router
from app.api.orders import router as orders_router
from app.api.products import router as products_router

__all__ = [
    "cart_router",
    "health_router",
    "orders_router",
    "products_router",
]
