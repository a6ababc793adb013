"""Storefront HTTP API package."""

from storefront.api.errors import register_exception_handlers
from storefront.api.routes import cart_router, order_router
from storefront.api.startup import lifespan

__all__ = ["cart_router", "lifespan", "order_router", "register_exception_handlers"]
