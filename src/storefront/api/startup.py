"""Application startup — make the order collection available to the API."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from storefront.domain import storefront
from storefront.order.seed import load_demo_orders

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Seed the demo order history before the first request is served."""
    with storefront.domain_context():
        orders = load_demo_orders()
    logger.info("Order history ready", seeded=len(orders))
    yield
