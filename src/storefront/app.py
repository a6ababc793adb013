"""Storefront FastAPI application.

Processes cart and order commands synchronously over HTTP. Every request runs
inside the storefront domain context. At startup an empty order collection is
given its demo history (``SEED_DEMO_ORDERS`` in ``[tool.protean.custom]``).

Usage:
    uvicorn storefront.app:app --host 0.0.0.0 --port 8000 --reload
"""

import os
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.api import cart_router, lifespan, order_router, register_exception_handlers
from storefront.domain import storefront
from storefront.utils.logging import add_context, clear_context, configure_logging

configure_logging(log_dir=os.getenv("LOG_DIR", "logs"))

# PROTEAN_ENV selects the config overlay applied at init
storefront.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Storefront API",
    description="Shopping carts, checkout and order history",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the storefront domain context and tag log lines with a request id."""
    add_context(request_id=request.headers.get("X-Request-ID", str(uuid4())), path=request.url.path)
    try:
        with storefront.domain_context():
            return await call_next(request)
    finally:
        clear_context()


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
app.include_router(cart_router)
app.include_router(order_router)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domain": storefront.name,
        }
    )
