"""Marketstream FastAPI application.

Web server that processes commands synchronously via HTTP. Every request
runs inside the marketplace domain context.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV controls which config overlay is applied:
#   - "test"       → in-memory providers, handlers fire in the UoW
#   - "production" → PostgreSQL + Redis, event handlers fire via Engine
from marketplace.domain import marketplace

marketplace.init()

from marketplace.promotion.treasure import seed_treasure_config  # noqa: E402
from marketplace.utils.logging import add_context, clear_context  # noqa: E402


@asynccontextmanager
async def lifespan(app: FastAPI):
    with marketplace.domain_context():
        seed_treasure_config()
    yield


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Marketstream API",
    description="Multi-tenant marketplace: checkout, inventory, tenant routing and coupons",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the marketplace domain context and tag log lines with a request id."""
    clear_context()
    request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
    add_context(request_id=request_id, path=request.url.path)
    with marketplace.domain_context():
        response = await call_next(request)
    response.headers["X-Request-Id"] = request_id
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from marketplace.api import (  # noqa: E402
    cart_router,
    coupon_router,
    order_router,
    product_router,
    register_error_handlers,
    tenant_router,
)

register_error_handlers(app)
app.include_router(order_router)
app.include_router(product_router)
app.include_router(cart_router)
app.include_router(coupon_router)
app.include_router(tenant_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": {"name": marketplace.name}})
