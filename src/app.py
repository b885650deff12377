"""Farm marketplace FastAPI application.

Single-domain web server that processes commands synchronously via HTTP.
Each request runs inside the marketplace domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

import uuid

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV also picks the log renderer (JSON in production and staging).
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from marketplace.config import get_settings
from marketplace.domain import marketplace
from marketplace.utils.logging import bind_request_context, clear_request_context, get_logger

marketplace.init()

logger = get_logger(__name__)

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Farm Market API",
    description="Farm-to-consumer marketplace: carts, per-farmer orders and sales analytics",
)

_origins = list(get_settings().cors_origins)
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    # Browsers reject credentialed responses for a wildcard origin
    allow_credentials="*" not in _origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the marketplace domain context and tag log lines with a request id."""
    clear_request_context()
    bind_request_context(
        request_id=request.headers.get("X-Request-ID") or uuid.uuid4().hex,
        method=request.method,
        path=request.url.path,
    )
    with marketplace.domain_context():
        response = await call_next(request)
    return response


# ---------------------------------------------------------------------------
# Routers and error handlers
# ---------------------------------------------------------------------------
from marketplace.api.errors import register_error_handlers  # noqa: E402
from marketplace.api.routes import analytics_router, auth_router, cart_router, order_router  # noqa: E402

app.include_router(auth_router)
app.include_router(cart_router)
app.include_router(order_router)
app.include_router(analytics_router)
register_error_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": {"name": marketplace.name}})
