"""Payflow FastAPI application.

Web server that processes payment commands synchronously via HTTP. Every
request under a payflow route runs inside the payflow domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from payflow.domain import payflow
from payflow.utils.logging import add_context, clear_context, configure_logging

configure_logging()

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# PROTEAN_ENV controls which config overlay is applied:
#   - "test"       → event_processing = "sync"  (projectors fire in UoW)
#   - "production" → event_processing = "async" (projectors fire via Engine)
payflow.init()

_DOMAIN_PREFIXES = ("/payments", "/payment-methods")

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Payflow API",
    description="Payment lifecycle processing — authorize, capture, void",
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
    """Push the payflow domain context for each domain request."""
    if request.url.path.startswith(_DOMAIN_PREFIXES):
        add_context(http_method=request.method, http_path=request.url.path)
        try:
            with payflow.domain_context():
                response = await call_next(request)
        finally:
            clear_context()
        return response
    # Health check and docs run outside the domain context
    return await call_next(request)


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from payflow.api.routes import payment_method_router, payment_router, register_error_handlers  # noqa: E402

register_error_handlers(app)
app.include_router(payment_method_router)
app.include_router(payment_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {
                "payflow": {"name": payflow.name},
            },
        }
    )
