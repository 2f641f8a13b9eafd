"""
Wholesale Admin Console — FastAPI Application

Order fulfillment backend: cached order list, guarded status/payment changes
against the storefront's order service, tax invoice and waybill composition.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi import HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from domain.errors import to_domain_error
from exceptions import OrderServiceError
from routes import health, orders

# ── Logging ─────────────────────────────────────────────────────────

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan ────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: validate settings. Shutdown: stop background resync, close upstream client."""
    settings.validate_production_settings()
    logger.info(f"Order service: {settings.order_service_url}")

    yield  # app runs here

    from services.order_repository import repository
    await repository.close()
    await repository.client.close()

    logger.info("Shutting down")


# ── App Factory ─────────────────────────────────────────────────────

app = FastAPI(
    title="Wholesale Admin Console API",
    description="Order fulfillment: status lifecycle, payment toggle, tax invoice and waybill documents",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routes ──────────────────────────────────────────────────────────

app.include_router(health.router)
app.include_router(orders.router)


# ── Exception Handlers ──────────────────────────────────────────────


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """
    Catch-all for unhandled exceptions.

    Never return raw exception details to clients; the full traceback is
    logged server-side for debugging.
    """
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": {
                "code": "internal_server_error",
                "message": "Internal server error",
            },
        },
    )


def _domain_error_response(exc) -> JSONResponse:
    error_code = exc.__class__.__name__.replace("Error", "").lower()
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": {
                "code": error_code,
                "message": exc.message,
                "details": exc.details,
            },
        },
    )


@app.exception_handler(OrderServiceError)
async def order_service_exception_handler(request, exc: OrderServiceError):
    """Order service failures surface as 401 (credential) or 502 (everything else)."""
    logger.warning(f"Order service error on {request.url.path}: {exc.message}")
    return _domain_error_response(to_domain_error(exc))


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc: HTTPException):
    """
    Standardize HTTPException responses for frontend consumers.

    Keeps the original HTTP status code, but wraps the payload.
    """
    # DomainError is a subclass of HTTPException
    if hasattr(exc, "message") and hasattr(exc, "details"):
        return _domain_error_response(exc)

    detail = exc.detail
    message = detail if isinstance(detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": {
                "code": "http_error",
                "message": message,
                "details": detail if not isinstance(detail, str) else None,
            },
        },
    )


# ── Entrypoint ──────────────────────────────────────────────────────

if __name__ == "__main__":
    import uvicorn
    import os
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port, log_level="info")
