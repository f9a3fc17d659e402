"""
Checkout Bridge — FastAPI Application

Bridges Stripe hosted Checkout and a WooCommerce store:
create-checkout for the storefront, a Stripe webhook that marks paid orders
as processing, and a status lookup for the success page.

Run:
    python main.py
    uvicorn main:create_app --factory --port 3000
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from config import Settings, load_settings
from domain.constants import ERR_BAD_INPUT, ERR_INTERNAL
from domain.responses import error_response
from routes import checkout, health, webhooks
from services.async_executor import create_executor, shutdown_executor
from services.event_cache import ProcessedEventCache
from services.order_backend import WooCommerceClient
from services.payment_gateway import PaymentGateway, StripeGateway

# ── Logging ─────────────────────────────────────────────────────────

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan ────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: validate settings. Shutdown: close HTTP client and thread pool."""
    app.state.settings.validate_production_settings()
    logger.info(
        f"Checkout bridge ready (env={app.state.settings.environment}, "
        f"woo auth={app.state.order_backend.auth_mode})"
    )

    yield  # app runs here

    await app.state.order_backend.aclose()
    shutdown_executor(app.state.executor)
    logger.info("Shutting down")


# ── Exception Handlers ──────────────────────────────────────────────


async def http_exception_handler(request, exc: HTTPException):
    """
    Render DomainError / HTTPException as { "ok": false, "error": ... }.

    Keeps the original HTTP status code.
    """
    message = getattr(exc, "message", None) or (
        exc.detail if isinstance(exc.detail, str) else "Request failed"
    )
    return JSONResponse(status_code=exc.status_code, content=error_response(message))


async def validation_exception_handler(request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content=error_response(ERR_BAD_INPUT))


async def global_exception_handler(request, exc):
    """
    Catch-all for unhandled exceptions.

    The full traceback is logged server-side; clients get a fixed code.
    """
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content=error_response(ERR_INTERNAL))


# ── App Factory ─────────────────────────────────────────────────────


def create_app(
    settings: Optional[Settings] = None,
    gateway: Optional[PaymentGateway] = None,
    order_backend: Optional[WooCommerceClient] = None,
) -> FastAPI:
    """
    Build the application.

    Settings are loaded here (once) unless given; a missing required
    variable raises ConfigurationError and the process never starts serving.
    gateway / order_backend can be injected to run without Stripe or
    WooCommerce.
    """
    settings = settings or load_settings()
    logging.getLogger().setLevel(settings.log_level)
    # Request URLs carry WooCommerce credentials in query auth mode
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)

    app = FastAPI(
        title="Checkout Bridge API",
        description="Stripe Checkout ↔ WooCommerce order status bridge",
        version="1.1.0",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.executor = create_executor(settings.stripe_executor_workers)
    app.state.gateway = gateway or StripeGateway.from_settings(settings, executor=app.state.executor)
    app.state.order_backend = order_backend or WooCommerceClient.from_settings(settings)
    app.state.event_cache = ProcessedEventCache(
        ttl_seconds=settings.webhook_event_ttl_seconds,
        max_size=settings.webhook_event_cache_size,
    )

    # CORS (storefront origins only; the webhook is server-to-server)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", "X-API-Key"],
    )

    # ── Routes ──────────────────────────────────────────────────────
    app.include_router(webhooks.router)
    app.include_router(health.router)
    app.include_router(checkout.router)

    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    return app


# ── Entrypoint ──────────────────────────────────────────────────────

if __name__ == "__main__":
    import uvicorn

    application = create_app()
    uvicorn.run(application, host="0.0.0.0", port=application.state.settings.port, log_level="info")
