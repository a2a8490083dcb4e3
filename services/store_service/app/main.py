"""FastAPI application for the Store Service."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from libs.common.error_handler import add_exception_handlers
from libs.common.logging import get_logger
from libs.common.middleware import add_observability_middleware
from services.store_service.errors import PersistenceError, StoreError, http_status
from services.store_service.routers import (
    admin_orders_router,
    checkout_router,
    email_router,
    orders_router,
)

logger = get_logger(__name__)


async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    status_code = http_status(exc)
    if isinstance(exc, PersistenceError):
        logger.error(
            f"{request.url.path} failed after payment {exc.payment_intent_id}: {exc.message}"
        )
    elif status_code >= 500:
        logger.error(f"{request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.url.path} rejected ({status_code}): {exc.message}")
    return JSONResponse(status_code=status_code, content={"error": exc.message})


def create_app() -> FastAPI:
    """Create and configure the Store Service FastAPI app."""
    app = FastAPI(
        title="Joulaa Store Service",
        version="0.1.0",
        description="Cosmetics store checkout: payment intents, orders and order history.",
    )

    # Add observability (structured logging + request tracing)
    add_observability_middleware(app)

    # Consistent {"error": ...} bodies
    add_exception_handlers(app)
    app.add_exception_handler(StoreError, store_error_handler)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "store"}

    # Storefront routes
    app.include_router(checkout_router, prefix="/api")
    app.include_router(orders_router, prefix="/api")
    app.include_router(email_router, prefix="/api")

    # Admin routes (order management, reconciliation)
    app.include_router(admin_orders_router, prefix="/admin/store")

    return app


app = create_app()
