"""
FastAPI application - Main entry point
"""

from dotenv import load_dotenv

load_dotenv()

import logging
import os
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.api.endpoints.admin import router as admin_router
from storefront.api.endpoints.checkout import router as checkout_router
from storefront.api.endpoints.products import router as products_router
from storefront.api.endpoints.webhooks import router as webhooks_router
from storefront.error_handler import ErrorHandler
from storefront.integrations.payments.stripe_client import StripePaymentClient
from storefront.integrations.selection import select_email_service, select_payment_client
from storefront.services.webhook_service import WebhookService
from storefront.utils.config_loader import load_shop_config

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def _select_repository():
    # Real database when DATABASE_URL is set, else an in-memory store seeded with the fallback catalog
    if os.getenv("DATABASE_URL"):
        from storefront.database.sql import SqlShopRepository

        repository = SqlShopRepository(connection_string=os.environ["DATABASE_URL"])
        repository.create_tables()
        return repository

    from storefront.database.memory import MemoryShopRepository
    from storefront.database.seed import seed_products

    repository = MemoryShopRepository()
    seed_products(repository)
    return repository


def create_app(repository=None, payment_client=None, email_service=None, config=None) -> FastAPI:
    app = FastAPI(
        title="Mawu Storefront API",
        description="Shop catalogue, checkout and donation payments for the Mawu Foundation",
        version="1.0.0",
    )

    # CORS middleware
    origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ============================================================================
    # DEPENDENCY INJECTION
    # ============================================================================
    app.state.config = config or load_shop_config()
    app.state.repository = repository if repository is not None else _select_repository()
    app.state.payment_client = payment_client or select_payment_client()
    app.state.email_service = email_service or select_email_service()
    app.state.webhook_service = WebhookService(app.state.repository, app.state.email_service)

    app.include_router(webhooks_router, prefix="/api")
    app.include_router(products_router, prefix="/api")
    app.include_router(checkout_router, prefix="/api")
    app.include_router(admin_router, prefix="/api")

    error_handler = ErrorHandler()

    @app.exception_handler(Exception)
    async def unhandled_exception(request: Request, exc: Exception):
        payload = error_handler.handle_exception(exc, context={"path": request.url.path, "method": request.method})
        return JSONResponse(status_code=500, content=payload)

    @app.get("/api/health", tags=["Health"])
    async def health():
        try:
            app.state.repository.ping()
        except Exception as e:
            logger.error("[Health Check] Error: %s", e)
            return JSONResponse(
                status_code=503,
                content={
                    "status": "unhealthy",
                    "timestamp": datetime.utcnow().isoformat(),
                    "error": "Service unavailable",
                },
            )

        stripe_configured = isinstance(app.state.payment_client, StripePaymentClient)
        return {
            "status": "healthy",
            "timestamp": datetime.utcnow().isoformat(),
            "environment": os.getenv("APP_ENV", "development"),
            "services": {
                "database": "connected",
                "stripe": "configured" if stripe_configured else "not configured",
                "email": app.state.email_service.sender.name,
            },
        }

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "3001")))
