"""FastAPI application factory"""

import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from src.api.error import register_error_handlers
from src.api.routes import commissions, pricing, wallet

logger = logging.getLogger(__name__)


def create_app(config) -> FastAPI:
    app = FastAPI(
        title="Recruiting Wallet Service",
        description="Company and consultant wallets, regional pricing and commission ledger",
        version="1.0.0",
        docs_url=f"{config.API_PREFIX}/docs",
        openapi_url=f"{config.API_PREFIX}/openapi.json",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=config.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    for module in (wallet, pricing, commissions):
        app.include_router(module.router, prefix=config.API_PREFIX)

    @app.get(f"{config.API_PREFIX}/health", tags=["Health"])
    async def health():
        return {"status": "ok"}

    logger.info(f"API routes mounted under {config.API_PREFIX}")
    return app
