"""
FastAPI application factory for the tradebot API.
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import AsyncIterator, Mapping

from fastapi import FastAPI

from apps.api.common import register_api_error_handlers
from apps.api.wiring.modules import build_tradebot_api_module


def create_app(*, environ: Mapping[str, str] | None = None) -> FastAPI:
    """
    Build FastAPI app with wallet, trade, and ledger routers wired at startup.

    Related: apps.api.routes.wallets,
      apps.api.routes.trades,
      apps.api.routes.ledger,
      apps.api.wiring.modules.tradebot

    Args:
        environ: Optional environment mapping override.
    Returns:
        FastAPI: Application instance with registered routers and `/metrics` endpoint.
    Assumptions:
        Module wiring performs fail-fast validation before first request.
    Raises:
        FileNotFoundError: If runtime config path is missing.
        ValueError: If settings or config parsing/validation fails.
        KeyVaultConfigurationError: If encryption key is malformed.
    Side Effects:
        Reads runtime YAML and creates outbound clients.
    """
    effective_environ = os.environ if environ is None else environ
    module = build_tradebot_api_module(environ=effective_environ)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        try:
            yield
        finally:
            module.close()

    app = FastAPI(
        title="Tradebot API",
        version="1.0.0",
        lifespan=lifespan,
    )
    register_api_error_handlers(app=app)
    app.include_router(module.router)
    app.mount("/metrics", module.metrics_app)
    return app
