"""
FastAPI application entrypoint for the NutriSense ingredient analysis service.
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from nutrisense.api.routes import router as api_router
from nutrisense.core.config import get_settings
from nutrisense.core.logging import configure_logging

CORS_ALLOW_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="NutriSense Ingredient Analysis",
        version="0.1.0",
        description="Validated, provider-resilient AI analysis of food ingredients.",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_allow_origins),
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=CORS_ALLOW_HEADERS,
    )
    app.include_router(api_router, prefix="/api")
    return app


app = create_app()

__all__ = ["app", "create_app"]
