"""
Factory functions to provide shared clients and services as FastAPI dependencies.

Providers are built from configuration once per process, in the order given by
``AI_PROVIDER_ORDER``; providers without credentials are skipped.
"""

import logging
from functools import lru_cache

from nutrisense.clients import (
    AIGatewayProvider,
    CompletionProvider,
    GeminiProvider,
    SQLiteStore,
)
from nutrisense.core.config import AppSettings, get_settings
from nutrisense.services import (
    AnalysisOrchestrator,
    ProviderDispatcher,
    SharedAnalysisService,
)

logger = logging.getLogger(__name__)


def build_providers(settings: AppSettings) -> list[CompletionProvider]:
    """Instantiate configured providers in priority order."""
    timeout = settings.upstream_timeout_seconds
    providers: list[CompletionProvider] = []
    for name in settings.provider_order:
        if name == "gemini" and settings.gemini.api_key:
            providers.append(GeminiProvider(settings.gemini, timeout_seconds=timeout))
        elif name == "gateway" and settings.gateway.api_key:
            providers.append(AIGatewayProvider(settings.gateway, timeout_seconds=timeout))
        elif name not in ("gemini", "gateway"):
            logger.warning("Ignoring unknown AI provider '%s'.", name)
    if not providers:
        logger.error("No AI provider credentials configured.")
    return providers


@lru_cache()
def get_provider_dispatcher() -> ProviderDispatcher:
    """Provide the dispatcher over the configured providers."""
    return ProviderDispatcher(build_providers(get_settings()))


@lru_cache()
def get_analysis_orchestrator() -> AnalysisOrchestrator:
    """Provide the orchestrator used by the analysis endpoints."""
    return AnalysisOrchestrator(get_provider_dispatcher())


@lru_cache()
def get_sqlite_store() -> SQLiteStore:
    """Provide shared SQLite record store."""
    return SQLiteStore(get_settings().database_path)


def get_shared_analysis_service() -> SharedAnalysisService:
    """Build the shared analysis service over the record store."""
    return SharedAnalysisService(get_sqlite_store())


__all__ = [
    "build_providers",
    "get_analysis_orchestrator",
    "get_provider_dispatcher",
    "get_shared_analysis_service",
    "get_sqlite_store",
]
