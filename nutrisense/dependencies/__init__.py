"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    build_providers,
    get_analysis_orchestrator,
    get_provider_dispatcher,
    get_shared_analysis_service,
    get_sqlite_store,
)
from .config import AppSettingsDependency, get_app_settings

__all__ = [
    "AppSettingsDependency",
    "build_providers",
    "get_analysis_orchestrator",
    "get_app_settings",
    "get_provider_dispatcher",
    "get_shared_analysis_service",
    "get_sqlite_store",
]
