"""
FastAPI dependencies exposing the startup configuration to routes.
"""

from typing import Annotated

from fastapi import Depends

from nutrisense.core.config import AppSettings, get_settings


def get_app_settings() -> AppSettings:
    """Return the process-wide settings read at startup."""
    return get_settings()


AppSettingsDependency = Annotated[AppSettings, Depends(get_app_settings)]

__all__ = ["AppSettingsDependency", "get_app_settings"]
