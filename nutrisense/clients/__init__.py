"""Expose constructed client wrappers."""

from .ai_gateway import AIGatewayProvider
from .base import (
    Attachment,
    CompletionProvider,
    CompletionRequest,
    ModelTier,
    PromptMessage,
)
from .gemini import GeminiProvider
from .nutrisense_api import NutriSenseApiClient, NutriSenseApiError
from .sqlite_store import SQLiteStore

__all__ = [
    "AIGatewayProvider",
    "Attachment",
    "CompletionProvider",
    "CompletionRequest",
    "GeminiProvider",
    "ModelTier",
    "NutriSenseApiClient",
    "NutriSenseApiError",
    "PromptMessage",
    "SQLiteStore",
]
