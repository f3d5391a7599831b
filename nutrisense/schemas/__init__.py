"""Public schema exports."""

from .analysis import (
    AnalysisRecord,
    ChatResponse,
    Ingredient,
    IngredientCategory,
    SharedAnalysis,
    ShareResponse,
    Tradeoff,
    TranscriptionResponse,
    new_analysis_id,
)
from .commands import (
    AnalysisCommand,
    ChatCommand,
    ChatMessage,
    ImageAnalysisCommand,
    TextAnalysisCommand,
    TranscriptionCommand,
)

__all__ = [
    "AnalysisCommand",
    "AnalysisRecord",
    "ChatCommand",
    "ChatMessage",
    "ChatResponse",
    "ImageAnalysisCommand",
    "Ingredient",
    "IngredientCategory",
    "SharedAnalysis",
    "ShareResponse",
    "TextAnalysisCommand",
    "Tradeoff",
    "TranscriptionCommand",
    "TranscriptionResponse",
    "new_analysis_id",
]
