"""
Pydantic models describing the normalized ingredient analysis.

Field names are snake_case in Python and camelCase on the wire. The bounds
declared here are the strict shape; :mod:`nutrisense.services.schema_guard`
coerces anything that fails them.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Annotated, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints
from pydantic.alias_generators import to_camel

Verdict = Literal["safe", "caution", "concern"]
Safety = Literal["safe", "moderate", "concern", "unknown"]

VERDICTS: tuple[str, ...] = ("safe", "caution", "concern")
SAFETY_LEVELS: tuple[str, ...] = ("safe", "moderate", "concern", "unknown")

MAX_PRODUCT_NAME = 300
MAX_SUMMARY = 2000
MAX_DETECTED_CONTEXT = 300
MAX_CONTEXT_NOTE = 1000
MAX_QUICK_ADVICE_ITEMS = 10
MAX_QUICK_ADVICE = 200
MAX_CATEGORY_NAME = 100
MAX_CATEGORY_ICON = 16
MAX_AI_NOTE = 1000
MAX_INGREDIENT_NAME = 200
MAX_EXPLANATION = 1000
MAX_DETAILED_INFO = 2000
MAX_TRADEOFF_INGREDIENT = 200
MAX_TRADEOFF_TEXT = 1000


def new_analysis_id() -> str:
    """Return a collision-resistant analysis identifier."""
    return f"analysis-{uuid.uuid4().hex}"


class CamelModel(BaseModel):
    """Base model serializing to camelCase keys while accepting either form."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Ingredient(CamelModel):
    """A single ingredient with its safety assessment."""

    common_name: str = Field(..., max_length=MAX_INGREDIENT_NAME)
    scientific_name: Optional[str] = Field(None, max_length=MAX_INGREDIENT_NAME)
    safety: Safety
    explanation: str = Field(..., max_length=MAX_EXPLANATION)
    detailed_info: Optional[str] = Field(None, max_length=MAX_DETAILED_INFO)


class IngredientCategory(CamelModel):
    """Group of ingredients sharing a role (sweeteners, preservatives, ...)."""

    name: str = Field(..., max_length=MAX_CATEGORY_NAME)
    icon: str = Field(..., max_length=MAX_CATEGORY_ICON)
    ai_note: Optional[str] = Field(None, max_length=MAX_AI_NOTE)
    ingredients: List[Ingredient]


class Tradeoff(CamelModel):
    """Why an ingredient is used, what the worry is, and a balanced view."""

    ingredient: str = Field(..., max_length=MAX_TRADEOFF_INGREDIENT)
    why: str = Field(..., max_length=MAX_TRADEOFF_TEXT)
    concern: str = Field(..., max_length=MAX_TRADEOFF_TEXT)
    reality: str = Field(..., max_length=MAX_TRADEOFF_TEXT)


class AnalysisRecord(CamelModel):
    """Normalized ingredient safety assessment returned to clients."""

    id: str = Field(default_factory=new_analysis_id)
    product_name: Optional[str] = Field(None, max_length=MAX_PRODUCT_NAME)
    verdict: Verdict
    confidence: int = Field(..., ge=0, le=100, strict=True)
    health_score: int = Field(..., ge=0, le=100, strict=True)
    summary: str = Field(..., max_length=MAX_SUMMARY)
    detected_context: Optional[str] = Field(None, max_length=MAX_DETECTED_CONTEXT)
    context_note: Optional[str] = Field(None, max_length=MAX_CONTEXT_NOTE)
    quick_advice: List[
        Annotated[str, StringConstraints(max_length=MAX_QUICK_ADVICE)]
    ] = Field(..., max_length=MAX_QUICK_ADVICE_ITEMS)
    categories: List[IngredientCategory]
    tradeoffs: List[Tradeoff]

    def to_payload(self) -> dict:
        """Serialize using the wire (camelCase) field names."""
        return self.model_dump(mode="json", by_alias=True)


class ChatResponse(BaseModel):
    """Reply to a follow-up question."""

    response: str


class TranscriptionResponse(BaseModel):
    """Text recognized in a voice recording."""

    text: str


class ShareResponse(CamelModel):
    """Returned after an analysis is stored for sharing."""

    share_code: str


class SharedAnalysis(CamelModel):
    """A stored analysis retrievable through its share code."""

    share_code: str
    created_at: datetime
    analysis: AnalysisRecord


__all__ = [
    "AnalysisRecord",
    "ChatResponse",
    "Ingredient",
    "IngredientCategory",
    "SAFETY_LEVELS",
    "Safety",
    "ShareResponse",
    "SharedAnalysis",
    "Tradeoff",
    "TranscriptionResponse",
    "VERDICTS",
    "Verdict",
    "new_analysis_id",
]
