"""
Validated, immutable commands produced by the payload validator.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Optional, Tuple, Union

Role = Literal["user", "assistant"]


@dataclass(frozen=True, slots=True)
class TextAnalysisCommand:
    """Analyze an ingredient list typed or pasted by the user."""

    ingredient_text: str
    question: Optional[str] = None
    kind: Literal["text"] = "text"


@dataclass(frozen=True, slots=True)
class ImageAnalysisCommand:
    """Analyze the ingredient label visible in an uploaded photo."""

    image_data: bytes = field(repr=False)
    mime_type: str = "image/jpeg"
    question: Optional[str] = None
    kind: Literal["image"] = "image"


AnalysisCommand = Union[TextAnalysisCommand, ImageAnalysisCommand]


@dataclass(frozen=True, slots=True)
class ChatMessage:
    role: Role
    content: str


@dataclass(frozen=True, slots=True)
class ChatCommand:
    """Follow-up question about a previously produced analysis."""

    question: str
    analysis_context: Dict[str, Any]
    history: Tuple[ChatMessage, ...] = ()


@dataclass(frozen=True, slots=True)
class TranscriptionCommand:
    """Voice recording to transcribe into text."""

    audio_data: bytes = field(repr=False)
    mime_type: str = "audio/webm"


__all__ = [
    "AnalysisCommand",
    "ChatCommand",
    "ChatMessage",
    "ImageAnalysisCommand",
    "Role",
    "TextAnalysisCommand",
    "TranscriptionCommand",
]
