"""Validation of untrusted request bodies into typed commands."""

from __future__ import annotations

import base64
import binascii
import json
import re
from typing import Any, Mapping

from nutrisense.core.errors import PayloadValidationError
from nutrisense.schemas.commands import (
    AnalysisCommand,
    ChatCommand,
    ChatMessage,
    ImageAnalysisCommand,
    TextAnalysisCommand,
    TranscriptionCommand,
)

MAX_INGREDIENTS_LENGTH = 5000
MAX_QUERY_LENGTH = 500
MAX_IMAGE_BASE64_LENGTH = 7_000_000
MAX_IMAGE_BYTES = 5 * 1024 * 1024
MAX_QUESTION_LENGTH = 1000
MAX_CONVERSATION_HISTORY = 10
MAX_HISTORY_MESSAGE_LENGTH = 2000
MAX_CONTEXT_BYTES = 50_000
MAX_AUDIO_BASE64_LENGTH = 13_000_000
MAX_AUDIO_BYTES = 10 * 1024 * 1024

VALID_TYPES = ("text", "image")
CHAT_ROLES = ("user", "assistant")

_DATA_URL_PREFIX = re.compile(r"^data:(image/[a-z]+);base64,")
_BASE64_HEAD = re.compile(r"^[A-Za-z0-9+/=]+$")
_SHAPE_CHECK_LENGTH = 100


def _require_object(body: Any) -> Mapping[str, Any]:
    if not isinstance(body, Mapping):
        raise PayloadValidationError("Invalid request body")
    return body


def _decode_base64(data: str, error_message: str) -> bytes:
    # MIME encoders wrap at 76 columns.
    data = data.replace("\r", "").replace("\n", "")
    if not _BASE64_HEAD.match(data[:_SHAPE_CHECK_LENGTH]):
        raise PayloadValidationError(error_message)
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise PayloadValidationError(error_message) from exc


def _validate_image(image_base64: Any, question: str | None) -> ImageAnalysisCommand:
    if not image_base64 or not isinstance(image_base64, str):
        raise PayloadValidationError("Image data is required for image analysis")
    if len(image_base64) > MAX_IMAGE_BASE64_LENGTH:
        raise PayloadValidationError("Image size exceeds maximum allowed (5MB)")

    mime_type = "image/jpeg"
    data = image_base64
    prefix = _DATA_URL_PREFIX.match(image_base64)
    if prefix:
        mime_type = prefix.group(1)
        data = image_base64[prefix.end():]

    image_data = _decode_base64(data, "Invalid image format")
    if len(image_data) > MAX_IMAGE_BYTES:
        raise PayloadValidationError("Image size exceeds maximum allowed (5MB)")
    return ImageAnalysisCommand(
        image_data=image_data, mime_type=mime_type, question=question
    )


def _validate_text(ingredients: Any, question: str | None) -> TextAnalysisCommand:
    if not ingredients or not isinstance(ingredients, str):
        raise PayloadValidationError("Ingredients text is required")
    if len(ingredients) > MAX_INGREDIENTS_LENGTH:
        raise PayloadValidationError(
            f"Ingredients text exceeds maximum length ({MAX_INGREDIENTS_LENGTH} characters)"
        )
    if not ingredients.strip():
        raise PayloadValidationError("Ingredients text cannot be empty")
    return TextAnalysisCommand(ingredient_text=ingredients, question=question)


def validate_analysis_payload(body: Any) -> AnalysisCommand:
    """Validate an analyze request: ``{ingredients?, imageBase64?, type, userQuery?}``."""
    payload = _require_object(body)

    raw_type = payload.get("type")
    request_type = raw_type if isinstance(raw_type, str) else "text"
    if request_type not in VALID_TYPES:
        raise PayloadValidationError("Invalid type. Must be 'text' or 'image'")

    user_query = payload.get("userQuery")
    question = user_query if isinstance(user_query, str) else None
    if question is not None and len(question) > MAX_QUERY_LENGTH:
        raise PayloadValidationError(
            f"Query exceeds maximum length ({MAX_QUERY_LENGTH} characters)"
        )
    if question is not None and not question.strip():
        question = None

    if request_type == "image":
        return _validate_image(payload.get("imageBase64"), question)
    return _validate_text(payload.get("ingredients"), question)


def _valid_history(raw_history: Any) -> tuple[ChatMessage, ...]:
    if not isinstance(raw_history, list):
        return ()
    entries = [
        entry
        for entry in raw_history
        if isinstance(entry, Mapping)
        and entry.get("role") in CHAT_ROLES
        and isinstance(entry.get("content"), str)
    ]
    return tuple(
        ChatMessage(
            role=entry["role"],
            content=entry["content"][:MAX_HISTORY_MESSAGE_LENGTH],
        )
        for entry in entries[-MAX_CONVERSATION_HISTORY:]
    )


def validate_chat_payload(body: Any) -> ChatCommand:
    """Validate a chat request: ``{question, analysisContext, conversationHistory}``."""
    payload = _require_object(body)

    question = payload.get("question")
    if not question or not isinstance(question, str):
        raise PayloadValidationError("Question is required")
    if not question.strip():
        raise PayloadValidationError("Question cannot be empty")
    if len(question) > MAX_QUESTION_LENGTH:
        raise PayloadValidationError(
            f"Question exceeds maximum length ({MAX_QUESTION_LENGTH} characters)"
        )

    context = payload.get("analysisContext") or {}
    if not isinstance(context, Mapping):
        raise PayloadValidationError("Invalid analysis context")
    serialized = json.dumps(context, ensure_ascii=False, default=str)
    if len(serialized.encode("utf-8")) > MAX_CONTEXT_BYTES:
        raise PayloadValidationError(
            f"Analysis context exceeds maximum size ({MAX_CONTEXT_BYTES} bytes)"
        )

    return ChatCommand(
        question=question.strip(),
        analysis_context=dict(context),
        history=_valid_history(payload.get("conversationHistory")),
    )


def validate_transcription_payload(body: Any) -> TranscriptionCommand:
    """Validate a transcription request: ``{audioBase64}``."""
    payload = _require_object(body)

    audio_base64 = payload.get("audioBase64")
    if not audio_base64 or not isinstance(audio_base64, str):
        raise PayloadValidationError("Audio data is required")
    if len(audio_base64) > MAX_AUDIO_BASE64_LENGTH:
        raise PayloadValidationError("Audio size exceeds maximum allowed (10MB)")
    if not audio_base64.strip():
        raise PayloadValidationError("Audio data cannot be empty")

    audio_data = _decode_base64(audio_base64, "Invalid audio format")
    if len(audio_data) > MAX_AUDIO_BYTES:
        raise PayloadValidationError("Audio size exceeds maximum allowed (10MB)")
    return TranscriptionCommand(audio_data=audio_data)


__all__ = [
    "MAX_CONTEXT_BYTES",
    "MAX_CONVERSATION_HISTORY",
    "MAX_INGREDIENTS_LENGTH",
    "MAX_QUERY_LENGTH",
    "validate_analysis_payload",
    "validate_chat_payload",
    "validate_transcription_payload",
]
