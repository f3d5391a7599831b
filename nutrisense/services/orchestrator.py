"""Compose validation, provider dispatch and schema normalization per use case."""

from __future__ import annotations

import json
import logging

from nutrisense.clients.base import (
    Attachment,
    CompletionRequest,
    ModelTier,
    PromptMessage,
)
from nutrisense.core.errors import ProviderUnavailable
from nutrisense.schemas import (
    AnalysisCommand,
    AnalysisRecord,
    ChatCommand,
    ChatResponse,
    ImageAnalysisCommand,
    TranscriptionCommand,
    TranscriptionResponse,
    new_analysis_id,
)
from nutrisense.services import prompts
from nutrisense.services.dispatcher import ProviderDispatcher
from nutrisense.services.schema_guard import extract_json_object, normalize_analysis

ANALYSIS_TEMPERATURE = 0.3
CHAT_TEMPERATURE = 0.7
TRANSCRIPTION_TEMPERATURE = 0.1

logger = logging.getLogger(__name__)


class AnalysisOrchestrator:
    """Entry point for the analyze, chat and transcribe operations."""

    def __init__(self, dispatcher: ProviderDispatcher) -> None:
        self._dispatcher = dispatcher

    async def analyze(self, command: AnalysisCommand) -> AnalysisRecord:
        """Produce a normalized analysis for ingredient text or a label photo."""
        logger.info(
            "Processing analysis request, type: %s, hasQuery: %s",
            command.kind,
            command.question is not None,
        )
        request = build_analysis_request(command)
        content = await self._dispatcher.dispatch(request)
        record = normalize_analysis(extract_json_object(content))
        logger.info("Analysis complete, verdict: %s", record.verdict)
        return record.model_copy(update={"id": new_analysis_id()})

    async def chat(self, command: ChatCommand) -> ChatResponse:
        """Answer a follow-up question about an earlier analysis."""
        logger.info("Processing chat request, history: %d", len(command.history))
        content = await self._dispatcher.dispatch(build_chat_request(command))
        return ChatResponse(response=_require_text(content, "chat"))

    async def transcribe(self, command: TranscriptionCommand) -> TranscriptionResponse:
        """Transcribe a voice recording describing a product or its ingredients."""
        logger.info("Processing transcription request")
        content = await self._dispatcher.dispatch(build_transcription_request(command))
        return TranscriptionResponse(text=_require_text(content, "transcription"))


def _require_text(content: str, operation: str) -> str:
    text = (content or "").strip()
    if not text:
        raise ProviderUnavailable(f"No {operation} generated")
    return text


def build_analysis_request(command: AnalysisCommand) -> CompletionRequest:
    """Build the provider prompt; photos use the more capable model tier."""
    if isinstance(command, ImageAnalysisCommand):
        text = prompts.IMAGE_ANALYSIS_PROMPT
        if command.question:
            text += prompts.QUESTION_SUFFIX.format(question=command.question)
        message = PromptMessage(
            role="user",
            text=text,
            attachments=(
                Attachment(
                    kind="image", mime_type=command.mime_type, data=command.image_data
                ),
            ),
        )
        tier = ModelTier.CAPABLE
    else:
        text = prompts.TEXT_ANALYSIS_PROMPT.format(ingredients=command.ingredient_text)
        if command.question and command.question != command.ingredient_text:
            text += prompts.QUESTION_SUFFIX.format(question=command.question)
        message = PromptMessage(role="user", text=text)
        tier = ModelTier.LIGHT

    return CompletionRequest(
        tier=tier,
        system_prompt=prompts.ANALYSIS_SYSTEM_PROMPT,
        messages=(message,),
        temperature=ANALYSIS_TEMPERATURE,
    )


def build_chat_request(command: ChatCommand) -> CompletionRequest:
    """Embed the analysis as context, then the bounded history and the question."""
    if command.analysis_context:
        context = json.dumps(
            normalize_analysis(command.analysis_context).to_payload(),
            indent=2,
            ensure_ascii=False,
        )
    else:
        context = "No analysis is available yet."

    history = tuple(
        PromptMessage(role=message.role, text=message.content)
        for message in command.history
    )
    return CompletionRequest(
        tier=ModelTier.LIGHT,
        system_prompt=prompts.CHAT_SYSTEM_PROMPT.format(context=context),
        messages=(*history, PromptMessage(role="user", text=command.question)),
        temperature=CHAT_TEMPERATURE,
    )


def build_transcription_request(command: TranscriptionCommand) -> CompletionRequest:
    return CompletionRequest(
        tier=ModelTier.LIGHT,
        system_prompt="",
        messages=(
            PromptMessage(
                role="user",
                text=prompts.TRANSCRIPTION_PROMPT,
                attachments=(
                    Attachment(
                        kind="audio",
                        mime_type=command.mime_type,
                        data=command.audio_data,
                    ),
                ),
            ),
        ),
        temperature=TRANSCRIPTION_TEMPERATURE,
    )


__all__ = [
    "AnalysisOrchestrator",
    "build_analysis_request",
    "build_chat_request",
    "build_transcription_request",
]
