"""
FastAPI routes for the ingredient analysis service.

Every endpoint funnels failures through :func:`classify_error`, so only
validation messages and the provider rate/quota messages reach the client
verbatim; everything else becomes the endpoint's generic message.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from nutrisense.core.config import AppSettings
from nutrisense.core.errors import NutriSenseError, classify_error
from nutrisense.dependencies import (
    AppSettingsDependency,
    get_analysis_orchestrator,
    get_shared_analysis_service,
)
from nutrisense.schemas import ShareResponse
from nutrisense.services import (
    AnalysisOrchestrator,
    SharedAnalysisService,
    validate_analysis_payload,
    validate_chat_payload,
    validate_transcription_payload,
)

router = APIRouter()
logger = logging.getLogger(__name__)

ANALYSIS_FAILED = "Analysis failed. Please try again."
CHAT_FAILED = "Chat failed. Please try again."
TRANSCRIPTION_FAILED = "Transcription failed. Please try again."
SHARE_FAILED = "Failed to save analysis. Please try again."

OrchestratorDependency = Annotated[
    AnalysisOrchestrator, Depends(get_analysis_orchestrator)
]
SharingDependency = Annotated[
    SharedAnalysisService, Depends(get_shared_analysis_service)
]


class InvalidJSONBody(Exception):
    """Raised when the request body is not valid JSON."""


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def _failure(exc: Exception, generic_message: str, operation: str) -> JSONResponse:
    if isinstance(exc, InvalidJSONBody):
        return _error(HTTPStatus.BAD_REQUEST, "Invalid JSON body")
    status_code, message = classify_error(exc, generic_message)
    if isinstance(exc, NutriSenseError) and exc.expose:
        logger.warning("%s rejected (%d): %s", operation, status_code, exc.message)
    else:
        logger.error("Error in %s: %r", operation, exc, exc_info=exc)
    return _error(status_code, message)


async def _read_json(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError as exc:
        raise InvalidJSONBody() from exc


def _log_unknown_origin(request: Request, settings: AppSettings) -> None:
    origin = request.headers.get("origin")
    if not origin:
        return
    if not any(host in origin for host in settings.known_origin_hosts):
        logger.warning(
            "Request from external origin: %s referer: %s",
            origin,
            request.headers.get("referer"),
        )


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok"}


@router.post("/analyze-ingredients", status_code=HTTPStatus.OK)
async def analyze_ingredients(
    request: Request,
    orchestrator: OrchestratorDependency,
    settings: AppSettingsDependency,
) -> JSONResponse:
    """Analyze ingredient text or a label photo."""
    _log_unknown_origin(request, settings)
    try:
        command = validate_analysis_payload(await _read_json(request))
        record = await orchestrator.analyze(command)
    except Exception as exc:
        return _failure(exc, ANALYSIS_FAILED, "analyze-ingredients")
    return JSONResponse(record.to_payload())


@router.post("/chat-ingredients", status_code=HTTPStatus.OK)
async def chat_ingredients(
    request: Request,
    orchestrator: OrchestratorDependency,
    settings: AppSettingsDependency,
) -> JSONResponse:
    """Answer a follow-up question about an analysis."""
    _log_unknown_origin(request, settings)
    try:
        command = validate_chat_payload(await _read_json(request))
        reply = await orchestrator.chat(command)
    except Exception as exc:
        return _failure(exc, CHAT_FAILED, "chat-ingredients")
    return JSONResponse(reply.model_dump())


@router.post("/transcribe-audio", status_code=HTTPStatus.OK)
async def transcribe_audio(
    request: Request,
    orchestrator: OrchestratorDependency,
    settings: AppSettingsDependency,
) -> JSONResponse:
    """Transcribe a voice recording."""
    _log_unknown_origin(request, settings)
    try:
        command = validate_transcription_payload(await _read_json(request))
        transcription = await orchestrator.transcribe(command)
    except Exception as exc:
        return _failure(exc, TRANSCRIPTION_FAILED, "transcribe-audio")
    return JSONResponse(transcription.model_dump())


@router.post("/shared-analyses", status_code=HTTPStatus.CREATED)
async def create_shared_analysis(
    request: Request, sharing: SharingDependency
) -> JSONResponse:
    """Store an analysis and return the code used in share links."""
    try:
        share_code = sharing.share(await _read_json(request))
    except Exception as exc:
        return _failure(exc, SHARE_FAILED, "shared-analyses")
    return JSONResponse(
        ShareResponse(share_code=share_code).model_dump(by_alias=True),
        status_code=HTTPStatus.CREATED,
    )


@router.get("/shared-analyses/{share_code}", status_code=HTTPStatus.OK)
async def get_shared_analysis(
    share_code: str, sharing: SharingDependency
) -> JSONResponse:
    """Return a previously shared analysis."""
    try:
        shared = sharing.get(share_code)
    except Exception as exc:
        return _failure(exc, "Invalid share link", "shared-analyses")
    if shared is None:
        return _error(HTTPStatus.NOT_FOUND, "Analysis not found or link has expired")
    return JSONResponse(shared.model_dump(mode="json", by_alias=True))


__all__ = ["router"]
