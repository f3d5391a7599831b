"""HTTP client for the NutriSense API with per-operation retry budgets."""

from __future__ import annotations

import base64
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx

from nutrisense.schemas import AnalysisRecord
from nutrisense.utils.http import (
    ANALYZE_RETRY,
    CHAT_RETRY,
    TRANSCRIBE_RETRY,
    RetryConfig,
    call_with_retry,
)

_IMAGE_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
    ".gif": "image/gif",
}


class NutriSenseApiError(Exception):
    """Raised when the API answers with an ``{"error": ...}`` body."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class NutriSenseApiClient:
    """Call the analyze, chat, transcribe and share endpoints."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def analyze_text(
        self, ingredients: str, *, question: str | None = None
    ) -> AnalysisRecord:
        payload: Dict[str, Any] = {"ingredients": ingredients, "type": "text"}
        if question:
            payload["userQuery"] = question
        body = await self._post("/api/analyze-ingredients", payload, ANALYZE_RETRY)
        return AnalysisRecord.model_validate(body)

    async def analyze_image(
        self, image_path: Path, *, question: str | None = None
    ) -> AnalysisRecord:
        mime_type = _IMAGE_TYPES.get(image_path.suffix.lower(), "image/jpeg")
        encoded = base64.b64encode(image_path.read_bytes()).decode("ascii")
        payload: Dict[str, Any] = {
            "imageBase64": f"data:{mime_type};base64,{encoded}",
            "type": "image",
        }
        if question:
            payload["userQuery"] = question
        body = await self._post("/api/analyze-ingredients", payload, ANALYZE_RETRY)
        return AnalysisRecord.model_validate(body)

    async def chat(
        self,
        question: str,
        *,
        analysis: AnalysisRecord | None,
        history: Optional[List[Dict[str, str]]] = None,
    ) -> str:
        payload = {
            "question": question,
            "analysisContext": analysis.to_payload() if analysis else {},
            "conversationHistory": history or [],
        }
        body = await self._post("/api/chat-ingredients", payload, CHAT_RETRY)
        return body["response"]

    async def transcribe(self, audio: bytes) -> str:
        payload = {"audioBase64": base64.b64encode(audio).decode("ascii")}
        body = await self._post("/api/transcribe-audio", payload, TRANSCRIBE_RETRY)
        return body["text"]

    async def share(self, analysis: AnalysisRecord) -> str:
        body = await self._post(
            "/api/shared-analyses", analysis.to_payload(), RetryConfig(attempts=1)
        )
        return body["shareCode"]

    async def _post(
        self, path: str, payload: Dict[str, Any], retry_config: RetryConfig
    ) -> Dict[str, Any]:
        async def _send() -> Dict[str, Any]:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(path, json=payload)
            try:
                body = response.json()
            except ValueError:
                body = {}
            if response.is_error or not isinstance(body, dict) or "error" in body:
                message = body.get("error") if isinstance(body, dict) else None
                raise NutriSenseApiError(
                    message or f"Request failed with HTTP {response.status_code}",
                    response.status_code,
                )
            return body

        return await call_with_retry(_send, retry_config=retry_config)


__all__ = ["NutriSenseApiClient", "NutriSenseApiError"]
