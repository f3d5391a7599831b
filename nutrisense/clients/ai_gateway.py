"""Completion provider for an OpenAI-compatible AI gateway."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any, Dict, List

import httpx

from nutrisense.clients.base import CompletionRequest, ModelTier, PromptMessage
from nutrisense.core.config import GatewaySettings
from nutrisense.core.errors import (
    ProviderQuotaExceeded,
    ProviderRateLimited,
    ProviderUnavailable,
)

logger = logging.getLogger(__name__)


class AIGatewayProvider:
    """Call ``/chat/completions`` on the configured gateway."""

    name = "gateway"

    def __init__(
        self,
        settings: GatewaySettings,
        *,
        timeout_seconds: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._timeout = timeout_seconds
        self._transport = transport

    async def complete(self, request: CompletionRequest) -> str:
        body = {
            "model": self._model_name(request.tier),
            "messages": _build_messages(request),
            "temperature": request.temperature,
        }
        headers = {
            "Authorization": f"Bearer {self._settings.api_key}",
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    f"{self._settings.base_url.rstrip('/')}/chat/completions",
                    json=body,
                    headers=headers,
                )
        except httpx.HTTPError as exc:
            raise ProviderUnavailable(
                f"AI gateway request failed: {exc.__class__.__name__}",
                provider=self.name,
            ) from exc

        if response.status_code == HTTPStatus.TOO_MANY_REQUESTS:
            raise ProviderRateLimited("AI gateway rate limited", provider=self.name)
        if response.status_code == HTTPStatus.PAYMENT_REQUIRED:
            raise ProviderQuotaExceeded("AI gateway credits exhausted", provider=self.name)
        if response.is_error:
            logger.error("AI gateway error: HTTP %d", response.status_code)
            raise ProviderUnavailable(
                f"AI gateway returned HTTP {response.status_code}", provider=self.name
            )

        content = _extract_content(response)
        if not content or not content.strip():
            raise ProviderUnavailable("AI gateway returned no content", provider=self.name)
        return content

    def _model_name(self, tier: ModelTier) -> str:
        if tier is ModelTier.CAPABLE:
            return self._settings.capable_model_name
        return self._settings.light_model_name


def _extract_content(response: httpx.Response) -> str | None:
    try:
        payload = response.json()
        content = payload["choices"][0]["message"]["content"]
    except (ValueError, KeyError, IndexError, TypeError):
        return None
    return content if isinstance(content, str) else None


def _message_content(message: PromptMessage) -> str | List[Dict[str, Any]]:
    if not message.attachments:
        return message.text

    parts: List[Dict[str, Any]] = [{"type": "text", "text": message.text}]
    for attachment in message.attachments:
        if attachment.kind == "image":
            parts.append(
                {
                    "type": "image_url",
                    "image_url": {
                        "url": f"data:{attachment.mime_type};base64,{attachment.as_base64()}"
                    },
                }
            )
        else:
            parts.append(
                {
                    "type": "input_audio",
                    "input_audio": {
                        "data": attachment.as_base64(),
                        "format": attachment.mime_type.split("/")[-1].split(";")[0],
                    },
                }
            )
    return parts


def _build_messages(request: CompletionRequest) -> List[Dict[str, Any]]:
    messages: List[Dict[str, Any]] = []
    if request.system_prompt:
        messages.append({"role": "system", "content": request.system_prompt})
    messages.extend(
        {"role": message.role, "content": _message_content(message)}
        for message in request.messages
    )
    return messages


__all__ = ["AIGatewayProvider"]
