"""Completion provider backed by the Google Gemini SDK."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Iterable

import google.generativeai as genai
from google.api_core.exceptions import (
    GoogleAPICallError,
    GoogleAPIError,
    NotFound,
    ResourceExhausted,
    TooManyRequests,
)

from nutrisense.clients.base import CompletionRequest, ModelTier, PromptMessage
from nutrisense.core.config import GeminiSettings
from nutrisense.core.errors import (
    NutriSenseError,
    ProviderQuotaExceeded,
    ProviderRateLimited,
    ProviderUnavailable,
)

_LIGHT_FALLBACKS: tuple[str, ...] = (
    "gemini-2.5-flash",
    "gemini-2.0-flash",
)
_CAPABLE_FALLBACKS: tuple[str, ...] = (
    "gemini-2.5-pro",
    "gemini-2.5-flash",
)
_ROLES = {"user": "user", "assistant": "model"}

logger = logging.getLogger(__name__)


class GeminiProvider:
    """Answer completion requests with Gemini, trying fallback model names."""

    name = "gemini"

    def __init__(self, settings: GeminiSettings, *, timeout_seconds: float = 60.0) -> None:
        self._settings = settings
        self._timeout = timeout_seconds
        # Configure the global client once per process.
        genai.configure(api_key=settings.api_key)

    async def complete(self, request: CompletionRequest) -> str:
        contents = [_to_content(message) for message in request.messages]

        def _invoke() -> str:
            response = self._invoke_with_models(
                models=self._model_candidates(request.tier),
                build=lambda model_name: genai.GenerativeModel(
                    model_name,
                    system_instruction=request.system_prompt or None,
                    generation_config={"temperature": request.temperature},
                ),
                call=lambda model: model.generate_content(
                    contents,
                    safety_settings=[],
                    request_options={"timeout": self._timeout},
                ),
            )
            try:
                return response.text or ""
            except ValueError:
                # Blocked or empty candidates; ``.text`` raises instead of returning "".
                return ""

        try:
            text = await asyncio.to_thread(_invoke)
        except NutriSenseError:
            raise
        except Exception as exc:
            logger.warning("Unexpected Gemini SDK failure: %r", exc)
            raise ProviderUnavailable(
                f"Gemini call failed: {exc.__class__.__name__}", provider=self.name
            ) from exc
        if not text.strip():
            raise ProviderUnavailable("Gemini returned no content", provider=self.name)
        return text

    def _invoke_with_models(
        self,
        *,
        models: Iterable[str],
        build: Callable[[str], genai.GenerativeModel],
        call: Callable[[genai.GenerativeModel], Any],
    ) -> Any:
        """Try the configured model followed by fallbacks when it is not found."""
        model_sequence = list(models)
        for index, model_name in enumerate(model_sequence):
            try:
                return call(build(model_name))
            except NotFound:
                logger.warning(
                    "Gemini model '%s' not found (attempt %d/%d); trying fallback.",
                    model_name,
                    index + 1,
                    len(model_sequence),
                )
                continue
            except (ResourceExhausted, TooManyRequests) as exc:
                raise ProviderRateLimited(
                    f"Gemini rate limited: {exc.message}", provider=self.name
                ) from exc
            except GoogleAPICallError as exc:
                if exc.code == 402:
                    raise ProviderQuotaExceeded(
                        f"Gemini quota exceeded: {exc.message}", provider=self.name
                    ) from exc
                raise ProviderUnavailable(
                    f"Gemini generate_content failed: {exc.message}",
                    provider=self.name,
                ) from exc
            except GoogleAPIError as exc:
                raise ProviderUnavailable(
                    f"Gemini generate_content failed: {exc}", provider=self.name
                ) from exc

        primary = model_sequence[0] if model_sequence else "unknown"
        raise ProviderUnavailable(
            f"Gemini model '{primary}' is not available.", provider=self.name
        )

    def _model_candidates(self, tier: ModelTier) -> list[str]:
        if tier is ModelTier.CAPABLE:
            return self._collect_candidates(
                self._settings.capable_model_name, _CAPABLE_FALLBACKS
            )
        return self._collect_candidates(
            self._settings.light_model_name, _LIGHT_FALLBACKS
        )

    @staticmethod
    def _collect_candidates(
        configured: str | None,
        fallbacks: tuple[str, ...],
    ) -> list[str]:
        """Return distinct model names prioritizing the configured value."""
        seen: set[str] = set()
        candidates: list[str] = []
        for name in (configured, *fallbacks):
            if not name:
                continue
            cleaned = name.strip()
            if not cleaned or cleaned in seen:
                continue
            seen.add(cleaned)
            candidates.append(cleaned)
        return candidates


def _to_content(message: PromptMessage) -> dict[str, Any]:
    parts: list[Any] = [message.text]
    parts.extend(
        {"mime_type": attachment.mime_type, "data": attachment.data}
        for attachment in message.attachments
    )
    return {"role": _ROLES[message.role], "parts": parts}


__all__ = ["GeminiProvider"]
