"""Dispatch completion requests across a prioritized sequence of providers."""

from __future__ import annotations

import logging
from typing import Sequence

from nutrisense.clients.base import CompletionProvider, CompletionRequest
from nutrisense.core.errors import ConfigurationError, ProviderError

logger = logging.getLogger(__name__)


class ProviderDispatcher:
    """Try each provider in priority order until one answers.

    Classified provider failures (rate limited, quota exceeded, unavailable) on
    any provider but the last trigger a fallback to the next one; the last
    provider's failure is raised to the caller. Nothing is retried here.
    """

    def __init__(self, providers: Sequence[CompletionProvider]) -> None:
        self._providers = tuple(providers)

    @property
    def provider_names(self) -> tuple[str, ...]:
        return tuple(provider.name for provider in self._providers)

    async def dispatch(self, request: CompletionRequest) -> str:
        if not self._providers:
            raise ConfigurationError("No AI provider credentials are configured")

        last_error: ProviderError | None = None
        for index, provider in enumerate(self._providers):
            try:
                content = await provider.complete(request)
            except ProviderError as exc:
                last_error = exc
                if index + 1 < len(self._providers):
                    logger.warning(
                        "Provider '%s' failed (%s: %s); falling back to '%s'.",
                        provider.name,
                        exc.__class__.__name__,
                        exc.message,
                        self._providers[index + 1].name,
                    )
                continue
            logger.info(
                "Provider '%s' answered %s-tier request.",
                provider.name,
                request.tier.value,
            )
            return content

        if last_error is None:  # pragma: no cover - loop always runs
            raise ConfigurationError("No AI provider credentials are configured")
        logger.error(
            "All providers failed; last error from '%s': %s",
            last_error.provider,
            last_error.message,
        )
        raise last_error


__all__ = ["ProviderDispatcher"]
