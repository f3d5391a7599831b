"""Provider-neutral prompt types shared by every completion provider."""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from enum import Enum
from typing import Literal, Protocol, Tuple


class ModelTier(str, Enum):
    """Cost/capability class of the model used for a request."""

    LIGHT = "light"
    CAPABLE = "capable"


@dataclass(frozen=True, slots=True)
class Attachment:
    """Binary media sent alongside a prompt."""

    kind: Literal["image", "audio"]
    mime_type: str
    data: bytes = field(repr=False)

    def as_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")


@dataclass(frozen=True, slots=True)
class PromptMessage:
    role: Literal["user", "assistant"]
    text: str
    attachments: Tuple[Attachment, ...] = ()


@dataclass(frozen=True, slots=True)
class CompletionRequest:
    """Everything a provider needs to produce one completion."""

    tier: ModelTier
    system_prompt: str
    messages: Tuple[PromptMessage, ...]
    temperature: float = 0.3


class CompletionProvider(Protocol):
    """An upstream AI service able to answer a :class:`CompletionRequest`.

    Implementations return the model's text and raise one of the classified
    :class:`~nutrisense.core.errors.ProviderError` subclasses on failure.
    """

    name: str

    async def complete(self, request: CompletionRequest) -> str:
        ...


__all__ = [
    "Attachment",
    "CompletionProvider",
    "CompletionRequest",
    "ModelTier",
    "PromptMessage",
]
