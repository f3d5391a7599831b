try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import base64
import json

import httpx
import pytest

from nutrisense.clients.ai_gateway import AIGatewayProvider
from nutrisense.clients.base import (
    Attachment,
    CompletionRequest,
    ModelTier,
    PromptMessage,
)
from nutrisense.core.config import AppSettings, GatewaySettings
from nutrisense.core.errors import (
    ConfigurationError,
    ProviderQuotaExceeded,
    ProviderRateLimited,
    ProviderUnavailable,
)
from nutrisense.dependencies import build_providers
from nutrisense.services.dispatcher import ProviderDispatcher


def _request(tier: ModelTier = ModelTier.LIGHT, attachments=()) -> CompletionRequest:
    return CompletionRequest(
        tier=tier,
        system_prompt="system",
        messages=(PromptMessage(role="user", text="Sugar, Salt", attachments=attachments),),
    )


class StubProvider:
    def __init__(self, name: str, *, result: str | None = None, error: Exception | None = None) -> None:
        self.name = name
        self._result = result
        self._error = error
        self.calls: list[CompletionRequest] = []

    async def complete(self, request: CompletionRequest) -> str:
        self.calls.append(request)
        if self._error is not None:
            raise self._error
        return self._result or ""


@pytest.mark.asyncio
async def test_primary_success_skips_secondary() -> None:
    primary = StubProvider("primary", result="primary answer")
    secondary = StubProvider("secondary", result="secondary answer")

    content = await ProviderDispatcher([primary, secondary]).dispatch(_request())

    assert content == "primary answer"
    assert secondary.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [ProviderRateLimited(), ProviderQuotaExceeded(), ProviderUnavailable("HTTP 503")],
)
async def test_primary_failure_falls_back_silently(error: Exception) -> None:
    primary = StubProvider("primary", error=error)
    secondary = StubProvider("secondary", result="secondary answer")

    content = await ProviderDispatcher([primary, secondary]).dispatch(_request())

    assert content == "secondary answer"
    assert len(primary.calls) == 1
    assert len(secondary.calls) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error", [ProviderRateLimited(), ProviderQuotaExceeded(), ProviderUnavailable()]
)
async def test_last_provider_failure_is_raised(error: Exception) -> None:
    dispatcher = ProviderDispatcher(
        [
            StubProvider("primary", error=ProviderUnavailable()),
            StubProvider("secondary", error=error),
        ]
    )

    with pytest.raises(type(error)):
        await dispatcher.dispatch(_request())


@pytest.mark.asyncio
async def test_unclassified_errors_are_not_swallowed() -> None:
    secondary = StubProvider("secondary", result="never used")
    dispatcher = ProviderDispatcher(
        [StubProvider("primary", error=KeyError("bug")), secondary]
    )

    with pytest.raises(KeyError):
        await dispatcher.dispatch(_request())
    assert secondary.calls == []


@pytest.mark.asyncio
async def test_no_providers_is_a_configuration_error() -> None:
    with pytest.raises(ConfigurationError):
        await ProviderDispatcher([]).dispatch(_request())


def test_build_providers_follows_configured_order_and_skips_missing_keys() -> None:
    settings = AppSettings(
        provider_order="gateway,gemini,unknown",
        gemini={"api_key": None},
        gateway={"api_key": "gateway-key"},
    )

    providers = build_providers(settings)

    assert [provider.name for provider in providers] == ["gateway"]


def _gateway(handler) -> AIGatewayProvider:
    settings = GatewaySettings(api_key="gateway-key", base_url="https://gateway.test/v1")
    return AIGatewayProvider(settings, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_gateway_builds_openai_style_request() -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json={"choices": [{"message": {"content": "{}"}}]})

    image = Attachment(kind="image", mime_type="image/png", data=b"png")
    content = await _gateway(handler).complete(
        _request(ModelTier.CAPABLE, attachments=(image,))
    )

    assert content == "{}"
    sent = captured[0]
    assert str(sent.url) == "https://gateway.test/v1/chat/completions"
    assert sent.headers["Authorization"] == "Bearer gateway-key"
    body = json.loads(sent.content)
    assert body["model"] == "google/gemini-2.5-pro"
    assert body["messages"][0] == {"role": "system", "content": "system"}
    parts = body["messages"][1]["content"]
    assert parts[0] == {"type": "text", "text": "Sugar, Salt"}
    expected_url = f"data:image/png;base64,{base64.b64encode(b'png').decode()}"
    assert parts[1]["image_url"]["url"] == expected_url


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status_code, error_type",
    [
        (429, ProviderRateLimited),
        (402, ProviderQuotaExceeded),
        (500, ProviderUnavailable),
        (401, ProviderUnavailable),
    ],
)
async def test_gateway_classifies_http_failures(status_code: int, error_type) -> None:
    provider = _gateway(lambda request: httpx.Response(status_code, json={"error": "x"}))

    with pytest.raises(error_type) as excinfo:
        await provider.complete(_request())

    assert excinfo.value.provider == "gateway"


@pytest.mark.asyncio
async def test_gateway_transport_failure_is_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    with pytest.raises(ProviderUnavailable):
        await _gateway(handler).complete(_request())


@pytest.mark.asyncio
async def test_gateway_empty_content_is_unavailable() -> None:
    provider = _gateway(
        lambda request: httpx.Response(200, json={"choices": [{"message": {"content": ""}}]})
    )

    with pytest.raises(ProviderUnavailable):
        await provider.complete(_request())
