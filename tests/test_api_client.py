try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import base64
import json

import httpx
import pytest

from nutrisense.clients import nutrisense_api
from nutrisense.clients.nutrisense_api import NutriSenseApiClient, NutriSenseApiError
from nutrisense.schemas import AnalysisRecord


@pytest.fixture(autouse=True)
def no_backoff(monkeypatch):
    real_call_with_retry = nutrisense_api.call_with_retry

    async def _no_sleep(delay: float) -> None:
        return None

    async def _call(operation, *, retry_config=None):
        return await real_call_with_retry(
            operation, retry_config=retry_config, sleep=_no_sleep
        )

    monkeypatch.setattr(nutrisense_api, "call_with_retry", _call)


class ScriptedTransport:
    def __init__(self, responses: list[httpx.Response]) -> None:
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responses.pop(0)

    def client(self) -> NutriSenseApiClient:
        return NutriSenseApiClient(
            "http://nutrisense.test/", transport=httpx.MockTransport(self)
        )


@pytest.mark.asyncio
async def test_analyze_text_retries_transient_failure(well_formed_analysis: dict) -> None:
    transport = ScriptedTransport(
        [
            httpx.Response(503, text="upstream down"),
            httpx.Response(200, json=well_formed_analysis),
        ]
    )

    record = await transport.client().analyze_text("Organic Apples", question="Safe?")

    assert isinstance(record, AnalysisRecord)
    assert record.product_name == "Organic Apple Cinnamon Bar"
    assert len(transport.requests) == 2
    sent = json.loads(transport.requests[-1].content)
    assert sent == {"ingredients": "Organic Apples", "type": "text", "userQuery": "Safe?"}
    assert str(transport.requests[-1].url) == "http://nutrisense.test/api/analyze-ingredients"


@pytest.mark.asyncio
async def test_validation_error_is_raised_without_retry() -> None:
    transport = ScriptedTransport(
        [httpx.Response(400, json={"error": "Ingredients text cannot be empty"})]
    )

    with pytest.raises(NutriSenseApiError) as excinfo:
        await transport.client().analyze_text("   ")

    assert excinfo.value.status_code == 400
    assert str(excinfo.value) == "Ingredients text cannot be empty"
    assert len(transport.requests) == 1


@pytest.mark.asyncio
async def test_chat_budget_is_two_attempts(well_formed_analysis: dict) -> None:
    transport = ScriptedTransport(
        [
            httpx.Response(400, json={"error": "Chat failed. Please try again."}),
            httpx.Response(400, json={"error": "Chat failed. Please try again."}),
        ]
    )
    analysis = AnalysisRecord.model_validate(well_formed_analysis)

    with pytest.raises(NutriSenseApiError, match="Chat failed"):
        await transport.client().chat("Why?", analysis=analysis)

    assert len(transport.requests) == 2
    sent = json.loads(transport.requests[0].content)
    assert sent["analysisContext"]["productName"] == "Organic Apple Cinnamon Bar"
    assert sent["conversationHistory"] == []


@pytest.mark.asyncio
async def test_analyze_image_sends_data_url(tmp_path, well_formed_analysis: dict) -> None:
    image = tmp_path / "label.png"
    image.write_bytes(b"png-bytes")
    transport = ScriptedTransport([httpx.Response(200, json=well_formed_analysis)])

    await transport.client().analyze_image(image)

    sent = json.loads(transport.requests[0].content)
    assert sent["type"] == "image"
    expected = base64.b64encode(b"png-bytes").decode("ascii")
    assert sent["imageBase64"] == f"data:image/png;base64,{expected}"


@pytest.mark.asyncio
async def test_transcribe_and_share_return_fields(well_formed_analysis: dict) -> None:
    transport = ScriptedTransport(
        [
            httpx.Response(200, json={"text": "Sugar, salt"}),
            httpx.Response(201, json={"shareCode": "0123456789ab"}),
        ]
    )
    client = transport.client()

    text = await client.transcribe(b"audio")
    share_code = await client.share(AnalysisRecord.model_validate(well_formed_analysis))

    assert text == "Sugar, salt"
    assert share_code == "0123456789ab"
    assert json.loads(transport.requests[0].content) == {
        "audioBase64": base64.b64encode(b"audio").decode("ascii")
    }
