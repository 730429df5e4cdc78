from __future__ import annotations

import asyncio
import json
from typing import Any, Callable

import httpx
import pytest

from codegen_gateway.common.schema import GenerationJob, GenerationResult
from codegen_gateway.common.settings import Settings
from codegen_gateway.dispatch.dispatcher import Dispatcher
from codegen_gateway.dispatch.errors import (
    EmptyResultError,
    GenerationTimeoutError,
    ProviderError,
    UnexpectedGenerationError,
    UnsupportedModelError,
)
from codegen_gateway.dispatch.registry import build_registry

REGISTRY = build_registry(Settings(), env={"REPLICATE_API_KEY": "r8-test"})


def _dispatcher(handler: Callable[[httpx.Request], Any], timeout_s: float = 30.0) -> Dispatcher:
    return Dispatcher(REGISTRY, timeout_s=timeout_s, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_reverse_string_scenario() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"output": "def reverse(s): return s[::-1]"})

    job = GenerationJob(prompt="reverse a string", language="python", model="codellama")
    result = await _dispatcher(handler).generate(job)

    assert result == GenerationResult(code="def reverse(s): return s[::-1]", language="python")
    request = seen[0]
    assert str(request.url) == "https://api.replicate.com/v1/predictions"
    assert request.headers["Authorization"] == "Token r8-test"
    body = json.loads(request.content)
    assert body == {
        "prompt": "Write python code for: reverse a string\nOnly respond with code, no explanations.",
        "max_new_tokens": 1000,
        "temperature": 0.2,
        "top_p": 0.95,
    }


@pytest.mark.asyncio
async def test_each_provider_uses_its_transform() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if "huggingface" in request.url.host:
            return httpx.Response(200, json=[{"generated_text": "hf code"}])
        return httpx.Response(200, json={"output": {"text": "together code"}})

    dispatcher = _dispatcher(handler)
    starcoder = await dispatcher.generate(GenerationJob(prompt="p", model="starcoder"))
    wizard = await dispatcher.generate(GenerationJob(prompt="p", model="wizard-coder"))
    assert starcoder.code == "hf code"
    assert wizard.code == "together code"
    assert wizard.language == "javascript"


@pytest.mark.asyncio
async def test_unknown_model_is_unsupported() -> None:
    calls: list[httpx.Request] = []
    dispatcher = _dispatcher(lambda request: calls.append(request) or httpx.Response(200))
    with pytest.raises(UnsupportedModelError) as info:
        await dispatcher.generate(GenerationJob(prompt="p", model="unknown-model"))
    assert info.value.message == "Unsupported model: unknown-model"
    assert info.value.model == "unknown-model"
    assert calls == []


@pytest.mark.asyncio
async def test_provider_503_carries_status_and_body() -> None:
    dispatcher = _dispatcher(lambda request: httpx.Response(503, text="model is loading"))
    with pytest.raises(ProviderError) as info:
        await dispatcher.generate(GenerationJob(prompt="p"))
    assert info.value.status_code == 503
    assert "503" in info.value.message
    assert "model is loading" in info.value.message


@pytest.mark.asyncio
async def test_provider_error_without_body_uses_reason_phrase() -> None:
    dispatcher = _dispatcher(lambda request: httpx.Response(502))
    with pytest.raises(ProviderError) as info:
        await dispatcher.generate(GenerationJob(prompt="p"))
    assert info.value.message == "API request failed (502): Bad Gateway"


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [{"output": ""}, {"output": "   \n"}, {"unexpected": "shape"}])
async def test_empty_result(payload) -> None:
    dispatcher = _dispatcher(lambda request: httpx.Response(200, json=payload))
    with pytest.raises(EmptyResultError) as info:
        await dispatcher.generate(GenerationJob(prompt="p"))
    assert info.value.message == "Empty response from AI model"


@pytest.mark.asyncio
async def test_invalid_json_is_unexpected() -> None:
    dispatcher = _dispatcher(lambda request: httpx.Response(200, text="<html>oops</html>"))
    with pytest.raises(UnexpectedGenerationError, match="Invalid JSON"):
        await dispatcher.generate(GenerationJob(prompt="p"))


@pytest.mark.asyncio
async def test_network_failure_is_unexpected() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(UnexpectedGenerationError, match="connection refused"):
        await _dispatcher(handler).generate(GenerationJob(prompt="p"))


@pytest.mark.asyncio
async def test_transport_timeout_maps_to_timeout() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("read timed out", request=request)

    with pytest.raises(GenerationTimeoutError):
        await _dispatcher(handler).generate(GenerationJob(prompt="p"))


@pytest.mark.asyncio
async def test_slow_provider_times_out_and_is_cancelled() -> None:
    cancelled = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        try:
            await asyncio.sleep(5)
        except asyncio.CancelledError:
            cancelled.set()
            raise
        return httpx.Response(200, json={"output": "too late"})

    dispatcher = _dispatcher(handler, timeout_s=0.05)
    with pytest.raises(GenerationTimeoutError) as info:
        await dispatcher.generate(GenerationJob(prompt="p", model="codellama"))
    assert info.value.message == "Request to codellama API timed out after 0.05 seconds"
    assert cancelled.is_set()


def test_default_timeout_message_names_thirty_seconds() -> None:
    dispatcher = Dispatcher(REGISTRY)
    assert dispatcher.timeout_s == 30.0
    assert f"{dispatcher.timeout_s:g}" == "30"
