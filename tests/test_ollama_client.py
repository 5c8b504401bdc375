"""Tests for the Ollama HTTP client, using httpx.MockTransport."""

import json

import httpx
import pytest

from inkpolish.core.providers import (
    BUILTIN_DESCRIPTORS,
    OllamaClient,
    ProviderConnectionError,
    ProviderHTTPError,
    ProviderResponseError,
    ProviderTarget,
    ProviderTimeoutError,
)

OLLAMA = next(d for d in BUILTIN_DESCRIPTORS if d.kind == "ollama")


def make_target(model: str = "mistral") -> ProviderTarget:
    return ProviderTarget(descriptor=OLLAMA, base_url="http://ollama.test/", model=model)


def make_client(handler) -> OllamaClient:
    return OllamaClient(timeout=5.0, transport=httpx.MockTransport(handler))


class TestCheckConnection:
    @pytest.mark.asyncio
    async def test_reachable(self):
        def handler(request):
            assert request.url.path == "/"
            return httpx.Response(200, text="Ollama is running")

        assert await make_client(handler).check_connection(make_target()) is True

    @pytest.mark.asyncio
    async def test_error_status_is_unreachable(self):
        client = make_client(lambda request: httpx.Response(503))
        assert await client.check_connection(make_target()) is False

    @pytest.mark.asyncio
    async def test_connection_refused_is_unreachable(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        assert await make_client(handler).check_connection(make_target()) is False


class TestListModels:
    @pytest.mark.asyncio
    async def test_parses_model_names(self):
        def handler(request):
            assert request.method == "GET"
            assert request.url.path == "/api/tags"
            return httpx.Response(
                200,
                json={"models": [{"name": "mistral:latest"}, {"name": "llama3"}, {"size": 1}]},
            )

        models = await make_client(handler).list_models(make_target())
        assert models == ["mistral:latest", "llama3"]

    @pytest.mark.asyncio
    async def test_unexpected_shape_raises(self):
        client = make_client(lambda request: httpx.Response(200, json={"tags": []}))

        with pytest.raises(ProviderResponseError):
            await client.list_models(make_target())


class TestGenerate:
    @pytest.mark.asyncio
    async def test_sends_non_streaming_payload(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"response": "Polished.", "done": True})

        result = await make_client(handler).generate(
            make_target("llama3"), "raw text", "be nice"
        )

        assert result == "Polished."
        assert seen["path"] == "/api/generate"
        assert seen["body"] == {
            "model": "llama3",
            "prompt": "raw text",
            "system": "be nice",
            "stream": False,
        }

    @pytest.mark.asyncio
    async def test_missing_response_field_raises(self):
        client = make_client(lambda request: httpx.Response(200, json={"done": True}))

        with pytest.raises(ProviderResponseError):
            await client.generate(make_target(), "text", "system")

    @pytest.mark.asyncio
    async def test_malformed_json_raises(self):
        client = make_client(lambda request: httpx.Response(200, text="<html>"))

        with pytest.raises(ProviderResponseError, match="malformed JSON"):
            await client.generate(make_target(), "text", "system")

    @pytest.mark.asyncio
    async def test_missing_model_suggests_pull(self):
        client = make_client(
            lambda request: httpx.Response(404, json={"error": "model 'phi9' not found"})
        )

        with pytest.raises(ProviderHTTPError) as exc_info:
            await client.generate(make_target("phi9"), "text", "system")

        assert exc_info.value.status_code == 404
        assert "Pull it first" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_server_error_includes_detail(self):
        client = make_client(
            lambda request: httpx.Response(500, json={"error": "out of memory"})
        )

        with pytest.raises(ProviderHTTPError, match="out of memory"):
            await client.generate(make_target(), "text", "system")

    @pytest.mark.asyncio
    async def test_connection_refused(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(ProviderConnectionError, match="Make sure Ollama is running"):
            await make_client(handler).generate(make_target(), "text", "system")

    @pytest.mark.asyncio
    async def test_read_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(ProviderTimeoutError):
            await make_client(handler).generate(make_target(), "text", "system")


@pytest.mark.asyncio
async def test_verify_api_key_always_succeeds():
    client = make_client(lambda request: httpx.Response(500))
    assert await client.verify_api_key(make_target()) is True
