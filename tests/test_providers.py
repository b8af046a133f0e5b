import asyncio
from contextlib import asynccontextmanager

import pytest
from aiohttp import web
from aiohttp import test_utils

from askbot.providers import AnthropicProvider, EchoProvider, OpenAIProvider
from conftest import MockProvider


@asynccontextmanager
async def vendor_server(handler):
    """Run a fake vendor API answering every POST with ``handler``."""
    received = []

    async def recording_handler(request: web.Request) -> web.StreamResponse:
        received.append({
            "path": request.path,
            "headers": dict(request.headers),
            "json": await request.json(),
        })
        return await handler(request)

    app = web.Application()
    app.router.add_post("/v1/completions", recording_handler)
    app.router.add_post("/v1/messages", recording_handler)
    server = test_utils.TestServer(app)
    await server.start_server()
    try:
        yield server, received
    finally:
        await server.close()


def json_handler(body, status=200):
    async def handler(request):
        return web.json_response(body, status=status)
    return handler


@pytest.mark.asyncio
async def test_openai_sends_prompt_and_token_budget() -> None:
    handler = json_handler({"choices": [{"text": "\n\n4 "}]})
    async with vendor_server(handler) as (server, received):
        provider = OpenAIProvider(
            api_key="sk-test",
            endpoint=str(server.make_url("/v1/completions")),
        )
        try:
            response = await provider.get_response("What is 2+2?")
        finally:
            await provider.close()

    assert response.ok
    assert response.text == "4"
    assert response.provider == "openai"
    request = received[0]
    assert request["headers"]["Authorization"] == "Bearer sk-test"
    assert request["json"] == {
        "model": "gpt-3.5-turbo-instruct",
        "prompt": "What is 2+2?",
        "max_tokens": 150,
    }


@pytest.mark.asyncio
async def test_openai_non_2xx_is_failure() -> None:
    handler = json_handler({"error": {"message": "boom"}}, status=500)
    async with vendor_server(handler) as (server, _):
        provider = OpenAIProvider(
            api_key="sk-test", endpoint=str(server.make_url("/v1/completions"))
        )
        try:
            response = await provider.get_response("hello")
        finally:
            await provider.close()

    assert not response.ok
    assert response.text is None
    assert "500" in response.error


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [401, 403, 429])
async def test_openai_auth_and_rate_limit_are_failures(status) -> None:
    async with vendor_server(json_handler({}, status=status)) as (server, _):
        provider = OpenAIProvider(
            api_key="bad", endpoint=str(server.make_url("/v1/completions"))
        )
        try:
            response = await provider.get_response("hello")
        finally:
            await provider.close()

    assert not response.ok


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [
    {"choices": []},
    {"unexpected": True},
    {"choices": [{"no_text": 1}]},
    {"choices": [{"text": "   "}]},
    {"choices": [{"text": 5}]},
    {"choices": [{"text": ["a", "list"]}]},
    ["not", "an", "object"],
])
async def test_openai_unexpected_shapes_are_failures(body) -> None:
    async with vendor_server(json_handler(body)) as (server, _):
        provider = OpenAIProvider(
            api_key="sk-test", endpoint=str(server.make_url("/v1/completions"))
        )
        try:
            response = await provider.get_response("hello")
        finally:
            await provider.close()

    assert not response.ok
    assert response.error


@pytest.mark.asyncio
async def test_openai_non_json_body_is_failure() -> None:
    async def handler(request):
        return web.Response(text="<html>gateway</html>", content_type="text/html")

    async with vendor_server(handler) as (server, _):
        provider = OpenAIProvider(
            api_key="sk-test", endpoint=str(server.make_url("/v1/completions"))
        )
        try:
            response = await provider.get_response("hello")
        finally:
            await provider.close()

    assert not response.ok


@pytest.mark.asyncio
async def test_connection_error_is_failure() -> None:
    provider = OpenAIProvider(api_key="sk-test", endpoint="http://127.0.0.1:1/v1/completions")
    try:
        response = await provider.get_response("hello")
    finally:
        await provider.close()

    assert not response.ok
    assert "Request failed" in response.error


@pytest.mark.asyncio
async def test_timeout_is_failure() -> None:
    async def slow_handler(request):
        await asyncio.sleep(1)
        return web.json_response({"choices": [{"text": "late"}]})

    async with vendor_server(slow_handler) as (server, _):
        provider = OpenAIProvider(
            api_key="sk-test",
            endpoint=str(server.make_url("/v1/completions")),
            timeout=0.1,
        )
        try:
            response = await provider.get_response("hello")
        finally:
            await provider.close()

    assert not response.ok
    assert response.error == "Request timed out"


@pytest.mark.asyncio
async def test_anthropic_messages_request() -> None:
    body = {"content": [
        {"type": "text", "text": "Bonjour"},
        {"type": "tool_use", "id": "x"},
        {"type": "text", "text": " le monde"},
    ]}
    async with vendor_server(json_handler(body)) as (server, received):
        provider = AnthropicProvider(
            api_key="ak-test",
            model="claude-test",
            max_tokens=64,
            endpoint=str(server.make_url("/v1/messages")),
        )
        try:
            response = await provider.get_response("Salut")
        finally:
            await provider.close()

    assert response.text == "Bonjour le monde"
    assert response.provider == "anthropic"
    request = received[0]
    assert request["headers"]["x-api-key"] == "ak-test"
    assert request["headers"]["anthropic-version"] == "2023-06-01"
    assert request["json"] == {
        "model": "claude-test",
        "max_tokens": 64,
        "messages": [{"role": "user", "content": "Salut"}],
    }


@pytest.mark.asyncio
async def test_anthropic_missing_content_is_failure() -> None:
    async with vendor_server(json_handler({"type": "error"})) as (server, _):
        provider = AnthropicProvider(
            api_key="ak-test", endpoint=str(server.make_url("/v1/messages"))
        )
        try:
            response = await provider.get_response("Salut")
        finally:
            await provider.close()

    assert not response.ok


@pytest.mark.asyncio
async def test_echo_provider_needs_no_network() -> None:
    provider = EchoProvider(label="Anthropic")
    response = await provider.get_response("Quelle heure est-il ?")
    assert response.ok
    assert response.text == "Réponse de Anthropic pour: Quelle heure est-il ?"
    await provider.close()


def test_provider_defaults() -> None:
    openai = OpenAIProvider(api_key="k")
    anthropic = AnthropicProvider(api_key="k")
    assert openai.endpoint == "https://api.openai.com/v1/completions"
    assert anthropic.endpoint == "https://api.anthropic.com/v1/messages"
    assert openai.max_tokens == 150
    assert openai.api_key == "k"


@pytest.mark.asyncio
async def test_provider_errors_from_subclass_are_contained() -> None:
    provider = MockProvider(error=KeyError("choices"))
    response = await provider.get_response("hello")
    assert not response.ok
    assert provider.prompts == ["hello"]


@pytest.mark.asyncio
async def test_empty_completion_is_failure() -> None:
    response = await MockProvider(answer="").get_response("hello")
    assert not response.ok
    assert response.error == "Empty completion"


@pytest.mark.asyncio
async def test_undecodable_error_body_is_failure() -> None:
    async def handler(request):
        return web.Response(body=b"\xff\xfe bad", status=502, charset="utf-8")

    async with vendor_server(handler) as (server, _):
        provider = OpenAIProvider(
            api_key="sk-test", endpoint=str(server.make_url("/v1/completions"))
        )
        try:
            response = await provider.get_response("hello")
        finally:
            await provider.close()

    assert not response.ok
    assert "502" in response.error


@pytest.mark.asyncio
async def test_undecodable_success_body_is_failure() -> None:
    async def handler(request):
        return web.Response(body=b"\xff\xfe{}", status=200, charset="utf-8")

    async with vendor_server(handler) as (server, _):
        provider = OpenAIProvider(
            api_key="sk-test", endpoint=str(server.make_url("/v1/completions"))
        )
        try:
            response = await provider.get_response("hello")
        finally:
            await provider.close()

    assert not response.ok


@pytest.mark.asyncio
async def test_non_text_completion_is_failure() -> None:
    response = await MockProvider(answer={"text": "4"}).get_response("hello")
    assert not response.ok
    assert response.error.startswith("Unexpected response")
