"""Tests for the completion provider backends."""

import json

import httpx
import pytest

from research_mcp.config.research import ResearchConfig
from research_mcp.core.errors.llm import (
    AuthenticationError,
    InvalidRequestError,
    LLMError,
    ProviderNotConfiguredError,
    RateLimitError,
)
from research_mcp.core.providers import (
    AnthropicProvider,
    OpenAICompatibleProvider,
    create_completion_provider,
)


def _openai_reply(text: str) -> dict:
    return {
        "model": "gpt-4o-2024",
        "choices": [{"message": {"role": "assistant", "content": text}}],
        "usage": {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15},
    }


class TestOpenAICompatibleProvider:
    """Tests for OpenAICompatibleProvider."""

    async def test_complete_sends_chat_request(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = str(request.url)
            captured["auth"] = request.headers["authorization"]
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json=_openai_reply("hello"))

        provider = OpenAICompatibleProvider(
            api_key="sk-test",
            base_url="https://llm.example/v1/",
            model="gpt-4o",
            max_tokens=256,
            transport=httpx.MockTransport(handler),
        )
        response = await provider.complete("be brief", "say hi")
        await provider.close()

        assert captured["url"] == "https://llm.example/v1/chat/completions"
        assert captured["auth"] == "Bearer sk-test"
        assert captured["body"]["model"] == "gpt-4o"
        assert captured["body"]["max_tokens"] == 256
        assert captured["body"]["messages"] == [
            {"role": "system", "content": "be brief"},
            {"role": "user", "content": "say hi"},
        ]
        assert response.text == "hello"
        assert response.model == "gpt-4o-2024"
        assert response.usage.total_tokens == 15

    async def test_content_parts_are_joined(self):
        reply = _openai_reply("")
        reply["choices"][0]["message"]["content"] = [
            {"type": "text", "text": "part one"},
            {"type": "text", "text": "part two"},
        ]
        provider = OpenAICompatibleProvider(
            api_key="k",
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json=reply)),
        )
        response = await provider.complete("s", "u")
        assert response.text == "part one\npart two"

    async def test_initialize_requires_api_key(self):
        with pytest.raises(ProviderNotConfiguredError):
            await OpenAICompatibleProvider(api_key=None).initialize()

    @pytest.mark.parametrize(
        "status, error_type",
        [
            (401, AuthenticationError),
            (403, AuthenticationError),
            (429, RateLimitError),
            (400, InvalidRequestError),
            (500, LLMError),
        ],
    )
    async def test_http_errors_mapped(self, status, error_type):
        provider = OpenAICompatibleProvider(
            api_key="k",
            transport=httpx.MockTransport(
                lambda request: httpx.Response(status, json={"error": {"message": "nope"}})
            ),
        )
        with pytest.raises(error_type):
            await provider.complete("s", "u")

    async def test_server_error_is_retryable(self):
        provider = OpenAICompatibleProvider(
            api_key="k",
            transport=httpx.MockTransport(lambda request: httpx.Response(502, text="bad gateway")),
        )
        with pytest.raises(LLMError) as exc_info:
            await provider.complete("s", "u")
        assert exc_info.value.retryable is True

    async def test_no_choices_is_an_error(self):
        provider = OpenAICompatibleProvider(
            api_key="k",
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"choices": []})),
        )
        with pytest.raises(LLMError):
            await provider.complete("s", "u")


class TestAnthropicProvider:
    """Tests for AnthropicProvider."""

    async def test_complete_uses_messages_api(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = str(request.url)
            captured["headers"] = request.headers
            captured["body"] = json.loads(request.content)
            return httpx.Response(
                200,
                json={
                    "model": "claude-sonnet-4-5",
                    "content": [{"type": "text", "text": "Hello"}, {"type": "text", "text": " there"}],
                    "usage": {"input_tokens": 12, "output_tokens": 3},
                },
            )

        provider = AnthropicProvider(
            api_key="ak-test",
            base_url="https://api.anthropic.com/v1",
            transport=httpx.MockTransport(handler),
        )
        response = await provider.complete("system text", "user text")

        assert captured["url"] == "https://api.anthropic.com/v1/messages"
        assert captured["headers"]["x-api-key"] == "ak-test"
        assert captured["headers"]["anthropic-version"] == "2023-06-01"
        assert captured["body"]["system"] == "system text"
        assert captured["body"]["messages"] == [{"role": "user", "content": "user text"}]
        assert response.text == "Hello there"
        assert response.usage.total_tokens == 15


class TestCreateCompletionProvider:
    """Tests for backend selection from configuration."""

    def test_none_when_unconfigured(self):
        assert create_completion_provider(ResearchConfig()) is None

    def test_none_when_disabled(self):
        config = ResearchConfig(enabled=False, llm_provider="openai", llm_api_key="k")
        assert create_completion_provider(config) is None

    def test_openai(self):
        config = ResearchConfig(llm_provider="openai", llm_api_key="k")
        assert isinstance(create_completion_provider(config), OpenAICompatibleProvider)

    def test_anthropic(self):
        config = ResearchConfig(llm_provider="anthropic", llm_api_key="k")
        assert isinstance(create_completion_provider(config), AnthropicProvider)
