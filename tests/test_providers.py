"""Tests for the Anthropic and OpenAI providers with stubbed SDK clients."""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from config.config_loader import ModelConfig
from room_council.providers.anthropic import AnthropicProvider
from room_council.providers.base import EmptyResponseError, ProviderError
from room_council.providers.openai_provider import OpenAIProvider


@pytest.fixture
def model_config(sample_model_config, monkeypatch) -> ModelConfig:
    monkeypatch.setenv(sample_model_config.api_key_env, "sk-test")
    return sample_model_config


def _anthropic_with(model_config: ModelConfig, create: AsyncMock) -> AnthropicProvider:
    provider = AnthropicProvider(model_config)
    provider._client = MagicMock()
    provider._client.messages.create = create
    return provider


def _anthropic_message(*blocks):
    return SimpleNamespace(
        content=list(blocks),
        usage=SimpleNamespace(input_tokens=12, output_tokens=30),
    )


def test_missing_api_key_raises(sample_model_config, monkeypatch):
    monkeypatch.delenv(sample_model_config.api_key_env, raising=False)
    with pytest.raises(ProviderError, match="Missing API key"):
        AnthropicProvider(sample_model_config)
    with pytest.raises(ProviderError, match="Missing API key"):
        OpenAIProvider(sample_model_config)


async def test_anthropic_uses_first_text_block(model_config):
    create = AsyncMock(return_value=_anthropic_message(
        SimpleNamespace(type="tool_use", id="t1"),
        SimpleNamespace(type="text", text="First text."),
        SimpleNamespace(type="text", text="Second text."),
    ))
    provider = _anthropic_with(model_config, create)

    response = await provider.generate("You are Analytical.", "Cozy room?")

    assert response.content == "First text."
    assert response.token_count == 42
    assert response.provider == "agent"
    kwargs = create.call_args.kwargs
    assert kwargs["system"] == "You are Analytical."
    assert kwargs["messages"] == [{"role": "user", "content": "Cozy room?"}]
    assert kwargs["max_tokens"] == model_config.max_tokens
    assert kwargs["model"] == model_config.model


async def test_anthropic_no_text_block_is_empty_response(model_config):
    create = AsyncMock(return_value=_anthropic_message(SimpleNamespace(type="tool_use", id="t1")))
    provider = _anthropic_with(model_config, create)

    with pytest.raises(EmptyResponseError):
        await provider.generate("s", "p")


async def test_anthropic_blank_first_text_block_is_empty_response(model_config):
    """A blank first text block is not skipped in favour of a later one."""
    create = AsyncMock(return_value=_anthropic_message(
        SimpleNamespace(type="text", text=""),
        SimpleNamespace(type="text", text="real text"),
    ))
    provider = _anthropic_with(model_config, create)

    with pytest.raises(EmptyResponseError, match="No text in first text block"):
        await provider.generate("s", "p")


async def test_anthropic_api_error_wrapped(model_config):
    provider = _anthropic_with(model_config, AsyncMock(side_effect=ConnectionError("reset")))

    with pytest.raises(ProviderError, match="API call failed: reset"):
        await provider.generate("s", "p")


async def test_anthropic_timeout_wrapped(model_config):
    async def hang(**kwargs):
        await asyncio.sleep(9999)

    model_config.timeout_sec = 0.05
    provider = _anthropic_with(model_config, AsyncMock(side_effect=hang))

    with pytest.raises(ProviderError, match="timed out"):
        await provider.generate("s", "p")


async def test_openai_sends_system_message(model_config):
    completion = SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content="Warm lamps."))],
        usage=SimpleNamespace(total_tokens=17),
    )
    provider = OpenAIProvider(model_config)
    provider._client = MagicMock()
    provider._client.chat.completions.create = AsyncMock(return_value=completion)

    response = await provider.generate("You are Creative.", "Cozy room?")

    assert response.content == "Warm lamps."
    assert response.token_count == 17
    messages = provider._client.chat.completions.create.call_args.kwargs["messages"]
    assert messages == [
        {"role": "system", "content": "You are Creative."},
        {"role": "user", "content": "Cozy room?"},
    ]


async def test_openai_empty_choice_is_empty_response(model_config):
    provider = OpenAIProvider(model_config)
    provider._client = MagicMock()
    provider._client.chat.completions.create = AsyncMock(
        return_value=SimpleNamespace(choices=[], usage=None)
    )

    with pytest.raises(EmptyResponseError):
        await provider.generate("s", "p")
