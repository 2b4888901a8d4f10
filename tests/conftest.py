"""Shared pytest fixtures."""

from collections.abc import Callable
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from config.config_loader import AppConfig, DefaultsConfig, ModelConfig, PromptsConfig, ServerConfig
from room_council.models import AgentResponse, ModelResponse, PipelineResult
from room_council.providers.base import AIProvider
from room_council.roles import ROSTER

LIVING_ROOM_QUERY = "How can I design a minimalist yet cozy living room?"


@pytest.fixture
def sample_model_config() -> ModelConfig:
    return ModelConfig(
        name="agent",
        sdk="anthropic",
        model="test-model-1",
        api_key_env="TEST_API_KEY",
        timeout_sec=30,
        max_tokens=300,
        base_url=None,
    )


@pytest.fixture
def sample_prompts_config() -> PromptsConfig:
    return PromptsConfig(
        insight="INSIGHT STAGE. {agent_count} agents. Role: {role}. Under {word_limit} words.",
        critique="CRITIQUE STAGE. {agent_count} agents. Role: {role}.\n{other_insights}\nUnder {word_limit} words.",
        synthesis="SYNTHESIS STAGE. {agent_count} agents. Query: {query}\n{insights}\n{critiques}",
        critique_user="Original Query: {query}",
        synthesis_user="Please synthesize and tailor the room.",
        word_limit=150,
    )


@pytest.fixture
def sample_app_config(tmp_path: Path, sample_prompts_config: PromptsConfig) -> AppConfig:
    agent = ModelConfig(
        name="agent",
        sdk="anthropic",
        model="claude-3-5-haiku-20241022",
        api_key_env="ANTHROPIC_API_KEY",
        timeout_sec=60,
        max_tokens=300,
    )
    lead = ModelConfig(
        name="lead",
        sdk="anthropic",
        model="claude-3-5-sonnet-20240620",
        api_key_env="ANTHROPIC_API_KEY",
        timeout_sec=120,
        max_tokens=1000,
    )
    return AppConfig(
        defaults=DefaultsConfig(output_dir=tmp_path / "output"),
        server=ServerConfig(),
        models={"agent": agent, "lead": lead},
        prompts=sample_prompts_config,
        available_providers={"agent", "lead"},
    )


@pytest.fixture
def sample_insights() -> list[AgentResponse]:
    return [
        AgentResponse(agent_id=i, role=role.label, content=f"{role.label} insight text")
        for i, role in enumerate(ROSTER)
    ]


@pytest.fixture
def sample_critiques() -> list[AgentResponse]:
    return [
        AgentResponse(agent_id=i, role=role.label, content=f"{role.label} critique text")
        for i, role in enumerate(ROSTER)
    ]


@pytest.fixture
def sample_result(sample_insights, sample_critiques) -> PipelineResult:
    return PipelineResult(
        query=LIVING_ROOM_QUERY,
        insights=sample_insights,
        critiques=sample_critiques,
        final_output="## Executive Summary\nLight and warm.\n\n## Your Tailored Room\nA soft rug.",
        total_duration_sec=4.2,
    )


def _response(name: str, content: str) -> ModelResponse:
    return ModelResponse(provider=name, model="mock-model", content=content, latency_sec=0.1, token_count=10)


class MockProvider(AIProvider):
    """Test double AIProvider."""

    def __init__(self, provider_name: str = "mock", response_content: str = "Mock response") -> None:
        self._name = provider_name
        self._response_content = response_content
        # Shadow the class method with an AsyncMock at the instance level.
        # ABC check passes because generate is defined in the class body below.
        self.generate = AsyncMock(  # type: ignore[assignment]
            return_value=_response(provider_name, response_content)
        )

    def name(self) -> str:
        return self._name

    def model_string(self) -> str:
        return "mock-model"

    async def generate(self, system_prompt: str, prompt: str) -> ModelResponse:  # type: ignore[override]
        """Default implementation; replaced by AsyncMock in __init__."""
        return _response(self._name, self._response_content)


class RecordingProvider(AIProvider):
    """Records every (system_prompt, prompt) pair in call order.

    The reply comes from ``responder(system_prompt, prompt)``; an exception
    raised by the responder propagates like a failed API call.
    """

    def __init__(
        self,
        provider_name: str = "recorder",
        responder: Callable[[str, str], str] | None = None,
    ) -> None:
        self._name = provider_name
        self._responder = responder or (lambda system_prompt, prompt: f"reply to: {prompt}")
        self.calls: list[tuple[str, str]] = []

    def name(self) -> str:
        return self._name

    def model_string(self) -> str:
        return f"{self._name}-model"

    async def generate(self, system_prompt: str, prompt: str) -> ModelResponse:
        self.calls.append((system_prompt, prompt))
        return _response(self._name, self._responder(system_prompt, prompt))


def role_of(system_prompt: str) -> str:
    """Pull the role label out of a prompt rendered from the sample templates."""
    for role in ROSTER:
        if f"Role: {role.instruction}" in system_prompt:
            return role.label
    raise AssertionError(f"No role found in prompt: {system_prompt[:80]}")


def stage_of(system_prompt: str) -> str:
    return system_prompt.split(" STAGE", 1)[0].lower()


def stage_aware_reply(system_prompt: str, prompt: str) -> str:
    """Distinct, traceable content per stage and role."""
    stage = stage_of(system_prompt)
    if stage not in ("insight", "critique", "synthesis"):
        return "OK"
    if stage == "synthesis":
        return "## Executive Summary\nCalm palette.\n\n## Your Tailored Room\nLinen sofa, warm lamps."
    return f"<{stage} from {role_of(system_prompt)}>"


@pytest.fixture
def mock_provider() -> MockProvider:
    return MockProvider()


@pytest.fixture
def recording_agent() -> RecordingProvider:
    return RecordingProvider("agent", stage_aware_reply)


@pytest.fixture
def recording_lead() -> RecordingProvider:
    return RecordingProvider("lead", stage_aware_reply)
