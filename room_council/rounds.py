"""Insight and critique rounds: one call per agent, fanned out in parallel."""

import asyncio
import logging

from config.config_loader import PromptsConfig
from room_council.models import AgentResponse
from room_council.providers.base import AIProvider, ProviderError
from room_council.roles import ROSTER, Role

logger = logging.getLogger(__name__)

INSIGHT_FALLBACK = "Error generating insight."
CRITIQUE_FALLBACK = "Error generating critique."


def _format_other_insights(insights: list[AgentResponse], exclude_id: int) -> str:
    """Label every insight by role, leaving out the caller's own."""
    return "\n\n".join(
        f"[Agent {r.role}]: {r.content}" for r in insights if r.agent_id != exclude_id
    )


async def _call_agent(
    provider: AIProvider,
    agent_id: int,
    role: Role,
    system_prompt: str,
    prompt: str,
    stage: str,
    fallback: str,
) -> AgentResponse:
    """Run one agent call. Never raises; failures become the fallback content."""
    try:
        response = await provider.generate(system_prompt, prompt)
    except ProviderError as exc:
        logger.warning("Agent %d (%s) %s failed: %s", agent_id, role.label, stage, exc)
        return AgentResponse(agent_id=agent_id, role=role.label, content=fallback, ok=False)
    except Exception as exc:
        logger.warning("Agent %d (%s) %s unexpected failure: %s", agent_id, role.label, stage, exc)
        return AgentResponse(agent_id=agent_id, role=role.label, content=fallback, ok=False)

    return AgentResponse(agent_id=agent_id, role=role.label, content=response.content)


async def generate_insight(
    provider: AIProvider,
    prompts: PromptsConfig,
    query: str,
    role: Role,
    agent_id: int,
    agent_count: int = len(ROSTER),
) -> AgentResponse:
    """One agent's independent take on the query."""
    system_prompt = prompts.insight.format(
        agent_count=agent_count,
        role=role.instruction,
        word_limit=prompts.word_limit,
    )
    return await _call_agent(provider, agent_id, role, system_prompt, query, "insight", INSIGHT_FALLBACK)


async def generate_critique(
    provider: AIProvider,
    prompts: PromptsConfig,
    query: str,
    insights: list[AgentResponse],
    role: Role,
    agent_id: int,
    agent_count: int = len(ROSTER),
) -> AgentResponse:
    """One agent's reaction to everyone else's insights."""
    system_prompt = prompts.critique.format(
        agent_count=agent_count,
        role=role.instruction,
        word_limit=prompts.word_limit,
        other_insights=_format_other_insights(insights, agent_id),
    )
    prompt = prompts.critique_user.format(query=query)
    return await _call_agent(provider, agent_id, role, system_prompt, prompt, "critique", CRITIQUE_FALLBACK)


def _log_round(stage: str, responses: list[AgentResponse]) -> None:
    succeeded = sum(1 for r in responses if r.ok)
    if succeeded < len(responses):
        logger.warning(
            "%s round degraded: only %d/%d agents responded",
            stage.capitalize(),
            succeeded,
            len(responses),
        )
    else:
        logger.info("%s round complete: %d/%d agents responded", stage.capitalize(), succeeded, len(responses))


async def run_insight_round(
    provider: AIProvider,
    prompts: PromptsConfig,
    query: str,
    roles: tuple[Role, ...] = ROSTER,
) -> list[AgentResponse]:
    """Launch every insight call, then wait for all.

    Agent ids are positions in ``roles`` (0..N-1); results follow that order.
    """
    logger.info("Starting insight round with %d agents", len(roles))
    responses = await asyncio.gather(
        *(generate_insight(provider, prompts, query, role, i, len(roles)) for i, role in enumerate(roles))
    )
    _log_round("insight", responses)
    return list(responses)


async def run_critique_round(
    provider: AIProvider,
    prompts: PromptsConfig,
    query: str,
    insights: list[AgentResponse],
    roles: tuple[Role, ...] = ROSTER,
) -> list[AgentResponse]:
    """Launch every critique call against the finished insights, then wait for all."""
    logger.info("Starting critique round with %d agents", len(roles))
    responses = await asyncio.gather(
        *(
            generate_critique(provider, prompts, query, insights, role, i, len(roles))
            for i, role in enumerate(roles)
        )
    )
    _log_round("critique", responses)
    return list(responses)
