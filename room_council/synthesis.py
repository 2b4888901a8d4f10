"""Final synthesis: fold insights and critiques into one lead call."""

import logging

from config.config_loader import PromptsConfig
from room_council.models import AgentResponse, Synthesis
from room_council.providers.base import AIProvider, EmptyResponseError, ProviderError

logger = logging.getLogger(__name__)

EMPTY_SUMMARY_FALLBACK = "Error generating summary."
SYNTHESIS_FALLBACK = "Error in synthesis process."


def _format_section(responses: list[AgentResponse], kind: str) -> str:
    return "\n\n".join(f"[Agent {r.role} {kind}]: {r.content}" for r in responses)


async def synthesize(
    query: str,
    insights: list[AgentResponse],
    critiques: list[AgentResponse],
    lead: AIProvider,
    prompts: PromptsConfig,
) -> Synthesis:
    """Run the lead call and return its text.

    Never raises: an empty response yields EMPTY_SUMMARY_FALLBACK, any other
    failure yields SYNTHESIS_FALLBACK, both with ok=False.
    """
    system_prompt = prompts.synthesis.format(
        agent_count=len(insights),
        query=query,
        insights=_format_section(insights, "Insight"),
        critiques=_format_section(critiques, "Critique"),
    )

    logger.info("Running synthesis via %s (%s)", lead.name(), lead.model_string())

    try:
        response = await lead.generate(system_prompt, prompts.synthesis_user)
    except EmptyResponseError as exc:
        logger.warning("Synthesis returned no text: %s", exc)
        return Synthesis(content=EMPTY_SUMMARY_FALLBACK, ok=False)
    except ProviderError as exc:
        logger.warning("Synthesis failed: %s", exc)
        return Synthesis(content=SYNTHESIS_FALLBACK, ok=False)
    except Exception as exc:
        logger.warning("Synthesis unexpected failure: %s", exc)
        return Synthesis(content=SYNTHESIS_FALLBACK, ok=False)

    if not response.content:
        logger.warning("Synthesizer %s returned empty content", lead.name())
        return Synthesis(content=EMPTY_SUMMARY_FALLBACK, ok=False)

    return Synthesis(content=response.content)
