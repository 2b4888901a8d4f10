"""Connectivity check for the two model entries a pipeline depends on."""

import asyncio
import logging
from dataclasses import dataclass

from room_council.pipeline import CouncilPipeline
from room_council.providers.base import AIProvider

logger = logging.getLogger(__name__)

_PING_SYSTEM = "You are the {entry} model of a room design council. This is a connectivity check."
_PING_PROMPT = "Reply with the word OK only."
_TIMEOUT_SEC = 15.0


@dataclass
class ProviderStatus:
    """Outcome of pinging one model entry ("agent" or "lead")."""

    entry: str
    model: str
    ok: bool
    latency_sec: float | None = None
    error: str = ""


async def _ping(entry: str, provider: AIProvider) -> ProviderStatus:
    try:
        response = await asyncio.wait_for(
            provider.generate(_PING_SYSTEM.format(entry=entry), _PING_PROMPT),
            timeout=_TIMEOUT_SEC,
        )
    except Exception as exc:
        logger.debug("Health check failed for %s (%s): %s", entry, provider.model_string(), exc)
        return ProviderStatus(entry, provider.model_string(), ok=False, error=str(exc) or type(exc).__name__)
    return ProviderStatus(entry, provider.model_string(), ok=True, latency_sec=response.latency_sec)


async def check_pipeline(pipeline: CouncilPipeline) -> list[ProviderStatus]:
    """Ping the agent and lead providers in parallel.

    The agent entry serves every insight and critique call, so a failure there
    degrades all 2N agent slots; a lead failure degrades only the synthesis.

    Returns:
        One status per entry, agent first.
    """
    statuses = await asyncio.gather(
        _ping("agent", pipeline.agent_provider),
        _ping("lead", pipeline.lead_provider),
    )
    return list(statuses)
