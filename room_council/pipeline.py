"""Pipeline orchestration: insight round, then critique round, then synthesis."""

import logging
import time

from config.config_loader import PromptsConfig
from room_council.models import PipelineResult
from room_council.providers.base import AIProvider
from room_council.roles import ROSTER, Role
from room_council.rounds import run_critique_round, run_insight_round
from room_council.synthesis import synthesize

logger = logging.getLogger(__name__)


class CouncilPipeline:
    """Runs the three stages for a query with injected completion providers.

    Args:
        agent_provider: Used for every insight and critique call.
        lead_provider: Used for the single synthesis call.
        prompts: Prompt templates from config.
        roles: Agent roster, defaults to every Role. Agent ids are positions in it.
    """

    def __init__(
        self,
        agent_provider: AIProvider,
        lead_provider: AIProvider,
        prompts: PromptsConfig,
        roles: tuple[Role, ...] = ROSTER,
    ) -> None:
        self.agent_provider = agent_provider
        self.lead_provider = lead_provider
        self.prompts = prompts
        self.roles = roles

    async def run(self, query: str) -> PipelineResult:
        """Run all stages. Stage failures degrade content, they never raise.

        Raises:
            ValueError: If the query is empty.
        """
        if not query or not query.strip():
            raise ValueError("Query must be a non-empty string")

        start = time.monotonic()

        insights = await run_insight_round(self.agent_provider, self.prompts, query, self.roles)
        critiques = await run_critique_round(self.agent_provider, self.prompts, query, insights, self.roles)

        logger.info("Starting synthesis")
        synthesis = await synthesize(query, insights, critiques, self.lead_provider, self.prompts)

        result = PipelineResult(
            query=query,
            insights=insights,
            critiques=critiques,
            final_output=synthesis.content,
            synthesis_ok=synthesis.ok,
            total_duration_sec=time.monotonic() - start,
        )
        if result.degraded:
            logger.warning("Pipeline finished degraded in %.1fs", result.total_duration_sec)
        else:
            logger.info("Pipeline finished in %.1fs", result.total_duration_sec)
        return result
