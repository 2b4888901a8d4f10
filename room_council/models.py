"""Dataclasses for the room council pipeline. No deps."""

from dataclasses import dataclass, field


@dataclass
class ModelResponse:
    provider: str          # config entry name: "agent" or "lead"
    model: str             # actual model string used
    content: str
    latency_sec: float
    token_count: int | None


@dataclass
class AgentResponse:
    agent_id: int
    role: str              # short label, e.g. "Analytical"
    content: str
    ok: bool = True        # False when content is a fallback string


@dataclass
class Synthesis:
    content: str
    ok: bool = True


@dataclass
class PipelineResult:
    query: str
    insights: list[AgentResponse] = field(default_factory=list)
    critiques: list[AgentResponse] = field(default_factory=list)
    final_output: str = ""
    synthesis_ok: bool = True
    total_duration_sec: float = 0.0

    @property
    def degraded(self) -> bool:
        return not (
            self.synthesis_ok
            and all(r.ok for r in self.insights)
            and all(r.ok for r in self.critiques)
        )
