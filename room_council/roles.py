"""The fixed agent roster."""

from enum import Enum


class Role(Enum):
    """An agent persona. Declaration order is the roster order."""

    ANALYTICAL = ("Analytical", "Focus on facts, data, and logical structure.")
    CREATIVE = ("Creative", "Focus on innovative ideas, metaphors, and out-of-the-box thinking.")
    CRITICAL = ("Critical", "Focus on potential flaws, risks, and counter-arguments.")
    PRACTICAL = ("Practical", "Focus on actionable steps, implementation details, and feasibility.")

    def __init__(self, label: str, focus: str) -> None:
        self.label = label
        self.focus = focus

    @property
    def instruction(self) -> str:
        """Full role text used inside prompts, e.g. 'Critical: Focus on ...'."""
        return f"{self.label}: {self.focus}"


ROSTER: tuple[Role, ...] = tuple(Role)
