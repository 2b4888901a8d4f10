"""Abstract base for all completion providers."""

from abc import ABC, abstractmethod

from room_council.models import ModelResponse


class ProviderError(Exception):
    """Raised when a provider call fails."""

    def __init__(self, provider_name: str, message: str) -> None:
        self.provider_name = provider_name
        super().__init__(f"[{provider_name}] {message}")


class EmptyResponseError(ProviderError):
    """Raised when a call succeeds but carries no usable text."""


class AIProvider(ABC):
    """Abstract base for all completion providers."""

    @abstractmethod
    def name(self) -> str:
        """Return the config entry name (e.g. 'agent', 'lead')."""
        ...

    @abstractmethod
    def model_string(self) -> str:
        """Return the actual model identifier string."""
        ...

    @abstractmethod
    async def generate(self, system_prompt: str, prompt: str) -> ModelResponse:
        """Run one completion.

        Args:
            system_prompt: Instruction framing the call (role, task, context).
            prompt: The user message.

        Returns:
            ModelResponse dataclass with content and metadata.

        Raises:
            EmptyResponseError: When the response holds no text block.
            ProviderError: On API failure or timeout.
        """
        ...
