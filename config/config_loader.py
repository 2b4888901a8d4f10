"""Load settings.yaml into typed dataclasses. Checks API keys at startup."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

_SETTINGS_PATH = Path(__file__).parent / "settings.yaml"

# Model entries the pipeline needs: one for the per-agent stages, one for synthesis.
REQUIRED_MODELS = ("agent", "lead")


@dataclass
class ModelConfig:
    name: str
    sdk: str
    model: str
    api_key_env: str
    timeout_sec: int
    max_tokens: int
    base_url: str | None = None


@dataclass
class PromptsConfig:
    insight: str
    critique: str
    synthesis: str
    critique_user: str = "Original Query: {query}"
    synthesis_user: str = "Please synthesize and tailor the room."
    word_limit: int = 150


@dataclass
class ServerConfig:
    host: str = "127.0.0.1"
    port: int = 3001
    cors_origins: list[str] = field(default_factory=list)


@dataclass
class DefaultsConfig:
    output_dir: Path


@dataclass
class AppConfig:
    defaults: DefaultsConfig
    server: ServerConfig
    models: dict[str, ModelConfig]
    prompts: PromptsConfig
    available_providers: set[str] = field(default_factory=set)

    @property
    def agent_model(self) -> ModelConfig:
        return self.models["agent"]

    @property
    def lead_model(self) -> ModelConfig:
        return self.models["lead"]


def load_config(settings_path: Path = _SETTINGS_PATH) -> AppConfig:
    """Load and validate configuration from settings.yaml.

    Raises FileNotFoundError if settings file missing, ValueError if the
    agent or lead model entry is absent. A missing API key is logged and its
    entry left out of available_providers; the CLI refuses to start then.
    """
    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    with settings_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    defaults_raw = raw.get("defaults", {})
    defaults = DefaultsConfig(
        output_dir=Path(defaults_raw.get("output_dir", "./output")),
    )

    server_raw = raw.get("server", {})
    server = ServerConfig(
        host=str(server_raw.get("host", "127.0.0.1")),
        # PORT from the environment wins, as with most hosting platforms
        port=int(os.environ.get("PORT", server_raw.get("port", 3001))),
        cors_origins=list(server_raw.get("cors_origins", [])),
    )

    prompts_raw = raw["prompts"]
    prompts = PromptsConfig(
        insight=prompts_raw["insight"],
        critique=prompts_raw["critique"],
        synthesis=prompts_raw["synthesis"],
        critique_user=prompts_raw.get("critique_user", "Original Query: {query}"),
        synthesis_user=prompts_raw.get("synthesis_user", "Please synthesize and tailor the room."),
        word_limit=int(prompts_raw.get("word_limit", 150)),
    )

    missing = [name for name in REQUIRED_MODELS if name not in raw.get("models", {})]
    if missing:
        raise ValueError(f"Settings must define models: {', '.join(missing)}")

    models: dict[str, ModelConfig] = {}
    available_providers: set[str] = set()

    for provider_name, model_raw in raw["models"].items():
        model_cfg = ModelConfig(
            name=provider_name,
            sdk=model_raw["sdk"],
            model=model_raw["model"],
            api_key_env=model_raw["api_key_env"],
            timeout_sec=int(model_raw["timeout_sec"]),
            max_tokens=int(model_raw["max_tokens"]),
            base_url=model_raw.get("base_url"),
        )
        models[provider_name] = model_cfg

        api_key = os.environ.get(model_raw["api_key_env"], "").strip()
        if api_key:
            available_providers.add(provider_name)
            logger.info("Provider available: %s (%s)", provider_name, model_cfg.model)
        else:
            logger.warning(
                "No API key for %s: set %s in .env",
                provider_name,
                model_raw["api_key_env"],
            )

    return AppConfig(
        defaults=defaults,
        server=server,
        models=models,
        prompts=prompts,
        available_providers=available_providers,
    )
