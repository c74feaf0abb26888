import os
from dataclasses import dataclass


@dataclass(frozen=True)
class AIConfig:
    provider: str
    model: str
    analysis_temperature: float
    generation_temperature: float


def load_ai_config() -> AIConfig:
    provider = os.getenv("AI_PROVIDER", "openai").strip().lower()
    model = os.getenv("AI_MODEL", "gpt-4o-mini").strip()
    return AIConfig(
        provider=provider,
        model=model,
        analysis_temperature=float(os.getenv("AI_ANALYSIS_TEMPERATURE", "0.0")),
        generation_temperature=float(os.getenv("AI_GENERATION_TEMPERATURE", "0.7")),
    )
