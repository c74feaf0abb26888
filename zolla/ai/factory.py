from zolla.ai.config import load_ai_config
from zolla.ai.types import AIClient, AIClientError

from zolla.ai.providers.openai_provider import OpenAIProvider


def get_ai_client() -> AIClient:
    cfg = load_ai_config()

    if cfg.provider == "openai":
        return OpenAIProvider(model=cfg.model)

    raise AIClientError(f"Unsupported AI_PROVIDER='{cfg.provider}'", code="llm_disabled")
