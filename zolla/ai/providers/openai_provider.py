from __future__ import annotations

import logging
import os
from typing import Optional, Sequence

from openai import APIConnectionError, APIStatusError, AsyncOpenAI, OpenAIError

from zolla.ai.types import AIClientError, ChatMessage

logger = logging.getLogger(__name__)


def _looks_like_placeholder(value: str) -> bool:
    lower = value.strip().lower()
    return lower.startswith("your_") or lower.startswith("replace_") or lower in {"changeme", "todo"}


class OpenAIProvider:
    def __init__(
        self,
        model: str,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_s: float = 60.0,
        max_retries: int = 0,
    ):
        self._model = model
        key = (api_key or os.getenv("OPENAI_API_KEY") or "").strip()
        if not key or _looks_like_placeholder(key):
            raise AIClientError("OpenAI API key not configured", code="llm_disabled")

        self._client = AsyncOpenAI(
            api_key=key,
            base_url=(base_url or os.getenv("OPENAI_BASE_URL") or None),
            timeout=float(os.getenv("OPENAI_TIMEOUT_S", str(timeout_s))),
            max_retries=int(os.getenv("OPENAI_MAX_RETRIES", str(max_retries))),
        )

    @property
    def model(self) -> str:
        return self._model

    async def complete(
        self, messages: Sequence[ChatMessage], *, temperature: float
    ) -> str:
        payload = [{"role": m.role, "content": m.content} for m in messages]
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=payload,
                temperature=temperature,
            )
        except APIStatusError as exc:
            logger.warning("openai_status_error model=%s status=%s", self._model, exc.status_code)
            raise AIClientError(f"OpenAI API error: {exc.message}", code="llm_http_error") from exc
        except APIConnectionError as exc:
            logger.warning("openai_connection_error model=%s: %s", self._model, exc)
            raise AIClientError("OpenAI API error: connection failed", code="llm_http_error") from exc
        except OpenAIError as exc:
            raise AIClientError(f"OpenAI API error: {exc}", code="llm_http_error") from exc

        content = response.choices[0].message.content if response.choices else ""
        return content or ""
