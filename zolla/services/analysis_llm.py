from __future__ import annotations

import json
import logging
import re
import time
from typing import Sequence, TypeVar

from pydantic import BaseModel, ValidationError

from zolla.ai.config import load_ai_config
from zolla.ai.prompts import (
    build_analysis_messages,
    build_cover_letter_messages,
    build_tailored_resume_messages,
)
from zolla.ai.types import AIClient, AIClientError, ChatMessage
from zolla.schemas.analysis import AnalysisResult, CoverLetterResult, TailoredResumeResult

logger = logging.getLogger(__name__)

INVALID_RESPONSE_MESSAGE = "Invalid JSON response from AI. Please try again."

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")

ModelT = TypeVar("ModelT", bound=BaseModel)


def extract_json_from_markdown(text: str) -> str:
    match = _FENCE_RE.search(text or "")
    if match:
        return match.group(1).strip()
    return (text or "").strip()


def parse_json_reply(text: str, model: type[ModelT]) -> ModelT:
    clean = extract_json_from_markdown(text)
    try:
        payload = json.loads(clean)
        return model.model_validate(payload)
    except (ValueError, ValidationError) as exc:
        logger.warning("llm_reply_parse_failed model=%s reply_len=%s: %s", model.__name__, len(clean), exc)
        raise AIClientError(INVALID_RESPONSE_MESSAGE, code="invalid_response") from exc


async def _json_completion(
    client: AIClient,
    messages: Sequence[ChatMessage],
    *,
    temperature: float,
    model: type[ModelT],
    operation: str,
) -> ModelT:
    started = time.perf_counter()
    reply = await client.complete(messages, temperature=temperature)
    result = parse_json_reply(reply, model)
    logger.info(
        "llm_completion operation=%s reply_len=%s latency_ms=%s",
        operation,
        len(reply),
        int((time.perf_counter() - started) * 1000),
    )
    return result


async def analyze_resume(
    client: AIClient,
    resume_text: str,
    job_description: str,
    analysis_types: Sequence[str] = (),
) -> AnalysisResult:
    return await _json_completion(
        client,
        build_analysis_messages(resume_text, job_description, analysis_types),
        temperature=load_ai_config().analysis_temperature,
        model=AnalysisResult,
        operation="analyze_resume",
    )


async def generate_tailored_resume(client: AIClient, resume_text: str, job_description: str) -> TailoredResumeResult:
    return await _json_completion(
        client,
        build_tailored_resume_messages(resume_text, job_description),
        temperature=load_ai_config().generation_temperature,
        model=TailoredResumeResult,
        operation="tailored_resume",
    )


async def generate_cover_letter(client: AIClient, resume_text: str, job_description: str) -> CoverLetterResult:
    return await _json_completion(
        client,
        build_cover_letter_messages(resume_text, job_description),
        temperature=load_ai_config().generation_temperature,
        model=CoverLetterResult,
        operation="cover_letter",
    )
