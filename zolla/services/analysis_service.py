from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Sequence

from zolla.ai.factory import get_ai_client
from zolla.ai.types import AIClient
from zolla.core.config import settings
from zolla.schemas.account import AnalysisRecord
from zolla.schemas.analysis import (
    JOB_MATCH_ANALYSIS,
    PREMIUM_ANALYSIS_TYPES,
    AnalysisResult,
    AnalyzeResponse,
    IssueSummary,
    JobKeyword,
)
from zolla.services.analysis_llm import analyze_resume
from zolla.services.hashing import content_hash, short_hash
from zolla.storage import analyses as analyses_store

logger = logging.getLogger(__name__)

CACHED_SUMMARY = (
    "This analysis was retrieved from your previous submission with the same resume and job description."
)


class AnalysisInputError(ValueError):
    status_code = 400


@dataclass(frozen=True)
class AnalysisInputs:
    resume_text: str
    job_description: str
    selected_analysis_types: tuple[str, ...]

    @property
    def needs_job_description(self) -> bool:
        return JOB_MATCH_ANALYSIS in self.selected_analysis_types


def requires_job_description(selected_analysis_types: Sequence[str]) -> bool:
    return JOB_MATCH_ANALYSIS in selected_analysis_types


def validate_inputs(resume_text: str, job_description: str, selected_analysis_types: Sequence[str]) -> AnalysisInputs:
    if not selected_analysis_types:
        raise AnalysisInputError("Please select at least one analysis type.")
    if not (resume_text or "").strip():
        raise AnalysisInputError("Please provide your resume text.")
    if requires_job_description(selected_analysis_types) and not (job_description or "").strip():
        raise AnalysisInputError("Please provide the job description for job match analysis.")
    return AnalysisInputs(
        resume_text=resume_text,
        job_description=job_description or "",
        selected_analysis_types=tuple(dict.fromkeys(selected_analysis_types)),
    )


def numeric_score(match_score: str) -> int:
    match = re.search(r"(\d+)", match_score or "")
    return int(match.group(1)) if match else 0


def result_from_record(record: AnalysisRecord, *, summary: str) -> AnalysisResult:
    """Stored payload when present, otherwise a result rebuilt from the flat columns."""
    if record.analysis_details:
        return AnalysisResult.model_validate(record.analysis_details)
    return AnalysisResult(
        match_summary=summary,
        match_score=f"{record.compatibility_score}/100",
        job_keywords_detected=[JobKeyword(keyword=keyword, status="Present") for keyword in record.keyword_matches],
        gaps_and_suggestions=list(record.experience_gaps),
    )


def llm_analysis_types(selected_analysis_types: Sequence[str]) -> list[str]:
    allowed = [
        type_id
        for type_id in selected_analysis_types
        if settings.premium_analysis_enabled or type_id not in PREMIUM_ANALYSIS_TYPES
    ]
    return [type_id for type_id in allowed if type_id != JOB_MATCH_ANALYSIS]


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'s' if count > 1 else ''}"


def summarize_issues(result: AnalysisResult | None) -> IssueSummary:
    if result is None:
        return IssueSummary()

    details: list[str] = []
    total = 0

    def add(count: int, noun: str) -> None:
        nonlocal total
        if count > 0:
            details.append(_plural(count, noun))
            total += count

    if result.ats_compatibility:
        add(len(result.ats_compatibility.issues), "ATS compatibility problem")
    add(sum(1 for item in result.job_keywords_detected if item.status == "Missing"), "missing keyword")
    if result.impact_statement_review:
        add(len(result.impact_statement_review.weak_statements), "weak impact statement")
    if result.skills_gap_assessment:
        add(len(result.skills_gap_assessment.missing_skills), "skill gap")
    if result.format_optimization:
        add(len(result.format_optimization.issues), "format issue")
    if result.career_story_flow:
        add(len(result.career_story_flow.issues), "career story issue")
    if total == 0:
        add(len(result.gaps_and_suggestions), "improvement area")

    return IssueSummary(total=total, details=details)


async def analyze(
    *,
    user_id: str,
    resume_text: str,
    job_description: str,
    selected_analysis_types: Sequence[str],
    ai_client: AIClient | None = None,
) -> AnalyzeResponse:
    inputs = validate_inputs(resume_text, job_description, selected_analysis_types)

    resume_hash = ""
    job_description_hash = ""
    if inputs.needs_job_description:
        resume_hash = content_hash(inputs.resume_text)
        job_description_hash = content_hash(inputs.job_description)
        cached = analyses_store.find_cached_analysis(
            user_id=user_id,
            resume_hash=resume_hash,
            job_description_hash=job_description_hash,
            retention_days=settings.analysis_retention_days,
        )
        if cached is not None:
            logger.info("analysis_cache_hit user=%s record=%s", short_hash(user_id), cached.id)
            result = result_from_record(cached, summary=CACHED_SUMMARY)
            return AnalyzeResponse(
                result=result,
                used_cached_result=True,
                record_id=cached.id,
                issues=summarize_issues(result),
            )

    result = await analyze_resume(
        ai_client or get_ai_client(),
        inputs.resume_text,
        inputs.job_description if inputs.needs_job_description else "",
        llm_analysis_types(inputs.selected_analysis_types),
    )

    record_id: str | None = None
    if inputs.needs_job_description:
        record = analyses_store.insert_analysis(
            user_id=user_id,
            compatibility_score=numeric_score(result.match_score),
            keyword_matches=[item.keyword for item in result.job_keywords_detected if item.status == "Present"],
            experience_gaps=list(result.gaps_and_suggestions),
            skill_gaps=[],
            analysis_details=result.model_dump(mode="json", exclude_none=True),
            original_resume_text=inputs.resume_text,
            original_job_description=inputs.job_description,
            resume_hash=resume_hash,
            job_description_hash=job_description_hash,
        )
        record_id = record.id

    logger.info(
        json.dumps(
            {
                "event": "analysis_complete",
                "user_hash": short_hash(user_id),
                "types": list(inputs.selected_analysis_types),
                "resume_len": len(inputs.resume_text),
                "job_description_len": len(inputs.job_description),
                "record_id": record_id,
            }
        )
    )
    return AnalyzeResponse(
        result=result,
        used_cached_result=False,
        record_id=record_id,
        issues=summarize_issues(result),
    )
