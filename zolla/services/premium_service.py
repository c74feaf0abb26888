from __future__ import annotations

import logging

from zolla.ai.factory import get_ai_client
from zolla.ai.types import AIClient
from zolla.schemas.analysis import AnalysisResult, CoverLetterResult, TailoredResumeResult
from zolla.schemas.premium import PremiumPackage
from zolla.services.analysis_llm import generate_cover_letter, generate_tailored_resume
from zolla.services.analysis_service import numeric_score
from zolla.services.hashing import short_hash
from zolla.storage import analyses as analyses_store

logger = logging.getLogger(__name__)


async def generate_premium_package(
    *,
    user_id: str,
    resume_text: str,
    job_description: str,
    analysis_result: AnalysisResult | None,
    ai_client: AIClient | None = None,
) -> PremiumPackage:
    client = ai_client or get_ai_client()
    tailored = await generate_tailored_resume(client, resume_text, job_description)
    letter = await generate_cover_letter(client, resume_text, job_description)

    # Stored as its own record; hashes stay NULL so it never answers a cache lookup.
    record = analyses_store.insert_analysis(
        user_id=user_id,
        compatibility_score=numeric_score(analysis_result.match_score) if analysis_result else 0,
        keyword_matches=(
            [item.keyword for item in analysis_result.job_keywords_detected if item.status == "Present"]
            if analysis_result
            else []
        ),
        experience_gaps=list(analysis_result.gaps_and_suggestions) if analysis_result else [],
        tailored_resume=tailored.tailored_resume,
        cover_letter=letter.cover_letter,
        analysis_details=analysis_result.model_dump(mode="json", exclude_none=True) if analysis_result else None,
        original_resume_text=resume_text,
        original_job_description=job_description,
    )
    logger.info("premium_package_created user=%s record=%s", short_hash(user_id), record.id)
    return PremiumPackage(record_id=record.id, tailored_resume=tailored, cover_letter=letter)


async def tailor_resume(
    *, resume_text: str, job_description: str, ai_client: AIClient | None = None
) -> TailoredResumeResult:
    return await generate_tailored_resume(ai_client or get_ai_client(), resume_text, job_description)


async def write_cover_letter(
    *, resume_text: str, job_description: str, ai_client: AIClient | None = None
) -> CoverLetterResult:
    return await generate_cover_letter(ai_client or get_ai_client(), resume_text, job_description)
