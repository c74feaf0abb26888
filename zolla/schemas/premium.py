from __future__ import annotations

from pydantic import BaseModel, Field

from zolla.schemas.analysis import AnalysisResult, CoverLetterResult, TailoredResumeResult


class PremiumRequest(BaseModel):
    resume_text: str = Field(min_length=1, max_length=50000)
    job_description: str = Field(min_length=1, max_length=50000)
    analysis_result: AnalysisResult | None = None


class PremiumPackage(BaseModel):
    record_id: str
    tailored_resume: TailoredResumeResult
    cover_letter: CoverLetterResult
