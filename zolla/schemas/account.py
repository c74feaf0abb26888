from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from zolla.schemas.analysis import AnalysisResult
from zolla.schemas.wizard import WizardState


class UserProfile(BaseModel):
    id: str
    email: str | None = None
    name: str | None = None
    address: str | None = None
    profile_picture_url: str | None = None
    created_at: datetime
    updated_at: datetime


class ProfileUpdateRequest(BaseModel):
    # email is owned by the auth provider
    model_config = ConfigDict(extra="forbid")

    name: str = Field(default="", max_length=200)
    address: str = Field(default="", max_length=1000)
    profile_picture_url: str = Field(default="", max_length=2000)


class AnalysisRecord(BaseModel):
    id: str
    user_id: str
    compatibility_score: int = Field(ge=0, le=100)
    keyword_matches: list[str] = Field(default_factory=list)
    experience_gaps: list[str] = Field(default_factory=list)
    skill_gaps: list[str] = Field(default_factory=list)
    tailored_resume: str | None = None
    cover_letter: str | None = None
    analysis_details: dict[str, Any] | None = None
    original_resume_text: str | None = None
    original_job_description: str | None = None
    resume_hash: str | None = None
    job_description_hash: str | None = None
    created_at: datetime


class HistoryItem(BaseModel):
    id: str
    compatibility_score: int
    keyword_matches: list[str]
    has_tailored_resume: bool
    created_at: datetime
    days_remaining: int = Field(ge=0)
    is_expired: bool
    can_view: bool
    can_upgrade: bool


class HistoryPage(BaseModel):
    items: list[HistoryItem]
    total: int = Field(ge=0)
    limit: int
    offset: int


class TailoredResumeView(BaseModel):
    kind: Literal["tailored_resume"] = "tailored_resume"
    tailored_resume: str
    improvements: list[str] = Field(default_factory=list)
    cover_letter: str | None = None
    cover_letter_key_points: list[str] | None = None
    reference: str


class AnalysisView(BaseModel):
    kind: Literal["analysis"] = "analysis"
    wizard: WizardState


class PremiumInputs(BaseModel):
    resume_text: str
    job_description: str
    analysis_result: AnalysisResult
