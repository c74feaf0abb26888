from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

AnalysisTypeId = Literal[
    "job_match_analysis",
    "ats_compatibility",
    "impact_statement_review",
    "skills_gap_assessment",
    "format_optimization",
    "career_story_flow",
]
KeywordStatus = Literal["Present", "Missing"]

JOB_MATCH_ANALYSIS = "job_match_analysis"


class AnalysisOption(BaseModel):
    id: AnalysisTypeId
    label: str
    description: str
    is_premium: bool = False
    is_core: bool = False


ANALYSIS_OPTIONS: tuple[AnalysisOption, ...] = (
    AnalysisOption(
        id="job_match_analysis",
        label="Job Match Analysis",
        description="Core compatibility scoring and keyword matching",
        is_core=True,
    ),
    AnalysisOption(
        id="ats_compatibility",
        label="ATS Compatibility Check",
        description="Check if your resume passes automated screening",
    ),
    AnalysisOption(
        id="impact_statement_review",
        label="Impact Statement Review",
        description="Identify weak accomplishments and achievements",
    ),
    AnalysisOption(
        id="skills_gap_assessment",
        label="Skills Gap Assessment",
        description="Compare your skills to job requirements",
        is_premium=True,
    ),
    AnalysisOption(
        id="format_optimization",
        label="Format Optimization",
        description="Review resume formatting and structure",
        is_premium=True,
    ),
    AnalysisOption(
        id="career_story_flow",
        label="Career Story Flow Analysis",
        description="Analyze career progression narrative",
        is_premium=True,
    ),
)

PREMIUM_ANALYSIS_TYPES = frozenset(option.id for option in ANALYSIS_OPTIONS if option.is_premium)


class JobKeyword(BaseModel):
    keyword: str
    status: KeywordStatus


class _Section(BaseModel):
    score: float = Field(ge=0, le=10)
    summary: str = ""
    suggestions: list[str] = Field(default_factory=list)


class IssuesSection(_Section):
    issues: list[str] = Field(default_factory=list)


class ImpactStatementReview(_Section):
    weak_statements: list[str] = Field(default_factory=list)


class SkillsGapAssessment(_Section):
    missing_skills: list[str] = Field(default_factory=list)


class AnalysisResult(BaseModel):
    match_summary: str = ""
    match_score: str = ""
    job_keywords_detected: list[JobKeyword] = Field(default_factory=list)
    gaps_and_suggestions: list[str] = Field(default_factory=list)
    ats_compatibility: IssuesSection | None = None
    impact_statement_review: ImpactStatementReview | None = None
    skills_gap_assessment: SkillsGapAssessment | None = None
    format_optimization: IssuesSection | None = None
    career_story_flow: IssuesSection | None = None

    @field_validator("match_score", mode="before")
    @classmethod
    def _coerce_match_score(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return f"{int(value)}/100"
        return value


class TailoredResumeResult(BaseModel):
    tailored_resume: str
    improvements: list[str] = Field(default_factory=list)


class CoverLetterResult(BaseModel):
    cover_letter: str
    key_points: list[str] = Field(default_factory=list)


class IssueSummary(BaseModel):
    total: int = Field(default=0, ge=0)
    details: list[str] = Field(default_factory=list)


class AnalyzeRequest(BaseModel):
    resume_text: str = Field(default="", max_length=50000)
    job_description: str = Field(default="", max_length=50000)
    selected_analysis_types: list[AnalysisTypeId] = Field(
        default_factory=lambda: [JOB_MATCH_ANALYSIS], max_length=len(ANALYSIS_OPTIONS)
    )


class AnalyzeResponse(BaseModel):
    result: AnalysisResult
    used_cached_result: bool = False
    record_id: str | None = None
    issues: IssueSummary = Field(default_factory=IssueSummary)


class ExtractTextResponse(BaseModel):
    filename: str
    source_type: Literal["text", "word", "pdf"]
    text: str
    characters: int = Field(ge=0)
    details: dict[str, Any] = Field(default_factory=dict)
