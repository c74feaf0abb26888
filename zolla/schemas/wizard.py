from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from zolla.schemas.analysis import JOB_MATCH_ANALYSIS, AnalysisResult, AnalysisTypeId

WIZARD_STATE_VERSION = 1

WizardStep = Literal[1, 2, 3, 4]


class WizardState(BaseModel):
    version: int = WIZARD_STATE_VERSION
    current_step: WizardStep = 1
    resume_text: str = ""
    job_description: str = ""
    selected_analysis_types: list[AnalysisTypeId] = Field(default_factory=lambda: [JOB_MATCH_ANALYSIS])
    file_name: str | None = None
    analysis_result: AnalysisResult | None = None
    used_cached_result: bool = False


class WizardUpdateRequest(BaseModel):
    resume_text: str | None = Field(default=None, max_length=50000)
    job_description: str | None = Field(default=None, max_length=50000)
    selected_analysis_types: list[AnalysisTypeId] | None = None
    file_name: str | None = Field(default=None, max_length=255)


class WizardResponse(BaseModel):
    state: WizardState
    can_proceed: bool
    requires_job_description: bool
