"""Four-step resume wizard: upload, analysis types, job description, results.

All transitions are pure functions over ``WizardState``; persistence of the
state lives in ``zolla.storage.wizard_store`` and the HTTP layer stitches the
two together.
"""
from __future__ import annotations

from typing import Literal

from zolla.schemas.account import AnalysisRecord
from zolla.schemas.analysis import JOB_MATCH_ANALYSIS, AnalysisResult
from zolla.schemas.wizard import WizardState
from zolla.services.analysis_service import result_from_record
from zolla.storage import wizard_store

HISTORY_SUMMARY = "This is a historical analysis from your account."

UPLOAD_STEP = 1
TYPES_STEP = 2
JOB_DESCRIPTION_STEP = 3
RESULTS_STEP = 4

NextAction = Literal["advance", "analyze"]


class WizardTransitionError(ValueError):
    status_code = 409


def initial_state() -> WizardState:
    return WizardState()


def update_fields(state: WizardState, **changes) -> WizardState:
    clean = {key: value for key, value in changes.items() if value is not None}
    if "selected_analysis_types" in clean:
        clean["selected_analysis_types"] = list(dict.fromkeys(clean["selected_analysis_types"]))
    return state.model_copy(update=clean)


def toggle_analysis_type(state: WizardState, type_id: str) -> WizardState:
    selected = list(state.selected_analysis_types)
    if type_id in selected:
        selected.remove(type_id)
    else:
        selected.append(type_id)
    return state.model_copy(update={"selected_analysis_types": selected})


def requires_job_description(state: WizardState) -> bool:
    return JOB_MATCH_ANALYSIS in state.selected_analysis_types


def can_leave_upload(state: WizardState) -> bool:
    return bool(state.resume_text.strip())


def can_leave_type_selection(state: WizardState) -> bool:
    return len(state.selected_analysis_types) > 0


def can_analyze(state: WizardState) -> bool:
    if not can_leave_upload(state) or not can_leave_type_selection(state):
        return False
    return not requires_job_description(state) or bool(state.job_description.strip())


def can_proceed(state: WizardState) -> bool:
    if state.current_step == UPLOAD_STEP:
        return can_leave_upload(state)
    if state.current_step == TYPES_STEP:
        return can_leave_type_selection(state)
    if state.current_step == JOB_DESCRIPTION_STEP:
        return can_analyze(state)
    return False


def next_action(state: WizardState) -> NextAction:
    """What the forward button does from the current step."""
    if state.current_step == UPLOAD_STEP:
        if not can_leave_upload(state):
            raise WizardTransitionError("Please provide your resume text.")
        return "advance"
    if state.current_step == TYPES_STEP:
        if not can_leave_type_selection(state):
            raise WizardTransitionError("Please select at least one analysis type.")
        return "advance" if requires_job_description(state) else "analyze"
    if state.current_step == JOB_DESCRIPTION_STEP:
        if requires_job_description(state) and not state.job_description.strip():
            raise WizardTransitionError("Please provide the job description for job match analysis.")
        return "analyze"
    raise WizardTransitionError("The analysis is complete. Start a new analysis to continue.")


def advance(state: WizardState) -> WizardState:
    if next_action(state) != "advance":
        raise WizardTransitionError("This step runs the analysis instead of advancing.")
    return state.model_copy(update={"current_step": state.current_step + 1})


def back(state: WizardState) -> WizardState:
    if state.current_step == RESULTS_STEP:
        target = JOB_DESCRIPTION_STEP if requires_job_description(state) else TYPES_STEP
    else:
        target = max(UPLOAD_STEP, state.current_step - 1)
    return state.model_copy(update={"current_step": target})


def with_result(state: WizardState, result: AnalysisResult, *, used_cached_result: bool) -> WizardState:
    return state.model_copy(
        update={
            "current_step": RESULTS_STEP,
            "analysis_result": result,
            "used_cached_result": used_cached_result,
        }
    )


def from_history(record: AnalysisRecord) -> WizardState:
    return initial_state().model_copy(
        update={
            "current_step": RESULTS_STEP,
            "analysis_result": result_from_record(record, summary=HISTORY_SUMMARY),
            "resume_text": record.original_resume_text or "",
            "job_description": record.original_job_description or "",
            "used_cached_result": True,
        }
    )


def load(user_id: str) -> WizardState:
    return wizard_store.load_state(user_id) or initial_state()


def save(user_id: str, state: WizardState) -> WizardState:
    wizard_store.save_state(user_id, state)
    return state


def reset(user_id: str) -> WizardState:
    wizard_store.clear_state(user_id)
    return initial_state()


def enter_from_history(user_id: str, record: AnalysisRecord) -> WizardState:
    """Replace any stored state wholesale; a historical result always lands on the results step."""
    return save(user_id, from_history(record))
