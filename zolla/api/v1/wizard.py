import logging

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status

from zolla.ai.types import AIClientError
from zolla.api.v1.common import raise_ai_http_error, read_upload
from zolla.core.config import settings
from zolla.core.rate_limit import ai_rate_limit, rate_limit
from zolla.core.security import CurrentUser, analysis_user, current_user
from zolla.schemas.analysis import ANALYSIS_OPTIONS, PREMIUM_ANALYSIS_TYPES
from zolla.schemas.wizard import WizardResponse, WizardState, WizardUpdateRequest
from zolla.services import wizard
from zolla.services.analysis_service import AnalysisInputError, analyze
from zolla.services.extract import extract_text

router = APIRouter()
logger = logging.getLogger(__name__)

_KNOWN_TYPES = {option.id for option in ANALYSIS_OPTIONS}


def _check_premium(type_id: str) -> None:
    if type_id in PREMIUM_ANALYSIS_TYPES and not settings.premium_analysis_enabled:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="This analysis type requires premium.")


def _respond(state: WizardState) -> WizardResponse:
    return WizardResponse(
        state=state,
        can_proceed=wizard.can_proceed(state),
        requires_job_description=wizard.requires_job_description(state),
    )


@router.get("/wizard", response_model=WizardResponse)
async def get_wizard(user: CurrentUser = Depends(current_user)):
    return _respond(wizard.load(user.id))


@router.patch("/wizard", response_model=WizardResponse)
async def update_wizard(payload: WizardUpdateRequest, user: CurrentUser = Depends(current_user)):
    for type_id in payload.selected_analysis_types or []:
        _check_premium(type_id)
    state =wizard.update_fields(wizard.load(user.id), **payload.model_dump(exclude_unset=True))
    return _respond(wizard.save(user.id, state))


@router.delete("/wizard", response_model=WizardResponse)
async def reset_wizard(user: CurrentUser = Depends(current_user)):
    return _respond(wizard.reset(user.id))


@router.post("/wizard/types/{type_id}/toggle", response_model=WizardResponse)
async def toggle_wizard_type(type_id: str, user: CurrentUser = Depends(current_user)):
    if type_id not in _KNOWN_TYPES:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown analysis type.")
    _check_premium(type_id)
    state = wizard.toggle_analysis_type(wizard.load(user.id), type_id)
    return _respond(wizard.save(user.id, state))


@router.post("/wizard/upload", response_model=WizardResponse)
@rate_limit()
async def upload_resume(
    request: Request,
    file: UploadFile = File(...),
    user: CurrentUser = Depends(current_user),
):
    _ = request
    filename = file.filename or "uploaded-file"
    state = wizard.save(user.id, wizard.update_fields(wizard.load(user.id), file_name=filename))
    try:
        content = await read_upload(file)
        extracted = extract_text(filename, content)
    except HTTPException:
        wizard.save(user.id, state.model_copy(update={"file_name": None}))
        raise
    except ValueError as exc:
        wizard.save(user.id, state.model_copy(update={"file_name": None}))
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    state = wizard.update_fields(state, resume_text=extracted.text)
    return _respond(wizard.save(user.id, state))


@router.delete("/wizard/file", response_model=WizardResponse)
async def remove_resume_file(user: CurrentUser = Depends(current_user)):
    state = wizard.load(user.id).model_copy(update={"file_name": None, "resume_text": ""})
    return _respond(wizard.save(user.id, state))


@router.post("/wizard/back", response_model=WizardResponse)
async def wizard_back(user: CurrentUser = Depends(current_user)):
    return _respond(wizard.save(user.id, wizard.back(wizard.load(user.id))))


@router.post("/wizard/next", response_model=WizardResponse)
@ai_rate_limit()
async def wizard_next(request: Request, user: CurrentUser = Depends(analysis_user)):
    _ = request
    state = wizard.load(user.id)
    try:
        action = wizard.next_action(state)
    except wizard.WizardTransitionError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc

    if action == "advance":
        return _respond(wizard.save(user.id, wizard.advance(state)))

    try:
        outcome = await analyze(
            user_id=user.id,
            resume_text=state.resume_text,
            job_description=state.job_description,
            selected_analysis_types=state.selected_analysis_types,
        )
    except AnalysisInputError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
    except AIClientError as exc:
        logger.warning("wizard_analysis_failed step=%s code=%s", state.current_step, exc.code)
        raise_ai_http_error(exc)

    state = wizard.with_result(state, outcome.result, used_cached_result=outcome.used_cached_result)
    return _respond(wizard.save(user.id, state))
