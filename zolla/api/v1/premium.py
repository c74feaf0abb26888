from fastapi import APIRouter, Depends, Request

from zolla.ai.types import AIClientError
from zolla.api.v1.common import raise_ai_http_error
from zolla.core.rate_limit import ai_rate_limit
from zolla.core.security import CurrentUser, current_user
from zolla.schemas.analysis import CoverLetterResult, TailoredResumeResult
from zolla.schemas.premium import PremiumPackage, PremiumRequest
from zolla.services import premium_service

router = APIRouter()


@router.post("/premium/generate", response_model=PremiumPackage)
@ai_rate_limit()
async def generate_package(
    request: Request,
    payload: PremiumRequest,
    user: CurrentUser = Depends(current_user),
):
    _ = request
    try:
        return await premium_service.generate_premium_package(
            user_id=user.id,
            resume_text=payload.resume_text,
            job_description=payload.job_description,
            analysis_result=payload.analysis_result,
        )
    except AIClientError as exc:
        raise_ai_http_error(exc)


@router.post("/premium/tailored-resume", response_model=TailoredResumeResult)
@ai_rate_limit()
async def tailored_resume(
    request: Request,
    payload: PremiumRequest,
    user: CurrentUser = Depends(current_user),
):
    _ = request, user
    try:
        return await premium_service.tailor_resume(
            resume_text=payload.resume_text,
            job_description=payload.job_description,
        )
    except AIClientError as exc:
        raise_ai_http_error(exc)


@router.post("/premium/cover-letter", response_model=CoverLetterResult)
@ai_rate_limit()
async def cover_letter(
    request: Request,
    payload: PremiumRequest,
    user: CurrentUser = Depends(current_user),
):
    _ = request, user
    try:
        return await premium_service.write_cover_letter(
            resume_text=payload.resume_text,
            job_description=payload.job_description,
        )
    except AIClientError as exc:
        raise_ai_http_error(exc)
