from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status

from zolla.ai.types import AIClientError
from zolla.api.v1.common import raise_ai_http_error, read_upload
from zolla.core.rate_limit import ai_rate_limit, rate_limit
from zolla.core.security import CurrentUser, analysis_user, current_user
from zolla.schemas.analysis import (
    ANALYSIS_OPTIONS,
    AnalysisOption,
    AnalyzeRequest,
    AnalyzeResponse,
    ExtractTextResponse,
)
from zolla.services.analysis_service import AnalysisInputError, analyze
from zolla.services.extract import extract_text

router = APIRouter()


@router.get("/analysis/types", response_model=list[AnalysisOption])
async def analysis_types():
    return list(ANALYSIS_OPTIONS)


@router.post("/analysis", response_model=AnalyzeResponse)
@ai_rate_limit()
async def run_analysis(
    request: Request,
    payload: AnalyzeRequest,
    user: CurrentUser = Depends(analysis_user),
):
    _ = request
    try:
        return await analyze(
            user_id=user.id,
            resume_text=payload.resume_text,
            job_description=payload.job_description,
            selected_analysis_types=payload.selected_analysis_types,
        )
    except AnalysisInputError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
    except AIClientError as exc:
        raise_ai_http_error(exc)


@router.post("/extract-text", response_model=ExtractTextResponse)
@rate_limit()
async def extract_resume_text(
    request: Request,
    file: UploadFile = File(...),
    user: CurrentUser = Depends(current_user),
):
    _ = request, user
    filename = file.filename or "uploaded-file"
    content = await read_upload(file)
    try:
        return extract_text(filename, content)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
