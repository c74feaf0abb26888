import logging
import sqlite3

from fastapi import APIRouter, Depends, HTTPException, Query, status

from zolla.core.security import CurrentUser, current_user
from zolla.schemas.account import (
    AnalysisView,
    HistoryPage,
    PremiumInputs,
    ProfileUpdateRequest,
    TailoredResumeView,
    UserProfile,
)
from zolla.services import account_service
from zolla.services.account_service import HistoryActionError

router = APIRouter()
logger = logging.getLogger(__name__)


def _storage_error(exc: sqlite3.Error, message: str) -> None:
    logger.exception("account_storage_error: %s", exc)
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message) from exc


@router.get("/account/profile", response_model=UserProfile)
def get_profile(user: CurrentUser = Depends(current_user)):
    try:
        return account_service.get_profile(user.id, user.email)
    except sqlite3.Error as exc:
        _storage_error(exc, "Failed to load profile")


@router.put("/account/profile", response_model=UserProfile)
def update_profile(payload: ProfileUpdateRequest, user: CurrentUser = Depends(current_user)):
    try:
        return account_service.update_profile(user.id, user.email, payload)
    except sqlite3.Error as exc:
        _storage_error(exc, "Failed to update profile")


@router.get("/account/history", response_model=HistoryPage)
def history(
    limit: int | None = Query(default=None, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    user: CurrentUser = Depends(current_user),
):
    try:
        return account_service.list_history(user.id, limit=limit, offset=offset)
    except sqlite3.Error as exc:
        _storage_error(exc, "Failed to load resume history")


@router.post("/account/history/{record_id}/view", response_model=TailoredResumeView | AnalysisView)
def view_history_item(record_id: str, user: CurrentUser = Depends(current_user)):
    try:
        return account_service.view_history_item(user.id, record_id)
    except HistoryActionError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
    except sqlite3.Error as exc:
        _storage_error(exc, "Failed to load resume history")


@router.post("/account/history/{record_id}/upgrade", response_model=PremiumInputs)
def upgrade_history_item(record_id: str, user: CurrentUser = Depends(current_user)):
    try:
        return account_service.upgrade_history_item(user.id, record_id)
    except HistoryActionError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
    except sqlite3.Error as exc:
        _storage_error(exc, "Failed to load resume history")
