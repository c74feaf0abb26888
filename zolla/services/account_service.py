from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta

from zolla.core.config import settings
from zolla.schemas.account import (
    AnalysisRecord,
    AnalysisView,
    HistoryItem,
    HistoryPage,
    PremiumInputs,
    ProfileUpdateRequest,
    TailoredResumeView,
    UserProfile,
)
from zolla.services import wizard
from zolla.services.analysis_service import result_from_record
from zolla.services.hashing import short_hash
from zolla.storage import analyses as analyses_store
from zolla.storage import users as users_store
from zolla.storage.db import utc_now

logger = logging.getLogger(__name__)

UPGRADE_SUMMARY = "Historical analysis from your account."


class HistoryActionError(ValueError):
    def __init__(self, message: str, *, status_code: int = 409):
        super().__init__(message)
        self.status_code = status_code


def get_profile(user_id: str, email: str | None) -> UserProfile:
    return users_store.get_or_create_user(user_id, email)


def update_profile(user_id: str, email: str | None, changes: ProfileUpdateRequest) -> UserProfile:
    users_store.get_or_create_user(user_id, email)
    profile = users_store.update_user(
        user_id,
        name=changes.name.strip() or None,
        address=changes.address.strip() or None,
        profile_picture_url=changes.profile_picture_url.strip() or None,
    )
    if profile is None:
        raise RuntimeError(f"User '{user_id}' disappeared during profile update.")
    logger.info("profile_updated user=%s", short_hash(user_id))
    return profile


def days_remaining(created_at: datetime, now: datetime | None = None) -> int:
    expiry = created_at + timedelta(days=settings.analysis_retention_days)
    remaining = (expiry - (now or utc_now())) / timedelta(days=1)
    return max(0, math.ceil(remaining))


def is_expired(record: AnalysisRecord, now: datetime | None = None) -> bool:
    return days_remaining(record.created_at, now) == 0


def can_view(record: AnalysisRecord, now: datetime | None = None) -> bool:
    has_content = bool(record.tailored_resume or record.analysis_details)
    return has_content and not is_expired(record, now)


def can_upgrade(record: AnalysisRecord, now: datetime | None = None) -> bool:
    return bool(
        record.original_resume_text
        and record.original_job_description
        and not record.tailored_resume
        and not is_expired(record, now)
    )


def to_history_item(record: AnalysisRecord, now: datetime | None = None) -> HistoryItem:
    now = now or utc_now()
    remaining = days_remaining(record.created_at, now)
    return HistoryItem(
        id=record.id,
        compatibility_score=record.compatibility_score,
        keyword_matches=record.keyword_matches,
        has_tailored_resume=bool(record.tailored_resume),
        created_at=record.created_at,
        days_remaining=remaining,
        is_expired=remaining == 0,
        can_view=can_view(record, now),
        can_upgrade=can_upgrade(record, now),
    )


def list_history(
    user_id: str,
    *,
    limit: int | None = None,
    offset: int = 0,
    now: datetime | None = None,
) -> HistoryPage:
    page_size = limit or settings.history_page_size
    records = analyses_store.list_analyses(user_id=user_id, limit=page_size, offset=offset)
    total = analyses_store.count_analyses(user_id=user_id)
    return HistoryPage(
        items=[to_history_item(record, now) for record in records],
        total=total,
        limit=page_size,
        offset=offset,
    )


def _get_record(user_id: str, record_id: str) -> AnalysisRecord:
    record = analyses_store.get_analysis(user_id=user_id, record_id=record_id)
    if record is None:
        raise HistoryActionError("Analysis not found.", status_code=404)
    return record


def view_history_item(
    user_id: str, record_id: str, *, now: datetime | None = None
) -> TailoredResumeView | AnalysisView:
    record = _get_record(user_id, record_id)
    if is_expired(record, now):
        raise HistoryActionError("This analysis has expired.")
    if not can_view(record, now):
        raise HistoryActionError("This analysis has no stored result to view.")

    if record.tailored_resume and record.tailored_resume.strip():
        return TailoredResumeView(
            tailored_resume=record.tailored_resume,
            improvements=["Previously generated resume from your history"],
            cover_letter=record.cover_letter,
            cover_letter_key_points=(
                ["Previously generated cover letter from your history"] if record.cover_letter else None
            ),
            reference=f"history-{record.id}",
        )
    return AnalysisView(wizard=wizard.enter_from_history(user_id, record))


def upgrade_history_item(user_id: str, record_id: str, *, now: datetime | None = None) -> PremiumInputs:
    record = _get_record(user_id, record_id)
    if not can_upgrade(record, now):
        if is_expired(record, now):
            raise HistoryActionError("This analysis has expired.")
        raise HistoryActionError("This analysis cannot be upgraded.")
    return PremiumInputs(
        resume_text=record.original_resume_text or "",
        job_description=record.original_job_description or "",
        analysis_result=result_from_record(record, summary=UPGRADE_SUMMARY),
    )
