from __future__ import annotations

import json
import uuid
from datetime import datetime, timedelta
from typing import Any

from zolla.schemas.account import AnalysisRecord
from zolla.storage.db import connect, row_to_dict, to_iso, utc_now

_COLUMNS = (
    "id, user_id, compatibility_score, keyword_matches, experience_gaps, skill_gaps, "
    "tailored_resume, cover_letter, analysis_details, original_resume_text, "
    "original_job_description, resume_hash, job_description_hash, created_at"
)

_JSON_LIST_COLUMNS = ("keyword_matches", "experience_gaps", "skill_gaps")


def _to_record(data: dict[str, Any]) -> AnalysisRecord:
    for column in _JSON_LIST_COLUMNS:
        data[column] = json.loads(data[column]) if data.get(column) else []
    details = data.get("analysis_details")
    data["analysis_details"] = json.loads(details) if details else None
    return AnalysisRecord.model_validate(data)


def insert_analysis(
    *,
    user_id: str,
    compatibility_score: int,
    keyword_matches: list[str],
    experience_gaps: list[str],
    skill_gaps: list[str] | None = None,
    tailored_resume: str | None = None,
    cover_letter: str | None = None,
    analysis_details: dict[str, Any] | None = None,
    original_resume_text: str | None = None,
    original_job_description: str | None = None,
    resume_hash: str | None = None,
    job_description_hash: str | None = None,
    created_at: datetime | None = None,
) -> AnalysisRecord:
    record_id = uuid.uuid4().hex
    created = created_at or utc_now()
    with connect() as conn:
        conn.execute(
            f"""
            INSERT INTO resume_analyses ({_COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                record_id,
                user_id,
                max(0, min(100, int(compatibility_score))),
                json.dumps(keyword_matches, ensure_ascii=False),
                json.dumps(experience_gaps, ensure_ascii=False),
                json.dumps(skill_gaps or [], ensure_ascii=False),
                tailored_resume,
                cover_letter,
                json.dumps(analysis_details, ensure_ascii=False) if analysis_details is not None else None,
                original_resume_text,
                original_job_description,
                resume_hash,
                job_description_hash,
                to_iso(created),
            ),
        )
        conn.commit()
    record = get_analysis(user_id=user_id, record_id=record_id)
    if record is None:
        raise RuntimeError(f"Analysis record '{record_id}' was not persisted.")
    return record


def get_analysis(*, user_id: str, record_id: str) -> AnalysisRecord | None:
    with connect() as conn:
        cur = conn.execute(
            f"SELECT {_COLUMNS} FROM resume_analyses WHERE id = ? AND user_id = ?",
            (record_id, user_id),
        )
        row = cur.fetchone()
        if not row:
            return None
        return _to_record(row_to_dict(cur, row))


def find_cached_analysis(
    *,
    user_id: str,
    resume_hash: str,
    job_description_hash: str,
    retention_days: int,
    now: datetime | None = None,
) -> AnalysisRecord | None:
    """Most recent non-expired record of this user matching both digests."""
    cutoff = (now or utc_now()) - timedelta(days=retention_days)
    with connect() as conn:
        cur = conn.execute(
            f"""
            SELECT {_COLUMNS}
            FROM resume_analyses
            WHERE user_id = ? AND resume_hash = ? AND job_description_hash = ? AND created_at > ?
            ORDER BY created_at DESC
            LIMIT 1
            """,
            (user_id, resume_hash, job_description_hash, to_iso(cutoff)),
        )
        row = cur.fetchone()
        if not row:
            return None
        return _to_record(row_to_dict(cur, row))


def list_analyses(*, user_id: str, limit: int, offset: int = 0) -> list[AnalysisRecord]:
    with connect() as conn:
        cur = conn.execute(
            f"""
            SELECT {_COLUMNS}
            FROM resume_analyses
            WHERE user_id = ?
            ORDER BY created_at DESC, rowid DESC
            LIMIT ? OFFSET ?
            """,
            (user_id, limit, offset),
        )
        rows = cur.fetchall()
        return [_to_record(row_to_dict(cur, row)) for row in rows]


def count_analyses(*, user_id: str) -> int:
    with connect() as conn:
        cur = conn.execute("SELECT COUNT(*) FROM resume_analyses WHERE user_id = ?", (user_id,))
        return int(cur.fetchone()[0] or 0)
