from __future__ import annotations

import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from zolla.core.config import settings

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS users (
        id TEXT PRIMARY KEY,
        email TEXT,
        name TEXT,
        address TEXT,
        profile_picture_url TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS resume_analyses (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        compatibility_score INTEGER NOT NULL,
        keyword_matches TEXT NOT NULL,
        experience_gaps TEXT NOT NULL,
        skill_gaps TEXT NOT NULL,
        tailored_resume TEXT,
        cover_letter TEXT,
        analysis_details TEXT,
        original_resume_text TEXT,
        original_job_description TEXT,
        resume_hash TEXT,
        job_description_hash TEXT,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_resume_analyses_user_created
    ON resume_analyses (user_id, created_at)
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_resume_analyses_hashes
    ON resume_analyses (user_id, resume_hash, job_description_hash)
    """,
    """
    CREATE TABLE IF NOT EXISTS wizard_sessions (
        slot_key TEXT PRIMARY KEY,
        version INTEGER NOT NULL,
        state_json TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
)

_initialized_paths: set[str] = set()
_init_lock = threading.Lock()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def get_db_path() -> Path:
    return Path(settings.database_path)


def _ensure_schema(conn: sqlite3.Connection, db_path: Path) -> None:
    key = str(db_path.resolve())
    with _init_lock:
        if key in _initialized_paths:
            return
        for statement in _SCHEMA:
            conn.execute(statement)
        conn.commit()
        _initialized_paths.add(key)


def connect() -> sqlite3.Connection:
    db_path = get_db_path()
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path, timeout=5)
    _ensure_schema(conn, db_path)
    return conn


def init_db() -> None:
    with connect() as conn:
        conn.execute("PRAGMA journal_mode=WAL;")


def row_to_dict(cursor: sqlite3.Cursor, row: tuple) -> dict[str, Any]:
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def to_iso(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")
