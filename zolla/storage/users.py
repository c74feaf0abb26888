from __future__ import annotations

from zolla.schemas.account import UserProfile
from zolla.storage.db import connect, row_to_dict, to_iso, utc_now

_COLUMNS = "id, email, name, address, profile_picture_url, created_at, updated_at"


def get_user(user_id: str) -> UserProfile | None:
    with connect() as conn:
        cur = conn.execute(f"SELECT {_COLUMNS} FROM users WHERE id = ?", (user_id,))
        row = cur.fetchone()
        if not row:
            return None
        return UserProfile.model_validate(row_to_dict(cur, row))


def get_or_create_user(user_id: str, email: str | None) -> UserProfile:
    now = to_iso(utc_now())
    with connect() as conn:
        conn.execute(
            """
            INSERT OR IGNORE INTO users (id, email, created_at, updated_at)
            VALUES (?, ?, ?, ?)
            """,
            (user_id, email, now, now),
        )
        conn.commit()
    profile = get_user(user_id)
    if profile is None:
        raise RuntimeError(f"User '{user_id}' could not be created.")
    return profile


def update_user(
    user_id: str,
    *,
    name: str | None,
    address: str | None,
    profile_picture_url: str | None,
) -> UserProfile | None:
    with connect() as conn:
        cur = conn.execute(
            """
            UPDATE users
            SET name = ?, address = ?, profile_picture_url = ?, updated_at = ?
            WHERE id = ?
            """,
            (name, address, profile_picture_url, to_iso(utc_now()), user_id),
        )
        conn.commit()
        if not cur.rowcount:
            return None
    return get_user(user_id)
