from __future__ import annotations

import json
import logging

from pydantic import ValidationError

from zolla.schemas.wizard import WIZARD_STATE_VERSION, WizardState
from zolla.storage.db import connect, to_iso, utc_now

logger = logging.getLogger(__name__)

SLOT_PREFIX = "zolla_dashboard_state"


def slot_key(user_id: str) -> str:
    return f"{SLOT_PREFIX}:{user_id}"


def load_state(user_id: str) -> WizardState | None:
    """Stored wizard state, or None when the slot is empty or unusable."""
    with connect() as conn:
        cur = conn.execute(
            "SELECT version, state_json FROM wizard_sessions WHERE slot_key = ?",
            (slot_key(user_id),),
        )
        row = cur.fetchone()
    if not row:
        return None

    version, state_json = row
    if version != WIZARD_STATE_VERSION:
        logger.warning("wizard_state_version_mismatch stored=%s expected=%s", version, WIZARD_STATE_VERSION)
        return None
    try:
        return WizardState.model_validate(json.loads(state_json))
    except (ValueError, ValidationError) as exc:
        logger.warning("wizard_state_load_failed: %s", exc)
        return None


def save_state(user_id: str, state: WizardState) -> None:
    with connect() as conn:
        conn.execute(
            """
            INSERT INTO wizard_sessions (slot_key, version, state_json, updated_at)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(slot_key) DO UPDATE SET
                version = excluded.version,
                state_json = excluded.state_json,
                updated_at = excluded.updated_at
            """,
            (slot_key(user_id), state.version, state.model_dump_json(), to_iso(utc_now())),
        )
        conn.commit()


def clear_state(user_id: str) -> None:
    with connect() as conn:
        conn.execute("DELETE FROM wizard_sessions WHERE slot_key = ?", (slot_key(user_id),))
        conn.commit()
