from __future__ import annotations

from dataclasses import dataclass

from fastapi import Header, HTTPException, status

from zolla.core.config import settings


@dataclass(frozen=True)
class CurrentUser:
    id: str
    email: str | None = None


def check_api_key(x_api_key: str | None) -> None:
    if not settings.api_key:
        return
    if x_api_key != settings.api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Please provide a valid API key.",
        )


def require_user(detail: str = "Please sign in to continue."):
    """Dependency resolving the identity handed over by the upstream auth provider."""

    def dependency(
        x_api_key: str | None = Header(default=None, alias="X-API-Key"),
        x_user_id: str | None = Header(default=None, alias="X-User-Id"),
        x_user_email: str | None = Header(default=None, alias="X-User-Email"),
    ) -> CurrentUser:
        check_api_key(x_api_key)
        user_id = (x_user_id or "").strip()
        if not user_id:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)
        email = (x_user_email or "").strip() or None
        return CurrentUser(id=user_id, email=email)

    return dependency


current_user = require_user()
analysis_user = require_user("Please sign in to analyze your resume.")
