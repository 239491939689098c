"""Auth Routes — issue the session cookie and clear it on logout.

Invariants:
    - Cookie name from settings (default "token"), httpOnly, path "/"
    - secure and samesite=none only in production; lax without secure elsewhere
    - max_age equals the token validity window
    - Logout deletes with the same attributes as issuance (browsers match on path/secure/samesite)
"""

import logging

from fastapi import APIRouter, Depends, Response

from loanlink.api.dependencies import get_token_codec, get_user_directory
from loanlink.config import Settings, get_settings
from loanlink.core.session_tokens import SessionTokenCodec
from loanlink.schemas.auth import SignInRequest
from loanlink.services.user_directory import UserDirectory

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


def cookie_settings(settings: Settings) -> dict:
    """Attributes shared by set_cookie and delete_cookie."""
    return {
        "httponly": True,
        "secure": settings.is_production,
        "samesite": "none" if settings.is_production else "lax",
        "path": "/",
    }


@router.post("/jwt")
async def issue_session(
    body: SignInRequest,
    response: Response,
    settings: Settings = Depends(get_settings),
    codec: SessionTokenCodec = Depends(get_token_codec),
    users: UserDirectory = Depends(get_user_directory),
):
    """Sign the identity claim and deliver it as the session cookie."""
    token = codec.issue(body.model_dump())
    response.set_cookie(
        settings.session_cookie_name, token,
        max_age=codec.max_age_seconds, **cookie_settings(settings),
    )
    await users.record_login(body.email)
    logger.info("Session issued", extra={"user_email": body.email})
    return {"success": True}


@router.post("/logout")
async def logout(response: Response, settings: Settings = Depends(get_settings)):
    response.delete_cookie(settings.session_cookie_name, **cookie_settings(settings))
    return {"success": True}
