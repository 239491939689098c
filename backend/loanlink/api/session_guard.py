"""Session Guard — authenticates requests from the session cookie.

Invariants:
    - Missing cookie, bad signature, malformed token and expiry all yield the same
      UnauthenticatedError (401); the handler never runs
    - Authentication only: role/ownership checks happen afterwards in core/access_policy.py
    - No refresh or rotation: a token close to expiry is not renewed
"""

import logging

from fastapi import Depends, Request

from loanlink.config import Settings, get_settings
from loanlink.core.domain_types import Caller
from loanlink.core.errors import SessionTokenError, UnauthenticatedError
from loanlink.core.session_tokens import SessionTokenCodec
from loanlink.api.dependencies import get_token_codec, get_user_directory
from loanlink.services.user_directory import UserDirectory

logger = logging.getLogger(__name__)


async def require_identity(
    request: Request,
    settings: Settings = Depends(get_settings),
    codec: SessionTokenCodec = Depends(get_token_codec),
) -> dict:
    """Verified identity claim from the session cookie."""
    token = request.cookies.get(settings.session_cookie_name)
    if not token:
        raise UnauthenticatedError()
    try:
        return codec.verify(token)
    except SessionTokenError:
        logger.info("Rejected session token", extra={"path": request.url.path})
        raise UnauthenticatedError()


async def get_caller(
    identity: dict = Depends(require_identity),
    users: UserDirectory = Depends(get_user_directory),
) -> Caller:
    """Identity plus the role currently stored for its email."""
    email = identity.get("email")
    if not isinstance(email, str) or not email:
        raise UnauthenticatedError()
    return Caller(email=email, role=await users.role_of(email))
