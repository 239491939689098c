"""Session Token Codec — issues and verifies signed, time-limited identity tokens.

Invariants:
    - verify(issue(claim)) == claim for every instant strictly before expiry
    - At or after expiry, on signature mismatch, or on a malformed token, verify raises
      SessionTokenError — the three failure modes are indistinguishable to the caller
    - Signature segment must be canonical base64url: no two token strings verify to
      the same signature
    - No server-side session table: a token cannot be revoked before it expires

Design Decisions:
    - HS256 JWT via python-jose with a server-held secret
    - Expiry judged against an injected clock (not jose's wall clock) so expiry is testable
    - `exp` and `iat` are reserved: the codec owns them and strips them on verify
    - jose claim checks (exp, nbf, iat, aud, ...) disabled: every other key, `nbf` included,
      is opaque claim data that must round-trip unchanged
"""

import base64
import binascii
import logging
from collections.abc import Mapping
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from jose import jwt
from jose.exceptions import JOSEError

from loanlink.core.errors import SessionTokenError

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
DEFAULT_TTL = timedelta(days=7)
RESERVED_CLAIMS = ("exp", "iat")

_DECODE_OPTIONS = {
    "verify_signature": True,
    "verify_exp": False,
    "verify_nbf": False,
    "verify_iat": False,
    "verify_aud": False,
    "verify_iss": False,
    "verify_sub": False,
    "verify_jti": False,
    "verify_at_hash": False,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _is_canonical_segment(segment: str) -> bool:
    try:
        raw = base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))
    except (ValueError, binascii.Error):
        return False
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii") == segment


class SessionTokenCodec:
    """Signs identity claims into opaque cookie values and reads them back."""

    def __init__(
        self,
        secret: str,
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], datetime] = _utcnow,
    ):
        if not secret:
            raise ValueError("session secret must not be empty")
        self._secret = secret
        self.ttl = ttl
        self._clock = clock

    @property
    def max_age_seconds(self) -> int:
        return int(self.ttl.total_seconds())

    def issue(self, claim: Mapping[str, Any]) -> str:
        """Serialize claim + validity window into a signed token."""
        if not isinstance(claim, Mapping):
            raise TypeError("identity claim must be a mapping")
        now = self._clock()
        payload = {k: v for k, v in claim.items() if k not in RESERVED_CLAIMS}
        payload["iat"] = int(now.timestamp())
        payload["exp"] = int((now + self.ttl).timestamp())
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def verify(self, token: str) -> dict[str, Any]:
        """Return the original claim, or raise SessionTokenError."""
        if not isinstance(token, str) or token.count(".") != 2:
            raise SessionTokenError()
        if not _is_canonical_segment(token.rsplit(".", 1)[1]):
            raise SessionTokenError()
        try:
            payload = jwt.decode(
                token, self._secret, algorithms=[ALGORITHM], options=_DECODE_OPTIONS,
            )
        except (JOSEError, ValueError) as e:
            logger.debug(f"Session token rejected: {type(e).__name__}")
            raise SessionTokenError()

        exp = payload.get("exp")
        if not isinstance(exp, int) or self._clock().timestamp() >= exp:
            raise SessionTokenError()
        return {k: v for k, v in payload.items() if k not in RESERVED_CLAIMS}
