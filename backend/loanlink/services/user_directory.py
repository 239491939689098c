"""User Directory — upsert-by-email registration and role lookup.

Invariants:
    - register() never overwrites: an existing email returns the "already exists" signal
      and leaves the stored record untouched
    - Self-registration always yields a borrower; manager and admin are granted by an admin
    - role_of() falls back to borrower for unknown users and unknown stored roles
"""

import logging

from loanlink.core.domain_types import Email, Operation, Role, UpdateResult
from loanlink.core.errors import AccessDeniedError, DatabaseError, ErrorContext
from loanlink.core.repository_protocols import Store
from loanlink.services.clock import Clock, utcnow

logger = logging.getLogger(__name__)

SELF_REGISTRATION_ROLES = frozenset({Role.BORROWER})
ALREADY_EXISTS = "user already exists"


class UserDirectory:
    def __init__(self, store: Store, clock: Clock = utcnow):
        self.store = store
        self._clock = clock

    async def register(
        self,
        email: Email,
        name: str | None = None,
        photo_url: str | None = None,
        role: Role = Role.BORROWER,
    ) -> dict:
        if role not in SELF_REGISTRATION_ROLES:
            raise AccessDeniedError(
                Operation.CHANGE_USER_ROLE.value, ErrorContext(user_email=email),
            )
        if await self.get(email) is not None:
            return {"message": ALREADY_EXISTS, "inserted_id": None}

        try:
            user_id = await self.store.users.insert_one({
                "email": email,
                "name": name,
                "photo_url": photo_url,
                "role": role.value,
                "created_at": self._clock(),
            })
        except DatabaseError:
            # lost a race against a concurrent registration of the same email
            if await self.get(email) is not None:
                return {"message": ALREADY_EXISTS, "inserted_id": None}
            raise
        logger.info("User registered", extra={"user_email": email})
        return {"message": "user created", "inserted_id": user_id}

    async def get(self, email: Email) -> dict | None:
        return await self.store.users.find_one({"email": email})

    async def role_of(self, email: Email) -> Role:
        user = await self.get(email)
        if user is None:
            return Role.BORROWER
        try:
            return Role(user["role"])
        except ValueError:
            return Role.BORROWER

    async def list_users(self) -> list[dict]:
        return await self.store.users.find_many(sort=[("created_at", -1)])

    async def all_emails(self) -> list[Email]:
        return [u["email"] for u in await self.store.users.find_many()]

    async def set_role(self, email: Email, role: Role) -> UpdateResult:
        return await self.store.users.update_one({"email": email}, {"role": role.value})

    async def record_login(self, email: Email) -> UpdateResult:
        return await self.store.users.update_one(
            {"email": email}, {"last_login_at": self._clock()},
        )
