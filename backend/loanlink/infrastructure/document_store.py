"""Document Store — collection-style CRUD over SQLAlchemy tables.

Invariants:
    - Documents are plain dicts keyed by column name; ids are generated string UUIDs
    - Filters are equality maps; unknown field names raise ValueError (never silently ignored)
    - modified_count counts only records whose values actually changed: re-applying the
      same values matches but modifies nothing
    - Matching nothing is a zero count, never an exception
    - One session per call: each operation commits or rolls back on its own

Design Decisions:
    - Collection API (find_one / update_many / ...) over repository-per-entity: every
      manager speaks the same narrow contract (core/repository_protocols.py)
    - Update loads matching rows and diffs in Python so modified_count is exact across
      PostgreSQL and SQLite
    - update_* lock the selected rows (FOR UPDATE) so compare-and-set filters hold on PostgreSQL
"""

import logging
from typing import Any, Sequence

from sqlalchemy import select

from loanlink.config import Settings
from loanlink.core.domain_types import DeleteResult, UpdateResult
from loanlink.db.base import Base
from loanlink.infrastructure.database import DatabaseSessionManager
from loanlink.models import Application, Loan, Notification, User

logger = logging.getLogger(__name__)

Document = dict[str, Any]


class DocumentCollection:
    """One named collection backed by one ORM model."""

    def __init__(self, manager: DatabaseSessionManager, model: type[Base]):
        self._manager = manager
        self.model = model
        self.name = model.__tablename__
        self._fields = model.field_names()

    def _check_fields(self, keys) -> None:
        unknown = set(keys) - self._fields
        if unknown:
            raise ValueError(
                f"Unknown field(s) for {self.name}: {', '.join(sorted(unknown))}",
            )

    def _where(self, filter: Document | None):
        filter = filter or {}
        self._check_fields(filter)
        return [getattr(self.model, k) == v for k, v in filter.items()]

    async def find_one(self, filter: Document) -> Document | None:
        async with self._manager.session() as db:
            result = await db.execute(
                select(self.model).where(*self._where(filter)).limit(1),
            )
            row = result.scalar_one_or_none()
            return row.to_document() if row else None

    async def find_many(
        self,
        filter: Document | None = None,
        sort: Sequence[tuple[str, int]] | None = None,
    ) -> list[Document]:
        query = select(self.model).where(*self._where(filter))
        for field, direction in sort or ():
            self._check_fields([field])
            column = getattr(self.model, field)
            query = query.order_by(column.desc() if direction < 0 else column.asc())
        async with self._manager.session() as db:
            result = await db.execute(query)
            return [row.to_document() for row in result.scalars().all()]

    async def insert_one(self, document: Document) -> str:
        self._check_fields(document)
        async with self._manager.session() as db:
            row = self.model(**document)
            db.add(row)
            await db.commit()
            return row.id

    async def insert_many(self, documents: Sequence[Document]) -> list[str]:
        """Single-transaction bulk insert: all documents land or none do."""
        if not documents:
            return []
        for doc in documents:
            self._check_fields(doc)
        async with self._manager.session() as db:
            rows = [self.model(**doc) for doc in documents]
            db.add_all(rows)
            await db.commit()
            return [row.id for row in rows]

    async def _update(
        self, filter: Document, changes: Document, limit: int | None,
    ) -> UpdateResult:
        self._check_fields(changes)
        query = select(self.model).where(*self._where(filter)).with_for_update()
        if limit is not None:
            query = query.limit(limit)
        async with self._manager.session() as db:
            rows = (await db.execute(query)).scalars().all()
            modified = 0
            for row in rows:
                changed = False
                for key, value in changes.items():
                    if getattr(row, key) != value:
                        setattr(row, key, value)
                        changed = True
                modified += int(changed)
            await db.commit()
        return UpdateResult(matched_count=len(rows), modified_count=modified)

    async def update_one(self, filter: Document, changes: Document) -> UpdateResult:
        return await self._update(filter, changes, limit=1)

    async def update_many(self, filter: Document, changes: Document) -> UpdateResult:
        return await self._update(filter, changes, limit=None)

    async def delete_one(self, filter: Document) -> DeleteResult:
        async with self._manager.session() as db:
            result = await db.execute(
                select(self.model).where(*self._where(filter)).limit(1),
            )
            row = result.scalar_one_or_none()
            if row is None:
                return DeleteResult(deleted_count=0)
            await db.delete(row)
            await db.commit()
        return DeleteResult(deleted_count=1)


class ResourceStore:
    """Explicit store handle: acquired once at startup, released at shutdown."""

    def __init__(self, manager: DatabaseSessionManager):
        self.manager = manager
        self.users = DocumentCollection(manager, User)
        self.loans = DocumentCollection(manager, Loan)
        self.applications = DocumentCollection(manager, Application)
        self.notifications = DocumentCollection(manager, Notification)

    @classmethod
    def connect(cls, settings: Settings) -> "ResourceStore":
        engine_kwargs = {}
        if not settings.database_url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=settings.database_pool_size,
                max_overflow=settings.database_max_overflow,
                pool_recycle=3600,
            )
        manager = DatabaseSessionManager(settings.database_url, **engine_kwargs)
        logger.info("Resource store connected")
        return cls(manager)

    async def create_schema(self) -> None:
        """Create all tables (local bootstrap and tests; production uses alembic)."""
        async with self.manager.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def health_check(self) -> bool:
        return await self.manager.health_check()

    async def close(self) -> None:
        await self.manager.dispose()
        logger.info("Resource store closed")
