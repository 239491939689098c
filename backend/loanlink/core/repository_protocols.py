"""Boundary Protocols — the narrow document-store contract consumed by every service.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - Filters are equality maps over document fields; no schema is enforced here
    - update_* / delete_one report counts; matching nothing is a zero count, not an error

Design Decisions:
    - Protocol over ABC: structural subtyping, tests may pass any conforming fake
"""

from typing import Any, Protocol, Sequence

from loanlink.core.domain_types import DeleteResult, UpdateResult

Document = dict[str, Any]
SortSpec = Sequence[tuple[str, int]]


class Collection(Protocol):
    """Contract for one named collection of documents."""
    name: str

    async def find_one(self, filter: Document) -> Document | None: ...
    async def find_many(
        self, filter: Document | None = None, sort: SortSpec | None = None,
    ) -> list[Document]: ...
    async def insert_one(self, document: Document) -> str: ...
    async def insert_many(self, documents: Sequence[Document]) -> list[str]: ...
    async def update_one(self, filter: Document, changes: Document) -> UpdateResult: ...
    async def update_many(self, filter: Document, changes: Document) -> UpdateResult: ...
    async def delete_one(self, filter: Document) -> DeleteResult: ...


class Store(Protocol):
    """The four collections every manager is constructed with."""
    users: Collection
    loans: Collection
    applications: Collection
    notifications: Collection
