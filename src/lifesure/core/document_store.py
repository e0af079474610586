# LifeSure - Application and Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Document store contract shared by the PostgreSQL and in-process backends.

Documents are plain JSON-compatible dicts. Each collection addresses its
documents by a UUID exposed under the ``id`` key. Filters are exact-match
maps over top-level fields; ``exclude`` is a second exact-match map the
document must *not* match, which is how services express compare-and-swap
updates ("set Approved unless already Approved") in a single atomic call.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any
from uuid import UUID

Document = dict[str, Any]
Filter = Mapping[str, Any]
SortSpec = Sequence[tuple[str, int]]

ASCENDING = 1
DESCENDING = -1


class Collection(str, Enum):
    """Collections owned by the platform."""

    USERS = "users"
    POLICIES = "policies"
    APPLICATIONS = "applications"
    TRANSACTIONS = "transactions"
    CLAIMS = "claims"


# Storage-level uniqueness; enforced by unique indexes in PostgreSQL and by
# MemoryDocumentStore on insert.
UNIQUE_KEYS: Mapping[Collection, tuple[tuple[str, ...], ...]] = {
    Collection.USERS: (("email",),),
    Collection.CLAIMS: (("policy_id", "customerEmail"),),
    Collection.TRANSACTIONS: (("transactionId",),),
}


class StoreError(Exception):
    """Base class for document store failures."""


class DuplicateKeyError(StoreError):
    """An insert or update would break a unique key."""

    def __init__(self, collection: str, keys: Sequence[str]) -> None:
        self.collection = collection
        self.keys = tuple(keys)
        super().__init__(f"Duplicate key on {collection} ({', '.join(self.keys)})")


class DocumentStore(ABC):
    """Abstract document store with single-document atomicity."""

    @abstractmethod
    async def connect(self) -> None:
        """Acquire underlying resources."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Release underlying resources."""

    @abstractmethod
    async def find_one(self, collection: Collection, filter: Filter) -> Document | None:
        """Return the first document matching ``filter``."""

    @abstractmethod
    async def find(
        self,
        collection: Collection,
        filter: Filter | None = None,
        *,
        sort: SortSpec | None = None,
        limit: int | None = None,
    ) -> list[Document]:
        """Return matching documents, in storage order unless ``sort`` is given."""

    @abstractmethod
    async def insert_one(self, collection: Collection, document: Document) -> UUID:
        """Insert a document and return its id. Raises DuplicateKeyError."""

    @abstractmethod
    async def update_one(
        self,
        collection: Collection,
        filter: Filter,
        *,
        set: Mapping[str, Any] | None = None,
        inc: Mapping[str, int] | None = None,
        exclude: Filter | None = None,
    ) -> int:
        """Update one document and return the matched count (0 or 1)."""

    @abstractmethod
    async def find_one_and_update(
        self,
        collection: Collection,
        filter: Filter,
        *,
        set: Mapping[str, Any] | None = None,
        inc: Mapping[str, int] | None = None,
        exclude: Filter | None = None,
    ) -> Document | None:
        """Update one document and return it as written, or None when unmatched."""

    @abstractmethod
    async def delete_one(self, collection: Collection, filter: Filter) -> int:
        """Delete one document and return the deleted count (0 or 1)."""

    @abstractmethod
    async def count(self, collection: Collection, filter: Filter | None = None) -> int:
        """Count documents matching ``filter``."""

    async def health_check(self) -> bool:
        """Whether the backend answers; in-process stores always do."""
        return True
