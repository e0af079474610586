# LifeSure - Application and Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""In-process document store for local development and tests."""

import copy
import json
from collections.abc import Mapping
from typing import Any
from uuid import UUID

from beartype import beartype

from .document_store import (
    UNIQUE_KEYS,
    Collection,
    Document,
    DocumentStore,
    DuplicateKeyError,
    Filter,
    SortSpec,
)
from .ids import new_id


def _to_json(value: Any) -> Any:
    """Round-trip through JSON so stored values match the PostgreSQL backend."""
    return json.loads(json.dumps(value, default=str))


def _matches(doc_id: UUID, doc: Document, filter: Filter) -> bool:
    for key, expected in filter.items():
        if key == "id":
            if str(doc_id) != str(expected):
                return False
        elif doc.get(key) != _to_json(expected):
            return False
    return True


def _set_path(doc: Document, path: str, value: Any) -> None:
    parts = path.split(".")
    target = doc
    for part in parts[:-1]:
        nested = target.get(part)
        if not isinstance(nested, dict):
            nested = {}
            target[part] = nested
        target = nested
    target[parts[-1]] = _to_json(value)


class MemoryDocumentStore(DocumentStore):
    """Dict-backed store honouring the same contract as PostgreSQL.

    Every operation completes without awaiting, so each call is atomic with
    respect to other coroutines on the event loop.
    """

    def __init__(self) -> None:
        """Initialize empty collections."""
        self._collections: dict[Collection, dict[UUID, Document]] = {
            collection: {} for collection in Collection
        }

    async def connect(self) -> None:
        """Nothing to acquire."""

    async def disconnect(self) -> None:
        """Nothing to release."""

    @beartype
    def _unique_conflict(
        self,
        collection: Collection,
        candidate: Document,
        skip_id: UUID | None = None,
    ) -> tuple[str, ...] | None:
        for keys in UNIQUE_KEYS.get(collection, ()):
            values = tuple(candidate.get(key) for key in keys)
            if any(value is None for value in values):
                continue
            for doc_id, existing in self._collections[collection].items():
                if doc_id == skip_id:
                    continue
                if tuple(existing.get(key) for key in keys) == values:
                    return keys
        return None

    def _first_match(
        self, collection: Collection, filter: Filter, exclude: Filter | None
    ) -> tuple[UUID, Document] | None:
        for doc_id, doc in self._collections[collection].items():
            if not _matches(doc_id, doc, filter):
                continue
            if exclude and _matches(doc_id, doc, exclude):
                continue
            return doc_id, doc
        return None

    @staticmethod
    def _public(doc_id: UUID, doc: Document) -> Document:
        return {"id": str(doc_id), **copy.deepcopy(doc)}

    @beartype
    async def find_one(self, collection: Collection, filter: Filter) -> Document | None:
        """Return the first document matching ``filter``."""
        match = self._first_match(collection, filter, None)
        return self._public(*match) if match else None

    @beartype
    async def find(
        self,
        collection: Collection,
        filter: Filter | None = None,
        *,
        sort: SortSpec | None = None,
        limit: int | None = None,
    ) -> list[Document]:
        """Return matching documents, in insertion order unless sorted."""
        docs = [
            self._public(doc_id, doc)
            for doc_id, doc in self._collections[collection].items()
            if _matches(doc_id, doc, filter or {})
        ]
        for key, direction in reversed(sort or ()):
            present = [doc for doc in docs if doc.get(key) is not None]
            missing = [doc for doc in docs if doc.get(key) is None]
            present.sort(key=lambda doc: doc[key], reverse=direction < 0)
            docs = present + missing
        return docs[:limit] if limit is not None else docs

    @beartype
    async def insert_one(self, collection: Collection, document: Document) -> UUID:
        """Insert a document and return its id."""
        body = _to_json({k: v for k, v in document.items() if k != "id"})
        doc_id = UUID(str(document["id"])) if document.get("id") else new_id()
        if doc_id in self._collections[collection]:
            raise DuplicateKeyError(collection.value, ("id",))
        keys = self._unique_conflict(collection, body)
        if keys:
            raise DuplicateKeyError(collection.value, keys)
        self._collections[collection][doc_id] = body
        return doc_id

    @beartype
    def _apply(
        self,
        collection: Collection,
        filter: Filter,
        set: Mapping[str, Any] | None,
        inc: Mapping[str, int] | None,
        exclude: Filter | None,
    ) -> tuple[UUID, Document] | None:
        match = self._first_match(collection, filter, exclude)
        if match is None:
            return None
        doc_id, current = match
        updated = copy.deepcopy(current)
        for path, value in (set or {}).items():
            _set_path(updated, path, value)
        for key, amount in (inc or {}).items():
            updated[key] = (updated.get(key) or 0) + amount
        keys = self._unique_conflict(collection, updated, skip_id=doc_id)
        if keys:
            raise DuplicateKeyError(collection.value, keys)
        self._collections[collection][doc_id] = updated
        return doc_id, updated

    @beartype
    async def update_one(
        self,
        collection: Collection,
        filter: Filter,
        *,
        set: Mapping[str, Any] | None = None,
        inc: Mapping[str, int] | None = None,
        exclude: Filter | None = None,
    ) -> int:
        """Update one document and return the matched count."""
        return 0 if self._apply(collection, filter, set, inc, exclude) is None else 1

    @beartype
    async def find_one_and_update(
        self,
        collection: Collection,
        filter: Filter,
        *,
        set: Mapping[str, Any] | None = None,
        inc: Mapping[str, int] | None = None,
        exclude: Filter | None = None,
    ) -> Document | None:
        """Update one document and return it as written."""
        applied = self._apply(collection, filter, set, inc, exclude)
        return self._public(*applied) if applied else None

    @beartype
    async def delete_one(self, collection: Collection, filter: Filter) -> int:
        """Delete one document and return the deleted count."""
        match = self._first_match(collection, filter, None)
        if match is None:
            return 0
        del self._collections[collection][match[0]]
        return 1

    @beartype
    async def count(self, collection: Collection, filter: Filter | None = None) -> int:
        """Count documents matching ``filter``."""
        return sum(
            1
            for doc_id, doc in self._collections[collection].items()
            if _matches(doc_id, doc, filter or {})
        )
