# LifeSure - Application and Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Policy catalog service.

Holds policy definitions and their purchase counters. Policies are cached by
id; every write path drops the cached copy so that a snapshot taken at
application time always sees the latest committed terms.
"""

from typing import Any
from uuid import UUID

from beartype import beartype
from pydantic import ValidationError

from ..core.cache import Cache, CacheKeys, MemoryCache
from ..core.document_store import Collection, DocumentStore
from ..core.errors import ServiceError
from ..core.ids import parse_id
from ..core.logging_utils import get_logger
from ..core.result_types import Err, Ok, Result
from ..models.base import json_instant, utc_now
from ..models.policy import Policy, PolicyCreate, PolicyUpdate
from .guards import storage_guard

logger = get_logger(__name__)


class PolicyCatalog:
    """Service for policy catalog business logic."""

    def __init__(
        self, store: DocumentStore, cache: Cache | MemoryCache, *, cache_ttl: int = 3600
    ) -> None:
        """Initialize the catalog with its store and cache."""
        self._store = store
        self._cache = cache
        self._cache_ttl = cache_ttl

    @storage_guard("create_policy")
    @beartype
    async def create(self, policy_data: PolicyCreate) -> Result[Policy, ServiceError]:
        """Add a policy; its purchase counter starts at zero."""
        document: dict[str, Any] = policy_data.model_dump(mode="json", by_alias=True)
        document["purchaseCount"] = 0
        document["createdAt"] = json_instant(utc_now())
        policy_id = await self._store.insert_one(Collection.POLICIES, document)
        logger.info("Policy %s created: %s", policy_id, policy_data.title)
        return Ok(Policy.from_document({"id": str(policy_id), **document}))

    @storage_guard("get_policy")
    @beartype
    async def get(self, policy_id: str | UUID) -> Result[Policy, ServiceError]:
        """Get a policy by id, from cache when possible."""
        parsed = parse_id(policy_id, "policy_id")
        if isinstance(parsed, Err):
            return parsed
        key = CacheKeys.policy(parsed.value)

        cached = await self._cache.get(key)
        if cached:
            return Ok(Policy.from_document(cached))

        document = await self._store.find_one(Collection.POLICIES, {"id": parsed.value})
        if document is None:
            return Err(ServiceError.not_found("Policy", parsed.value))

        policy = Policy.from_document(document)
        await self._cache.set(key, policy.to_response(), self._cache_ttl)
        return Ok(policy)

    @storage_guard("list_policies")
    @beartype
    async def list_policies(
        self, category: str | None = None
    ) -> Result[list[Policy], ServiceError]:
        """All policies in storage order, optionally within one category."""
        filter = {"category": category} if category else {}
        documents = await self._store.find(Collection.POLICIES, filter)
        return Ok([Policy.from_document(document) for document in documents])

    @storage_guard("update_policy")
    @beartype
    async def update(
        self, policy_id: str | UUID, policy_update: PolicyUpdate
    ) -> Result[Policy, ServiceError]:
        """Apply a partial update.

        The age window is re-checked against the merged terms, so sending only
        ``minAge`` cannot invert an existing ``maxAge``. Applications keep the
        snapshot they were submitted with.
        """
        existing = await self.get(policy_id)
        if isinstance(existing, Err):
            return existing
        policy = existing.value

        changes = policy_update.changes()
        if not changes:
            return Ok(policy)

        try:
            Policy.from_document({**policy.to_response(), **changes})
        except ValidationError as e:
            return Err(ServiceError.from_validation_exception(e))

        updated = await self._store.find_one_and_update(
            Collection.POLICIES, {"id": policy.id}, set=changes
        )
        await self._cache.delete(CacheKeys.policy(policy.id))
        if updated is None:
            return Err(ServiceError.not_found("Policy", policy.id))

        logger.info("Policy %s updated: %s", policy.id, ", ".join(sorted(changes)))
        return Ok(Policy.from_document(updated))

    @storage_guard("delete_policy")
    @beartype
    async def delete(self, policy_id: str | UUID) -> Result[None, ServiceError]:
        """Remove a policy from the catalog."""
        parsed = parse_id(policy_id, "policy_id")
        if isinstance(parsed, Err):
            return parsed

        deleted = await self._store.delete_one(Collection.POLICIES, {"id": parsed.value})
        await self._cache.delete(CacheKeys.policy(parsed.value))
        if not deleted:
            return Err(ServiceError.not_found("Policy", parsed.value))

        logger.info("Policy %s deleted", parsed.value)
        return Ok(None)

    @storage_guard("increment_purchase_count")
    @beartype
    async def increment_purchase_count(self, policy_id: str | UUID) -> Result[bool, ServiceError]:
        """Atomically add one to the purchase counter.

        Returns ``Ok(False)`` when the policy no longer exists; the approval
        that triggered the increment still stands.
        """
        parsed = parse_id(policy_id, "policy_id")
        if isinstance(parsed, Err):
            return parsed

        matched = await self._store.update_one(
            Collection.POLICIES, {"id": parsed.value}, inc={"purchaseCount": 1}
        )
        await self._cache.delete(CacheKeys.policy(parsed.value))
        if not matched:
            logger.warning("Purchase count not incremented: policy %s is gone", parsed.value)
            return Ok(False)

        logger.info("Purchase count incremented for policy %s", parsed.value)
        return Ok(True)
