# LifeSure - Application and Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Claim lifecycle service."""

from datetime import datetime
from uuid import UUID

from beartype import beartype

from ..core.document_store import (
    DESCENDING,
    Collection,
    Document,
    DocumentStore,
    DuplicateKeyError,
)
from ..core.errors import ServiceError
from ..core.ids import parse_id
from ..core.logging_utils import get_logger
from ..core.result_types import Err, Ok, Result
from ..models.base import json_instant, utc_now
from ..models.claim import Claim, ClaimCreate, ClaimStatus
from .guards import storage_guard
from .policy_catalog import PolicyCatalog

logger = get_logger(__name__)

_DUPLICATE_MESSAGE = "Claim already submitted for this policy"
_RESOLUTIONS = (ClaimStatus.APPROVED, ClaimStatus.REJECTED)


class ClaimService:
    """Service for claim business logic."""

    def __init__(self, store: DocumentStore, catalog: PolicyCatalog) -> None:
        """Initialize with the store and the catalog whose counters claims move."""
        self._store = store
        self._catalog = catalog

    @storage_guard("file_claim")
    @beartype
    async def file_claim(
        self, claim_data: ClaimCreate, now: datetime | None = None
    ) -> Result[Claim, ServiceError]:
        """File a Pending claim; one per customer per policy.

        The lookup gives the usual answer fast; the unique key on
        ``(policy_id, customerEmail)`` settles concurrent submissions.
        """
        parsed = parse_id(claim_data.policy_id, "policy_id")
        if isinstance(parsed, Err):
            return parsed
        key = {"policy_id": str(parsed.value), "customerEmail": claim_data.customer_email}

        if await self._store.find_one(Collection.CLAIMS, key) is not None:
            logger.warning(
                "Duplicate claim from %s on %s", claim_data.customer_email, parsed.value
            )
            return Err(ServiceError.conflict(_DUPLICATE_MESSAGE))

        document: Document = {
            **key,
            "reason": claim_data.reason,
            "document": claim_data.document,
            "status": ClaimStatus.PENDING.value,
            "createdAt": json_instant(now or utc_now()),
            "approvedAt": None,
            "agentEmail": None,
            "resolvedAt": None,
        }
        try:
            claim_id = await self._store.insert_one(Collection.CLAIMS, document)
        except DuplicateKeyError:
            logger.warning("Concurrent duplicate claim from %s", claim_data.customer_email)
            return Err(ServiceError.conflict(_DUPLICATE_MESSAGE))

        logger.info("Claim %s filed by %s", claim_id, claim_data.customer_email)
        return Ok(Claim.from_document({"id": str(claim_id), **document}))

    @storage_guard("resolve_claim")
    @beartype
    async def resolve(
        self,
        claim_id: str | UUID,
        status: str,
        agent_email: str | None = None,
        now: datetime | None = None,
    ) -> Result[Claim, ServiceError]:
        """Approve or reject a claim.

        Approval sets ``approvedAt`` and adds one to the policy's purchase
        counter, once: approving an already approved claim changes nothing.
        """
        if status not in {resolution.value for resolution in _RESOLUTIONS}:
            return Err(
                ServiceError.validation(
                    f"Invalid status {status!r}; expected Approved or Rejected", "status"
                )
            )
        resolution = ClaimStatus(status)
        parsed = parse_id(claim_id, "claimId")
        if isinstance(parsed, Err):
            return parsed

        now = now or utc_now()
        filter = {"id": parsed.value}
        fields = {
            "status": resolution.value,
            "agentEmail": (agent_email or "").strip() or None,
            "resolvedAt": json_instant(now),
        }

        if resolution is ClaimStatus.REJECTED:
            document = await self._store.find_one_and_update(
                Collection.CLAIMS, filter, set={**fields, "approvedAt": None}
            )
            if document is None:
                return Err(ServiceError.not_found("Claim", parsed.value))
            logger.info("Claim %s rejected by %s", parsed.value, fields["agentEmail"])
            return Ok(Claim.from_document(document))

        document = await self._store.find_one_and_update(
            Collection.CLAIMS,
            filter,
            set={**fields, "approvedAt": json_instant(now)},
            exclude={"status": ClaimStatus.APPROVED.value},
        )
        if document is None:
            current = await self._store.find_one(Collection.CLAIMS, filter)
            if current is None:
                return Err(ServiceError.not_found("Claim", parsed.value))
            logger.info("Claim %s already approved", parsed.value)
            return Ok(Claim.from_document(current))

        claim = Claim.from_document(document)
        logger.info("Claim %s approved by %s", claim.id, claim.agent_email)
        counted = await self._catalog.increment_purchase_count(claim.policy_id)
        if isinstance(counted, Err):
            return counted
        return Ok(claim)

    @storage_guard("get_claim")
    @beartype
    async def get(self, claim_id: str | UUID) -> Result[Claim, ServiceError]:
        """Get a claim by id."""
        parsed = parse_id(claim_id, "claimId")
        if isinstance(parsed, Err):
            return parsed

        document = await self._store.find_one(Collection.CLAIMS, {"id": parsed.value})
        if document is None:
            return Err(ServiceError.not_found("Claim", parsed.value))
        return Ok(Claim.from_document(document))

    @storage_guard("list_claims")
    @beartype
    async def list_claims(
        self, customer_email: str | None = None, status: str | None = None
    ) -> Result[list[Claim], ServiceError]:
        """Claims matching the given fields, newest first."""
        filter: Document = {}
        if customer_email:
            filter["customerEmail"] = customer_email
        if status:
            filter["status"] = status
        documents = await self._store.find(
            Collection.CLAIMS, filter, sort=[("createdAt", DESCENDING)]
        )
        return Ok([Claim.from_document(document) for document in documents])
