# LifeSure - Application and Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Application lifecycle service.

Owns submission, agent assignment and status transitions. The purchase
counter of the referenced policy moves by exactly one on each transition
into Approved: the status write is a conditional update that only matches
applications not already Approved, and only the caller whose write matched
increments the counter.
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from beartype import beartype

from ..core.document_store import DESCENDING, Collection, Document, DocumentStore
from ..core.errors import ServiceError
from ..core.ids import parse_id
from ..core.logging_utils import get_logger
from ..core.result_types import Err, Ok, Result
from ..models.application import (
    Application,
    ApplicationStatus,
    ApplicationSubmission,
    PaymentState,
)
from ..models.base import json_instant, normalize_email, utc_now
from ..models.policy import PolicySnapshot
from .guards import storage_guard
from .policy_catalog import PolicyCatalog

logger = get_logger(__name__)

_STATUS_VALUES = ", ".join(status.value for status in ApplicationStatus)


class ApplicationService:
    """Service for application lifecycle business logic."""

    def __init__(self, store: DocumentStore, catalog: PolicyCatalog) -> None:
        """Initialize with the store and the catalog used for snapshots."""
        self._store = store
        self._catalog = catalog

    @storage_guard("submit_application")
    @beartype
    async def submit(
        self, submission: ApplicationSubmission, now: datetime | None = None
    ) -> Result[UUID, ServiceError]:
        """Insert a Pending application carrying a snapshot of its policy.

        Submissions without ``policy_id`` skip the snapshot and start with a
        zero premium.
        """
        now = now or utc_now()
        snapshot: PolicySnapshot | None = None
        policy_ref: str | None = None

        if submission.policy_id is not None:
            policy_result = await self._catalog.get(submission.policy_id)
            if isinstance(policy_result, Err):
                return policy_result
            policy = policy_result.value
            snapshot = PolicySnapshot.capture(policy)
            policy_ref = policy.id

        payment = PaymentState(
            amount=snapshot.base_premium if snapshot else 0,
            frequency=submission.frequency,
            next_payment_due=now,
        )
        document = submission.model_dump(
            mode="json", by_alias=True, exclude={"frequency", "policy_id"}
        )
        document.update(
            {
                "policy_id": policy_ref,
                "status": ApplicationStatus.PENDING.value,
                "agent": None,
                "assignedAt": None,
                "createdAt": json_instant(now),
                "policyDetails": (
                    snapshot.model_dump(mode="json", by_alias=True) if snapshot else None
                ),
                "payment": payment.model_dump(mode="json", by_alias=True),
            }
        )

        application_id = await self._store.insert_one(Collection.APPLICATIONS, document)
        logger.info(
            "Application %s submitted by %s for policy %s",
            application_id,
            submission.email,
            policy_ref,
        )
        return Ok(application_id)

    @storage_guard("assign_agent")
    @beartype
    async def assign_agent(
        self, application_id: str | UUID, agent_email: str, now: datetime | None = None
    ) -> Result[None, ServiceError]:
        """Set or overwrite the agent handling an application."""
        agent_email = agent_email.strip()
        if not agent_email:
            return Err(ServiceError.missing_field("agent"))
        parsed = parse_id(application_id, "applicationId")
        if isinstance(parsed, Err):
            return parsed

        matched = await self._store.update_one(
            Collection.APPLICATIONS,
            {"id": parsed.value},
            set={"agent": agent_email, "assignedAt": json_instant(now or utc_now())},
        )
        if not matched:
            return Err(ServiceError.not_found("Application", parsed.value))

        logger.info("Application %s assigned to %s", parsed.value, agent_email)
        return Ok(None)

    @storage_guard("set_application_status")
    @beartype
    async def set_status(
        self, application_id: str | UUID, new_status: str
    ) -> Result[Application, ServiceError]:
        """Move an application to ``new_status``.

        Rejecting an approved application is allowed and leaves the purchase
        counter alone; it counts applications ever approved.
        """
        try:
            status = ApplicationStatus(new_status)
        except ValueError:
            return Err(
                ServiceError.validation(
                    f"Invalid status {new_status!r}; expected one of {_STATUS_VALUES}",
                    "status",
                )
            )
        parsed = parse_id(application_id, "applicationId")
        if isinstance(parsed, Err):
            return parsed
        filter = {"id": parsed.value}

        if status is ApplicationStatus.APPROVED:
            return await self._approve(filter, {})

        document = await self._store.find_one_and_update(
            Collection.APPLICATIONS, filter, set={"status": status.value}
        )
        if document is None:
            return Err(ServiceError.not_found("Application", parsed.value))

        logger.info("Application %s is now %s", parsed.value, status.value)
        return Ok(Application.from_document(document))

    @storage_guard("record_application_payment")
    @beartype
    async def record_payment(
        self, application_id: UUID, email: str, payment_fields: dict[str, Any]
    ) -> Result[Application, ServiceError]:
        """Write reconciled payment fields; a paid application is Approved.

        The payment fields are a blind overwrite. The move to Approved, and
        therefore the counter increment, happens at most once.
        """
        return await self._approve({"id": application_id, "email": email}, payment_fields)

    async def _approve(
        self, filter: dict[str, Any], extra: dict[str, Any]
    ) -> Result[Application, ServiceError]:
        document = await self._store.find_one_and_update(
            Collection.APPLICATIONS,
            filter,
            set={**extra, "status": ApplicationStatus.APPROVED.value},
            exclude={"status": ApplicationStatus.APPROVED.value},
        )
        if document is not None:
            application = Application.from_document(document)
            logger.info("Application %s approved", application.id)
            if application.policy_id:
                counted = await self._catalog.increment_purchase_count(application.policy_id)
                if isinstance(counted, Err):
                    return counted
            return Ok(application)

        # Already Approved, or absent.
        if extra:
            current = await self._store.find_one_and_update(
                Collection.APPLICATIONS, filter, set=extra
            )
        else:
            current = await self._store.find_one(Collection.APPLICATIONS, filter)
        if current is None:
            return Err(ServiceError.not_found("Application", filter["id"]))
        return Ok(Application.from_document(current))

    @storage_guard("get_application")
    @beartype
    async def get(self, application_id: str | UUID) -> Result[Application, ServiceError]:
        """Get an application by id."""
        parsed = parse_id(application_id, "applicationId")
        if isinstance(parsed, Err):
            return parsed

        document = await self._store.find_one(Collection.APPLICATIONS, {"id": parsed.value})
        if document is None:
            return Err(ServiceError.not_found("Application", parsed.value))
        return Ok(Application.from_document(document))

    @storage_guard("find_customer_application")
    @beartype
    async def get_for_customer(
        self, application_id: UUID, email: str
    ) -> Result[Application, ServiceError]:
        """Get an application only if it belongs to ``email``."""
        owner = normalize_email(email)
        if isinstance(owner, Err):
            return Err(ServiceError.not_found("Application", application_id))
        document = await self._store.find_one(
            Collection.APPLICATIONS, {"id": application_id, "email": owner.value}
        )
        if document is None:
            return Err(ServiceError.not_found("Application", application_id))
        return Ok(Application.from_document(document))

    @storage_guard("list_applications")
    @beartype
    async def list_applications(
        self,
        email: str | None = None,
        agent: str | None = None,
        status: str | None = None,
    ) -> Result[list[Application], ServiceError]:
        """Applications matching the given fields, newest first."""
        filter: Document = {}
        if email:
            filter["email"] = email
        if agent:
            filter["agent"] = agent
        if status:
            filter["status"] = status
        documents = await self._store.find(
            Collection.APPLICATIONS, filter, sort=[("createdAt", DESCENDING)]
        )
        return Ok([Application.from_document(document) for document in documents])
