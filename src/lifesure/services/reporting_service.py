# LifeSure - Application and Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Reporting views for agent dashboards and catalog popularity.

Everything here is derived from lifecycle documents and never written back.
"""

from datetime import datetime

from beartype import beartype

from ..core.document_store import DESCENDING, Collection, DocumentStore
from ..core.errors import ServiceError
from ..core.result_types import Ok, Result
from ..models.application import Application, ApplicationStatus
from ..models.base import utc_now
from ..models.claim import Claim
from ..models.policy import Policy
from ..models.report import AgentOverview
from .billing import add_months
from .guards import storage_guard

RECENT_LIMIT = 5


def _month_window(now: datetime) -> tuple[datetime, datetime]:
    start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return start, add_months(start, 1)


class ReportingService:
    """Derived views over applications, claims and policies."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    @storage_guard("agent_overview")
    @beartype
    async def agent_overview(
        self, agent_email: str, now: datetime | None = None
    ) -> Result[AgentOverview, ServiceError]:
        """Workload of ``agent_email`` and its activity in the month of ``now``."""
        start, end = _month_window(now or utc_now())

        documents = await self._store.find(
            Collection.APPLICATIONS, {"agent": agent_email}, sort=[("createdAt", DESCENDING)]
        )
        applications = [Application.from_document(document) for document in documents]

        status_counts = {status.value: 0 for status in ApplicationStatus}
        for application in applications:
            status_counts[application.status.value] += 1

        assigned_this_month = sum(
            1
            for application in applications
            if application.assigned_at is not None and start <= application.assigned_at < end
        )

        claim_documents = await self._store.find(Collection.CLAIMS, {"agentEmail": agent_email})
        claims_resolved = sum(
            1
            for claim in (Claim.from_document(document) for document in claim_documents)
            if claim.resolved_at is not None and start <= claim.resolved_at < end
        )

        return Ok(
            AgentOverview(
                agent_email=agent_email,
                status_counts=status_counts,
                assigned_this_month=assigned_this_month,
                claims_resolved_this_month=claims_resolved,
                recent_applications=applications[:RECENT_LIMIT],
            )
        )

    @storage_guard("policy_popularity")
    @beartype
    async def policy_popularity(self, limit: int = 10) -> Result[list[Policy], ServiceError]:
        """Policies with the most approvals first."""
        documents = await self._store.find(
            Collection.POLICIES, sort=[("purchaseCount", DESCENDING)], limit=max(limit, 0)
        )
        return Ok([Policy.from_document(document) for document in documents])
