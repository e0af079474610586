# LifeSure - Application and Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Claim models.

At most one claim exists per ``(policy_id, customerEmail)`` pair; the store
enforces this with a unique key, the service reports it as a conflict.
"""

from datetime import datetime
from enum import Enum

from pydantic import EmailStr, Field

from .base import DocumentModel, RequestModel, utc_now


class ClaimStatus(str, Enum):
    """Resolution state of a claim."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class ClaimCreate(RequestModel):
    """Customer's claim against a policy they hold."""

    policy_id: str = Field(..., min_length=1, alias="policy_id")
    customer_email: EmailStr
    reason: str = Field(..., min_length=1, max_length=5000)
    document: str | None = Field(default=None, max_length=2000)


class ClaimResolution(RequestModel):
    """Agent or administrator decision on a claim."""

    status: str = Field(..., min_length=1, max_length=50)
    agent_email: str = Field(default="", max_length=320)


class Claim(DocumentModel):
    """Claim as stored."""

    policy_id: str = Field(..., alias="policy_id")
    customer_email: str
    reason: str
    document: str | None = None
    status: ClaimStatus = ClaimStatus.PENDING
    created_at: datetime = Field(default_factory=utc_now)
    approved_at: datetime | None = None
    agent_email: str | None = None
    resolved_at: datetime | None = None
