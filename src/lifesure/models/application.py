# LifeSure - Application and Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Application domain models with the embedded payment sub-state.

Lifecycle:

- ``status``: Pending -> Approved | Rejected (Approved -> Rejected allowed).
- ``payment.status``: Due -> Paid on first reconciliation, then Paid -> Paid
  on each renewal while ``nextPaymentDue`` advances.
"""

from datetime import datetime
from enum import Enum

from pydantic import EmailStr, Field

from .base import BaseModelConfig, DocumentModel, RequestModel, utc_now
from .policy import PolicySnapshot


class ApplicationStatus(str, Enum):
    """Review state of an application."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class PaymentStatus(str, Enum):
    """Premium state of an application."""

    DUE = "Due"
    PAID = "Paid"


class PaymentFrequency(str, Enum):
    """Billing period for premiums."""

    MONTHLY = "monthly"
    YEARLY = "yearly"


class PaymentState(BaseModelConfig):
    """Premium bookkeeping embedded in every application."""

    status: PaymentStatus = PaymentStatus.DUE
    amount: float = Field(default=0, ge=0, description="Premium per period")
    frequency: PaymentFrequency = PaymentFrequency.MONTHLY
    last_payment_date: datetime | None = None
    next_payment_due: datetime
    payment_intent_id: str | None = None


class ApplicationSubmission(RequestModel):
    """Applicant-supplied fields; name, email and phone are mandatory."""

    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=30)
    address: str = Field(default="", max_length=500)
    nid: str = Field(default="", max_length=50, description="National ID")
    nominee_name: str = Field(default="", max_length=200)
    nominee_relation: str = Field(default="", max_length=100)
    health_disclosure: list[str] = Field(default_factory=list, max_length=50)
    policy_id: str | None = Field(default=None, alias="policy_id")
    frequency: PaymentFrequency = PaymentFrequency.MONTHLY


class Application(DocumentModel):
    """Application as stored."""

    name: str
    email: str
    phone: str
    address: str = ""
    nid: str = ""
    nominee_name: str = ""
    nominee_relation: str = ""
    health_disclosure: list[str] = Field(default_factory=list)
    policy_id: str | None = Field(default=None, alias="policy_id")
    status: ApplicationStatus = ApplicationStatus.PENDING
    agent: str | None = None
    assigned_at: datetime | None = None
    created_at: datetime = Field(default_factory=utc_now)
    policy_details: PolicySnapshot | None = None
    payment: PaymentState


class AgentAssignment(RequestModel):
    """Body of the assign-agent call."""

    agent: str = Field(..., min_length=1, max_length=320)


class StatusChange(RequestModel):
    """Body of the status call; the value is checked by the service."""

    status: str = Field(..., min_length=1, max_length=50)
