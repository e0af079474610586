# LifeSure - Application and Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Payment request bodies and the immutable transaction record."""

from datetime import datetime

from pydantic import Field

from .base import BaseModelConfig, DocumentModel, RequestModel, utc_now


class PaymentIntentRequest(RequestModel):
    """Ask the gateway for a card payment of ``amount`` major units."""

    policy_id: str = Field(..., min_length=1)
    policy_name: str = Field(default="", max_length=200)
    amount: float = Field(..., gt=0)
    customer_email: str = Field(..., min_length=1, max_length=320)


class PaymentConfirmation(RequestModel):
    """Client report of a completed payment; checked against the gateway."""

    payment_intent_id: str | None = None
    email: str | None = None
    policy_id: str | None = None
    application_id: str | None = None


class Transaction(DocumentModel):
    """One successful reconciliation, keyed by the gateway intent id."""

    transaction_id: str = Field(..., min_length=1)
    application_id: str
    policy_id: str
    customer_email: str
    policy_name: str = ""
    paid_amount: float = Field(default=0, ge=0)
    currency: str = "usd"
    date: datetime = Field(default_factory=utc_now)
    status: str = "succeeded"


class PaymentReceipt(BaseModelConfig):
    """What a reconciliation hands back to the caller."""

    transaction: Transaction
    next_payment_due: datetime
