# LifeSure - Application and Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Payment recorder.

Creates gateway payment intents and reconciles completed ones with the
application they pay for. The gateway is the source of truth for the amount
and status; the caller's figures are never trusted.

The transaction row is written before the application: it claims the intent
for one application. A crash between the two leaves a transaction for an
application still Due; reconciling the same intent again completes it.
"""

from datetime import datetime

from beartype import beartype

from ..core.document_store import Collection, DocumentStore, DuplicateKeyError
from ..core.errors import ServiceError
from ..core.ids import parse_id
from ..core.logging_utils import get_logger
from ..core.payment_gateway import PaymentGateway, PaymentIntent
from ..core.result_types import Err, Ok, Result
from ..models.application import Application, PaymentStatus
from ..models.base import json_instant, normalize_email, utc_now
from ..models.transaction import PaymentReceipt, Transaction
from .application_service import ApplicationService
from .billing import next_due_date
from .guards import storage_guard

logger = get_logger(__name__)


def to_minor_units(amount: int | float) -> int:
    """Major currency units to the gateway's integer minor units."""
    return int(round(amount * 100))


class PaymentService:
    """Service for premium payments and their audit trail."""

    def __init__(
        self,
        store: DocumentStore,
        gateway: PaymentGateway,
        applications: ApplicationService,
        *,
        currency: str = "usd",
    ) -> None:
        """Initialize with the store, gateway and application lifecycle."""
        self._store = store
        self._gateway = gateway
        self._applications = applications
        self._currency = currency

    @beartype
    async def create_intent(
        self, policy_id: str, policy_name: str, amount: int | float, customer_email: str
    ) -> Result[str, ServiceError]:
        """Create a card payment intent and return its client secret."""
        if amount <= 0:
            return Err(ServiceError.validation("amount must be greater than zero", "amount"))

        intent_result = await self._gateway.create_payment_intent(
            to_minor_units(amount),
            self._currency,
            customer_email,
            {"policyId": policy_id, "policyName": policy_name},
        )
        if isinstance(intent_result, Err):
            return intent_result
        intent = intent_result.value
        if not intent.client_secret:
            return Err(ServiceError.external("Payment gateway returned no client secret"))

        logger.info("Payment intent %s created for %s", intent.id, customer_email)
        return Ok(intent.client_secret)

    @storage_guard("reconcile_payment")
    @beartype
    async def reconcile(
        self,
        payment_intent_id: str | None,
        email: str | None,
        policy_id: str | None,
        application_id: str | None,
        now: datetime | None = None,
    ) -> Result[PaymentReceipt, ServiceError]:
        """Record a succeeded payment against the customer's application.

        The next due date is one period after ``now``, whatever the previous
        due date was. Reconciling the same intent again for the same
        application rewrites the payment fields and returns the transaction
        recorded the first time; an intent already recorded for another
        application is a conflict and writes nothing.
        """
        intent_ref = (payment_intent_id or "").strip()
        for name, value in (
            ("paymentIntentId", intent_ref),
            ("email", email),
            ("policyId", policy_id),
            ("applicationId", application_id),
        ):
            if value is None or not value.strip():
                return Err(ServiceError.missing_field(name))

        normalized = normalize_email(email)
        if isinstance(normalized, Err):
            return normalized
        customer_email = normalized.value
        parsed_application = parse_id(application_id, "applicationId")
        if isinstance(parsed_application, Err):
            return parsed_application
        parsed_policy = parse_id(policy_id, "policyId")
        if isinstance(parsed_policy, Err):
            return parsed_policy

        intent_result = await self._gateway.retrieve_payment_intent(intent_ref)
        if isinstance(intent_result, Err):
            return intent_result
        intent = intent_result.value
        if not intent.succeeded:
            logger.warning("Refusing to record intent %s in state %s", intent.id, intent.status)
            return Err(
                ServiceError.validation(
                    f"Payment {intent.id} has not succeeded (status: {intent.status})",
                    "paymentIntentId",
                )
            )

        found = await self._applications.get_for_customer(
            parsed_application.value, customer_email
        )
        if isinstance(found, Err):
            return found
        application = found.value
        policy_ref = str(parsed_policy.value)
        if application.policy_id is not None and application.policy_id != policy_ref:
            return Err(
                ServiceError.validation(
                    f"Application {application.id} is not for policy {policy_ref}",
                    "policyId",
                )
            )

        now = now or utc_now()
        claimed = await self._claim_transaction(
            intent, application, policy_ref, customer_email, now
        )
        if isinstance(claimed, Err):
            return claimed
        transaction = claimed.value

        next_due = next_due_date(now, application.payment.frequency)
        recorded = await self._applications.record_payment(
            parsed_application.value,
            customer_email,
            {
                "payment.status": PaymentStatus.PAID.value,
                "payment.lastPaymentDate": json_instant(now),
                "payment.nextPaymentDue": json_instant(next_due),
                "payment.paymentIntentId": intent.id,
            },
        )
        if isinstance(recorded, Err):
            return recorded

        logger.info(
            "Payment %s recorded for application %s, next due %s",
            intent.id,
            application.id,
            next_due.isoformat(),
        )
        return Ok(PaymentReceipt(transaction=transaction, next_payment_due=next_due))

    async def _claim_transaction(
        self,
        intent: PaymentIntent,
        application: Application,
        policy_ref: str,
        customer_email: str,
        now: datetime,
    ) -> Result[Transaction, ServiceError]:
        """Insert the audit row that binds ``intent`` to ``application``.

        The unique transaction id decides concurrent claims. A row already
        bound to the same application is returned as is.
        """
        document = {
            "transactionId": intent.id,
            "applicationId": application.id,
            "policyId": policy_ref,
            "customerEmail": customer_email,
            "policyName": (
                application.policy_details.title
                if application.policy_details
                else intent.metadata.get("policyName", "")
            ),
            "paidAmount": intent.amount / 100,
            "currency": intent.currency,
            "date": json_instant(now),
            "status": intent.status,
        }
        try:
            transaction_id = await self._store.insert_one(Collection.TRANSACTIONS, document)
        except DuplicateKeyError:
            existing = await self._store.find_one(
                Collection.TRANSACTIONS, {"transactionId": intent.id}
            )
            if existing is None:
                raise
            transaction = Transaction.from_document(existing)
            if transaction.application_id != application.id:
                logger.warning(
                    "Intent %s already paid application %s; refusing it for %s",
                    intent.id,
                    transaction.application_id,
                    application.id,
                )
                return Err(
                    ServiceError.conflict(
                        f"Payment {intent.id} is already recorded for another application"
                    )
                )
            logger.info("Intent %s already recorded; returning existing transaction", intent.id)
            return Ok(transaction)
        return Ok(Transaction.from_document({"id": str(transaction_id), **document}))

    @storage_guard("list_transactions")
    @beartype
    async def list_transactions(
        self, email: str | None = None
    ) -> Result[list[Transaction], ServiceError]:
        """Transactions in storage order, optionally for one customer."""
        filter = {"customerEmail": email} if email else {}
        documents = await self._store.find(Collection.TRANSACTIONS, filter)
        return Ok([Transaction.from_document(document) for document in documents])
