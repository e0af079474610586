"""Unit tests for payment intents and reconciliation."""

from datetime import datetime, timezone
from uuid import UUID, uuid4

import pytest

from lifesure.core.document_store import Collection
from lifesure.core.errors import ErrorKind, ServiceError
from lifesure.core.memory_store import MemoryDocumentStore
from lifesure.models.application import (
    ApplicationStatus,
    ApplicationSubmission,
    PaymentStatus,
)
from lifesure.models.policy import Policy
from lifesure.services.application_service import ApplicationService
from lifesure.services.payment_service import PaymentService, to_minor_units
from lifesure.services.policy_catalog import PolicyCatalog
from tests.conftest import FakeGateway

SUBMITTED = datetime(2025, 1, 15, 8, 0, tzinfo=timezone.utc)
PAID = datetime(2025, 3, 5, 14, 0, tzinfo=timezone.utc)


async def submit(
    applications: ApplicationService, policy: Policy, frequency: str = "monthly"
) -> UUID:
    submission = ApplicationSubmission.model_validate(
        {
            "name": "Alice",
            "email": "a@x.com",
            "phone": "555",
            "policy_id": policy.id,
            "frequency": frequency,
        }
    )
    return (await applications.submit(submission, now=SUBMITTED)).unwrap()


async def purchase_count(catalog: PolicyCatalog, policy: Policy) -> int:
    return (await catalog.get(policy.id)).unwrap().purchase_count


class TestToMinorUnits:
    @pytest.mark.parametrize(
        ("amount", "expected"), [(120, 12000), (19.99, 1999), (0.1 + 0.2, 30), (1e-3, 0)]
    )
    def test_rounds_to_cents(self, amount: float, expected: int) -> None:
        assert to_minor_units(amount) == expected


class TestCreateIntent:
    """Client secrets for card payments."""

    async def test_returns_client_secret(
        self, payments: PaymentService, gateway: FakeGateway
    ) -> None:
        secret = (
            await payments.create_intent("p1", "Family Shield", 120.5, "a@x.com")
        ).unwrap()

        assert secret == "pi_1_secret"
        assert gateway.created == [
            {
                "amount": 12050,
                "currency": "usd",
                "receipt_email": "a@x.com",
                "metadata": {"policyId": "p1", "policyName": "Family Shield"},
            }
        ]

    @pytest.mark.parametrize("amount", [0, -5])
    async def test_non_positive_amount(
        self, payments: PaymentService, gateway: FakeGateway, amount: float
    ) -> None:
        error = (await payments.create_intent("p1", "x", amount, "a@x.com")).unwrap_err()

        assert error.kind is ErrorKind.VALIDATION
        assert error.field == "amount"
        assert gateway.created == []

    async def test_whole_number_amount(
        self, payments: PaymentService, gateway: FakeGateway
    ) -> None:
        assert (await payments.create_intent("p1", "x", 120, "a@x.com")).is_ok()

        assert gateway.created[0]["amount"] == 12000

    async def test_gateway_failure(self, payments: PaymentService, gateway: FakeGateway) -> None:
        gateway.error = ServiceError.external("Your card was declined.")

        error = (await payments.create_intent("p1", "x", 10, "a@x.com")).unwrap_err()

        assert error.kind is ErrorKind.EXTERNAL_SERVICE
        assert error.message == "Your card was declined."


class TestReconcile:
    """Recording a succeeded intent against an application."""

    async def test_first_payment_approves_and_schedules_next(
        self,
        payments: PaymentService,
        applications: ApplicationService,
        catalog: PolicyCatalog,
        gateway: FakeGateway,
        policy: Policy,
    ) -> None:
        application_id = await submit(applications, policy)
        gateway.add_intent("pi_ok", 12000, metadata={"policyName": "Family Shield"})

        receipt = (
            await payments.reconcile("pi_ok", "a@x.com", policy.id, str(application_id), now=PAID)
        ).unwrap()

        assert receipt.next_payment_due == datetime(2025, 4, 5, 14, 0, tzinfo=timezone.utc)
        assert receipt.transaction.transaction_id == "pi_ok"
        assert receipt.transaction.paid_amount == 120
        assert receipt.transaction.policy_name == "Family Shield"
        assert receipt.transaction.application_id == str(application_id)

        application = (await applications.get(application_id)).unwrap()
        assert application.status is ApplicationStatus.APPROVED
        assert application.payment.status is PaymentStatus.PAID
        assert application.payment.last_payment_date == PAID
        assert application.payment.next_payment_due == receipt.next_payment_due
        assert application.payment.payment_intent_id == "pi_ok"
        assert await purchase_count(catalog, policy) == 1

    async def test_yearly_renewal(
        self,
        payments: PaymentService,
        applications: ApplicationService,
        gateway: FakeGateway,
        policy: Policy,
    ) -> None:
        application_id = await submit(applications, policy, frequency="yearly")
        gateway.add_intent("pi_year", 144000)

        receipt = (
            await payments.reconcile("pi_year", "a@x.com", policy.id, str(application_id), now=PAID)
        ).unwrap()

        assert receipt.next_payment_due == datetime(2026, 3, 5, 14, 0, tzinfo=timezone.utc)

    async def test_renewal_counts_from_payment_date(
        self,
        payments: PaymentService,
        applications: ApplicationService,
        catalog: PolicyCatalog,
        gateway: FakeGateway,
        policy: Policy,
    ) -> None:
        application_id = await submit(applications, policy)
        gateway.add_intent("pi_1", 12000)
        gateway.add_intent("pi_2", 12000)
        await payments.reconcile("pi_1", "a@x.com", policy.id, str(application_id), now=PAID)

        late = datetime(2025, 7, 31, 9, 0, tzinfo=timezone.utc)
        receipt = (
            await payments.reconcile("pi_2", "a@x.com", policy.id, str(application_id), now=late)
        ).unwrap()

        assert receipt.next_payment_due == datetime(2025, 8, 31, 9, 0, tzinfo=timezone.utc)
        application = (await applications.get(application_id)).unwrap()
        assert application.status is ApplicationStatus.APPROVED
        assert application.payment.payment_intent_id == "pi_2"
        assert await purchase_count(catalog, policy) == 1

    async def test_same_intent_twice_records_one_transaction(
        self,
        payments: PaymentService,
        applications: ApplicationService,
        catalog: PolicyCatalog,
        gateway: FakeGateway,
        store: MemoryDocumentStore,
        policy: Policy,
    ) -> None:
        application_id = await submit(applications, policy)
        gateway.add_intent("pi_dup", 12000)

        first = (
            await payments.reconcile("pi_dup", "a@x.com", policy.id, str(application_id), now=PAID)
        ).unwrap()
        second = (
            await payments.reconcile("pi_dup", "a@x.com", policy.id, str(application_id))
        ).unwrap()

        assert second.transaction.id == first.transaction.id
        assert await store.count(Collection.TRANSACTIONS) == 1
        assert await purchase_count(catalog, policy) == 1

    async def test_already_approved_application_is_not_recounted(
        self,
        payments: PaymentService,
        applications: ApplicationService,
        catalog: PolicyCatalog,
        gateway: FakeGateway,
        policy: Policy,
    ) -> None:
        application_id = await submit(applications, policy)
        await applications.set_status(application_id, "Approved")
        gateway.add_intent("pi_ok", 12000)

        await payments.reconcile("pi_ok", "a@x.com", policy.id, str(application_id), now=PAID)

        application = (await applications.get(application_id)).unwrap()
        assert application.payment.status is PaymentStatus.PAID
        assert await purchase_count(catalog, policy) == 1

    @pytest.mark.parametrize(
        ("field", "arguments"),
        [
            ("paymentIntentId", (None, "a@x.com", "p", "a")),
            ("email", ("pi_ok", "  ", "p", "a")),
            ("policyId", ("pi_ok", "a@x.com", None, "a")),
            ("applicationId", ("pi_ok", "a@x.com", "p", "")),
        ],
    )
    async def test_missing_field_is_named(
        self, payments: PaymentService, field: str, arguments: tuple[str | None, ...]
    ) -> None:
        error = (await payments.reconcile(*arguments)).unwrap_err()

        assert error.kind is ErrorKind.VALIDATION
        assert error.field == field

    async def test_other_customer_cannot_pay(
        self,
        payments: PaymentService,
        applications: ApplicationService,
        gateway: FakeGateway,
        store: MemoryDocumentStore,
        policy: Policy,
    ) -> None:
        application_id = await submit(applications, policy)
        gateway.add_intent("pi_ok", 12000)

        error = (
            await payments.reconcile("pi_ok", "b@x.com", policy.id, str(application_id))
        ).unwrap_err()

        assert error.kind is ErrorKind.NOT_FOUND
        application = (await applications.get(application_id)).unwrap()
        assert application.payment.status is PaymentStatus.DUE
        assert await store.count(Collection.TRANSACTIONS) == 0

    async def test_unsucceeded_intent_is_refused(
        self,
        payments: PaymentService,
        applications: ApplicationService,
        gateway: FakeGateway,
        policy: Policy,
    ) -> None:
        application_id = await submit(applications, policy)
        gateway.add_intent("pi_pending", 12000, status="requires_payment_method")

        error = (
            await payments.reconcile("pi_pending", "a@x.com", policy.id, str(application_id))
        ).unwrap_err()

        assert error.kind is ErrorKind.VALIDATION
        assert error.field == "paymentIntentId"
        application = (await applications.get(application_id)).unwrap()
        assert application.status is ApplicationStatus.PENDING

    async def test_unknown_intent(
        self, payments: PaymentService, applications: ApplicationService, policy: Policy
    ) -> None:
        application_id = await submit(applications, policy)

        error = (
            await payments.reconcile("pi_nope", "a@x.com", policy.id, str(application_id))
        ).unwrap_err()

        assert error.kind is ErrorKind.EXTERNAL_SERVICE

    async def test_malformed_application_id(
        self, payments: PaymentService, policy: Policy
    ) -> None:
        error = (
            await payments.reconcile("pi_ok", "a@x.com", policy.id, "not-an-id")
        ).unwrap_err()

        assert error.kind is ErrorKind.VALIDATION
        assert error.field == "applicationId"

    async def test_intent_cannot_pay_a_second_application(
        self,
        payments: PaymentService,
        applications: ApplicationService,
        catalog: PolicyCatalog,
        gateway: FakeGateway,
        store: MemoryDocumentStore,
        policy: Policy,
    ) -> None:
        first_id = await submit(applications, policy)
        second_id = await submit(applications, policy)
        gateway.add_intent("pi_one", 12000)
        await payments.reconcile("pi_one", "a@x.com", policy.id, str(first_id), now=PAID)

        error = (
            await payments.reconcile("pi_one", "a@x.com", policy.id, str(second_id), now=PAID)
        ).unwrap_err()

        assert error.kind is ErrorKind.CONFLICT
        second = (await applications.get(second_id)).unwrap()
        assert second.status is ApplicationStatus.PENDING
        assert second.payment.status is PaymentStatus.DUE
        assert second.payment.payment_intent_id is None
        assert await store.count(Collection.TRANSACTIONS) == 1
        assert await purchase_count(catalog, policy) == 1

    async def test_policy_must_match_application(
        self,
        payments: PaymentService,
        applications: ApplicationService,
        catalog: PolicyCatalog,
        gateway: FakeGateway,
        store: MemoryDocumentStore,
        policy: Policy,
    ) -> None:
        application_id = await submit(applications, policy)
        gateway.add_intent("pi_ok", 12000)

        error = (
            await payments.reconcile("pi_ok", "a@x.com", str(uuid4()), str(application_id))
        ).unwrap_err()

        assert error.kind is ErrorKind.VALIDATION
        assert error.field == "policyId"
        application = (await applications.get(application_id)).unwrap()
        assert application.status is ApplicationStatus.PENDING
        assert await store.count(Collection.TRANSACTIONS) == 0
        assert await purchase_count(catalog, policy) == 0

    async def test_email_matches_regardless_of_domain_case(
        self,
        payments: PaymentService,
        applications: ApplicationService,
        gateway: FakeGateway,
        policy: Policy,
    ) -> None:
        application_id = await submit(applications, policy)
        gateway.add_intent("pi_ok", 12000)

        receipt = (
            await payments.reconcile("pi_ok", " a@X.COM ", policy.id, str(application_id))
        ).unwrap()

        assert receipt.transaction.customer_email == "a@x.com"
        application = (await applications.get(application_id)).unwrap()
        assert application.payment.status is PaymentStatus.PAID

    async def test_invalid_email(
        self, payments: PaymentService, applications: ApplicationService, policy: Policy
    ) -> None:
        application_id = await submit(applications, policy)

        error = (
            await payments.reconcile("pi_ok", "not-an-email", policy.id, str(application_id))
        ).unwrap_err()

        assert error.kind is ErrorKind.VALIDATION
        assert error.field == "email"


class TestListTransactions:
    async def test_filters_by_customer(
        self,
        payments: PaymentService,
        applications: ApplicationService,
        gateway: FakeGateway,
        policy: Policy,
    ) -> None:
        application_id = await submit(applications, policy)
        gateway.add_intent("pi_1", 12000)
        await payments.reconcile("pi_1", "a@x.com", policy.id, str(application_id))

        mine = (await payments.list_transactions("a@x.com")).unwrap()
        assert [transaction.transaction_id for transaction in mine] == ["pi_1"]
        assert (await payments.list_transactions("b@x.com")).unwrap() == []
        assert len((await payments.list_transactions()).unwrap()) == 1
