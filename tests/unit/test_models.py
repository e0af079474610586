"""Unit tests for the Pydantic domain models.

Tests verify:
- Model immutability and unknown-key rejection on requests
- camelCase document keys with the historical ``policy_id`` spelling
- Numeric coercion of legacy catalog values
- Policy age bounds and the frozen snapshot
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from lifesure.models.application import (
    Application,
    ApplicationStatus,
    ApplicationSubmission,
    PaymentFrequency,
)
from lifesure.models.base import BaseModelConfig, coerce_number, json_instant
from lifesure.models.claim import ClaimCreate
from lifesure.models.policy import Policy, PolicyCreate, PolicySnapshot, PolicyUpdate


class TestBaseModelConfig:
    """Shared model configuration."""

    def test_model_is_frozen(self) -> None:
        class Sample(BaseModelConfig):
            value: str

        instance = Sample(value="test")
        with pytest.raises(ValidationError) as exc_info:
            instance.value = "other"  # type: ignore[misc]

        assert "frozen" in str(exc_info.value).lower()

    def test_whitespace_stripping_and_camel_aliases(self) -> None:
        class Sample(BaseModelConfig):
            nominee_name: str

        instance = Sample.model_validate({"nomineeName": "  Bob  "})

        assert instance.nominee_name == "Bob"
        assert instance.model_dump(by_alias=True) == {"nomineeName": "Bob"}

    def test_json_instant_matches_model_serialization(self) -> None:
        moment = datetime(2025, 3, 1, 12, 30, tzinfo=timezone.utc)

        class Sample(BaseModelConfig):
            at: datetime

        assert json_instant(moment) == Sample(at=moment).model_dump(mode="json")["at"]


class TestCoerceNumber:
    """Legacy catalog values arrive as strings."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("120", 120), ("99.5", 99.5), ("1,000", 1000), ("", 0), (42, 42), (None, None)],
    )
    def test_coercion(self, raw: object, expected: object) -> None:
        assert coerce_number(raw) == expected

    def test_non_numeric_string_is_left_for_validation(self) -> None:
        assert coerce_number("lots") == "lots"


class TestPolicyModels:
    """Catalog entries and snapshots."""

    def test_stored_policy_coerces_string_terms(self) -> None:
        policy = Policy.from_document(
            {
                "id": "7a4c1e0e-6f4a-4c8e-9a57-1d2b3c4d5e6f",
                "title": "Legacy",
                "basePremium": "120",
                "coverage": "50000",
                "minAge": "18",
                "maxAge": "65",
                "purchaseCount": "3",
            }
        )

        assert policy.base_premium == 120
        assert policy.min_age == 18
        assert policy.purchase_count == 3

    def test_missing_purchase_count_defaults_to_zero(self) -> None:
        policy = Policy.from_document({"id": "p1", "title": "New"})
        assert policy.purchase_count == 0

    def test_inverted_age_bounds_rejected(self) -> None:
        with pytest.raises(ValidationError, match="minAge must be less than or equal to maxAge"):
            PolicyCreate(title="Bad", min_age=70, max_age=30)

    def test_purchase_count_cannot_be_supplied_on_create(self) -> None:
        with pytest.raises(ValidationError):
            PolicyCreate.model_validate({"title": "Sneaky", "purchaseCount": 99})

    def test_negative_premium_rejected(self) -> None:
        with pytest.raises(ValidationError):
            PolicyCreate(title="Bad", base_premium=-1)

    def test_update_reports_only_sent_fields(self) -> None:
        update = PolicyUpdate.model_validate({"basePremium": "150"})
        assert update.changes() == {"basePremium": 150.0}

    def test_snapshot_copies_contractual_terms(self) -> None:
        policy = Policy.from_document(
            {
                "id": "p1",
                "title": "Family Shield",
                "category": "Term Life",
                "coverage": 500000,
                "duration": 20,
                "basePremium": 120,
                "minAge": 18,
                "maxAge": 60,
                "image": "https://img.example.com/a.png",
                "purchaseCount": 5,
            }
        )

        snapshot = PolicySnapshot.capture(policy)

        assert snapshot.model_dump(mode="json", by_alias=True) == {
            "title": "Family Shield",
            "category": "Term Life",
            "coverage": 500000.0,
            "duration": 20.0,
            "basePremium": 120.0,
            "minAge": 18,
            "maxAge": 60,
            "image": "https://img.example.com/a.png",
        }


class TestApplicationModels:
    """Submission payloads and stored applications."""

    def test_submission_requires_identity_fields(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            ApplicationSubmission.model_validate({"name": "Alice", "email": "a@x.com"})

        assert exc_info.value.errors()[0]["loc"] == ("phone",)

    def test_submission_defaults(self) -> None:
        submission = ApplicationSubmission.model_validate(
            {"name": "Alice", "email": "a@x.com", "phone": "555", "policy_id": "abc"}
        )

        assert submission.address == ""
        assert submission.health_disclosure == []
        assert submission.frequency is PaymentFrequency.MONTHLY
        assert submission.policy_id == "abc"

    def test_blank_name_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ApplicationSubmission(name="   ", email="a@x.com", phone="555")

    def test_stored_application_keeps_policy_id_key(self) -> None:
        application = Application.from_document(
            {
                "id": "a1",
                "name": "Alice",
                "email": "a@x.com",
                "phone": "555",
                "policy_id": "p1",
                "status": "Pending",
                "agent": None,
                "createdAt": "2025-01-01T00:00:00Z",
                "policyDetails": None,
                "payment": {
                    "status": "Due",
                    "amount": 120,
                    "frequency": "monthly",
                    "nextPaymentDue": "2025-01-01T00:00:00Z",
                },
            }
        )

        document = application.to_document()

        assert application.status is ApplicationStatus.PENDING
        assert document["policy_id"] == "p1"
        assert "policyId" not in document
        assert document["payment"]["nextPaymentDue"] == "2025-01-01T00:00:00Z"


class TestClaimModels:
    def test_claim_requires_reason(self) -> None:
        with pytest.raises(ValidationError):
            ClaimCreate.model_validate({"policy_id": "p1", "customerEmail": "a@x.com"})

    def test_document_is_optional(self) -> None:
        claim = ClaimCreate.model_validate(
            {"policy_id": "p1", "customerEmail": "a@x.com", "reason": "Hospital stay"}
        )
        assert claim.document is None
