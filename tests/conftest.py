"""Test configuration and fixtures.

Services run against the in-process document store, a fakeredis-backed
cache and a scripted payment gateway; the API is exercised through
FastAPI's TestClient with the same collaborators.
"""

from collections.abc import AsyncGenerator, Generator, Mapping
from typing import Any

import pytest
import pytest_asyncio
from fakeredis import FakeAsyncRedis
from fastapi.testclient import TestClient

from lifesure.api.dependencies import Services, build_services
from lifesure.core.cache import Cache, CacheConfig, MemoryCache
from lifesure.core.config import Settings
from lifesure.core.errors import ServiceError
from lifesure.core.memory_store import MemoryDocumentStore
from lifesure.core.payment_gateway import PaymentGateway, PaymentIntent
from lifesure.core.result_types import Err, Ok, Result
from lifesure.main import create_app
from lifesure.models.policy import Policy, PolicyCreate
from lifesure.services.application_service import ApplicationService
from lifesure.services.claim_service import ClaimService
from lifesure.services.payment_service import PaymentService
from lifesure.services.policy_catalog import PolicyCatalog
from lifesure.services.reporting_service import ReportingService
from lifesure.services.user_service import UserService


class FakeGateway(PaymentGateway):
    """Scripted gateway: intents are registered up front or created on demand."""

    def __init__(self) -> None:
        self.intents: dict[str, PaymentIntent] = {}
        self.created: list[dict[str, Any]] = []
        self.error: ServiceError | None = None

    def add_intent(
        self,
        intent_id: str,
        amount: int,
        status: str = "succeeded",
        metadata: Mapping[str, str] | None = None,
    ) -> PaymentIntent:
        intent = PaymentIntent(
            id=intent_id,
            amount=amount,
            currency="usd",
            status=status,
            client_secret=f"{intent_id}_secret",
            metadata=dict(metadata or {}),
        )
        self.intents[intent_id] = intent
        return intent

    async def create_payment_intent(
        self,
        amount_minor: int,
        currency: str,
        receipt_email: str,
        metadata: Mapping[str, str],
    ) -> Result[PaymentIntent, ServiceError]:
        if self.error is not None:
            return Err(self.error)
        self.created.append(
            {
                "amount": amount_minor,
                "currency": currency,
                "receipt_email": receipt_email,
                "metadata": dict(metadata),
            }
        )
        intent = self.add_intent(
            f"pi_{len(self.created)}", amount_minor, "requires_payment_method", metadata
        )
        return Ok(intent)

    async def retrieve_payment_intent(
        self, intent_id: str
    ) -> Result[PaymentIntent, ServiceError]:
        if self.error is not None:
            return Err(self.error)
        intent = self.intents.get(intent_id)
        if intent is None:
            return Err(ServiceError.external(f"No such payment_intent: '{intent_id}'"))
        return Ok(intent)


@pytest.fixture
def settings() -> Settings:
    """Settings pointing every backend at its in-process variant."""
    return Settings(
        database_url="memory://",
        redis_url="memory://",
        api_env="development",
        payment_gateway_secret_key="test-gateway-key-for-tests",
    )


@pytest.fixture
def store() -> MemoryDocumentStore:
    """Fresh in-process document store."""
    return MemoryDocumentStore()


@pytest_asyncio.fixture  # type: ignore[misc]
async def redis_cache() -> AsyncGenerator[Cache, None]:
    """Redis cache over fakeredis."""
    cache = Cache(
        CacheConfig(url="redis://localhost:6379/15"),
        redis_client=FakeAsyncRedis(decode_responses=True),
    )
    yield cache
    await cache.disconnect()


@pytest.fixture
def gateway() -> FakeGateway:
    """Scripted payment gateway."""
    return FakeGateway()


@pytest.fixture
def catalog(store: MemoryDocumentStore, redis_cache: Cache) -> PolicyCatalog:
    """Policy catalog with a Redis cache in front of the store."""
    return PolicyCatalog(store, redis_cache)


@pytest.fixture
def applications(store: MemoryDocumentStore, catalog: PolicyCatalog) -> ApplicationService:
    return ApplicationService(store, catalog)


@pytest.fixture
def payments(
    store: MemoryDocumentStore, gateway: FakeGateway, applications: ApplicationService
) -> PaymentService:
    return PaymentService(store, gateway, applications)


@pytest.fixture
def claims(store: MemoryDocumentStore, catalog: PolicyCatalog) -> ClaimService:
    return ClaimService(store, catalog)


@pytest.fixture
def users(store: MemoryDocumentStore) -> UserService:
    return UserService(store)


@pytest.fixture
def reports(store: MemoryDocumentStore) -> ReportingService:
    return ReportingService(store)


@pytest.fixture
def policy_data() -> PolicyCreate:
    """Catalog entry with a premium of 120."""
    return PolicyCreate(
        title="Family Shield",
        category="Term Life",
        description="Twenty year term cover",
        min_age=18,
        max_age=60,
        coverage=500000,
        duration=20,
        base_premium=120,
        image="https://img.example.com/family.png",
    )


@pytest_asyncio.fixture  # type: ignore[misc]
async def policy(catalog: PolicyCatalog, policy_data: PolicyCreate) -> Policy:
    """A policy already in the catalog."""
    return (await catalog.create(policy_data)).unwrap()


@pytest.fixture
def services(
    settings: Settings, store: MemoryDocumentStore, gateway: FakeGateway
) -> Services:
    """Services wired the way the application wires them."""
    return build_services(settings, store=store, cache=MemoryCache(), gateway=gateway)


@pytest.fixture
def client(settings: Settings, services: Services) -> Generator[TestClient, None, None]:
    """Test client running the full application lifespan."""
    app = create_app(settings, services)
    with TestClient(app) as test_client:
        yield test_client
