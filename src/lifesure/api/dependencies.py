# LifeSure - Application and Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""FastAPI dependencies and service wiring.

Collaborators are constructed once per process by :func:`build_services`
and stored on ``app.state``; route handlers receive them through the
getters below, which tests override or feed with in-memory backends.
"""

from attrs import frozen
from beartype import beartype
from fastapi import Request

from ..core.cache import Cache, MemoryCache, build_cache
from ..core.config import Settings
from ..core.database import Database, PoolConfig, PostgresDocumentStore
from ..core.document_store import DocumentStore
from ..core.memory_store import MemoryDocumentStore
from ..core.payment_gateway import PaymentGateway, StripePaymentGateway
from ..services.application_service import ApplicationService
from ..services.claim_service import ClaimService
from ..services.payment_service import PaymentService
from ..services.policy_catalog import PolicyCatalog
from ..services.reporting_service import ReportingService
from ..services.user_service import UserService


@frozen
class Services:
    """Everything a request handler may need, built at startup."""

    store: DocumentStore
    cache: Cache | MemoryCache
    gateway: PaymentGateway
    catalog: PolicyCatalog
    applications: ApplicationService
    payments: PaymentService
    claims: ClaimService
    users: UserService
    reports: ReportingService

    async def start(self) -> None:
        """Open store and cache connections."""
        await self.store.connect()
        await self.cache.connect()

    async def stop(self) -> None:
        """Close every connection, gateway included."""
        await self.gateway.aclose()
        await self.cache.disconnect()
        await self.store.disconnect()


@beartype
def build_store(settings: Settings) -> DocumentStore:
    """Pick the document store named by ``database_url``."""
    if settings.uses_memory_store:
        return MemoryDocumentStore()
    return PostgresDocumentStore(Database(PoolConfig.from_settings(settings)))


@beartype
def build_services(
    settings: Settings,
    *,
    store: DocumentStore | None = None,
    cache: Cache | MemoryCache | None = None,
    gateway: PaymentGateway | None = None,
) -> Services:
    """Wire services from settings; explicit collaborators take precedence."""
    store = store or build_store(settings)
    cache = cache or build_cache(settings)
    gateway = gateway or StripePaymentGateway.from_settings(settings)

    catalog = PolicyCatalog(store, cache, cache_ttl=settings.redis_ttl_seconds)
    applications = ApplicationService(store, catalog)
    return Services(
        store=store,
        cache=cache,
        gateway=gateway,
        catalog=catalog,
        applications=applications,
        payments=PaymentService(
            store, gateway, applications, currency=settings.payment_currency
        ),
        claims=ClaimService(store, catalog),
        users=UserService(store),
        reports=ReportingService(store),
    )


def get_services(request: Request) -> Services:
    """Services built by the application lifespan."""
    services: Services = request.app.state.services
    return services


def get_policy_catalog(request: Request) -> PolicyCatalog:
    return get_services(request).catalog


def get_application_service(request: Request) -> ApplicationService:
    return get_services(request).applications


def get_payment_service(request: Request) -> PaymentService:
    return get_services(request).payments


def get_claim_service(request: Request) -> ClaimService:
    return get_services(request).claims


def get_user_service(request: Request) -> UserService:
    return get_services(request).users


def get_reporting_service(request: Request) -> ReportingService:
    return get_services(request).reports
