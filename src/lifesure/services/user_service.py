# LifeSure - Application and Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""User registration and role management."""

from beartype import beartype

from ..core.document_store import Collection, DocumentStore, DuplicateKeyError
from ..core.errors import ServiceError
from ..core.logging_utils import get_logger
from ..core.result_types import Err, Ok, Result
from ..models.base import json_instant, utc_now
from ..models.user import User, UserRegistration, UserRole
from .guards import storage_guard

logger = get_logger(__name__)


class UserService:
    """Service for platform users."""

    def __init__(self, store: DocumentStore) -> None:
        """Initialize with the document store."""
        self._store = store

    @storage_guard("register_user")
    @beartype
    async def register(self, registration: UserRegistration) -> Result[User, ServiceError]:
        """Return the user for this email, creating a customer if unknown."""
        email = str(registration.email)
        existing = await self._store.find_one(Collection.USERS, {"email": email})
        if existing is not None:
            return Ok(User.from_document(existing))

        document = {
            "email": email,
            "name": registration.name,
            "photo": registration.photo,
            "role": UserRole.CUSTOMER.value,
            "createdAt": json_instant(utc_now()),
        }
        try:
            user_id = await self._store.insert_one(Collection.USERS, document)
        except DuplicateKeyError:
            # Registered concurrently; the first insert wins.
            winner = await self._store.find_one(Collection.USERS, {"email": email})
            if winner is None:
                raise
            return Ok(User.from_document(winner))

        logger.info("User %s registered", email)
        return Ok(User.from_document({"id": str(user_id), **document}))

    @storage_guard("set_user_role")
    @beartype
    async def set_role(self, email: str, role: UserRole) -> Result[User, ServiceError]:
        """Change a user's role."""
        document = await self._store.find_one_and_update(
            Collection.USERS, {"email": email}, set={"role": role.value}
        )
        if document is None:
            return Err(ServiceError.not_found("User", email))
        logger.info("User %s is now %s", email, role.value)
        return Ok(User.from_document(document))

    @storage_guard("get_user_role")
    @beartype
    async def get_role(self, email: str) -> Result[UserRole, ServiceError]:
        """Role of the user registered under ``email``."""
        document = await self._store.find_one(Collection.USERS, {"email": email})
        if document is None:
            return Err(ServiceError.not_found("User", email))
        return Ok(User.from_document(document).role)

    @storage_guard("list_users")
    @beartype
    async def list_users(self, role: UserRole | None = None) -> Result[list[User], ServiceError]:
        """All users in storage order, optionally with one role."""
        filter = {"role": role.value} if role else {}
        documents = await self._store.find(Collection.USERS, filter)
        return Ok([User.from_document(document) for document in documents])
