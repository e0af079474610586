# LifeSure - Application and Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Platform users and their roles."""

from datetime import datetime
from enum import Enum

from pydantic import EmailStr, Field

from .base import DocumentModel, RequestModel, utc_now


class UserRole(str, Enum):
    """Access level; new users start as customers."""

    CUSTOMER = "customer"
    AGENT = "agent"
    ADMIN = "admin"


class UserRegistration(RequestModel):
    """Sign-in payload; registering an existing email is a no-op."""

    email: EmailStr
    name: str = Field(default="", max_length=200)
    photo: str | None = Field(default=None, max_length=2000)


class RoleUpdate(RequestModel):
    role: UserRole


class User(DocumentModel):
    """User as stored."""

    email: str
    name: str = ""
    photo: str | None = None
    role: UserRole = UserRole.CUSTOMER
    created_at: datetime = Field(default_factory=utc_now)
