# LifeSure - Application and Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Policy catalog models and the frozen policy snapshot.

A :class:`PolicySnapshot` is the contractual copy of a policy's terms that
an application carries from the moment it is submitted. It is captured once
and never re-read from the catalog.
"""

from datetime import datetime
from typing import Any

from beartype import beartype
from pydantic import BaseModel, Field, field_validator, model_validator

from .base import BaseModelConfig, DocumentModel, RequestModel, coerce_number, utc_now

_NUMERIC_TERMS = ("coverage", "duration", "base_premium", "min_age", "max_age")


class _PolicyTermsMixin(BaseModel):
    """Shared coercion and bounds checks for anything carrying policy terms."""

    @field_validator(*_NUMERIC_TERMS, mode="before", check_fields=False)
    @classmethod
    def coerce_numeric_terms(cls, v: Any) -> Any:
        """Accept numeric strings written by older catalog editors."""
        return coerce_number(v)

    @model_validator(mode="after")
    def validate_age_bounds(self) -> Any:
        """Ensure the age window is not inverted."""
        min_age = getattr(self, "min_age", None)
        max_age = getattr(self, "max_age", None)
        if min_age is not None and max_age is not None and min_age > max_age:
            raise ValueError("minAge must be less than or equal to maxAge")
        return self


class PolicyCreate(_PolicyTermsMixin, RequestModel):
    """Payload for adding a policy to the catalog.

    ``purchaseCount`` is deliberately absent; it starts at zero and only the
    lifecycle services move it.
    """

    title: str = Field(..., min_length=1, max_length=200)
    category: str = Field(default="", max_length=100)
    description: str = Field(default="", max_length=5000)
    min_age: int = Field(default=0, ge=0, le=150)
    max_age: int = Field(default=100, ge=0, le=150)
    coverage: float = Field(default=0, ge=0, description="Coverage amount")
    duration: float = Field(default=0, ge=0, description="Term length in years")
    base_premium: float = Field(default=0, ge=0, description="Premium per period")
    image: str | None = Field(default=None, max_length=2000)


class PolicyUpdate(_PolicyTermsMixin, RequestModel):
    """Partial update for a catalog entry; unset fields are left alone."""

    title: str | None = Field(default=None, min_length=1, max_length=200)
    category: str | None = Field(default=None, max_length=100)
    description: str | None = Field(default=None, max_length=5000)
    min_age: int | None = Field(default=None, ge=0, le=150)
    max_age: int | None = Field(default=None, ge=0, le=150)
    coverage: float | None = Field(default=None, ge=0)
    duration: float | None = Field(default=None, ge=0)
    base_premium: float | None = Field(default=None, ge=0)
    image: str | None = Field(default=None, max_length=2000)

    @beartype
    def changes(self) -> dict[str, Any]:
        """Fields the caller actually sent, keyed as stored."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


class Policy(_PolicyTermsMixin, DocumentModel):
    """Catalog entry as stored."""

    title: str = Field(default="")
    category: str = Field(default="")
    description: str = Field(default="")
    min_age: int = Field(default=0, ge=0)
    max_age: int = Field(default=100, ge=0)
    coverage: float = Field(default=0, ge=0)
    duration: float = Field(default=0, ge=0)
    base_premium: float = Field(default=0, ge=0)
    image: str | None = Field(default=None)
    purchase_count: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=utc_now)

    @field_validator("purchase_count", mode="before")
    @classmethod
    def coerce_purchase_count(cls, v: Any) -> Any:
        """Older documents may lack the counter or store it as a string."""
        return coerce_number(v)


class PolicySnapshot(_PolicyTermsMixin, BaseModelConfig):
    """Immutable copy of a policy's terms taken at submission time."""

    title: str
    category: str = ""
    coverage: float = Field(default=0, ge=0)
    duration: float = Field(default=0, ge=0)
    base_premium: float = Field(default=0, ge=0)
    min_age: int = Field(default=0, ge=0)
    max_age: int = Field(default=100, ge=0)
    image: str | None = None

    @classmethod
    @beartype
    def capture(cls, policy: Policy) -> "PolicySnapshot":
        """Freeze the contractual terms of ``policy`` as they are right now."""
        return cls(
            title=policy.title,
            category=policy.category,
            coverage=policy.coverage,
            duration=policy.duration,
            base_premium=policy.base_premium,
            min_age=policy.min_age,
            max_age=policy.max_age,
            image=policy.image,
        )
