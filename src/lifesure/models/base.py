# LifeSure - Application and Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Base Pydantic model configuration for all domain models.

Two families share one naming convention: Python attributes are
snake_case, stored documents and API payloads are camelCase (the
``policy_id`` reference keeps its historical spelling).

- :class:`RequestModel` validates inbound payloads and rejects unknown keys.
- :class:`DocumentModel` reads stored documents, tolerating keys written by
  older clients, and knows how to serialize itself back for storage.
"""

from datetime import datetime, timezone
from typing import Any, TypeVar

from beartype import beartype
from pydantic import BaseModel, ConfigDict, EmailStr, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from ..core.document_store import Document
from ..core.errors import ServiceError
from ..core.result_types import Err, Ok, Result

D = TypeVar("D", bound="DocumentModel")

_INSTANT = TypeAdapter(datetime)
_EMAIL = TypeAdapter(EmailStr)


def utc_now() -> datetime:
    """Timezone-aware current instant."""
    return datetime.now(timezone.utc)


def json_instant(moment: datetime) -> str:
    """Serialize an instant exactly as document models do."""
    return _INSTANT.dump_python(moment, mode="json")


@beartype
def normalize_email(raw: str, field: str = "email") -> Result[str, ServiceError]:
    """Canonical form of an address, the same one request models store."""
    try:
        return Ok(_EMAIL.validate_python(raw.strip()))
    except ValidationError:
        return Err(ServiceError.validation(f"Invalid email address: {raw!r}", field))


def coerce_number(value: Any) -> Any:
    """Turn numeric strings from legacy documents into numbers.

    Blank strings count as zero; anything that is not a string is passed
    through for Pydantic to judge.
    """
    if value == "":
        return 0
    if isinstance(value, str):
        text = value.strip().replace(",", "")
        try:
            number = float(text)
        except ValueError:
            return value
        return int(number) if number.is_integer() else number
    return value


class BaseModelConfig(BaseModel):
    """Immutable model with camelCase aliases."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_assignment=True,
        str_strip_whitespace=True,
        validate_default=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class RequestModel(BaseModelConfig):
    """Inbound payload; unknown keys are an error."""


class DocumentModel(BaseModelConfig):
    """Stored document read back from the store."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="Document identifier in canonical string form")

    @classmethod
    @beartype
    def from_document(cls: type[D], document: Document) -> D:
        """Validate a raw store document."""
        return cls.model_validate(document)

    @beartype
    def to_document(self) -> Document:
        """Serialize for storage; the id travels separately."""
        return self.model_dump(mode="json", by_alias=True, exclude={"id"})

    @beartype
    def to_response(self) -> Document:
        """Serialize for API responses, id included."""
        return self.model_dump(mode="json", by_alias=True)
