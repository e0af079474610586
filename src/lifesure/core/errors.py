# LifeSure - Application and Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Service error taxonomy carried inside ``Err`` results."""

from enum import Enum

from attrs import field, frozen
from beartype import beartype
from pydantic import ValidationError as PydanticValidationError


class ErrorKind(str, Enum):
    """Failure categories reported by lifecycle services."""

    VALIDATION = "validation_error"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    EXTERNAL_SERVICE = "external_service_error"
    INTERNAL = "internal_error"


_GENERIC_INTERNAL_MESSAGE = "Internal server error"


@frozen
class ServiceError:
    """A business failure with enough context for the caller to act on."""

    kind: ErrorKind = field()
    message: str = field()
    field: str | None = field(default=None)

    @classmethod
    @beartype
    def validation(cls, message: str, field: str | None = None) -> "ServiceError":
        """Missing or malformed input."""
        return cls(ErrorKind.VALIDATION, message, field)

    @classmethod
    @beartype
    def missing_field(cls, field: str) -> "ServiceError":
        """A required field was absent or blank."""
        return cls(ErrorKind.VALIDATION, f"{field} is required", field)

    @classmethod
    @beartype
    def from_validation_exception(cls, exc: PydanticValidationError) -> "ServiceError":
        """First problem reported by a Pydantic model, with its field."""
        first = exc.errors()[0]
        loc = ".".join(str(part) for part in first["loc"]) or None
        message = first["msg"]
        if loc:
            message = f"{loc}: {message}"
        return cls(ErrorKind.VALIDATION, message, loc)

    @classmethod
    @beartype
    def not_found(cls, entity: str, entity_id: object) -> "ServiceError":
        """A referenced document does not exist."""
        return cls(ErrorKind.NOT_FOUND, f"{entity} {entity_id} not found")

    @classmethod
    @beartype
    def conflict(cls, message: str) -> "ServiceError":
        """The write would violate a uniqueness rule."""
        return cls(ErrorKind.CONFLICT, message)

    @classmethod
    @beartype
    def external(cls, message: str) -> "ServiceError":
        """The payment gateway refused or failed the call."""
        return cls(ErrorKind.EXTERNAL_SERVICE, message)

    @classmethod
    @beartype
    def internal(cls, message: str) -> "ServiceError":
        """Unexpected storage failure; the message stays server-side."""
        return cls(ErrorKind.INTERNAL, message)

    @property
    def public_message(self) -> str:
        """Message safe to return to API clients."""
        if self.kind is ErrorKind.INTERNAL:
            return _GENERIC_INTERNAL_MESSAGE
        return self.message

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"
