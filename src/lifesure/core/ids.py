# LifeSure - Application and Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Entity identifiers: canonical string form <-> UUID."""

from uuid import UUID, uuid4

from beartype import beartype

from .errors import ServiceError
from .result_types import Err, Ok, Result


@beartype
def parse_id(raw: str | UUID | None, field: str = "id") -> Result[UUID, ServiceError]:
    """Build an id from its external string form without touching storage."""
    if isinstance(raw, UUID):
        return Ok(raw)
    if raw is None or not raw.strip():
        return Err(ServiceError.missing_field(field))
    try:
        return Ok(UUID(raw.strip()))
    except ValueError:
        return Err(ServiceError.validation(f"Malformed identifier for {field}: {raw!r}", field))


@beartype
def new_id() -> UUID:
    """Generate a fresh, globally unique entity id."""
    return uuid4()
