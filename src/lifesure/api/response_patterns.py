# LifeSure - Application and Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""API response patterns following Result[T, E] + HTTP semantics.

Services return ``Ok`` or ``Err(ServiceError)``; this module turns both into
the platform's envelope, ``{"success": true, "data": ...}`` or
``{"success": false, "error": ..., "error_code": ..., "field": ...}``, and
picks the HTTP status from the error kind.
"""

from typing import Any

from beartype import beartype
from fastapi import Response, status
from pydantic import BaseModel, ConfigDict, Field

from ..core.errors import ErrorKind, ServiceError
from ..core.logging_utils import get_logger
from ..core.result_types import Err, Result

logger = get_logger(__name__)

ERROR_STATUS: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.EXTERNAL_SERVICE: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class ErrorResponse(BaseModel):
    """Standardized error response for business logic failures."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_assignment=True,
        str_strip_whitespace=True,
        validate_default=True,
    )

    success: bool = Field(default=False, description="Always false for error responses")
    error: str = Field(..., description="Human-readable error message")
    error_code: str = Field(..., description="Machine-readable error kind")
    field: str | None = Field(default=None, description="Offending input field")

    @classmethod
    @beartype
    def from_error(cls, error: ServiceError) -> "ErrorResponse":
        return cls(error=error.public_message, error_code=error.kind.value, field=error.field)


class SuccessResponse(BaseModel):
    """Standardized success response wrapper."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_assignment=True,
        validate_default=True,
    )

    success: bool = Field(default=True, description="Always true for success responses")
    data: Any = Field(default=None, description="Response payload")


def _jsonable(value: Any) -> Any:
    """Domain models leave the API in their camelCase stored form."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, list):
        return [_jsonable(item) for item in value]
    return value


@beartype
def handle_result(
    result: Result[Any, ServiceError],
    response: Response,
    success_status: int = status.HTTP_200_OK,
) -> SuccessResponse | ErrorResponse:
    """Convert a service result to the response envelope and status code."""
    if isinstance(result, Err):
        error = result.error
        response.status_code = ERROR_STATUS[error.kind]
        if error.kind is ErrorKind.INTERNAL:
            logger.error("Request failed: %s", error.message)
        return ErrorResponse.from_error(error)

    response.status_code = success_status
    return SuccessResponse(data=_jsonable(result.value))
