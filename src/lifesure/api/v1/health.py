# LifeSure - Application and Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Health check endpoint for monitoring system status."""

from beartype import beartype
from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, ConfigDict, Field

from ..dependencies import Services, get_services

router = APIRouter()


class HealthResponse(BaseModel):
    """Overall system health response."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_assignment=True,
        str_strip_whitespace=True,
        validate_default=True,
    )

    status: str = Field(..., pattern=r"^(healthy|unhealthy)$")
    components: dict[str, bool] = Field(default_factory=dict)


@router.get("/health")
@beartype
async def health_check(
    response: Response, services: Services = Depends(get_services)
) -> HealthResponse:
    """Report whether the document store and cache answer."""
    components = {
        "database": await services.store.health_check(),
        "cache": await services.cache.health_check(),
    }
    healthy = all(components.values())
    if not healthy:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return HealthResponse(status="healthy" if healthy else "unhealthy", components=components)
