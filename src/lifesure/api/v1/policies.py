# LifeSure - Application and Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Policy catalog endpoints."""

from beartype import beartype
from fastapi import APIRouter, Depends, Query, Response, status

from ...models.policy import PolicyCreate, PolicyUpdate
from ...services.policy_catalog import PolicyCatalog
from ...services.reporting_service import ReportingService
from ..dependencies import get_policy_catalog, get_reporting_service
from ..response_patterns import ErrorResponse, SuccessResponse, handle_result

router = APIRouter()


@router.post("/create-policies", status_code=status.HTTP_201_CREATED)
@beartype
async def create_policy(
    policy_data: PolicyCreate,
    response: Response,
    catalog: PolicyCatalog = Depends(get_policy_catalog),
) -> SuccessResponse | ErrorResponse:
    """Add a policy to the catalog."""
    result = await catalog.create(policy_data)
    return handle_result(result, response, success_status=status.HTTP_201_CREATED)


@router.put("/update-policy/{policy_id}")
@beartype
async def update_policy(
    policy_id: str,
    policy_update: PolicyUpdate,
    response: Response,
    catalog: PolicyCatalog = Depends(get_policy_catalog),
) -> SuccessResponse | ErrorResponse:
    """Edit catalog terms; existing applications keep their snapshot."""
    result = await catalog.update(policy_id, policy_update)
    return handle_result(result, response)


@router.get("/get-policies")
@beartype
async def list_policies(
    response: Response,
    category: str | None = None,
    catalog: PolicyCatalog = Depends(get_policy_catalog),
) -> SuccessResponse | ErrorResponse:
    result = await catalog.list_policies(category)
    return handle_result(result, response)


@router.get("/policies/popular")
@beartype
async def popular_policies(
    response: Response,
    limit: int = Query(default=10, ge=1, le=100),
    reports: ReportingService = Depends(get_reporting_service),
) -> SuccessResponse | ErrorResponse:
    """Most purchased policies first."""
    result = await reports.policy_popularity(limit)
    return handle_result(result, response)


@router.get("/policies/{policy_id}")
@beartype
async def get_policy(
    policy_id: str,
    response: Response,
    catalog: PolicyCatalog = Depends(get_policy_catalog),
) -> SuccessResponse | ErrorResponse:
    result = await catalog.get(policy_id)
    return handle_result(result, response)


@router.delete("/delete-policy/{policy_id}")
@beartype
async def delete_policy(
    policy_id: str,
    response: Response,
    catalog: PolicyCatalog = Depends(get_policy_catalog),
) -> SuccessResponse | ErrorResponse:
    """Remove a policy; applications already holding its snapshot are untouched."""
    result = await catalog.delete(policy_id)
    return handle_result(result, response)
