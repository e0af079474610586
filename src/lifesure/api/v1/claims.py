# LifeSure - Application and Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Claim endpoints with one-claim-per-policy enforcement."""

from beartype import beartype
from fastapi import APIRouter, Depends, Query, Response, status

from ...models.claim import ClaimCreate, ClaimResolution
from ...services.claim_service import ClaimService
from ..dependencies import get_claim_service
from ..response_patterns import ErrorResponse, SuccessResponse, handle_result

router = APIRouter()


@router.post("/claim-request", status_code=status.HTTP_201_CREATED)
@beartype
async def claim_request(
    claim_data: ClaimCreate,
    response: Response,
    claims: ClaimService = Depends(get_claim_service),
) -> SuccessResponse | ErrorResponse:
    """File a claim; a second claim on the same policy is a conflict."""
    result = await claims.file_claim(claim_data)
    return handle_result(result, response, success_status=status.HTTP_201_CREATED)


@router.patch("/claim-approve/{claim_id}")
@beartype
async def claim_approve(
    claim_id: str,
    resolution: ClaimResolution,
    response: Response,
    claims: ClaimService = Depends(get_claim_service),
) -> SuccessResponse | ErrorResponse:
    """Approve or reject a claim."""
    result = await claims.resolve(claim_id, resolution.status, resolution.agent_email)
    return handle_result(result, response)


@router.get("/claims")
@beartype
async def list_claims(
    response: Response,
    customer_email: str | None = Query(default=None, alias="customerEmail"),
    status_filter: str | None = Query(default=None, alias="status"),
    claims: ClaimService = Depends(get_claim_service),
) -> SuccessResponse | ErrorResponse:
    """Claims, newest first."""
    result = await claims.list_claims(customer_email, status_filter)
    return handle_result(result, response)


@router.get("/claims/{claim_id}")
@beartype
async def get_claim(
    claim_id: str,
    response: Response,
    claims: ClaimService = Depends(get_claim_service),
) -> SuccessResponse | ErrorResponse:
    result = await claims.get(claim_id)
    return handle_result(result, response)
