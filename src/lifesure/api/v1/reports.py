# LifeSure - Application and Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Agent dashboard endpoints."""

from beartype import beartype
from fastapi import APIRouter, Depends, Response

from ...services.reporting_service import ReportingService
from ..dependencies import get_reporting_service
from ..response_patterns import ErrorResponse, SuccessResponse, handle_result

router = APIRouter()


@router.get("/agent/{agent_email}/overview")
@beartype
async def agent_overview(
    agent_email: str,
    response: Response,
    reports: ReportingService = Depends(get_reporting_service),
) -> SuccessResponse | ErrorResponse:
    """Status counts, this month's activity and recent assignments."""
    result = await reports.agent_overview(agent_email)
    return handle_result(result, response)
