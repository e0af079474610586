# LifeSure - Application and Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Application lifecycle endpoints: submission, assignment, review."""

from beartype import beartype
from fastapi import APIRouter, Depends, Query, Response, status

from ...core.result_types import Err, Ok
from ...models.application import AgentAssignment, ApplicationSubmission, StatusChange
from ...services.application_service import ApplicationService
from ..dependencies import get_application_service
from ..response_patterns import ErrorResponse, SuccessResponse, handle_result

router = APIRouter()


@router.post("/submit-application", status_code=status.HTTP_201_CREATED)
@beartype
async def submit_application(
    submission: ApplicationSubmission,
    response: Response,
    applications: ApplicationService = Depends(get_application_service),
) -> SuccessResponse | ErrorResponse:
    """Submit an application; the policy's terms are snapshotted now."""
    result = await applications.submit(submission)
    if isinstance(result, Ok):
        result = Ok({"insertedId": str(result.value)})
    return handle_result(result, response, success_status=status.HTTP_201_CREATED)


@router.patch("/application/{application_id}/assign-agent")
@beartype
async def assign_agent(
    application_id: str,
    assignment: AgentAssignment,
    response: Response,
    applications: ApplicationService = Depends(get_application_service),
) -> SuccessResponse | ErrorResponse:
    """Assign or reassign the agent reviewing an application."""
    result = await applications.assign_agent(application_id, assignment.agent)
    if isinstance(result, Err):
        return handle_result(result, response)
    return handle_result(Ok({"modifiedCount": 1}), response)


@router.patch("/agent/application/{application_id}/status")
@beartype
async def set_application_status(
    application_id: str,
    change: StatusChange,
    response: Response,
    applications: ApplicationService = Depends(get_application_service),
) -> SuccessResponse | ErrorResponse:
    """Approve, reject or reopen an application."""
    result = await applications.set_status(application_id, change.status)
    return handle_result(result, response)


@router.get("/applications")
@beartype
async def list_applications(
    response: Response,
    email: str | None = None,
    agent: str | None = None,
    status_filter: str | None = Query(default=None, alias="status"),
    applications: ApplicationService = Depends(get_application_service),
) -> SuccessResponse | ErrorResponse:
    """Applications, newest first, filtered by customer, agent or status."""
    result = await applications.list_applications(
        email=email, agent=agent, status=status_filter
    )
    return handle_result(result, response)


@router.get("/applications/{application_id}")
@beartype
async def get_application(
    application_id: str,
    response: Response,
    applications: ApplicationService = Depends(get_application_service),
) -> SuccessResponse | ErrorResponse:
    """One application with its policy snapshot and payment state."""
    result = await applications.get(application_id)
    return handle_result(result, response)
