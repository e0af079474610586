# LifeSure - Application and Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Premium payment endpoints."""

from beartype import beartype
from fastapi import APIRouter, Depends, Response, status

from ...core.result_types import Ok
from ...models.transaction import PaymentConfirmation, PaymentIntentRequest
from ...services.payment_service import PaymentService
from ..dependencies import get_payment_service
from ..response_patterns import ErrorResponse, SuccessResponse, handle_result

router = APIRouter()


@router.post("/create-payment")
@beartype
async def create_payment(
    intent_request: PaymentIntentRequest,
    response: Response,
    payments: PaymentService = Depends(get_payment_service),
) -> SuccessResponse | ErrorResponse:
    """Start a card payment; the browser confirms it with the client secret."""
    result = await payments.create_intent(
        intent_request.policy_id,
        intent_request.policy_name,
        intent_request.amount,
        intent_request.customer_email,
    )
    if isinstance(result, Ok):
        result = Ok({"clientSecret": result.value})
    return handle_result(result, response)


@router.post("/save-transaction", status_code=status.HTTP_201_CREATED)
@beartype
async def save_transaction(
    confirmation: PaymentConfirmation,
    response: Response,
    payments: PaymentService = Depends(get_payment_service),
) -> SuccessResponse | ErrorResponse:
    """Reconcile a completed payment with the customer's application."""
    result = await payments.reconcile(
        confirmation.payment_intent_id,
        confirmation.email,
        confirmation.policy_id,
        confirmation.application_id,
    )
    return handle_result(result, response, success_status=status.HTTP_201_CREATED)


@router.get("/transactions")
@beartype
async def list_transactions(
    response: Response,
    email: str | None = None,
    payments: PaymentService = Depends(get_payment_service),
) -> SuccessResponse | ErrorResponse:
    """Recorded transactions, optionally for one customer."""
    result = await payments.list_transactions(email)
    return handle_result(result, response)
