"""학교 결제 결과 라우터 — 결제 게이트웨이 복귀 처리.

School Payment Result Router — Handles the browser's return from the
payment gateway. The gateway query string is forwarded as-is by the
front-end's result page.
"""

from typing import Annotated

import httpx
from fastapi import APIRouter, Depends, Query

from unisew.api.deps import get_workflows, require_school
from unisew.backend import get_backend
from unisew.schemas.payment import PaymentReturn
from unisew.schemas.session import SessionContext
from unisew.services.session_service import WorkflowSession

router: APIRouter = APIRouter()


@router.get("/result")
async def payment_result(
    api: Annotated[httpx.AsyncClient, Depends(get_backend)],
    current: Annotated[SessionContext, Depends(require_school)],
    workflows: Annotated[WorkflowSession, Depends(get_workflows)],
    vnp_response_code: str | None = Query(None, alias="vnp_ResponseCode"),
    vnp_amount: int | None = Query(None, alias="vnp_Amount"),
    vnp_txn_ref: str | None = Query(None, alias="vnp_TxnRef"),
    vnp_order_info: str | None = Query(None, alias="vnp_OrderInfo"),
    order_type: str = Query("order", alias="orderType"),
    quotation_id: int | None = Query(None, alias="quotationId"),
) -> dict:
    """결제 결과 처리 — 저장된 컨텍스트를 한 번만 소비."""
    params = PaymentReturn(
        vnp_response_code=vnp_response_code,
        vnp_amount=vnp_amount,
        vnp_txn_ref=vnp_txn_ref,
        vnp_order_info=vnp_order_info,
        order_type=order_type,
        quotation_id=quotation_id,
    )
    outcome = await workflows.quotations.complete_payment(api, params)
    return {**outcome, "notifications": workflows.notifier.drain()}
