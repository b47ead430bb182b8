"""학교 견적 라우터 — 견적 조회, 선택, 결제 API.

School Quotation Router — Lists the garment quotations of an order, opens
the payment summary for a pending one and hands off to the payment gateway.
"""

from typing import Annotated

import httpx
from fastapi import APIRouter, Depends

from unisew.api.deps import get_workflows, require_school
from unisew.backend import get_backend
from unisew.schemas.common import MessageResponse
from unisew.schemas.session import SessionContext
from unisew.services.session_service import WorkflowSession

router: APIRouter = APIRouter()


@router.get("/orders/{order_id}/quotations")
async def list_quotations(
    order_id: int,
    api: Annotated[httpx.AsyncClient, Depends(get_backend)],
    current: Annotated[SessionContext, Depends(require_school)],
    workflows: Annotated[WorkflowSession, Depends(get_workflows)],
) -> dict:
    """주문 견적 목록 — list_state로 loaded/empty/error 구분. 재시도는 재호출."""
    await workflows.quotations.load_quotations(api, order_id)
    return {**workflows.quotations.view(), "notifications": workflows.notifier.drain()}


@router.post("/quotations/{quotation_id}/selection")
async def select_quotation(
    quotation_id: int,
    current: Annotated[SessionContext, Depends(require_school)],
    workflows: Annotated[WorkflowSession, Depends(get_workflows)],
) -> dict:
    """대기 중인 견적 선택 → 금액 내역 포함 요약."""
    summary = workflows.quotations.select_quotation(quotation_id)
    return summary.model_dump(mode="json")


@router.delete("/quotations/selection", response_model=MessageResponse)
async def close_selection(
    current: Annotated[SessionContext, Depends(require_school)],
    workflows: Annotated[WorkflowSession, Depends(get_workflows)],
) -> dict:
    workflows.quotations.close_summary()
    return {"message": "Quotation summary closed"}


@router.post("/quotations/selection/payment")
async def proceed_to_payment(
    api: Annotated[httpx.AsyncClient, Depends(get_backend)],
    current: Annotated[SessionContext, Depends(require_school)],
    workflows: Annotated[WorkflowSession, Depends(get_workflows)],
) -> dict:
    """결제 URL 발급 — 프론트엔드가 redirect_url로 전체 페이지 이동."""
    redirect = await workflows.quotations.proceed_to_payment(api)
    return {**redirect, "notifications": workflows.notifier.drain()}
