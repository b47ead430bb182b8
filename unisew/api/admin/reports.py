"""관리자 신고 라우터 — 신고 검토 및 승인/거절 API.

Admin Report Router — Report review endpoints.
Lists reports, opens the approve/reject dialog, edits the decision and
submits it. Admin role only.
"""

from typing import Annotated

import httpx
from fastapi import APIRouter, Depends

from unisew.api.deps import get_workflows, require_admin
from unisew.backend import get_backend
from unisew.schemas.common import MessageResponse
from unisew.schemas.feedback import ApprovalDraftUpdate, ApprovalOpen
from unisew.schemas.session import SessionContext
from unisew.services.session_service import WorkflowSession

router: APIRouter = APIRouter()


@router.get("")
async def list_reports(
    api: Annotated[httpx.AsyncClient, Depends(get_backend)],
    current: Annotated[SessionContext, Depends(require_admin)],
    workflows: Annotated[WorkflowSession, Depends(get_workflows)],
) -> dict:
    """전체 신고 목록 조회. 실패해도 이전 목록과 알림을 반환."""
    await workflows.report_review.load_reports(api)
    return {**workflows.report_review.view(), "notifications": workflows.notifier.drain()}


@router.get("/{report_id}")
async def get_report(
    report_id: int,
    current: Annotated[SessionContext, Depends(require_admin)],
    workflows: Annotated[WorkflowSession, Depends(get_workflows)],
) -> dict:
    """불러온 목록에서 신고 상세 조회."""
    return workflows.report_review.get_report(report_id).model_dump(mode="json")


@router.post("/{report_id}/approval")
async def open_approval(
    report_id: int,
    data: ApprovalOpen,
    current: Annotated[SessionContext, Depends(require_admin)],
    workflows: Annotated[WorkflowSession, Depends(get_workflows)],
) -> dict:
    """승인/거절 다이얼로그 열기 — 입력값 초기화."""
    workflows.report_review.open_approval(report_id, data.action)
    return {"dialog": workflows.report_review.dialog.model_dump(mode="json")}


@router.patch("/approval")
async def update_approval(
    data: ApprovalDraftUpdate,
    current: Annotated[SessionContext, Depends(require_admin)],
    workflows: Annotated[WorkflowSession, Depends(get_workflows)],
) -> dict:
    """문제 수준/메시지 입력."""
    workflows.report_review.update_draft(
        problem_level=data.problem_level,
        message_for_school=data.message_for_school,
        message_for_partner=data.message_for_partner,
    )
    return {"dialog": workflows.report_review.dialog.model_dump(mode="json")}


@router.post("/approval/submit")
async def submit_approval(
    api: Annotated[httpx.AsyncClient, Depends(get_backend)],
    current: Annotated[SessionContext, Depends(require_admin)],
    workflows: Annotated[WorkflowSession, Depends(get_workflows)],
) -> dict:
    """결정 제출 → 환불 요청 → 목록 재조회."""
    result = await workflows.report_review.submit_approval(api)
    return {
        "result": result.model_dump(mode="json"),
        **workflows.report_review.view(),
        "notifications": workflows.notifier.drain(),
    }


@router.delete("/approval", response_model=MessageResponse)
async def close_approval(
    current: Annotated[SessionContext, Depends(require_admin)],
    workflows: Annotated[WorkflowSession, Depends(get_workflows)],
) -> dict:
    """다이얼로그 닫기 — 입력값 폐기."""
    workflows.report_review.close_approval()
    return {"message": "Approval dialog closed"}
