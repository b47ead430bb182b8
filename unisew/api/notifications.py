"""알림 라우터 — 대기 중인 사용자 알림 조회.

Notification Router — Drains the session's queued notifications, including
the ones queued by requests that ended in an error response.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from unisew.api.deps import get_workflows
from unisew.services.session_service import WorkflowSession

router: APIRouter = APIRouter()


@router.get("")
async def drain_notifications(
    workflows: Annotated[WorkflowSession, Depends(get_workflows)],
) -> dict:
    return {"notifications": workflows.notifier.drain()}
