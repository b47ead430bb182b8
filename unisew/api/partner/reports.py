"""파트너 신고 라우터 — 디자이너/공장 증빙 제출 API.

Partner Report Router — Evidence endpoints for designers and garment
manufacturers answering a report raised against them.
"""

from typing import Annotated

import httpx
from fastapi import APIRouter, Depends, File, UploadFile

from unisew.api.deps import get_workflows, require_partner
from unisew.backend import get_backend
from unisew.schemas.common import MessageResponse
from unisew.schemas.feedback import EvidenceContentUpdate, EvidenceModeUpdate
from unisew.schemas.session import SessionContext
from unisew.services.session_service import WorkflowSession
from unisew.services.storage_service import StagedFile

router: APIRouter = APIRouter()


def _to_staged(upload: UploadFile) -> StagedFile:
    """UploadFile → StagedFile 변환. 크기 정보가 없으면 스트림으로 측정."""
    size = upload.size
    if size is None:
        upload.file.seek(0, 2)
        size = upload.file.tell()
        upload.file.seek(0)
    return StagedFile(
        filename=upload.filename or "upload",
        content_type=upload.content_type or "application/octet-stream",
        size=size,
        stream=upload.file,
    )


def _dialog(workflows: WorkflowSession) -> dict:
    return {
        "dialog": workflows.evidence.dialog.model_dump(mode="json"),
        "notifications": workflows.notifier.drain(),
    }


@router.get("")
async def list_my_reports(
    api: Annotated[httpx.AsyncClient, Depends(get_backend)],
    current: Annotated[SessionContext, Depends(require_partner)],
    workflows: Annotated[WorkflowSession, Depends(get_workflows)],
) -> dict:
    """내가 받은 피드백/신고 목록."""
    await workflows.evidence.load_reports(api)
    return {**workflows.evidence.view(), "notifications": workflows.notifier.drain()}


@router.post("/{report_id}/evidence")
async def open_evidence(
    report_id: int,
    current: Annotated[SessionContext, Depends(require_partner)],
    workflows: Annotated[WorkflowSession, Depends(get_workflows)],
) -> dict:
    """증빙 다이얼로그 열기. 소명이 없는 신고만 가능."""
    workflows.evidence.open_evidence_dialog(report_id)
    return _dialog(workflows)


@router.patch("/evidence/content")
async def update_evidence_content(
    data: EvidenceContentUpdate,
    current: Annotated[SessionContext, Depends(require_partner)],
    workflows: Annotated[WorkflowSession, Depends(get_workflows)],
) -> dict:
    workflows.evidence.set_content(data.content)
    return _dialog(workflows)


@router.patch("/evidence/mode")
async def update_evidence_mode(
    data: EvidenceModeUpdate,
    current: Annotated[SessionContext, Depends(require_partner)],
    workflows: Annotated[WorkflowSession, Depends(get_workflows)],
) -> dict:
    """이미지 ↔ 영상 전환. 다른 매체의 업로드 내역은 비워짐."""
    workflows.evidence.set_mode(data.mode)
    return _dialog(workflows)


@router.post("/evidence/images")
async def upload_evidence_images(
    current: Annotated[SessionContext, Depends(require_partner)],
    workflows: Annotated[WorkflowSession, Depends(get_workflows)],
    files: list[UploadFile] = File(...),
) -> dict:
    """증빙 이미지 업로드 (파일당 최대 10MB, 누적)."""
    batch = await workflows.evidence.upload_images([_to_staged(f) for f in files])
    return {"batch": batch, **_dialog(workflows)}


@router.post("/evidence/video")
async def upload_evidence_video(
    current: Annotated[SessionContext, Depends(require_partner)],
    workflows: Annotated[WorkflowSession, Depends(get_workflows)],
    file: UploadFile = File(...),
) -> dict:
    """증빙 영상 업로드 (최대 50MB)."""
    uploaded = await workflows.evidence.upload_video(_to_staged(file))
    return {"video": uploaded, **_dialog(workflows)}


@router.post("/evidence/submit")
async def submit_evidence(
    api: Annotated[httpx.AsyncClient, Depends(get_backend)],
    current: Annotated[SessionContext, Depends(require_partner)],
    workflows: Annotated[WorkflowSession, Depends(get_workflows)],
) -> dict:
    """증빙 제출 → 목록 조용히 새로고침."""
    payload = await workflows.evidence.submit_evidence(api)
    return {
        "submitted": payload.model_dump(mode="json", by_alias=True),
        **workflows.evidence.view(),
        "notifications": workflows.notifier.drain(),
    }


@router.delete("/evidence", response_model=MessageResponse)
async def close_evidence(
    current: Annotated[SessionContext, Depends(require_partner)],
    workflows: Annotated[WorkflowSession, Depends(get_workflows)],
) -> dict:
    workflows.evidence.close_evidence_dialog()
    return {"message": "Evidence dialog closed"}
