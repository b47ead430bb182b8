"""증빙 제출 서비스 — 디자이너/공장 소명 워크플로.

Evidence Service — Partner evidence workflow.
A designer or garment manufacturer answers a report raised against them
with a text explanation plus exactly one evidence medium: a set of images
or a single video. Uploads happen before submission and accumulate in the
dialog draft; a failed submission keeps them so nothing has to be uploaded
twice.
"""

import logging

import httpx
from starlette.concurrency import run_in_threadpool

from unisew.config import settings
from unisew.repositories.feedback_repository import feedback_repository
from unisew.schemas.feedback import EvidenceDraft, EvidenceMode, EvidenceRequest, FeedbackItem
from unisew.schemas.session import AccountRole
from unisew.schemas.workflow import Closed, DialogState, Failed, Open, Submitting
from unisew.services.storage_service import StagedFile, storage_service
from unisew.utils.exceptions import BadRequestError, ConflictError, NotFoundError, UpstreamError
from unisew.utils.notifications import Notifier

logger = logging.getLogger(__name__)

_MB: int = 1024 * 1024


class EvidenceWorkflow:
    """디자이너/공장 증빙 워크플로 (세션당 1개).

    Partner evidence workflow, one instance per session.

    Attributes:
        role: 조회 대상 계정 역할 (designer 또는 garment)
        items: 받은 피드백과 신고 (Feedback and reports received by the partner)
        dialog: 증빙 다이얼로그 상태 (Evidence dialog state)
        last_batch: 마지막 이미지 업로드 결과 (Outcome of the last image batch)
    """

    def __init__(self, notifier: Notifier, role: AccountRole = AccountRole.DESIGNER) -> None:
        self.notifier: Notifier = notifier
        self.role: AccountRole = role
        self.items: list[FeedbackItem] = []
        self.loading: bool = False
        self.load_error: str | None = None
        self.dialog: DialogState[EvidenceDraft] = Closed()
        self.last_batch: dict | None = None

    # --- 목록 (List) ---

    async def load_reports(self, api: httpx.AsyncClient, show_loading: bool = True) -> list[FeedbackItem]:
        """받은 피드백/신고 목록을 불러옵니다.

        ``show_loading=False`` refreshes in the background after a
        submission, without flipping the loading flag.
        """
        if show_loading:
            self.loading = True
        try:
            result = await feedback_repository.get_partner_items(api, self.role)
        finally:
            self.loading = False

        if not result.ok:
            self.load_error = "Failed to fetch feedback data"
            self.notifier.error(self.load_error)
            return self.items

        self.load_error = None
        self.items = list(result.body or [])
        return self.items

    def get_item(self, report_id: int) -> FeedbackItem:
        for item in self.items:
            if item.id == report_id:
                return item
        raise NotFoundError("Report not found")

    def summary(self) -> dict:
        """피드백/신고 구분 통계 — Split and counts for the dashboard header."""
        feedbacks = [i for i in self.items if not i.is_report]
        reports = [i for i in self.items if i.is_report]
        ratings = [f.rating for f in feedbacks if f.rating is not None]
        return {
            "total_feedbacks": len(feedbacks),
            "total_reports": len(reports),
            "awaiting_evidence": sum(1 for r in reports if not r.has_evidence),
            "average_rating": round(sum(ratings) / len(ratings), 1) if ratings else 0,
        }

    # --- 다이얼로그 (Dialog) ---

    def open_evidence_dialog(self, report_id: int) -> EvidenceDraft:
        """증빙 다이얼로그를 엽니다. 모든 입력값 초기화, 기본 모드는 이미지.

        Only reports (not plain feedback) that have no partner answer yet
        can be opened.
        """
        if isinstance(self.dialog, Submitting):
            raise ConflictError("Evidence is already being submitted")

        item = self.get_item(report_id)
        if not item.is_report:
            raise BadRequestError("Evidence can only be given for reports")
        if item.has_evidence:
            raise ConflictError("Evidence has already been submitted for this report")

        draft = EvidenceDraft(report_id=item.id)
        self.dialog = Open(draft=draft)
        return draft

    def close_evidence_dialog(self) -> None:
        self.dialog = Closed()
        self.last_batch = None

    def _current_draft(self) -> EvidenceDraft:
        if isinstance(self.dialog, Submitting):
            raise ConflictError("Evidence is already being submitted")
        if isinstance(self.dialog, (Open, Failed)):
            return self.dialog.draft
        raise BadRequestError("No evidence dialog is open")

    def _replace_draft(self, draft: EvidenceDraft) -> EvidenceDraft:
        self.dialog = Open(draft=draft)
        return draft

    def set_content(self, content: str) -> EvidenceDraft:
        draft = self._current_draft()
        return self._replace_draft(draft.model_copy(update={"content": content}))

    def set_mode(self, mode: EvidenceMode) -> EvidenceDraft:
        """증빙 매체 전환 — 다른 매체의 업로드 내역은 비워집니다.

        Switch the evidence medium. Images and video are mutually exclusive,
        so whatever was staged for the other medium is cleared.
        """
        draft = self._current_draft()
        if mode == draft.mode:
            return draft
        if mode == EvidenceMode.VIDEO:
            update = {"mode": mode, "image_urls": [], "staged_files": [], "progress": 0}
        else:
            update = {"mode": mode, "video_url": None, "video_file": None, "progress": 0}
        self.last_batch = None
        return self._replace_draft(draft.model_copy(update=update))

    # --- 업로드 (Uploads) ---

    async def upload_images(self, files: list[StagedFile]) -> dict:
        """이미지를 순차적으로 업로드하고 URL을 누적합니다.

        Upload images one by one and append the returned URLs to the draft.
        Oversized files are skipped with a per-file warning; provider
        failures are reported per file and do not stop the batch. Progress
        is completed files over batch size.

        Returns:
            dict: uploaded / rejected / failed 파일 정보 (Per-file outcome of the batch)

        Raises:
            BadRequestError: 영상 모드이거나 파일 없음 (Video mode, or empty batch)
            UpstreamError: 크기 검사를 통과한 모든 파일이 업로드 실패
                           (Every file that passed the size check failed at the provider)
        """
        draft = self._current_draft()
        if draft.mode != EvidenceMode.IMAGE:
            raise BadRequestError("Switch to image mode before uploading images")
        if not files:
            raise BadRequestError("No files selected")

        limit = settings.MAX_IMAGE_SIZE_MB * _MB
        total = len(files)
        uploaded: list[str] = []
        rejected: list[str] = []
        failed: list[str] = []

        draft = self._replace_draft(draft.model_copy(update={"uploading": True, "progress": 0}))
        try:
            for index, file in enumerate(files, start=1):
                if file.size > limit:
                    rejected.append(file.filename)
                    self.notifier.warning(
                        f"{file.filename} exceeds {settings.MAX_IMAGE_SIZE_MB}MB and was skipped"
                    )
                else:
                    url = await run_in_threadpool(storage_service.upload_image, file)
                    if url:
                        uploaded.append(url)
                        draft.image_urls.append(url)
                        draft.staged_files.append(file.filename)
                    else:
                        failed.append(file.filename)
                        self.notifier.warning(f"Failed to upload {file.filename}")
                draft.progress = round(index / total * 100)
        finally:
            draft.uploading = False

        self.last_batch = {"uploaded": uploaded, "rejected": rejected, "failed": failed}

        if uploaded:
            self.notifier.success(f"{len(uploaded)} image(s) uploaded successfully!")
        else:
            self.notifier.error("No images were uploaded successfully.")
            if failed:
                raise UpstreamError("Failed to upload images. Please try again.")

        return {**self.last_batch, "image_urls": list(draft.image_urls), "progress": draft.progress}

    async def upload_video(self, file: StagedFile) -> dict:
        """영상 1개를 업로드합니다. 50MB 초과 시 업로드 전에 거부.

        Upload the single evidence video. Progress is byte-level, reported
        by the upload provider while the transfer runs.

        Raises:
            BadRequestError: 이미지 모드이거나 용량 초과 (Image mode, or file too large)
            UpstreamError: 업로드 실패 (Provider failed)
        """
        draft = self._current_draft()
        if draft.mode != EvidenceMode.VIDEO:
            raise BadRequestError("Switch to video mode before uploading a video")

        if file.size > settings.MAX_VIDEO_SIZE_MB * _MB:
            message = f"Video exceeds {settings.MAX_VIDEO_SIZE_MB}MB"
            self.notifier.error(message)
            raise BadRequestError(message)

        draft = self._replace_draft(draft.model_copy(update={"uploading": True, "progress": 0}))
        sent = 0

        def _on_progress(chunk: int) -> None:
            nonlocal sent
            sent += chunk
            if file.size:
                draft.progress = min(100, sent * 100 // file.size)

        try:
            url = await run_in_threadpool(storage_service.upload_video, file, _on_progress)
        finally:
            draft.uploading = False

        if not url:
            message = "Video upload failed. Please try again."
            self.notifier.error(message)
            raise UpstreamError(message)

        draft.video_url = url
        draft.video_file = file.filename
        draft.progress = 100
        self.notifier.success("Video uploaded successfully!")
        return {"video_url": url, "progress": draft.progress}

    # --- 제출 (Submit) ---

    def _validate(self, draft: EvidenceDraft) -> EvidenceRequest:
        if not draft.content.strip():
            message = "Please provide evidence content"
        elif draft.mode == EvidenceMode.IMAGE and not draft.image_urls:
            message = "Please upload at least one image as evidence"
        elif draft.mode == EvidenceMode.VIDEO and not draft.video_url:
            message = "Please upload a video as evidence"
        else:
            is_image = draft.mode == EvidenceMode.IMAGE
            return EvidenceRequest(
                report_id=int(draft.report_id),
                content=draft.content.strip(),
                image_urls=list(draft.image_urls) if is_image else [],
                video_url=None if is_image else draft.video_url,
            )
        self.notifier.error(message)
        raise BadRequestError(message)

    async def submit_evidence(self, api: httpx.AsyncClient) -> EvidenceRequest:
        """증빙을 제출하고 목록을 조용히 새로고침합니다.

        Submit the evidence, close the dialog and refresh the list without
        the loading flag.

        Raises:
            BadRequestError: 내용/매체 누락 — 네트워크 호출 없음 (Missing content or medium; nothing sent)
            ConflictError: 이미 제출 중 또는 이미 소명된 신고 (In flight, or already answered)
            UpstreamError: 백엔드 실패 — 업로드한 URL은 유지 (Backend failure; uploads kept)
        """
        draft = self._current_draft()
        payload = self._validate(draft)

        # 로드된 목록 기준 재확인 — Re-check against the loaded copy; the backend stays authoritative
        item = self.get_item(draft.report_id)
        if item.has_evidence:
            raise ConflictError("Evidence has already been submitted for this report")

        submitting = Submitting(draft=draft)
        self.dialog = submitting
        result = await feedback_repository.give_evidence(api, payload)
        if not result.ok:
            reason = result.message or "Failed to submit evidence. Please try again."
            if self.dialog is submitting:
                self.dialog = Failed(draft=draft, reason=reason)
            self.notifier.error(reason)
            raise UpstreamError(reason)

        self.notifier.success("Evidence submitted successfully!")
        # 제출 중 닫혔거나 다시 열린 다이얼로그는 건드리지 않음
        if self.dialog is submitting:
            self.close_evidence_dialog()
        await self.load_reports(api, show_loading=False)
        return payload

    def view(self) -> dict:
        return {
            "items": [i.model_dump(mode="json") for i in self.items],
            "loading": self.loading,
            "load_error": self.load_error,
            "summary": self.summary(),
            "dialog": self.dialog.model_dump(mode="json"),
        }
