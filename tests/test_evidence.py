"""증빙 제출 워크플로 테스트 — 목록, 업로드, 검증, 제출.

Evidence workflow tests — Partner list and summary, image batches and the
single video, client-side validation and submission.
"""

import asyncio
import io

import pytest
import pytest_asyncio
from pydantic import ValidationError

from tests.conftest import envelope, feedback_payload, report_payload
from unisew.schemas.feedback import EvidenceMode, EvidenceRequest, ReportStatus
from unisew.schemas.session import AccountRole
from unisew.schemas.workflow import Closed, Failed, Open
from unisew.services.evidence_service import EvidenceWorkflow
from unisew.services.storage_service import StagedFile, storage_service
from unisew.utils.exceptions import BadRequestError, ConflictError, UpstreamError
from unisew.utils.notifications import NotificationVariant

MB = 1024 * 1024


def staged(name: str, size: int = 2048, content_type: str = "image/png") -> StagedFile:
    """크기는 선언값 — 실제 바이트는 작게 (Declared size; tiny real payload)."""
    return StagedFile(filename=name, content_type=content_type, size=size, stream=io.BytesIO(b"\x89PNG" * 64))


@pytest.fixture
def workflow(notifier) -> EvidenceWorkflow:
    return EvidenceWorkflow(notifier, AccountRole.DESIGNER)


@pytest.fixture
def partner_items(fake):
    fake.on("POST", "/feedback/designer", json=envelope([
        report_payload(10),
        report_payload(11, partnerContent="Fabric was provided by the school"),
        feedback_payload(12, rating=4),
        feedback_payload(13, rating=5),
    ]))
    fake.on("PUT", "/feedback/evidence", json=envelope(None, "Evidence saved"))


@pytest_asyncio.fixture
async def opened(workflow, backend, partner_items) -> EvidenceWorkflow:
    await workflow.load_reports(backend)
    workflow.open_evidence_dialog(10)
    return workflow


# ===== 목록 (List) =====

class TestPartnerList:
    """받은 피드백/신고 목록 테스트."""

    async def test_summary(self, workflow, backend, partner_items):
        await workflow.load_reports(backend)
        assert workflow.summary() == {
            "total_feedbacks": 2,
            "total_reports": 2,
            "awaiting_evidence": 1,
            "average_rating": 4.5,
        }

    async def test_backend_status_spellings(self, workflow, backend, fake):
        """FEEDBACK_PENDING / FEEDBACK_APPROVED 표기도 목록 로드."""
        fake.on("POST", "/feedback/designer", json=envelope([
            report_payload(30, status="FEEDBACK_PENDING"),
            report_payload(31, status="FEEDBACK_APPROVED"),
        ]))
        items = await workflow.load_reports(backend)

        assert [i.status for i in items] == [ReportStatus.PENDING, ReportStatus.APPROVED]
        assert workflow.load_error is None
        assert workflow.open_evidence_dialog(30).mode == EvidenceMode.IMAGE

    async def test_garment_uses_garment_endpoint(self, notifier, backend, fake):
        fake.on("POST", "/feedback/garment", json=envelope([report_payload(20)]))
        workflow = EvidenceWorkflow(notifier, AccountRole.GARMENT)
        items = await workflow.load_reports(backend)
        assert [i.id for i in items] == [20]
        assert fake.calls("POST", "/feedback/designer") == []

    async def test_load_failure(self, workflow, backend, fake, notifier):
        fake.on("POST", "/feedback/designer", status=500, json={"message": "down"})
        assert await workflow.load_reports(backend) == []
        assert notifier.peek()[-1].message == "Failed to fetch feedback data"

    async def test_open_rejects_plain_feedback(self, workflow, backend, partner_items):
        await workflow.load_reports(backend)
        with pytest.raises(BadRequestError):
            workflow.open_evidence_dialog(12)

    async def test_open_rejects_answered_report(self, workflow, backend, partner_items):
        await workflow.load_reports(backend)
        with pytest.raises(ConflictError):
            workflow.open_evidence_dialog(11)

    async def test_open_defaults_to_image_mode(self, opened):
        assert isinstance(opened.dialog, Open)
        assert opened.dialog.draft.mode == EvidenceMode.IMAGE
        assert opened.dialog.draft.image_urls == []


# ===== 업로드 (Uploads) =====

class TestUploads:
    """이미지/영상 업로드 테스트."""

    async def test_batch_with_oversized_file(self, opened, notifier, local_uploads):
        """3개 중 1개가 10MB 초과 → 2개 URL, 경고 1개."""
        batch = await opened.upload_images([
            staged("front.png"),
            staged("huge.png", size=11 * MB),
            staged("back.png"),
        ])

        assert len(batch["image_urls"]) == 2
        assert batch["rejected"] == ["huge.png"]
        assert batch["progress"] == 100
        assert all(u.startswith("http://localhost:8000/uploads/evidence/images/") for u in batch["image_urls"])
        assert len(list((local_uploads / "evidence" / "images").rglob("*.png"))) == 2

        messages = [(n.variant, n.message) for n in notifier.peek()]
        assert (NotificationVariant.WARNING, "huge.png exceeds 10MB and was skipped") in messages
        assert (NotificationVariant.SUCCESS, "2 image(s) uploaded successfully!") in messages
        assert opened.dialog.draft.staged_files == ["front.png", "back.png"]
        assert opened.dialog.draft.uploading is False

    async def test_batches_accumulate(self, opened):
        await opened.upload_images([staged("a.png")])
        await opened.upload_images([staged("b.png"), staged("c.png")])
        assert len(opened.dialog.draft.image_urls) == 3

    async def test_provider_failure_is_per_file(self, opened, notifier, monkeypatch):
        original = storage_service.upload_image

        def flaky(file):
            return None if file.filename == "bad.png" else original(file)

        monkeypatch.setattr(storage_service, "upload_image", flaky)
        batch = await opened.upload_images([staged("ok.png"), staged("bad.png")])

        assert batch["failed"] == ["bad.png"]
        assert len(batch["image_urls"]) == 1
        assert any(n.message == "Failed to upload bad.png" for n in notifier.peek())

    async def test_all_uploads_failed(self, opened, monkeypatch):
        monkeypatch.setattr(storage_service, "upload_image", lambda file: None)
        with pytest.raises(UpstreamError):
            await opened.upload_images([staged("a.png"), staged("b.png")])
        assert opened.dialog.draft.image_urls == []

    async def test_all_oversized_is_not_upstream_error(self, opened, notifier):
        batch = await opened.upload_images([staged("big.png", size=20 * MB)])
        assert batch["image_urls"] == []
        assert notifier.peek()[-1].message == "No images were uploaded successfully."

    async def test_images_rejected_in_video_mode(self, opened):
        opened.set_mode(EvidenceMode.VIDEO)
        with pytest.raises(BadRequestError):
            await opened.upload_images([staged("a.png")])

    async def test_mode_switch_clears_other_medium(self, opened):
        await opened.upload_images([staged("a.png")])
        opened.set_mode(EvidenceMode.VIDEO)
        draft = opened.dialog.draft
        assert draft.image_urls == []
        assert draft.staged_files == []
        assert draft.progress == 0

        await opened.upload_video(staged("clip.mp4", content_type="video/mp4"))
        opened.set_mode(EvidenceMode.IMAGE)
        assert opened.dialog.draft.video_url is None

    async def test_video_over_limit_rejected_before_upload(self, opened, local_uploads):
        opened.set_mode(EvidenceMode.VIDEO)
        with pytest.raises(BadRequestError):
            await opened.upload_video(staged("long.mp4", size=51 * MB, content_type="video/mp4"))
        assert not (local_uploads / "evidence" / "videos").exists()
        assert opened.dialog.draft.video_url is None

    async def test_video_upload(self, opened):
        opened.set_mode(EvidenceMode.VIDEO)
        result = await opened.upload_video(staged("clip.mp4", content_type="video/mp4"))
        assert result["progress"] == 100
        assert result["video_url"].startswith("http://localhost:8000/uploads/evidence/videos/")
        assert opened.dialog.draft.video_file == "clip.mp4"


# ===== 제출 (Submit) =====

class TestSubmitEvidence:
    """증빙 제출 테스트."""

    async def test_empty_content_sends_nothing(self, opened, backend, fake, notifier):
        await opened.upload_images([staged("a.png")])
        opened.set_content("   ")
        with pytest.raises(BadRequestError):
            await opened.submit_evidence(backend)
        assert fake.calls("PUT", "/feedback/evidence") == []
        assert notifier.peek()[-1].message == "Please provide evidence content"

    async def test_image_mode_requires_images(self, opened, backend, fake):
        opened.set_content("The fabric was supplied by the school")
        with pytest.raises(BadRequestError) as exc_info:
            await opened.submit_evidence(backend)
        assert exc_info.value.detail == "Please upload at least one image as evidence"
        assert fake.calls("PUT", "/feedback/evidence") == []

    async def test_video_mode_requires_video(self, opened, backend, fake):
        opened.set_content("See attached")
        opened.set_mode(EvidenceMode.VIDEO)
        with pytest.raises(BadRequestError) as exc_info:
            await opened.submit_evidence(backend)
        assert exc_info.value.detail == "Please upload a video as evidence"
        assert fake.calls("PUT", "/feedback/evidence") == []

    async def test_submit_images(self, opened, backend, fake, notifier):
        await opened.upload_images([staged("a.png"), staged("b.png")])
        opened.set_content("  Stitching matched the approved sample  ")

        payload = await opened.submit_evidence(backend)

        sent = fake.sent("PUT", "/feedback/evidence")
        assert len(sent) == 1
        assert sent[0]["reportId"] == 10
        assert sent[0]["content"] == "Stitching matched the approved sample"
        assert len(sent[0]["imageUrls"]) == 2
        assert not sent[0]["videoUrl"]
        assert payload.image_urls == sent[0]["imageUrls"]
        assert isinstance(opened.dialog, Closed)
        assert notifier.peek()[-1].message == "Evidence submitted successfully!"

    async def test_submit_video_payload_has_no_images(self, opened, backend, fake):
        opened.set_mode(EvidenceMode.VIDEO)
        await opened.upload_video(staged("clip.mp4", content_type="video/mp4"))
        opened.set_content("Video of the delivery")

        await opened.submit_evidence(backend)

        sent = fake.sent("PUT", "/feedback/evidence")[0]
        assert sent["imageUrls"] == []
        assert sent["videoUrl"].endswith(".mp4")

    async def test_silent_refresh_after_submit(self, opened, backend, fake):
        await opened.upload_images([staged("a.png")])
        opened.set_content("Evidence")
        await opened.submit_evidence(backend)
        assert len(fake.calls("POST", "/feedback/designer")) == 2
        assert opened.loading is False

    async def test_failure_keeps_uploads(self, opened, backend, fake, notifier):
        fake.on("PUT", "/feedback/evidence", status=400, json={"message": "Report is closed"})
        await opened.upload_images([staged("a.png")])
        opened.set_content("Evidence")

        with pytest.raises(UpstreamError):
            await opened.submit_evidence(backend)

        assert isinstance(opened.dialog, Failed)
        assert opened.dialog.reason == "Report is closed"
        assert len(opened.dialog.draft.image_urls) == 1
        assert notifier.peek()[-1].variant == NotificationVariant.ERROR

    async def test_failure_without_backend_message(self, opened, backend, fake):
        fake.on("PUT", "/feedback/evidence", status=500, json={})
        await opened.upload_images([staged("a.png")])
        opened.set_content("Evidence")
        with pytest.raises(UpstreamError):
            await opened.submit_evidence(backend)
        assert opened.dialog.reason == "Failed to submit evidence. Please try again."

    async def test_request_rejects_both_media(self):
        with pytest.raises(ValidationError):
            EvidenceRequest(report_id=1, content="x", image_urls=["u"], video_url="v")
        with pytest.raises(ValidationError):
            EvidenceRequest(report_id=1, content="x")

    async def test_recheck_against_reloaded_list(self, opened, backend, fake):
        """열어둔 사이 다른 곳에서 소명됨 → 목록 재조회 후 제출 시 409, 전송 없음."""
        await opened.upload_images([staged("a.png")])
        opened.set_content("Evidence")
        fake.on("POST", "/feedback/designer", json=envelope([
            report_payload(10, partnerContent="Answered from another tab"),
        ]))
        await opened.load_reports(backend)

        with pytest.raises(ConflictError):
            await opened.submit_evidence(backend)
        assert fake.calls("PUT", "/feedback/evidence") == []

    async def test_second_submit_conflicts(self, opened, backend, fake):
        await opened.upload_images([staged("a.png")])
        opened.set_content("Evidence")
        gate = fake.hold("PUT", "/feedback/evidence")
        task = asyncio.create_task(opened.submit_evidence(backend))
        await fake.wait_for_call("PUT", "/feedback/evidence")

        with pytest.raises(ConflictError):
            await opened.submit_evidence(backend)

        gate.set()
        await task
        assert len(fake.calls("PUT", "/feedback/evidence")) == 1

    async def test_late_failure_after_close(self, opened, backend, fake):
        await opened.upload_images([staged("a.png")])
        opened.set_content("Evidence")
        gate = fake.hold("PUT", "/feedback/evidence")
        task = asyncio.create_task(opened.submit_evidence(backend))
        await fake.wait_for_call("PUT", "/feedback/evidence")

        opened.close_evidence_dialog()
        fake.on("PUT", "/feedback/evidence", status=500, json={})
        gate.set()

        with pytest.raises(UpstreamError):
            await task
        assert isinstance(opened.dialog, Closed)
