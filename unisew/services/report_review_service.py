"""신고 검토 서비스 — 관리자 승인/거절 워크플로.

Report Review Service — Admin approval workflow.
An administrator opens a pending report, picks approve or reject, fills a
severity level and messages, and submits. A successful decision is
followed by a refund request; a failed refund does not undo the decision
and is reported as a warning.

Dialog lifecycle:
    Closed --open_approval--> Open --submit--> Submitting --200--> Closed (list reloaded)
                                  ^                      \\--error--> Failed (draft kept)
                                  \\------update_draft------/
"""

import logging
from enum import Enum

import httpx
from pydantic import BaseModel

from unisew.config import settings
from unisew.repositories.feedback_repository import feedback_repository
from unisew.schemas.feedback import (
    ApprovalAction,
    ApprovalDraft,
    ApprovalRequest,
    FeedbackItem,
    ProblemLevel,
    RefundDecision,
    RefundRequest,
    ReportStatus,
)
from unisew.schemas.workflow import Closed, DialogState, Failed, Open, Submitting
from unisew.utils.exceptions import BadRequestError, ConflictError, NotFoundError, UpstreamError
from unisew.utils.notifications import Notifier

logger = logging.getLogger(__name__)


class ApprovalOutcome(str, Enum):
    COMPLETED = "completed"
    SUCCEEDED_WITH_WARNING = "succeeded_with_warning"  # 결정은 성공, 환불 요청 실패 (Decision saved, refund failed)


class ApprovalResult(BaseModel):
    report_id: int
    action: ApprovalAction
    problem_level: ProblemLevel  # 환불 요청에 실제로 보낸 수준 (Level actually sent with the refund)
    outcome: ApprovalOutcome
    refund: dict | None = None


class ReportReviewWorkflow:
    """관리자 신고 검토 워크플로 (세션당 1개).

    Admin report review workflow, one instance per session.

    Attributes:
        reports: 마지막으로 불러온 신고 목록 (Last loaded report list)
        loading: 목록 조회 중 여부 (List request in flight)
        load_error: 마지막 조회 실패 메시지 (Message of the last failed load)
        dialog: 승인 다이얼로그 상태 (Approval dialog state)
    """

    def __init__(self, notifier: Notifier) -> None:
        self.notifier: Notifier = notifier
        self.reports: list[FeedbackItem] = []
        self.loading: bool = False
        self.load_error: str | None = None
        self.dialog: DialogState[ApprovalDraft] = Closed()

    async def load_reports(self, api: httpx.AsyncClient) -> list[FeedbackItem]:
        """전체 신고 목록을 불러옵니다. 실패해도 기존 목록 유지.

        Fetch the full report list. A failure queues an error notification
        and keeps the previous list (empty on first load).
        """
        self.loading = True
        try:
            result = await feedback_repository.get_all_reports(api)
        finally:
            self.loading = False

        if not result.ok:
            self.load_error = "Failed to load reports"
            self.notifier.error(self.load_error)
            return self.reports

        self.load_error = None
        self.reports = list(result.body or [])
        return self.reports

    def get_report(self, report_id: int) -> FeedbackItem:
        for report in self.reports:
            if report.id == report_id:
                return report
        raise NotFoundError("Report not found")

    def stats(self) -> dict[str, int]:
        """상태별 건수 — Counts per status for the dashboard header."""
        return {
            "total": len(self.reports),
            "pending": sum(1 for r in self.reports if r.status == ReportStatus.PENDING),
            "approved": sum(1 for r in self.reports if r.status == ReportStatus.APPROVED),
            "rejected": sum(1 for r in self.reports if r.status == ReportStatus.REJECTED),
        }

    def open_approval(self, report_id: int, action: ApprovalAction) -> ApprovalDraft:
        """승인/거절 다이얼로그를 엽니다. 이전 입력값은 초기화.

        Open the approval dialog for a pending report. The draft always
        starts empty so input from an earlier dialog session cannot leak in.
        """
        if isinstance(self.dialog, Submitting):
            raise ConflictError("A decision is already being submitted")

        report = self.get_report(report_id)
        if report.status != ReportStatus.PENDING:
            raise ConflictError(f"Report has already been {report.status.value}")

        draft = ApprovalDraft(report_id=report.id, action=action)
        self.dialog = Open(draft=draft)
        return draft

    def _current_draft(self) -> ApprovalDraft:
        if isinstance(self.dialog, Submitting):
            raise ConflictError("A decision is already being submitted")
        if isinstance(self.dialog, (Open, Failed)):
            return self.dialog.draft
        raise BadRequestError("No approval dialog is open")

    def update_draft(
        self,
        problem_level: ProblemLevel | None = None,
        message_for_school: str | None = None,
        message_for_partner: str | None = None,
    ) -> ApprovalDraft:
        draft = self._current_draft()
        updates = {
            key: value
            for key, value in (
                ("problem_level", problem_level),
                ("message_for_school", message_for_school),
                ("message_for_partner", message_for_partner),
            )
            if value is not None
        }
        draft = draft.model_copy(update=updates)
        self.dialog = Open(draft=draft)
        return draft

    def close_approval(self) -> None:
        self.dialog = Closed()

    async def submit_approval(self, api: httpx.AsyncClient) -> ApprovalResult:
        """결정을 제출하고 환불 요청 후 목록을 다시 불러옵니다.

        Submit the decision, request the refund, then reload the list.

        Raises:
            BadRequestError: 승인인데 문제 수준 미선택 — 네트워크 호출 없음
                             (Approving without a problem level; nothing is sent)
            ConflictError: 이미 제출 중 (A submission is already in flight)
            UpstreamError: 승인 호출 실패 — 다이얼로그 유지 (Approval call failed; dialog kept for retry)
        """
        draft = self._current_draft()
        approving = draft.action == ApprovalAction.APPROVE
        verb = "approve" if approving else "reject"

        if approving and draft.problem_level is None:
            message = "Please select a problem level before approving"
            self.notifier.error(message)
            raise BadRequestError(message)

        submitting = Submitting(draft=draft)
        self.dialog = submitting

        result = await feedback_repository.approve(
            api,
            ApprovalRequest(
                feedback_id=draft.report_id,
                message_for_school=draft.message_for_school,
                message_for_partner=draft.message_for_partner,
                approved=approving,
            ),
        )
        if not result.ok:
            reason = f"Failed to {verb} report"
            if self.dialog is submitting:
                self.dialog = Failed(draft=draft, reason=reason)
            self.notifier.error(reason)
            raise UpstreamError(reason)

        # 거절 시 수준 미선택이면 기본값 사용 — Rejections without a level fall back to the default
        problem_level = draft.problem_level or ProblemLevel(settings.DEFAULT_REJECT_PROBLEM_LEVEL)
        refund = await feedback_repository.refund(
            api,
            RefundRequest(
                report_id=draft.report_id,
                decision=RefundDecision.ACCEPTED if approving else RefundDecision.REJECTED,
                problem_level=problem_level,
            ),
        )

        past = "approved" if approving else "rejected"
        if refund.ok:
            outcome = ApprovalOutcome.COMPLETED
            refund_body = refund.body.model_dump(mode="json") if refund.body is not None else None
            self.notifier.success(f"Report {past} successfully")
        else:
            outcome = ApprovalOutcome.SUCCEEDED_WITH_WARNING
            refund_body = None
            logger.warning("Refund for report %s failed after it was %s", draft.report_id, past)
            self.notifier.warning(f"Report {past} successfully, but the refund request failed")

        # 제출 중 닫히거나 다른 다이얼로그가 열렸으면 그대로 둠 — Late results leave a newer dialog alone
        if self.dialog is submitting:
            self.dialog = Closed()
        await self.load_reports(api)

        return ApprovalResult(
            report_id=draft.report_id,
            action=draft.action,
            problem_level=problem_level,
            outcome=outcome,
            refund=refund_body,
        )

    def view(self) -> dict:
        return {
            "reports": [r.model_dump(mode="json") for r in self.reports],
            "loading": self.loading,
            "load_error": self.load_error,
            "stats": self.stats(),
            "dialog": self.dialog.model_dump(mode="json"),
        }
