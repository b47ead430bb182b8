"""세션별 워크플로 저장소.

Per-session workflow registry.
Each signed-in session gets its own notification queue and one controller
per workflow. The backend stays the source of truth; what lives here is
only dialog state and the last fetched lists. Idle sessions are evicted
after SESSION_IDLE_MINUTES.
"""

from datetime import datetime, timedelta, timezone

from unisew.config import settings
from unisew.schemas.session import AccountRole, SessionContext
from unisew.services.evidence_service import EvidenceWorkflow
from unisew.services.quotation_service import QuotationWorkflow
from unisew.services.report_review_service import ReportReviewWorkflow
from unisew.utils.notifications import Notifier


class WorkflowSession:
    """한 세션의 워크플로 묶음 (Workflows of one session)."""

    def __init__(self, session: SessionContext) -> None:
        self.session_id: str = session.session_id
        self.role: AccountRole = session.role
        self.notifier: Notifier = Notifier()
        self.report_review: ReportReviewWorkflow = ReportReviewWorkflow(self.notifier)
        partner_role = session.role if session.is_partner else AccountRole.DESIGNER
        self.evidence: EvidenceWorkflow = EvidenceWorkflow(self.notifier, partner_role)
        self.quotations: QuotationWorkflow = QuotationWorkflow(self.notifier, session.session_id)
        self.last_seen: datetime = datetime.now(timezone.utc)


class SessionRegistry:

    def __init__(self) -> None:
        self._sessions: dict[str, WorkflowSession] = {}

    def get(self, session: SessionContext) -> WorkflowSession:
        """세션의 워크플로를 반환하고 없으면 생성합니다 — Get or create, evicting idle sessions."""
        now = datetime.now(timezone.utc)
        self._evict_idle(now)

        workflows = self._sessions.get(session.session_id)
        if workflows is None or workflows.role != session.role:
            workflows = WorkflowSession(session)
            self._sessions[session.session_id] = workflows
        workflows.last_seen = now
        return workflows

    def _evict_idle(self, now: datetime) -> None:
        cutoff = now - timedelta(minutes=settings.SESSION_IDLE_MINUTES)
        for session_id in [sid for sid, w in self._sessions.items() if w.last_seen < cutoff]:
            self.discard(session_id)

    def discard(self, session_id: str) -> None:
        """세션 상태 폐기 — 버려진 결제 컨텍스트도 함께 정리.

        Drop a session's workflows together with its abandoned payment context.
        """
        workflows = self._sessions.pop(session_id, None)
        if workflows is not None:
            workflows.quotations.store.discard(session_id)

    def clear(self) -> None:
        self._sessions.clear()


# 싱글턴 인스턴스 — Singleton instance
session_registry: SessionRegistry = SessionRegistry()
