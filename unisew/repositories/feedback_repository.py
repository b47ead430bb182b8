"""피드백/신고 레포지토리 — 백엔드 feedback 및 환불 엔드포인트.

Feedback Repository — Backend calls for reports, approvals, refunds and
partner evidence.
"""

from typing import Any

import httpx

from unisew.repositories.base import BaseRepository
from unisew.schemas.common import Result
from unisew.schemas.feedback import (
    ApprovalRequest,
    EvidenceRequest,
    FeedbackItem,
    RefundRequest,
    RefundResult,
)
from unisew.schemas.session import AccountRole


class FeedbackRepository(BaseRepository):

    async def get_all_reports(self, api: httpx.AsyncClient) -> Result:
        """관리자용 전체 신고/피드백 목록 (All reports and feedback, admin view)."""
        return await self._call(api, "GET", "/feedback/report", body_type=list[FeedbackItem] | None)

    async def approve(self, api: httpx.AsyncClient, data: ApprovalRequest) -> Result:
        return await self._call(
            api, "POST", "/feedback/approval", json=data.model_dump(mode="json", by_alias=True)
        )

    async def refund(self, api: httpx.AsyncClient, data: RefundRequest) -> Result:
        """승인 결정 후 환불 계산/실행 요청 (Refund computation after a decision)."""
        return await self._call(
            api,
            "POST",
            "/transaction/refund",
            body_type=RefundResult | None,
            json=data.model_dump(mode="json", by_alias=True),
        )

    async def get_partner_items(self, api: httpx.AsyncClient, role: AccountRole) -> Result:
        """로그인한 디자이너/공장의 피드백·신고 목록.

        Feedback and reports received by the logged-in designer or garment
        account. The backend exposes these as query-style POSTs.
        """
        path = "/feedback/garment" if role == AccountRole.GARMENT else "/feedback/designer"
        return await self._call(api, "POST", path, body_type=list[FeedbackItem] | None)

    async def give_evidence(self, api: httpx.AsyncClient, data: EvidenceRequest) -> Result:
        payload: dict[str, Any] = data.model_dump(mode="json", by_alias=True)
        return await self._call(api, "PUT", "/feedback/evidence", json=payload)


feedback_repository: FeedbackRepository = FeedbackRepository()
