"""파트너 API 라우터 패키지 — 디자이너/공장 엔드포인트 통합.

Partner API Router package — Aggregates designer and garment-manufacturer
endpoints into a single router.

Included routers:
    - reports: 받은 신고 조회 및 증빙 제출 (Received reports and evidence submission)
"""

from fastapi import APIRouter

from unisew.api.partner.reports import router as reports_router

partner_router: APIRouter = APIRouter()

partner_router.include_router(reports_router, prefix="/my/reports", tags=["Partner Reports"])
