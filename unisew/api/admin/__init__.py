"""관리자 API 라우터 패키지 — 모든 관리자 엔드포인트 통합.

Admin API Router package — Aggregates all admin-facing endpoints
into a single router for inclusion in the FastAPI application.

Included routers:
    - reports: 신고 검토 및 승인/거절 (Report review and approval)
"""

from fastapi import APIRouter

from unisew.api.admin.reports import router as reports_router

admin_router: APIRouter = APIRouter()

# 신고 검토: /reports 하위 (Report review workflow)
admin_router.include_router(reports_router, prefix="/reports", tags=["Admin Reports"])
