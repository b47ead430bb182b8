"""학교 API 라우터 패키지 — 모든 학교 엔드포인트 통합.

School API Router package — Aggregates school-facing endpoints.

Included routers:
    - quotations: 견적 조회/선택/결제 (Quotation listing, selection and payment hand-off)
    - payments: 결제 게이트웨이 복귀 (Payment gateway return)
"""

from fastapi import APIRouter

from unisew.api.school.payments import router as payments_router
from unisew.api.school.quotations import router as quotations_router

school_router: APIRouter = APIRouter()

school_router.include_router(quotations_router, tags=["School Quotations"])
school_router.include_router(payments_router, prefix="/payment", tags=["School Payment"])
