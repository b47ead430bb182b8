"""FastAPI 애플리케이션 엔트리포인트 — 미들웨어 및 라우터 등록.

FastAPI application entry point — Middleware and router registration.
Configures CORS, health check, and includes the auth, admin, partner and school
workflow routers plus the local upload file route.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from unisew.config import settings
from unisew.middleware.axiom_logging import AxiomLoggingMiddleware

app: FastAPI = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Axiom API 로깅 미들웨어 — Axiom API request/response logging
# CORS보다 먼저 등록하여 모든 요청을 캡처 (Registered before CORS to capture all requests)
app.add_middleware(AxiomLoggingMiddleware)

# CORS 미들웨어 — 세션 토큰은 Authorization 헤더로 전달
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """서버 상태 확인 엔드포인트.

    Health check endpoint for load balancers and monitoring.
    """
    return {"status": "ok"}


# ---------------------------------------------------------------------------
# 라우터 등록 — Router registration
# ---------------------------------------------------------------------------
# admin_router: 신고 검토 (Report review)
# partner_router: 디자이너/공장 증빙 제출 (Evidence submission)
# school_router: 견적 수락 및 결제 (Quotation acceptance and payment)
from unisew.api.admin import admin_router  # noqa: E402
from unisew.api.auth import router as auth_router  # noqa: E402
from unisew.api.notifications import router as notifications_router  # noqa: E402
from unisew.api.partner import partner_router  # noqa: E402
from unisew.api.school import school_router  # noqa: E402
from unisew.api.uploads import router as uploads_router  # noqa: E402

app.include_router(auth_router, prefix="/api/v1/auth", tags=["Auth"])
app.include_router(admin_router, prefix="/api/v1/admin")
app.include_router(partner_router, prefix="/api/v1/partner")
app.include_router(school_router, prefix="/api/v1/school")
app.include_router(notifications_router, prefix="/api/v1/notifications", tags=["Notifications"])
# 로컬 업로드 파일 — PUBLIC_BASE_URL/uploads/<key> (local upload provider only)
app.include_router(uploads_router, prefix="/uploads", tags=["Uploads"])
