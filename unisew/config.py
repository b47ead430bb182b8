"""애플리케이션 환경 설정 모듈.

Application configuration module using pydantic-settings.
All settings can be overridden via environment variables or a .env file.
"""

from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings

# .env 파일 절대 경로 — CWD와 무관하게 항상 프로젝트 루트의 .env를 참조
# Absolute path to .env file — ensures correct loading regardless of CWD
_ENV_FILE: Path = Path(__file__).resolve().parent.parent / ".env"


class Settings(BaseSettings):
    """애플리케이션 전역 설정 — 환경 변수 기반 구성.

    Global application settings loaded from environment variables.
    Uses pydantic-settings for automatic env var parsing and .env file support.

    Attributes:
        BACKEND_BASE_URL: UniSew 백엔드 REST API 주소 (Remote backend base URL, including /api/v1)
        BACKEND_TIMEOUT_SECONDS: 백엔드 호출 타임아웃, None이면 httpx 기본값 (Upstream timeout; None keeps httpx default)
        JWT_SECRET_KEY: 세션 토큰 서명 비밀키 (Session token signing secret key)
        JWT_ALGORITHM: 세션 토큰 서명 알고리즘 (Session token signing algorithm)
        JWT_ACCESS_TOKEN_EXPIRE_MINUTES: 세션 토큰 만료 시간(분) (Session token TTL in minutes)
        CORS_ORIGINS: 허용된 CORS 출처 목록 (Allowed CORS origin URLs)
        APP_NAME: 애플리케이션 표시 이름 (Application display name)
        DEBUG: 디버그 모드 플래그 (Debug mode flag)
    """

    # 백엔드 — UniSew REST API (Remote backend, the single source of truth)
    BACKEND_BASE_URL: str = "http://localhost:8080/api/v1"
    BACKEND_TIMEOUT_SECONDS: float | None = None

    # 세션 토큰 설정 — Signed session blob (replaces the browser's localStorage "user")
    JWT_SECRET_KEY: str = "change-this-secret-key-in-production"  # 운영 환경에서 반드시 변경 (MUST change in production)
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 12

    # CORS 설정 — 프론트엔드 개발 서버 허용 (Frontend dev server origins)
    CORS_ORIGINS: List[str] = ["http://localhost:5173", "http://localhost:3000"]

    # 앱 메타데이터 — Application metadata
    APP_NAME: str = "UniSew Portal"
    DEBUG: bool = True

    # Axiom 로깅 설정 — Axiom observability platform settings
    AXIOM_API_TOKEN: str = ""  # Axiom API 토큰 (API token from Axiom dashboard)
    AXIOM_DATASET: str = ""  # Axiom 데이터셋 이름 (Dataset name for API logs)

    # AWS S3 설정 — 증빙 이미지/영상 업로드 (Evidence image/video uploads)
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY: str = ""
    AWS_S3_BUCKET: str = ""
    AWS_S3_REGION: str = "ap-southeast-1"

    # 로컬 업로드 — S3 미설정 시 사용 (Local fallback when S3 is not configured)
    LOCAL_UPLOADS_DIR: str = ""
    PUBLIC_BASE_URL: str = "http://localhost:8000"

    # 업로드 용량 제한 — Upload size limits
    MAX_IMAGE_SIZE_MB: int = 10  # 이미지 1개당 (Per image file)
    MAX_VIDEO_SIZE_MB: int = 50  # 영상 1개 (Single video file)

    # 결제 설정 — Payment redirect round trip
    PAYMENT_RETURN_PATH: str = "/school/payment/result"
    PAYMENT_CONTEXT_TTL_MINUTES: int = 30  # 결제 컨텍스트 보관 시간 (Stored payment context lifetime)

    # 세션별 워크플로 상태 보관 시간 — Idle per-session workflow state lifetime
    SESSION_IDLE_MINUTES: int = 120

    # 거절 시 기본 문제 수준 — Problem level sent with the refund request when rejecting without one
    DEFAULT_REJECT_PROBLEM_LEVEL: str = "low"

    model_config = {"env_file": _ENV_FILE, "env_file_encoding": "utf-8"}


# 전역 설정 싱글턴 인스턴스 — Global settings singleton instance
settings: Settings = Settings()
