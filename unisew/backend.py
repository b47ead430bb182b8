"""백엔드 HTTP 클라이언트 설정 모듈.

Backend HTTP client configuration module.
Creates the httpx.AsyncClient used to talk to the UniSew REST backend.
The client plays the role a database session plays in a service that owns
its data: repositories receive it as their first argument and one client is
opened per request and closed when the request finishes.
"""

from collections.abc import AsyncGenerator
from typing import Annotated

import httpx
from fastapi import Depends

from unisew.api.deps import get_session
from unisew.config import settings
from unisew.schemas.session import SessionContext


def create_backend_client(upstream_token: str | None = None) -> httpx.AsyncClient:
    """백엔드용 비동기 클라이언트를 생성합니다.

    Build an AsyncClient bound to BACKEND_BASE_URL.
    The upstream token, when present, is forwarded as a Bearer token.
    The timeout falls back to httpx's default when not configured.
    """
    headers: dict[str, str] = {"Content-Type": "application/json"}
    if upstream_token:
        headers["Authorization"] = f"Bearer {upstream_token}"

    kwargs: dict = {"base_url": settings.BACKEND_BASE_URL, "headers": headers}
    if settings.BACKEND_TIMEOUT_SECONDS is not None:
        kwargs["timeout"] = settings.BACKEND_TIMEOUT_SECONDS
    return httpx.AsyncClient(**kwargs)


async def get_backend(
    session: Annotated[SessionContext, Depends(get_session)],
) -> AsyncGenerator[httpx.AsyncClient, None]:
    """요청 단위 백엔드 클라이언트를 생성하고 요청 종료 시 닫습니다.

    FastAPI dependency that yields a backend client for the current session.
    The client is closed after the request completes.

    Yields:
        httpx.AsyncClient: 백엔드 클라이언트 (Backend client carrying the session's upstream token)
    """
    async with create_backend_client(session.upstream_token) as client:
        yield client


async def get_public_backend() -> AsyncGenerator[httpx.AsyncClient, None]:
    """토큰 없는 백엔드 클라이언트 — 로그인 전용 (Backend client for the login call)."""
    async with create_backend_client() as client:
        yield client
