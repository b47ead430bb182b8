"""인증 라우터 — 로그인, 로그아웃, 세션 조회.

Auth Router — Login, logout, and current session endpoints.
Login is the only portal endpoint that needs no session token; it returns
the token every other endpoint expects in the Authorization header.
"""

from typing import Annotated

import httpx
from fastapi import APIRouter, Depends

from unisew.api.deps import get_session
from unisew.backend import get_public_backend
from unisew.schemas.auth import LoginRequest, SessionMeResponse, SessionTokenResponse
from unisew.schemas.session import SessionContext
from unisew.services.auth_service import auth_service

router: APIRouter = APIRouter()


@router.post("/login", response_model=SessionTokenResponse)
async def login(
    data: LoginRequest,
    api: Annotated[httpx.AsyncClient, Depends(get_public_backend)],
) -> SessionTokenResponse:
    """로그인 — 백엔드 인증 후 세션 토큰 발급.

    Login endpoint. Signs in at the backend and issues a session token.
    """
    return await auth_service.login(api, data)


@router.post("/logout", status_code=204)
async def logout(
    session: Annotated[SessionContext, Depends(get_session)],
) -> None:
    """로그아웃 — 세션의 다이얼로그/목록/결제 컨텍스트 폐기."""
    auth_service.logout(session)


@router.get("/me", response_model=SessionMeResponse)
async def get_me(
    session: Annotated[SessionContext, Depends(get_session)],
) -> SessionMeResponse:
    return auth_service.get_me(session)
