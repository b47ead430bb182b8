"""FastAPI 의존성 주입 모듈 — 세션 인증 및 역할 검사.

FastAPI dependency injection module — Session authentication and authorization.
Provides reusable dependencies for extracting the typed session from the
session token and enforcing role-based access on the workflow endpoints.

Authentication Flow:
    1. 클라이언트가 Authorization: Bearer <token> 헤더를 전송
       (Client sends Authorization: Bearer <token> header)
    2. decode_token()이 JWT를 검증하고 페이로드를 반환
       (decode_token verifies the JWT and returns its payload)
    3. 페이로드를 SessionContext로 검증 — 누락/불일치 시 401
       (Payload is validated into a SessionContext; anything missing or malformed is a 401,
       which the front-end answers by redirecting to the login page)
"""

from typing import Annotated, Awaitable, Callable

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import ValidationError

from unisew.schemas.session import AccountRole, SessionContext
from unisew.services.session_service import WorkflowSession, session_registry
from unisew.utils.exceptions import ForbiddenError, UnauthorizedError
from unisew.utils.jwt import decode_token

# HTTP Bearer 토큰 추출기 — auto_error=False: 누락 시 403 대신 401을 직접 반환
# (Missing header is reported as 401 by get_session rather than HTTPBearer's 403)
security: HTTPBearer = HTTPBearer(auto_error=False)

_LOGIN_AGAIN = "Session expired or invalid, please log in again"


async def get_session(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> SessionContext:
    """세션 토큰에서 현재 세션을 추출합니다.

    Decode the session token from the Authorization header and return the
    typed session context.

    Raises:
        UnauthorizedError: 토큰 누락/만료/형식 오류 (Missing, expired or malformed session)
    """
    if credentials is None:
        raise UnauthorizedError(_LOGIN_AGAIN)

    try:
        payload: dict = decode_token(credentials.credentials)
    except (jwt.ExpiredSignatureError, jwt.InvalidTokenError):
        raise UnauthorizedError(_LOGIN_AGAIN)

    if payload.get("type") != "access":
        raise UnauthorizedError("Invalid token type")

    try:
        return SessionContext(
            user_id=str(payload.get("sub") or ""),
            email=payload.get("email") or "",
            name=payload.get("name") or "",
            role=payload.get("role"),
            session_id=str(payload.get("sid") or payload.get("sub") or ""),
            upstream_token=payload.get("upstream"),
        )
    except ValidationError:
        raise UnauthorizedError(_LOGIN_AGAIN)


def require_role(*roles: AccountRole) -> Callable[..., Awaitable[SessionContext]]:
    """역할 기반 권한 검사 의존성 팩토리.

    Dependency factory that only lets the given roles through.

    Returns:
        FastAPI 의존성 함수 — 세션 반환 또는 403 발생
        (FastAPI dependency returning the session or raising 403)
    """
    allowed = frozenset(roles)

    async def _check(
        session: Annotated[SessionContext, Depends(get_session)],
    ) -> SessionContext:
        if session.role not in allowed:
            raise ForbiddenError()
        return session
    return _check


async def get_workflows(
    session: Annotated[SessionContext, Depends(get_session)],
) -> WorkflowSession:
    """현재 세션의 워크플로 묶음을 반환합니다 (Workflows of the current session)."""
    return session_registry.get(session)


# 편의 의존성 — Pre-configured role dependencies
require_admin = require_role(AccountRole.ADMIN)
require_partner = require_role(AccountRole.DESIGNER, AccountRole.GARMENT)
require_school = require_role(AccountRole.SCHOOL)
