"""인증 서비스 — 백엔드 로그인 후 포털 세션 토큰 발급.

Auth Service — Signs in at the backend and issues the portal session token.
The backend answers with the account blob and its own access token; the
role claim of that token decides which workflows the session may use. The
backend token rides inside the session token as ``upstream`` and every
later backend call forwards it.
"""

import logging
import uuid
from typing import Any

import httpx
import jwt

from unisew.repositories.auth_repository import auth_repository
from unisew.schemas.auth import LoginAccount, LoginRequest, SessionMeResponse, SessionTokenResponse
from unisew.schemas.session import AccountRole, SessionContext
from unisew.services.session_service import session_registry
from unisew.utils.exceptions import ForbiddenError, UnauthorizedError
from unisew.utils.jwt import create_access_token

logger = logging.getLogger(__name__)


def _backend_claims(token: str) -> dict[str, Any]:
    """백엔드 토큰의 클레임 — 서명은 백엔드가 검증 (The backend verifies its own signature)."""
    try:
        return jwt.decode(token, options={"verify_signature": False})
    except jwt.InvalidTokenError:
        return {}


def _resolve_role(value: Any) -> AccountRole:
    try:
        return AccountRole(str(value).strip().lower())
    except ValueError:
        raise ForbiddenError("This account cannot use the portal")


class AuthService:
    """로그인 및 세션 관리 서비스 (Sign-in and session lifecycle)."""

    async def login(self, api: httpx.AsyncClient, data: LoginRequest) -> SessionTokenResponse:
        """백엔드 로그인 후 세션 토큰을 발급합니다.

        Sign in at the backend and issue a session token.

        Args:
            api: 인증 없는 백엔드 클라이언트 (Backend client without a token)
            data: 구글 프로필 (Google profile of the account)

        Returns:
            SessionTokenResponse: 세션 토큰, 역할, 계정 정보

        Raises:
            UnauthorizedError: 백엔드 로그인 실패 또는 토큰 누락 (Backend refused or sent no token)
            ForbiddenError: 포털에서 지원하지 않는 역할 (Role the portal has no workflows for)
        """
        result = await auth_repository.login(api, data)
        if not result.ok:
            raise UnauthorizedError(result.message or "Login failed")

        account: LoginAccount = result.body
        if not account.access_token:
            logger.warning("Backend login for %s returned no access token", data.email)
            raise UnauthorizedError("Login failed")

        claims = _backend_claims(account.access_token)
        role = _resolve_role(claims.get("role") or account.role)
        user_id = str(claims.get("id") or claims.get("sub") or account.id or account.email or data.email)
        email = account.email or data.email
        name = account.name or data.name

        token = create_access_token({
            "sub": user_id,
            "email": email,
            "name": name,
            "role": role.value,
            "sid": uuid.uuid4().hex,
            "upstream": account.access_token,
        })
        logger.info("Session issued for %s (%s)", email, role.value)

        return SessionTokenResponse(
            access_token=token,
            role=role,
            user=account.model_dump(by_alias=True),
            message=result.message,
        )

    def get_me(self, session: SessionContext) -> SessionMeResponse:
        return SessionMeResponse(**session.model_dump(exclude={"upstream_token"}))

    def logout(self, session: SessionContext) -> None:
        """세션의 워크플로 상태 폐기 — 토큰은 만료될 때까지 유효 (Token itself stays valid until expiry)."""
        session_registry.discard(session.session_id)
        logger.info("Session %s signed out", session.session_id)


auth_service: AuthService = AuthService()
