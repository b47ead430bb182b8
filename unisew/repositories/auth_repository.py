"""인증 레포지토리 — Backend sign-in call."""

import httpx

from unisew.repositories.base import BaseRepository
from unisew.schemas.auth import LoginAccount, LoginRequest
from unisew.schemas.common import Failure, Result

# 백엔드가 설정하는 액세스 토큰 쿠키 이름 — Cookie carrying the backend access token
ACCESS_COOKIE: str = "access"


class AuthRepository(BaseRepository):

    async def login(self, api: httpx.AsyncClient, data: LoginRequest) -> Result:
        """백엔드 로그인 — 토큰은 ``access`` 쿠키 또는 바디에서 읽음.

        Sign in at the backend. The access token usually arrives as the
        ``access`` cookie; a token in the body is used when there is none.
        """
        response = await self._send(api, "POST", "/auth/login", json=data.model_dump(mode="json"))
        if isinstance(response, Failure):
            return response

        result = self._parse(response, "POST", "/auth/login", body_type=LoginAccount)
        if result.ok:
            result.body.access_token = response.cookies.get(ACCESS_COOKIE) or result.body.access_token
        return result


auth_repository: AuthRepository = AuthRepository()
