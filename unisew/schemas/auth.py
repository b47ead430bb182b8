"""인증 관련 Pydantic 스키마.

Authentication schemas.
The portal signs in through the backend's ``/auth/login`` (Google account
profile in, account blob and ``access`` cookie out) and answers with its
own session token.
"""

from typing import Any

from pydantic import AliasChoices, BaseModel, Field

from unisew.schemas.feedback import WireModel
from unisew.schemas.session import AccountRole


class LoginRequest(BaseModel):
    """로그인 요청 스키마 — Google 프로필 정보.

    Attributes:
        email: 구글 계정 이메일 (Google account email)
        name: 표시 이름 (Display name)
        avatar: 프로필 사진 URL (Profile picture URL)
    """

    email: str = Field(min_length=3)
    name: str = ""
    avatar: str | None = None


class LoginAccount(WireModel):
    """백엔드가 반환하는 계정 정보 (Account blob returned by the backend)."""

    model_config = {"extra": "allow"}

    id: int | str | None = None
    email: str = ""
    name: str = ""
    role: str | None = None
    # 쿠키 대신 바디로 올 때 — Some deployments return the token in the body
    access_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices("accessToken", "access", "access_token"),
        exclude=True,
    )


class SessionTokenResponse(BaseModel):
    """세션 토큰 발급 응답 스키마.

    Attributes:
        access_token: 포털 세션 토큰 (Portal session token for the Authorization header)
        token_type: 토큰 유형 (Always "bearer")
        role: 계정 역할 (Account role, decides the landing page)
        user: 계정 정보 (Account blob from the backend)
        message: 백엔드 메시지 (Backend welcome message)
    """

    access_token: str
    token_type: str = "bearer"
    role: AccountRole
    user: dict[str, Any]
    message: str | None = None


class SessionMeResponse(BaseModel):
    """현재 세션 정보 — 백엔드 토큰은 제외 (Current session without the upstream token)."""

    user_id: str
    email: str
    name: str
    role: AccountRole
    session_id: str
