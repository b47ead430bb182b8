"""세션 컨텍스트 스키마.

Session context schema — the typed shape of the signed-in account.
Built once per request from the verified session token.
"""

from enum import Enum

from pydantic import BaseModel, Field


class AccountRole(str, Enum):
    ADMIN = "admin"
    SCHOOL = "school"
    DESIGNER = "designer"
    GARMENT = "garment"


# 신고를 받는 쪽 — Accounts that can be the target of a report and answer it with evidence
PARTNER_ROLES: frozenset[AccountRole] = frozenset({AccountRole.DESIGNER, AccountRole.GARMENT})


class SessionContext(BaseModel):
    """인증된 세션 컨텍스트.

    Attributes:
        user_id: 계정 ID (Account identifier, JWT "sub")
        email: 이메일 (Account email)
        name: 표시 이름 (Display name)
        role: 계정 역할 (Account role)
        session_id: 세션 ID — 워크플로 상태 키 (Key of per-session workflow state)
        upstream_token: 백엔드 호출용 토큰 (Token forwarded to the backend)
    """

    user_id: str = Field(min_length=1)
    email: str = ""
    name: str = ""
    role: AccountRole
    session_id: str = Field(min_length=1)
    upstream_token: str | None = None

    @property
    def is_partner(self) -> bool:
        return self.role in PARTNER_ROLES
