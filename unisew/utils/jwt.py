"""세션 토큰 생성 및 검증 유틸리티 모듈.

Session token creation and verification utility module.
The portal keeps the signed-in user's identity in a JWT instead of a
free-form browser storage blob, so every request carries a typed session.

JWT Payload Structure:
    {
        "sub": "42",                    # 사용자 ID (Account identifier)
        "email": "school@unisew.vn",    # 이메일 (Account email)
        "name": "THPT Le Loi",          # 표시 이름 (Display name)
        "role": "school",               # admin | school | designer | garment
        "sid": "b3f1...",               # 세션 ID, 선택 (Optional session id)
        "upstream": "eyJ...",           # 백엔드 액세스 토큰 (Backend access token)
        "exp": 1234567890,              # 만료 시간 (Expiration)
        "type": "access"                # 토큰 유형 (Token type discriminator)
    }
"""

from datetime import datetime, timedelta, timezone
from typing import Any
import jwt

from unisew.config import settings


def create_access_token(data: dict[str, Any]) -> str:
    """세션 토큰을 생성합니다.

    Generate a session token with the given payload data.
    Token expires after JWT_ACCESS_TOKEN_EXPIRE_MINUTES.

    Args:
        data: JWT 페이로드 데이터 (Payload, see module docstring)

    Returns:
        str: 인코딩된 JWT 문자열 (Encoded JWT token string)
    """
    to_encode: dict[str, Any] = data.copy()
    expire: datetime = datetime.now(timezone.utc) + timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict[str, Any]:
    """세션 토큰을 디코딩하고 검증합니다.

    Decode and verify a session token string.
    Raises jwt.ExpiredSignatureError if the token has expired,
    and jwt.InvalidTokenError for any other validation failure.

    Args:
        token: JWT 토큰 문자열 (Encoded JWT token string)

    Returns:
        dict[str, Any]: 디코딩된 페이로드 딕셔너리 (Decoded payload dictionary)
    """
    return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
