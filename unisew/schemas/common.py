"""공통 Pydantic 스키마 정의.

Common Pydantic schema definitions.
Includes the backend response envelope, the typed Result wrapper returned
by every repository call, and generic message responses.

The backend wraps payloads as ``{"message": ..., "body": ...}`` and is not
perfectly consistent about it. Repositories parse the envelope once and
hand workflows either a ``Success`` (parsed body) or a ``Failure``
(status code and backend message), so workflow code never checks for optional
keys.
"""

from typing import Any, Generic, Literal, TypeVar, Union

from pydantic import BaseModel

T = TypeVar("T")


class Envelope(BaseModel):
    """백엔드 응답 봉투 (Backend response envelope).

    Attributes:
        message: 백엔드 메시지 (Human-readable message from the backend)
        body: 실제 데이터 (Payload; list, object or absent)
    """

    message: str | None = None
    body: Any = None


class Success(BaseModel, Generic[T]):
    """성공 결과 — Successful backend call with parsed body."""

    ok: Literal[True] = True
    status_code: int = 200
    body: T
    message: str | None = None


class Failure(BaseModel):
    """실패 결과 — Non-2xx answer or transport failure.

    Attributes:
        status_code: HTTP 상태 코드, 전송 실패 시 None (None when the request never got an answer)
        message: 백엔드가 준 메시지 또는 예외 설명 (Backend message or transport error text)
    """

    ok: Literal[False] = False
    status_code: int | None = None
    message: str | None = None


# 판별 유니온 — Discriminated on ``ok``
Result = Union[Success[T], Failure]


class MessageResponse(BaseModel):
    """단순 메시지 응답 스키마 (Simple message response)."""

    message: str  # 응답 메시지 (Response message)
