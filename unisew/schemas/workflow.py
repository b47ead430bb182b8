"""다이얼로그 상태 스키마.

Dialog lifecycle states.
Each workflow dialog is exactly one of Closed | Open(draft) |
Submitting(draft) | Failed(draft, reason); state changes replace the whole
value instead of flipping independent flags.
"""

from typing import Generic, Literal, TypeVar, Union

from pydantic import BaseModel

D = TypeVar("D")


class Closed(BaseModel):
    state: Literal["closed"] = "closed"


class Open(BaseModel, Generic[D]):
    state: Literal["open"] = "open"
    draft: D


class Submitting(BaseModel, Generic[D]):
    state: Literal["submitting"] = "submitting"
    draft: D


class Failed(BaseModel, Generic[D]):
    """제출 실패 — 입력값은 유지되어 재시도 가능 (Draft kept for retry)."""

    state: Literal["error"] = "error"
    draft: D
    reason: str


DialogState = Union[Closed, Open[D], Submitting[D], Failed[D]]
