"""기본 레포지토리 — 모든 백엔드 레포지토리의 부모 클래스.

Base Repository — Parent class for all backend repositories.
Wraps one REST call: sends the request, unwraps the ``{message, body}``
envelope, validates the body into the expected type and returns a typed
``Result``. HTTP errors and transport failures become ``Failure`` values;
nothing here raises for an unhappy backend.

Usage:
    class FeedbackRepository(BaseRepository):
        async def get_all_reports(self, api):
            return await self._call(api, "GET", "/feedback/report", body_type=list[FeedbackItem])
"""

import logging
from typing import Any, Sequence

import httpx
from pydantic import TypeAdapter, ValidationError

from unisew.schemas.common import Envelope, Failure, Result, Success

logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response) -> str | None:
    """에러 응답에서 백엔드 메시지를 추출합니다 — Backend message of an error response, if any."""
    try:
        data = response.json()
    except ValueError:
        return None
    if isinstance(data, dict):
        message = data.get("message") or data.get("detail")
        return str(message) if message else None
    return None


def _unwrap(data: Any) -> Envelope:
    """봉투가 없는 응답도 허용 — Accept both enveloped and bare payloads."""
    if isinstance(data, dict) and ("body" in data or set(data) <= {"message"}):
        return Envelope.model_validate(data)
    return Envelope(body=data)


class BaseRepository:
    """백엔드 REST 호출 공통 로직 (Shared REST call logic)."""

    async def _call(
        self,
        api: httpx.AsyncClient,
        method: str,
        path: str,
        *,
        body_type: Any = Any,
        json: Any = None,
        params: dict[str, Any] | None = None,
        success_codes: Sequence[int] = (200,),
    ) -> Result:
        """백엔드 호출 후 결과를 Result로 감쌉니다.

        Issue one backend request and wrap the outcome.

        Args:
            api: 백엔드 클라이언트 (Backend client)
            method: HTTP 메서드 (HTTP method)
            path: BACKEND_BASE_URL 기준 상대 경로 (Path relative to the backend base URL)
            body_type: envelope body 검증 타입 (Type the envelope body is validated into)
            json: 요청 바디 (JSON request body)
            params: 쿼리 파라미터 (Query parameters)
            success_codes: 성공으로 간주할 상태 코드 (Status codes treated as success)

        Returns:
            Result: Success(body) 또는 Failure(status_code, message)
        """
        response = await self._send(api, method, path, json=json, params=params)
        if isinstance(response, Failure):
            return response
        return self._parse(response, method, path, body_type, success_codes)

    async def _send(
        self,
        api: httpx.AsyncClient,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response | Failure:
        """요청만 전송 — 전송 실패는 Failure (Transport failures become a Failure)."""
        try:
            return await api.request(method, path, json=json, params=params)
        except httpx.HTTPError as exc:
            logger.warning("Backend %s %s failed: %s", method, path, exc)
            return Failure(status_code=None, message=None)

    def _parse(
        self,
        response: httpx.Response,
        method: str,
        path: str,
        body_type: Any = Any,
        success_codes: Sequence[int] = (200,),
    ) -> Result:
        if response.status_code not in success_codes:
            message = _error_message(response)
            logger.warning(
                "Backend %s %s answered %s: %s", method, path, response.status_code, message
            )
            return Failure(status_code=response.status_code, message=message)

        try:
            envelope = _unwrap(response.json() if response.content else None)
            body = TypeAdapter(body_type).validate_python(envelope.body)
        except (ValueError, ValidationError) as exc:
            logger.warning("Backend %s %s returned an unexpected body: %s", method, path, exc)
            return Failure(status_code=response.status_code, message=None)

        return Success(status_code=response.status_code, body=body, message=envelope.message)
