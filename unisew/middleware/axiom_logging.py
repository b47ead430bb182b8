"""Axiom API 로깅 미들웨어.

Axiom API logging middleware.
Captures request/response data for every portal call and ships it to
Axiom; without Axiom credentials the same event goes to the module logger.
Logs: endpoint, method, query params, JSON body, status code, error reason.
Sensitive fields (tokens, payment gateway hashes) are masked; evidence
uploads are never logged as bodies.
"""

import json
import logging
import re
import time
from typing import Any

from axiom_py import Client as AxiomClient
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from unisew.config import settings

logger = logging.getLogger(__name__)

# 마스킹 대상 필드 패턴 — Fields to mask in bodies and query strings
_SENSITIVE_KEYS = re.compile(
    r"(password|secret|token|authorization|api_key|credential|upstream|securehash)",
    re.IGNORECASE,
)

# 로깅 제외 경로 — Paths excluded from logging
_SKIP_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}


def _mask(data: Any, depth: int = 0) -> Any:
    """민감 필드 자동 마스킹 — Recursively mask sensitive fields in dicts/lists."""
    if depth > 5:
        return "..."
    if isinstance(data, dict):
        return {
            k: "***" if _SENSITIVE_KEYS.search(k) else _mask(v, depth + 1)
            for k, v in data.items()
        }
    if isinstance(data, list):
        return [_mask(item, depth + 1) for item in data[:20]]
    if isinstance(data, str) and len(data) > 2000:
        return data[:2000] + "...(truncated)"
    return data


async def _read_json_body(request: Request) -> Any:
    """JSON 요청 바디만 읽음 — multipart 업로드는 건너뜀 (Uploads are not logged)."""
    if request.method not in ("POST", "PUT", "PATCH"):
        return None
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("multipart/"):
        return "(multipart upload)"
    try:
        body_bytes = await request.body()
        return _mask(json.loads(body_bytes)) if body_bytes else None
    except (json.JSONDecodeError, UnicodeDecodeError):
        return "(non-json body)"


class AxiomLoggingMiddleware(BaseHTTPMiddleware):
    """모든 API 요청/응답을 Axiom(또는 로거)에 기록하는 미들웨어."""

    def __init__(self, app: Any) -> None:
        super().__init__(app)
        self._client: AxiomClient | None = None
        self._dataset: str = settings.AXIOM_DATASET

        if settings.AXIOM_API_TOKEN and settings.AXIOM_DATASET:
            self._client = AxiomClient(token=settings.AXIOM_API_TOKEN)

    def _emit(self, event: dict[str, Any]) -> None:
        if self._client is None:
            logger.info("%s %s -> %s (%sms)", event["method"], event["path"], event["status_code"], event["duration_ms"])
            return
        try:
            self._client.ingest_events(self._dataset, [event])
        except Exception as exc:  # 로깅 실패가 요청 처리에 영향주지 않도록 — Never break a request on log failure
            logger.warning("Axiom ingest failed: %s", exc)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in _SKIP_PATHS:
            return await call_next(request)

        start_time = time.time()
        request_body = await _read_json_body(request)

        error_detail: str | None = None
        status_code: int = 500
        try:
            response = await call_next(request)
            status_code = response.status_code

            # 에러 응답시 body에서 사유 추출 — Extract error detail from error responses
            if status_code >= 400:
                resp_body = b""
                async for chunk in response.body_iterator:
                    resp_body += chunk if isinstance(chunk, bytes) else chunk.encode("utf-8")

                try:
                    error_data = json.loads(resp_body)
                    error_detail = str(error_data.get("detail", error_data))[:500]
                except (json.JSONDecodeError, UnicodeDecodeError, AttributeError):
                    error_detail = resp_body.decode("utf-8", errors="replace")[:500]

                # 소비한 body를 다시 응답으로 반환 — Re-wrap consumed body
                response = Response(
                    content=resp_body,
                    status_code=status_code,
                    headers=dict(response.headers),
                    media_type=response.media_type,
                )
        except Exception as exc:
            error_detail = f"{type(exc).__name__}: {str(exc)[:300]}"
            raise
        finally:
            event: dict[str, Any] = {
                "method": request.method,
                "path": request.url.path,
                "status_code": status_code,
                "duration_ms": round((time.time() - start_time) * 1000, 2),
            }
            if request.query_params:
                event["query_params"] = _mask(dict(request.query_params))
            if request_body is not None:
                event["request_body"] = request_body
            if error_detail:
                event["error"] = error_detail
            self._emit(event)

        return response
