"""테스트 인프라 — 가짜 백엔드, httpx 클라이언트, 세션 토큰 픽스처.

Test infrastructure — Fake backend, httpx client, and session token fixtures.
The remote UniSew backend is replaced by an httpx.MockTransport that serves
canned responses and records every request, so tests can assert both what
the portal showed and what it sent (or did not send).
"""

import asyncio
import json
from collections.abc import AsyncGenerator
from typing import Any

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from unisew.backend import get_backend, get_public_backend
from unisew.config import settings
from unisew.main import app
from unisew.services.payment_service import payment_context_store
from unisew.services.session_service import session_registry
from unisew.services.storage_service import storage_service
from unisew.utils.jwt import create_access_token
from unisew.utils.notifications import Notifier

BACKEND_URL = "http://backend.test/api/v1"


# ---------------------------------------------------------------------------
# 가짜 백엔드 — Fake backend (request spy)
# ---------------------------------------------------------------------------
class FakeBackend:
    """경로별 응답을 등록하고 받은 요청을 기록합니다.

    ``hold`` parks requests to a path until the returned event is set, so a
    test can act while a backend call is still in flight.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], tuple[int, Any, dict[str, str] | None]] = {}
        self.gates: dict[tuple[str, str], asyncio.Event] = {}
        self.requests: list[httpx.Request] = []

    def on(
        self,
        method: str,
        path: str,
        status: int = 200,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.routes[(method, path)] = (status, json, headers)

    def hold(self, method: str, path: str) -> asyncio.Event:
        gate = asyncio.Event()
        self.gates[(method, path)] = gate
        return gate

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/api/v1")
        gate = self.gates.get((request.method, path))
        if gate is not None:
            await gate.wait()
        # 게이트 해제 후 등록된 응답 사용 — Response registered by the time the gate opens
        status, payload, headers = self.routes.get(
            (request.method, path), (404, {"message": f"No route for {path}"}, None)
        )
        if isinstance(payload, Exception):
            raise payload
        return httpx.Response(status, json=payload, headers=headers)

    async def wait_for_call(self, method: str, path: str) -> None:
        """요청이 도착할 때까지 이벤트 루프를 양보 (Yield until the request arrives)."""
        while not self.calls(method, path):
            await asyncio.sleep(0)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [
            r for r in self.requests
            if r.method == method and r.url.path.removeprefix("/api/v1") == path
        ]

    def sent(self, method: str, path: str) -> list[Any]:
        """해당 경로로 보낸 JSON 바디 목록 — Decoded JSON bodies sent to a path."""
        return [json.loads(r.content) if r.content else None for r in self.calls(method, path)]


@pytest.fixture
def fake() -> FakeBackend:
    return FakeBackend()


@pytest_asyncio.fixture
async def backend(fake: FakeBackend) -> AsyncGenerator[httpx.AsyncClient, None]:
    """가짜 백엔드에 연결된 클라이언트 (Client wired to the fake backend)."""
    async with httpx.AsyncClient(
        transport=httpx.MockTransport(fake.handler), base_url=BACKEND_URL
    ) as api:
        yield api


@pytest.fixture
def notifier() -> Notifier:
    return Notifier()


@pytest.fixture(autouse=True)
def local_uploads(tmp_path, monkeypatch):
    """업로드를 임시 디렉토리로 — Upload provider in local mode under tmp_path."""
    monkeypatch.setattr(settings, "AWS_S3_BUCKET", "")
    monkeypatch.setattr(storage_service, "uploads_dir", tmp_path / "uploads")
    return tmp_path / "uploads"


@pytest.fixture(autouse=True)
def reset_state():
    """세션 워크플로와 결제 컨텍스트 초기화."""
    session_registry.clear()
    payment_context_store.clear()
    yield
    session_registry.clear()
    payment_context_store.clear()


@pytest_asyncio.fixture
async def client(backend: httpx.AsyncClient) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트 — 백엔드 클라이언트를 오버라이드합니다."""
    async def _override_get_backend() -> AsyncGenerator[httpx.AsyncClient, None]:
        yield backend

    app.dependency_overrides[get_backend] = _override_get_backend
    app.dependency_overrides[get_public_backend] = _override_get_backend

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# 세션 토큰 — Session tokens per role
# ---------------------------------------------------------------------------
def make_token(role: str, user_id: str = "1", sid: str | None = None) -> str:
    """테스트용 세션 토큰을 생성합니다."""
    return create_access_token({
        "sub": user_id,
        "email": f"{role}@unisew.test",
        "name": f"Test {role.title()}",
        "role": role,
        "sid": sid or f"{role}-session-{user_id}",
        "upstream": f"upstream-{role}",
    })


@pytest.fixture
def admin_token() -> str:
    return make_token("admin")


@pytest.fixture
def designer_token() -> str:
    return make_token("designer", user_id="7")


@pytest.fixture
def garment_token() -> str:
    return make_token("garment", user_id="9")


@pytest.fixture
def school_token() -> str:
    return make_token("school", user_id="3")


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


# ---------------------------------------------------------------------------
# 백엔드 페이로드 헬퍼 — Backend payload builders
# ---------------------------------------------------------------------------
def envelope(body: Any, message: str = "OK") -> dict[str, Any]:
    return {"message": message, "body": body}


def report_payload(id: int, status: str = "pending", **extra: Any) -> dict[str, Any]:
    data = {
        "id": id,
        "report": True,
        "content": f"Report {id}: seams came apart after one wash",
        "rating": 0,
        "images": ["https://cdn.unisew.test/r1.png"],
        "status": status,
        "creationDate": "2025-03-01T08:00:00",
        "sender": {"name": "THPT Le Loi", "type": "school"},
        "receiver": {"name": "Garment Co", "type": "garment"},
    }
    data.update(extra)
    return data


def feedback_payload(id: int, rating: int = 5) -> dict[str, Any]:
    return {
        "id": id,
        "report": False,
        "content": "Great uniforms",
        "rating": rating,
        "status": "approved",
    }


def quotation_payload(id: int, price: int = 5_000_000, status: str = "pending", **extra: Any) -> dict[str, Any]:
    data = {
        "id": id,
        "garmentId": 90 + id,
        "garmentName": f"Garment {id}",
        "price": price,
        "earlyDeliveryDate": "2025-05-01",
        "acceptanceDeadline": "2025-04-15",
        "note": "Cotton blend",
        "status": status,
    }
    data.update(extra)
    return data
