"""세션 저장소 테스트 — 생성, 유휴 세션 정리, 역할 변경, 로그아웃.

Session registry tests — Creation, idle eviction, role changes and sign-out.
"""

from datetime import datetime, timedelta, timezone

import pytest

from unisew.config import settings
from unisew.schemas.payment import OrderPaymentDetails
from unisew.schemas.quotation import Quotation
from unisew.schemas.session import AccountRole, SessionContext
from unisew.schemas.workflow import Closed, Open
from unisew.services.payment_service import payment_context_store
from unisew.services.session_service import SessionRegistry


def session_of(session_id: str, role: AccountRole = AccountRole.SCHOOL) -> SessionContext:
    return SessionContext(user_id="3", role=role, session_id=session_id)


def pending_payment() -> OrderPaymentDetails:
    return OrderPaymentDetails(
        quotation=Quotation(id=1, garment_id=91, garment_name="Garment 1", price=5_000_000),
        order_id=77,
        service_fee=100_000,
        total_amount=5_100_000,
        stored_at=datetime.now(timezone.utc),
    )


@pytest.fixture
def registry() -> SessionRegistry:
    return SessionRegistry()


class TestSessionRegistry:

    def test_same_session_reuses_workflows(self, registry):
        first = registry.get(session_of("a"))
        assert registry.get(session_of("a")) is first
        assert registry.get(session_of("b")) is not first

    def test_idle_session_is_evicted(self, registry):
        """유휴 시간이 지나면 다음 요청에서 새 상태로 시작."""
        stale = registry.get(session_of("a"))
        stale.report_review.dialog = Open(draft=None)
        stale.last_seen = datetime.now(timezone.utc) - timedelta(minutes=settings.SESSION_IDLE_MINUTES + 1)

        registry.get(session_of("b"))
        fresh = registry.get(session_of("a"))

        assert fresh is not stale
        assert isinstance(fresh.report_review.dialog, Closed)

    def test_active_session_is_kept(self, registry):
        active = registry.get(session_of("a"))
        active.last_seen = datetime.now(timezone.utc) - timedelta(minutes=settings.SESSION_IDLE_MINUTES - 1)

        registry.get(session_of("b"))
        assert registry.get(session_of("a")) is active

    def test_eviction_discards_payment_context(self, registry):
        stale = registry.get(session_of("a"))
        payment_context_store.save("a", pending_payment())
        payment_context_store.save("b", pending_payment())
        stale.last_seen = datetime.now(timezone.utc) - timedelta(minutes=settings.SESSION_IDLE_MINUTES + 1)

        registry.get(session_of("c"))

        assert payment_context_store.peek("a") is None
        assert payment_context_store.peek("b") is not None

    def test_role_change_recreates_workflows(self, registry):
        designer = registry.get(session_of("a", AccountRole.DESIGNER))
        garment = registry.get(session_of("a", AccountRole.GARMENT))
        assert garment is not designer
        assert garment.evidence.role == AccountRole.GARMENT

    def test_discard(self, registry):
        first = registry.get(session_of("a"))
        payment_context_store.save("a", pending_payment())

        registry.discard("a")
        registry.discard("missing")

        assert payment_context_store.peek("a") is None
        assert registry.get(session_of("a")) is not first
