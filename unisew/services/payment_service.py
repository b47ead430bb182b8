"""결제 컨텍스트 저장소 — 결제 리다이렉트 왕복 동안 보관.

Payment context store.
Before the browser leaves for the payment gateway, the quotation snapshot,
order id, fee and total are stored under the single-purpose
``orderPaymentDetails`` slot of the session. When the browser returns the
context is consumed: read once and cleared, and ignored once it is older
than PAYMENT_CONTEXT_TTL_MINUTES, so a later unrelated visit can never
pick up a stale payment. Abandoned slots and processed transaction
references are pruned after the same TTL.
"""

from datetime import datetime, timedelta, timezone

from unisew.config import settings
from unisew.schemas.payment import ORDER_PAYMENT_DETAILS_KEY, OrderPaymentDetails


def _ttl() -> timedelta:
    return timedelta(minutes=settings.PAYMENT_CONTEXT_TTL_MINUTES)


class PaymentContextStore:
    """세션별 결제 컨텍스트 저장소 (Per-session payment context slots)."""

    def __init__(self) -> None:
        self._slots: dict[str, OrderPaymentDetails] = {}
        self._processed_refs: dict[str, datetime] = {}  # 거래 번호 → 처리 시각 (Txn ref -> processed at)

    @staticmethod
    def _key(session_id: str) -> str:
        return f"{session_id}:{ORDER_PAYMENT_DETAILS_KEY}"

    def _prune(self, now: datetime) -> None:
        """만료된 슬롯과 거래 번호 정리 — Drop expired slots and old transaction refs."""
        cutoff = now - _ttl()
        for key in [k for k, d in self._slots.items() if d.stored_at < cutoff]:
            del self._slots[key]
        for ref in [r for r, at in self._processed_refs.items() if at < cutoff]:
            del self._processed_refs[ref]

    def save(self, session_id: str, details: OrderPaymentDetails) -> None:
        self._prune(datetime.now(timezone.utc))
        self._slots[self._key(session_id)] = details

    def discard(self, session_id: str) -> None:
        self._slots.pop(self._key(session_id), None)

    def peek(self, session_id: str) -> OrderPaymentDetails | None:
        return self._slots.get(self._key(session_id))

    def consume(self, session_id: str) -> OrderPaymentDetails | None:
        """컨텍스트를 꺼내고 삭제합니다. 만료된 경우 None.

        Pop the stored context; expired contexts are dropped and None is returned.
        """
        details = self._slots.pop(self._key(session_id), None)
        if details is None:
            return None
        if datetime.now(timezone.utc) - details.stored_at > _ttl():
            return None
        return details

    def mark_processed(self, txn_ref: str) -> bool:
        """거래 번호를 처리 완료로 표시. 이미 처리된 경우 False.

        Record a gateway transaction reference; returns False when it was
        already processed, so a reloaded return page is handled only once.
        A reference older than the TTL no longer has a context to consume.
        """
        now = datetime.now(timezone.utc)
        self._prune(now)
        if txn_ref in self._processed_refs:
            return False
        self._processed_refs[txn_ref] = now
        return True

    def release(self, txn_ref: str) -> None:
        """처리 표시 해제 — 백엔드 확정 실패 시 재시도 허용 (Allow a retry after a failed confirmation)."""
        self._processed_refs.pop(txn_ref, None)

    def clear(self) -> None:
        self._slots.clear()
        self._processed_refs.clear()


# 싱글턴 인스턴스 — Singleton instance
payment_context_store: PaymentContextStore = PaymentContextStore()
