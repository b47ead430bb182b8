"""견적 수락 및 결제 서비스 — 학교 주문 워크플로.

Quotation Service — School-side quotation acceptance and payment workflow.
The school lists the garment quotations received for an order, picks a
pending one, reviews the price breakdown and is handed off to the payment
gateway. The quotation is never marked accepted here: on return from the
gateway the result is forwarded to the backend, which finalises the order.
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from urllib.parse import urlencode

import httpx

from unisew.config import settings
from unisew.repositories.order_repository import order_repository
from unisew.repositories.payment_repository import payment_repository
from unisew.schemas.payment import (
    OrderPaymentDetails,
    PaymentReturn,
    PaymentUrlRequest,
    QuotationApprovalRequest,
    TransactionRequest,
)
from unisew.schemas.quotation import PriceBreakdown, Quotation, QuotationStatus, QuotationSummary
from unisew.schemas.workflow import Closed, DialogState, Failed, Open, Submitting
from unisew.services.payment_service import PaymentContextStore, payment_context_store
from unisew.utils.exceptions import BadRequestError, ConflictError, NotFoundError, UpstreamError
from unisew.utils.fees import service_fee
from unisew.utils.notifications import Notifier

logger = logging.getLogger(__name__)


class QuotationListState(str, Enum):
    IDLE = "idle"
    LOADED = "loaded"
    EMPTY = "empty"
    ERROR = "error"


def build_summary(quotation: Quotation, order_id: int) -> QuotationSummary:
    """견적 요약 및 금액 내역 생성 (Summary with price, fee and total)."""
    fee = service_fee(quotation.price)
    return QuotationSummary(
        quotation_id=quotation.id,
        order_id=order_id,
        garment_name=quotation.garment_name,
        early_delivery_date=quotation.early_delivery_date,
        acceptance_deadline=quotation.acceptance_deadline,
        note=quotation.note,
        breakdown=PriceBreakdown(price=quotation.price, service_fee=fee, total=quotation.price + fee),
    )


class QuotationWorkflow:
    """학교 견적 수락 워크플로 (세션당 1개).

    School quotation workflow, one instance per session.

    Attributes:
        order_id: 현재 조회 중인 주문 (Order whose quotations are shown)
        quotations: 마지막으로 불러온 견적 (Last loaded quotations)
        list_state: 목록 화면 분기 — loaded / empty / error
        dialog: 결제 요약 다이얼로그 상태 (Payment summary dialog state)
    """

    def __init__(
        self,
        notifier: Notifier,
        session_id: str,
        store: PaymentContextStore = payment_context_store,
    ) -> None:
        self.notifier: Notifier = notifier
        self.session_id: str = session_id
        self.store: PaymentContextStore = store
        self.order_id: int | None = None
        self.quotations: list[Quotation] = []
        self.loading: bool = False
        self.list_state: QuotationListState = QuotationListState.IDLE
        self.error: str | None = None
        self.dialog: DialogState[QuotationSummary] = Closed()

    async def load_quotations(self, api: httpx.AsyncClient, order_id: int) -> list[Quotation]:
        """주문의 견적 목록을 불러옵니다. 자동 재시도 없음.

        Fetch the quotations of an order. Empty and error outcomes are
        distinct list states; retrying is a new call by the user.
        """
        if self.order_id != order_id:
            self.dialog = Closed()
            self.quotations = []
        self.order_id = order_id
        self.loading = True
        self.error = None
        try:
            result = await order_repository.get_quotations(api, order_id)
        finally:
            self.loading = False

        if not result.ok:
            self.error = "Failed to load quotations"
            self.list_state = QuotationListState.ERROR
            self.notifier.error(self.error)
            return self.quotations

        self.quotations = list(result.body or [])
        self.list_state = QuotationListState.LOADED if self.quotations else QuotationListState.EMPTY
        return self.quotations

    def quotation_views(self) -> list[dict]:
        """견적 카드 — 대기 중인 견적만 수락 가능, 수락된 견적은 표시만.

        Each quotation with its accept control: enabled only for pending
        quotations; accepted ones carry a disabled "Accepted" indicator.
        """
        views: list[dict] = []
        for quotation in self.quotations:
            data = quotation.model_dump(mode="json")
            data["can_accept"] = quotation.is_pending
            data["accepted"] = quotation.status == QuotationStatus.ACCEPTED
            views.append(data)
        return views

    def get_quotation(self, quotation_id: int) -> Quotation:
        for quotation in self.quotations:
            if quotation.id == quotation_id:
                return quotation
        raise NotFoundError("Quotation not found")

    def select_quotation(self, quotation_id: int) -> QuotationSummary:
        """견적을 선택하고 결제 요약을 엽니다. 대기 상태만 가능.

        Raises:
            NotFoundError: 목록에 없는 견적 (Quotation not in the loaded list)
            BadRequestError: 대기 상태가 아님 (Quotation is not pending)
        """
        if isinstance(self.dialog, Submitting):
            raise ConflictError("A payment is already being prepared")
        quotation = self.get_quotation(quotation_id)
        if not quotation.is_pending:
            raise BadRequestError("Only pending quotations can be accepted")

        summary = build_summary(quotation, self.order_id)
        self.dialog = Open(draft=summary)
        return summary

    def close_summary(self) -> None:
        self.dialog = Closed()

    async def proceed_to_payment(self, api: httpx.AsyncClient) -> dict:
        """결제 컨텍스트를 저장하고 결제 URL을 받아옵니다.

        Store the payment context, then ask the backend for the gateway URL.
        The caller redirects the browser to ``redirect_url``; control returns
        through the return URL only.

        Raises:
            ConflictError: 이미 진행 중 (Already preparing a payment)
            BadRequestError: 요약 다이얼로그 없음 (No summary open)
            UpstreamError: 결제 URL 발급 실패 — 컨텍스트 폐기, 다이얼로그 유지
                           (No URL; stored context discarded and summary kept open)
        """
        if isinstance(self.dialog, Submitting):
            raise ConflictError("A payment is already being prepared")
        if not isinstance(self.dialog, (Open, Failed)):
            raise BadRequestError("No quotation selected")

        summary: QuotationSummary = self.dialog.draft
        quotation = self.get_quotation(summary.quotation_id)
        fee = service_fee(quotation.price)
        total = quotation.price + fee

        submitting = Submitting(draft=summary)
        self.dialog = submitting
        details = OrderPaymentDetails(
            quotation=quotation,
            order_id=summary.order_id,
            service_fee=fee,
            total_amount=total,
            stored_at=datetime.now(timezone.utc),
        )
        self.store.save(self.session_id, details)

        query = urlencode({"orderType": "order", "quotationId": quotation.id})
        result = await payment_repository.get_payment_url(
            api,
            PaymentUrlRequest(
                amount=total,
                description=f"Thanh toan don hang tu {quotation.garment_name}",
                order_type="order",
                return_url=f"{settings.PAYMENT_RETURN_PATH}?{query}",
            ),
        )
        if not result.ok or not result.body.url:
            reason = "Failed to get payment URL. Please try again."
            self._discard_context(details)
            if self.dialog is submitting:
                self.dialog = Failed(draft=summary, reason=reason)
            self.notifier.error(reason)
            raise UpstreamError(reason)

        if self.dialog is not submitting:
            # 요약이 닫힌 뒤 도착한 URL — 리다이렉트하지 않음 (Summary closed while waiting; no redirect)
            self._discard_context(details)
            raise ConflictError("The quotation summary was closed before the payment started")

        self.dialog = Closed()
        self.notifier.info("Redirecting to the payment gateway...")
        return {"redirect_url": result.body.url, "amount": total, "service_fee": fee}

    def _discard_context(self, details: OrderPaymentDetails) -> None:
        """이 결제 시도의 컨텍스트만 폐기 — Leave a newer attempt's context in place."""
        if self.store.peek(self.session_id) is details:
            self.store.discard(self.session_id)

    async def complete_payment(self, api: httpx.AsyncClient, params: PaymentReturn) -> dict:
        """결제 게이트웨이 복귀 처리.

        Handle the browser's return from the payment gateway. The stored
        context is consumed once and each gateway transaction is processed
        once. A paid result is forwarded to the backend together with the
        transaction record; the backend decides whether the quotation is
        accepted.

        Raises:
            BadRequestError: 결과 코드 누락 또는 견적 불일치 (Missing result code or quotation mismatch)
            ConflictError: 이미 처리된 거래 (Transaction already processed)
            NotFoundError: 저장된 결제 컨텍스트 없음/만료 (No stored context, or it expired)
            UpstreamError: 백엔드 확정 실패 — 재시도 가능 (Backend confirmation failed; retry possible)
        """
        if params.vnp_response_code is None:
            raise BadRequestError("Missing payment result")

        txn_ref = params.vnp_txn_ref
        if txn_ref and not self.store.mark_processed(txn_ref):
            raise ConflictError("This payment has already been processed")

        details = self.store.consume(self.session_id)
        if details is None:
            if txn_ref:
                self.store.release(txn_ref)
            raise NotFoundError("No pending payment for this session")

        if params.quotation_id is not None and params.quotation_id != details.quotation.id:
            self.store.save(self.session_id, details)
            if txn_ref:
                self.store.release(txn_ref)
            raise BadRequestError("Payment result does not match the selected quotation")

        outcome = {
            "success": params.paid,
            "quotation_id": details.quotation.id,
            "order_id": details.order_id,
            "service_fee": details.service_fee,
            "amount": params.vnp_amount // 100 if params.vnp_amount is not None else details.total_amount,
            "gateway_code": params.vnp_response_code,
        }

        if not params.paid:
            self.notifier.error("Payment was not completed")
            return outcome

        request = QuotationApprovalRequest(
            quotation_id=details.quotation.id,
            create_transaction_request=TransactionRequest(
                type="order",
                receiver_id=details.quotation.garment_id,
                item_id=details.order_id,
                total_price=outcome["amount"],
                gateway_code=params.vnp_response_code,
                service_fee=details.service_fee,
            ),
        )
        result = await order_repository.approve_quotation(api, request)
        if not result.ok:
            logger.warning(
                "Backend refused paid quotation %s (txn %s): %s",
                details.quotation.id, txn_ref, result.message,
            )
            self.store.save(self.session_id, details)
            if txn_ref:
                self.store.release(txn_ref)
            reason = result.message or "Payment received but the order could not be confirmed"
            self.notifier.error(reason)
            raise UpstreamError(reason)

        self.notifier.success("Payment successful! Your order has been confirmed")
        return outcome

    def view(self) -> dict:
        return {
            "order_id": self.order_id,
            "list_state": self.list_state.value,
            "loading": self.loading,
            "error": self.error,
            "quotations": self.quotation_views(),
            "dialog": self.dialog.model_dump(mode="json"),
        }
