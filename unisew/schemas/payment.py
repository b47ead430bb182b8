"""결제 Pydantic 스키마.

Payment schemas: the payment-URL request, the context stored across the
gateway redirect, and the gateway's return parameters.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from unisew.schemas.feedback import WireModel
from unisew.schemas.quotation import Quotation

# 결제 컨텍스트 저장 키 — Name of the single-purpose slot bridging the redirect
ORDER_PAYMENT_DETAILS_KEY: str = "orderPaymentDetails"

# VNPay 성공 응답 코드 — Gateway response code meaning "paid"
GATEWAY_SUCCESS_CODE: str = "00"


class PaymentUrlRequest(WireModel):
    amount: int
    description: str
    order_type: str = "order"
    return_url: str = Field(serialization_alias="returnURL")


class PaymentUrl(WireModel):
    url: str


class OrderPaymentDetails(BaseModel):
    """리다이렉트 왕복 동안 보관되는 결제 컨텍스트.

    Payment context persisted before redirecting to the gateway and
    consumed once when the browser comes back.
    """

    quotation: Quotation
    order_id: int
    service_fee: int
    total_amount: int
    stored_at: datetime


class PaymentReturn(BaseModel):
    """결제 게이트웨이 복귀 파라미터 (Query parameters on return from the gateway)."""

    vnp_response_code: str | None = None
    vnp_amount: int | None = None  # 게이트웨이 금액은 x100 단위 (Gateway amount is in 1/100 dong)
    vnp_txn_ref: str | None = None
    vnp_order_info: str | None = None
    order_type: str = "order"
    quotation_id: int | None = None

    @property
    def paid(self) -> bool:
        return self.vnp_response_code == GATEWAY_SUCCESS_CODE


class TransactionRequest(WireModel):
    type: str = "order"
    receiver_id: int | None = None
    item_id: int
    total_price: int
    gateway_code: str
    service_fee: int
    pay_from_wallet: bool = False


class QuotationApprovalRequest(WireModel):
    quotation_id: int
    create_transaction_request: TransactionRequest
