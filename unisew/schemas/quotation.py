"""견적 Pydantic 스키마.

Garment quotation schemas for the school's order flow.
"""

from datetime import date
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from unisew.schemas.feedback import WireModel


class QuotationStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


_QUOTATION_STATUS_ALIASES: dict[str, QuotationStatus] = {
    "pending": QuotationStatus.PENDING,
    "garment_quotation_pending": QuotationStatus.PENDING,
    "accepted": QuotationStatus.ACCEPTED,
    "approved": QuotationStatus.ACCEPTED,
    "garment_quotation_accepted": QuotationStatus.ACCEPTED,
    "rejected": QuotationStatus.REJECTED,
    "garment_quotation_rejected": QuotationStatus.REJECTED,
}


class Quotation(WireModel):
    """공장 견적.

    Attributes:
        garment_id: 견적을 낸 공장 계정 ID (Manufacturer account id, receiver of the payment)
        garment_name: 공장 이름 (Manufacturer display name)
        price: 견적 금액, VND (Quoted price in whole dong)
        early_delivery_date: 최단 납품일 (Earliest delivery date)
        acceptance_deadline: 수락 마감일 (Last day the offer can be accepted)
    """

    id: int
    garment_id: int | None = None
    garment_name: str = ""
    price: int = Field(ge=0)
    early_delivery_date: date | None = None
    acceptance_deadline: date | None = None
    note: str | None = None
    status: QuotationStatus = QuotationStatus.PENDING

    @field_validator("status", mode="before")
    @classmethod
    def _normalise_status(cls, value: Any) -> Any:
        if isinstance(value, str):
            key = value.strip().lower()
            if key in _QUOTATION_STATUS_ALIASES:
                return _QUOTATION_STATUS_ALIASES[key]
        return value

    @property
    def is_pending(self) -> bool:
        return self.status == QuotationStatus.PENDING


class PriceBreakdown(BaseModel):
    price: int
    service_fee: int
    total: int


class QuotationSummary(BaseModel):
    """결제 전 견적 요약 — Summary shown before paying."""

    quotation_id: int
    order_id: int
    garment_name: str
    early_delivery_date: date | None = None
    acceptance_deadline: date | None = None
    note: str | None = None
    breakdown: PriceBreakdown
