"""플랫폼 서비스 수수료 계산 유틸리티.

Platform service fee utilities.
The fee is added on top of a garment quotation at payment time:
2% of the price up to 10,000,000 VND, a flat 200,000 VND above that.
Amounts are whole dong; the percentage is rounded half-up.
"""

from decimal import ROUND_HALF_UP, Decimal

SERVICE_FEE_RATE: Decimal = Decimal("0.02")
SERVICE_FEE_THRESHOLD: int = 10_000_000  # 이 금액 이하는 비율 적용 (Rate applies up to and including this price)
SERVICE_FEE_FLAT: int = 200_000  # 초과 시 고정 수수료 (Flat fee above the threshold)


def service_fee(price: int) -> int:
    """견적 금액에 대한 서비스 수수료를 계산합니다.

    Compute the service fee for a quotation price.

    Examples:
        service_fee(5_000_000) == 100_000
        service_fee(10_000_000) == 200_000
        service_fee(50_000_000) == 200_000
    """
    if price < 0:
        raise ValueError("price must not be negative")
    if price <= SERVICE_FEE_THRESHOLD:
        fee = (Decimal(price) * SERVICE_FEE_RATE).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        return int(fee)
    return SERVICE_FEE_FLAT


def total_payable(price: int) -> int:
    """수수료를 포함한 결제 총액 — Price plus service fee."""
    return price + service_fee(price)
