"""주문/견적 레포지토리 — Backend calls for order quotations."""

import httpx

from unisew.repositories.base import BaseRepository
from unisew.schemas.common import Result
from unisew.schemas.payment import QuotationApprovalRequest
from unisew.schemas.quotation import Quotation


class OrderRepository(BaseRepository):

    async def get_quotations(self, api: httpx.AsyncClient, order_id: int) -> Result:
        return await self._call(
            api,
            "GET",
            "/order/quotation",
            body_type=list[Quotation] | None,
            params={"orderId": order_id},
        )

    async def approve_quotation(self, api: httpx.AsyncClient, data: QuotationApprovalRequest) -> Result:
        """결제 완료된 견적을 백엔드에 전달 — 최종 수락은 백엔드가 결정.

        Forward a paid quotation to the backend, which decides whether the
        order is finalised. The backend answers 201 on creation.
        """
        return await self._call(
            api,
            "POST",
            "/order/quotation/approval",
            json=data.model_dump(mode="json", by_alias=True),
            success_codes=(200, 201),
        )


order_repository: OrderRepository = OrderRepository()
