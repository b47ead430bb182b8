"""결제 레포지토리 — Backend call issuing payment gateway URLs."""

import httpx

from unisew.repositories.base import BaseRepository
from unisew.schemas.common import Result
from unisew.schemas.payment import PaymentUrl, PaymentUrlRequest


class PaymentRepository(BaseRepository):

    async def get_payment_url(self, api: httpx.AsyncClient, data: PaymentUrlRequest) -> Result:
        return await self._call(
            api,
            "POST",
            "/payment/url",
            body_type=PaymentUrl,
            json=data.model_dump(mode="json", by_alias=True),
        )


payment_repository: PaymentRepository = PaymentRepository()
