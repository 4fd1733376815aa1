import asyncio
from typing import Optional, AsyncIterator

from ..models import Brand, PagedResponse, UserBrand
from ..params import UserBrandQueryParams
from .base import BaseService, parse_model


class BrandService(BaseService):

    async def list(self) -> PagedResponse[Brand]:
        """All brands of the organization; the endpoint is not paged."""
        await self._guard()
        data = await self._get("/brands")
        return parse_model(PagedResponse[Brand], data or {})

    async def iterate_all(self, *, cancel: Optional[asyncio.Event] = None) -> AsyncIterator[Brand]:
        response = await self.list()
        for brand in response.result:
            if cancel is not None and cancel.is_set():
                return
            yield brand

    async def user_brands(self, params: Optional[UserBrandQueryParams] = None) -> PagedResponse[UserBrand]:
        params = params or UserBrandQueryParams()
        await self._guard()
        data = await self._get("/user_brands", params.to_query())
        return parse_model(PagedResponse[UserBrand], data or {})
