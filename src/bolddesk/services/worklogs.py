import asyncio
from typing import Optional, AsyncIterator

from ..models import PagedResponse, Worklog
from ..pagination import ProgressSink
from ..params import WorklogQueryParams
from .base import BaseService


class WorklogService(BaseService):
    """Time entries across all tickets (``/tickets/worklogs``)."""

    async def list(self, params: Optional[WorklogQueryParams] = None) -> PagedResponse[Worklog]:
        return await self._list("/tickets/worklogs", params or WorklogQueryParams(), Worklog)

    def iterate_all(
        self,
        params: Optional[WorklogQueryParams] = None,
        *,
        progress: Optional[ProgressSink] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> AsyncIterator[Worklog]:
        return self._iterate(self.list, params or WorklogQueryParams(), "worklogs", progress, cancel)

    async def count(self, params: Optional[WorklogQueryParams] = None) -> int:
        base = params or WorklogQueryParams()
        page = await self.list(base.model_copy(update={"page": 1, "per_page": 1, "requires_counts": True}))
        return page.count
