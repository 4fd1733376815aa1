import asyncio
from typing import TYPE_CHECKING, Optional, Any, Type, TypeVar, AsyncIterator, Callable

from pydantic import BaseModel, ValidationError

from ..errors import BoldDeskApiError
from ..models import PagedResponse
from ..pagination import paginate, ProgressSink
from ..params import PageParams, QueryPairs
from ..ratelimit import wait_if_needed

if TYPE_CHECKING:
    from ..client import BoldDeskClient

M = TypeVar("M", bound=BaseModel)
P = TypeVar("P", bound=PageParams)


def parse_model(model: Type[M], data: Any) -> M:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise BoldDeskApiError(f"Failed to parse API response: {e}") from e


class BaseService:
    """Common plumbing for the resource services.

    Services share their client's transport and rate-limit snapshot.
    """

    def __init__(self, client: "BoldDeskClient"):
        self._client = client

    @property
    def rate_limit(self):
        return self._client.rate_limit

    async def _guard(self) -> None:
        await wait_if_needed(self._client.rate_limit)

    async def _get(self, path: str, params: Optional[QueryPairs] = None) -> Any:
        return await self._client.request_json("GET", path, params=params)

    async def _post(self, path: str, body: Any = None, params: Optional[QueryPairs] = None) -> Any:
        return await self._client.request_json("POST", path, params=params, json=body)

    async def _put(self, path: str, body: Any = None, params: Optional[QueryPairs] = None) -> Any:
        return await self._client.request_json("PUT", path, params=params, json=body)

    async def _patch(self, path: str, body: Any = None, params: Optional[QueryPairs] = None) -> Any:
        return await self._client.request_json("PATCH", path, params=params, json=body)

    async def _delete(self, path: str, body: Any = None, params: Optional[QueryPairs] = None) -> Any:
        return await self._client.request_json("DELETE", path, params=params, json=body)

    async def _get_model(self, path: str, model: Type[M], params: Optional[QueryPairs] = None) -> M:
        await self._guard()
        data = await self._get(path, params)
        return parse_model(model, data or {})

    async def _send_model(self, method: str, path: str, model: Type[M], body: Any = None,
                          params: Optional[QueryPairs] = None) -> M:
        await self._guard()
        data = await self._client.request_json(method, path, params=params, json=body)
        return parse_model(model, data or {})

    async def _list(self, path: str, params: PageParams, model: Type[M]) -> PagedResponse[M]:
        await self._guard()
        data = await self._get(path, params.to_query())
        return parse_model(PagedResponse[model], data or {})

    async def _list_plain(self, path: str, model: Type[M], params: Optional[QueryPairs] = None) -> list:
        """GET an endpoint that answers with a bare array or a ``result`` wrapper."""
        await self._guard()
        data = await self._get(path, params)
        if isinstance(data, dict):
            data = data.get("result") or []
        return [parse_model(model, item) for item in data or []]

    def _iterate(
        self,
        fetch_page: Callable[[P], Any],
        params: P,
        resource: str,
        progress: Optional[ProgressSink] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> AsyncIterator:
        return paginate(
            fetch_page,
            params,
            rate_limit=self._client.rate_limit,
            resource=resource,
            progress=progress,
            cancel=cancel,
        )
