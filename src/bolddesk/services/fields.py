import asyncio
from typing import Optional, List, AsyncIterator

from ..models import FieldApiResponse, FieldOption, FieldPositionChange, PagedResponse
from ..pagination import ProgressSink
from ..params import FieldOptionQueryParams
from .base import BaseService


def _require_api_name(api_name: str) -> str:
    if not api_name or not api_name.strip():
        raise ValueError("API name cannot be null or empty.")
    return api_name.strip()


def _require_positive(value: int, name: str) -> None:
    if value <= 0:
        raise ValueError(f"{name} must be greater than 0.")


class FieldService(BaseService):
    """Options of dropdown-style fields, addressed by field API name."""

    async def list_options(self, api_name: str, params: Optional[FieldOptionQueryParams] = None) -> PagedResponse[FieldOption]:
        api_name = _require_api_name(api_name)
        return await self._list(f"/fields/collection/{api_name}/options", params or FieldOptionQueryParams(), FieldOption)

    def iterate_options(
        self,
        api_name: str,
        params: Optional[FieldOptionQueryParams] = None,
        *,
        progress: Optional[ProgressSink] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> AsyncIterator[FieldOption]:
        api_name = _require_api_name(api_name)

        async def fetch(p: FieldOptionQueryParams) -> PagedResponse[FieldOption]:
            return await self.list_options(api_name, p)

        params = params or FieldOptionQueryParams(per_page=100, requires_counts=True)
        return self._iterate(fetch, params, "field options", progress, cancel)

    async def add_options(self, api_name: str, options: List[str]) -> FieldApiResponse:
        api_name = _require_api_name(api_name)
        if not options:
            raise ValueError("Field options cannot be null or empty.")
        return await self._send_model("POST", f"/fields/{api_name}/option_values", FieldApiResponse, {"fieldOptions": options})

    async def remove_option(self, option_id: int) -> FieldApiResponse:
        _require_positive(option_id, "Field option ID")
        return await self._send_model("DELETE", f"/fields/option_values/{option_id}", FieldApiResponse)

    async def set_option_readonly(self, option_id: int, read_only: bool) -> FieldApiResponse:
        _require_positive(option_id, "Field option ID")
        flag = "true" if read_only else "false"
        return await self._send_model("PATCH", f"/fields/option_values/{option_id}/readonly/{flag}", FieldApiResponse)

    async def change_option_position(self, field_id: int, option_id: int, change: FieldPositionChange) -> FieldApiResponse:
        _require_positive(field_id, "Field ID")
        _require_positive(option_id, "Field option ID")
        params = [
            ("toPosition", str(change.to_position)),
            ("isSortByAlphabeticalOrder", "true" if change.is_sort_by_alphabetical_order else "false"),
            ("isMoveToTopPosition", "true" if change.is_move_to_top_position else "false"),
            ("isMoveToBottomPosition", "true" if change.is_move_to_bottom_position else "false"),
        ]
        return await self._send_model(
            "PUT", f"/fields/{field_id}/option_values/{option_id}/position_change", FieldApiResponse, params=params
        )

    async def set_default_option(self, field_id: int, option_id: int) -> FieldApiResponse:
        _require_positive(field_id, "Field ID")
        _require_positive(option_id, "Field option ID")
        return await self._send_model("PUT", f"/fields/{field_id}/option_values/{option_id}/set_default", FieldApiResponse)

    async def remove_default_option(self, field_id: int, option_id: int) -> FieldApiResponse:
        _require_positive(field_id, "Field ID")
        _require_positive(option_id, "Field option ID")
        return await self._send_model("PUT", f"/fields/{field_id}/option_values/{option_id}/remove_default", FieldApiResponse)
