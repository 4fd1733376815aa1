import asyncio
from typing import Optional, Dict, Any, List, AsyncIterator
from urllib.parse import quote

from ..models import (
    AgentCount,
    AgentDetail,
    CreateAgentRequest,
    DeactivateAgentRequest,
    OperationResponse,
    PagedResponse,
    UpdateAgentRequest,
)
from ..pagination import ProgressSink
from ..params import AgentQueryParams, AgentCollectionQueryParams
from .base import BaseService


def _flag(value: bool) -> List[tuple]:
    return [("skipDependencyValidation", "true" if value else "false")]


class AgentService(BaseService):

    async def list(self, params: Optional[AgentQueryParams] = None) -> PagedResponse[AgentDetail]:
        return await self._list("/agents", params or AgentQueryParams(), AgentDetail)

    def iterate_all(
        self,
        params: Optional[AgentQueryParams] = None,
        *,
        progress: Optional[ProgressSink] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> AsyncIterator[AgentDetail]:
        return self._iterate(self.list, params or AgentQueryParams(per_page=100), "agents", progress, cancel)

    async def get(self, user_id: int) -> AgentDetail:
        return await self._get_model(f"/agents/{user_id}", AgentDetail)

    async def get_by_email(self, email: str) -> AgentDetail:
        return await self._get_model(f"/agents/{quote(email, safe='')}", AgentDetail)

    async def create(self, request: CreateAgentRequest, *, skip_dependency_validation: bool = True) -> OperationResponse:
        return await self._send_model(
            "POST", "/agents", OperationResponse, request.to_payload(), _flag(skip_dependency_validation)
        )

    async def update(self, user_id: int, request: UpdateAgentRequest) -> OperationResponse:
        return await self._send_model("PATCH", f"/agents/{user_id}", OperationResponse, request.to_payload())

    async def update_fields(self, user_id: int, fields: Dict[str, Any], *, skip_dependency_validation: bool = False) -> OperationResponse:
        return await self._send_model(
            "PATCH", f"/agents/{user_id}/fields", OperationResponse, {"fields": fields}, _flag(skip_dependency_validation)
        )

    async def activate(self, user_id: int) -> OperationResponse:
        return await self._send_model("PATCH", f"/agents/{user_id}/activate", OperationResponse)

    async def deactivate(self, user_id: int, request: Optional[DeactivateAgentRequest] = None) -> OperationResponse:
        body = request.to_payload() if request is not None else None
        return await self._send_model("PATCH", f"/agents/{user_id}/deactivate", OperationResponse, body)

    async def collections(self, params: Optional[AgentCollectionQueryParams] = None) -> PagedResponse[AgentDetail]:
        """Agents filtered by group, role or shift."""
        return await self._list("/agents/collections", params or AgentCollectionQueryParams(), AgentDetail)

    async def count(self) -> List[AgentCount]:
        return await self._list_plain("/agents/count", AgentCount)

    async def set_availability(self, user_id: int, availability_status_id: int) -> OperationResponse:
        return await self._send_model(
            "PATCH", f"/agents/{user_id}/agent_availability/{availability_status_id}", OperationResponse
        )
