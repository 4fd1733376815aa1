import asyncio
from typing import Optional, Dict, Any, List, AsyncIterator
from urllib.parse import quote

from ..models import (
    AddContactGroupRequest,
    AddContactToGroupRequest,
    BulkOperationResponse,
    Contact,
    ContactGroup,
    ContactGroupDomain,
    ContactGroupNotesResponse,
    CustomField,
    NoteRequest,
    OperationResponse,
    PagedResponse,
)
from ..pagination import ProgressSink
from ..params import (
    ContactGroupDomainsQueryParams,
    ContactGroupMembersQueryParams,
    ContactGroupQueryParams,
    NotesQueryParams,
    PageParams,
)
from .base import BaseService, parse_model


class ContactGroupService(BaseService):
    """Contact groups (companies), their members, domains and notes."""

    async def list(self, params: Optional[ContactGroupQueryParams] = None) -> PagedResponse[ContactGroup]:
        return await self._list("/contact_groups", params or ContactGroupQueryParams(), ContactGroup)

    def iterate_all(
        self,
        params: Optional[ContactGroupQueryParams] = None,
        *,
        progress: Optional[ProgressSink] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> AsyncIterator[ContactGroup]:
        return self._iterate(self.list, params or ContactGroupQueryParams(per_page=100), "contact groups", progress, cancel)

    async def get(self, group_id: int) -> ContactGroup:
        return await self._get_model(f"/contact_groups/{group_id}", ContactGroup)

    async def get_by_name(self, name: str) -> ContactGroup:
        return await self._get_model(f"/contact_groups/{quote(name, safe='')}", ContactGroup)

    async def create(self, request: AddContactGroupRequest) -> OperationResponse:
        return await self._send_model("POST", "/contact_groups", OperationResponse, request.to_payload())

    async def update(self, group_id: int, fields: Dict[str, Any]) -> OperationResponse:
        return await self._send_model("PUT", f"/contact_groups/{group_id}", OperationResponse, {"fields": fields})

    async def delete(self, group_ids: List[int]) -> BulkOperationResponse:
        return await self._send_model("DELETE", "/contact_groups", BulkOperationResponse, {"contactGroupIds": group_ids})

    # members

    async def list_members(self, group_id: int, params: Optional[ContactGroupMembersQueryParams] = None) -> PagedResponse[Contact]:
        return await self._list(f"/contact_groups/{group_id}/contacts", params or ContactGroupMembersQueryParams(), Contact)

    def iterate_members(
        self,
        group_id: int,
        params: Optional[ContactGroupMembersQueryParams] = None,
        *,
        progress: Optional[ProgressSink] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> AsyncIterator[Contact]:
        async def fetch(p: ContactGroupMembersQueryParams) -> PagedResponse[Contact]:
            return await self.list_members(group_id, p)

        return self._iterate(fetch, params or ContactGroupMembersQueryParams(per_page=100), "contacts", progress, cancel)

    async def add_members(self, group_id: int, members: List[AddContactToGroupRequest]) -> BulkOperationResponse:
        body = [m.to_payload() for m in members]
        return await self._send_model("POST", f"/contact_groups/{group_id}/contacts", BulkOperationResponse, body)

    async def remove_member(self, group_id: int, user_id: int) -> OperationResponse:
        return await self._send_model("DELETE", f"/contact_groups/{group_id}/contacts/{user_id}", OperationResponse)

    # domains

    async def list_domains(self, params: Optional[ContactGroupDomainsQueryParams] = None) -> PagedResponse[ContactGroupDomain]:
        return await self._list("/contact_groups/domains", params or ContactGroupDomainsQueryParams(), ContactGroupDomain)

    def iterate_domains(
        self,
        params: Optional[ContactGroupDomainsQueryParams] = None,
        *,
        progress: Optional[ProgressSink] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> AsyncIterator[ContactGroupDomain]:
        return self._iterate(self.list_domains, params or ContactGroupDomainsQueryParams(per_page=100), "domains", progress, cancel)

    # notes

    async def list_notes(self, group_id: int, params: Optional[NotesQueryParams] = None) -> ContactGroupNotesResponse:
        params = params or NotesQueryParams()
        await self._guard()
        data = await self._get(f"/contact_groups/{group_id}/notes", params.to_query())
        return parse_model(ContactGroupNotesResponse, data or {})

    async def add_note(self, group_id: int, request: NoteRequest) -> OperationResponse:
        return await self._send_model("POST", f"/contact_groups/{group_id}/notes", OperationResponse, request.to_payload())

    async def update_note(self, note_id: int, request: NoteRequest) -> OperationResponse:
        return await self._send_model("PUT", f"/contact_groups/notes/{note_id}", OperationResponse, request.to_payload())

    async def delete_note(self, note_id: int) -> OperationResponse:
        return await self._send_model("DELETE", f"/contact_groups/notes/{note_id}", OperationResponse)

    # custom fields

    async def list_fields(self, params: Optional[PageParams] = None) -> PagedResponse[CustomField]:
        return await self._list("/contact_group_fields", params or PageParams(per_page=50), CustomField)

    async def get_field(self, field_id: int) -> CustomField:
        return await self._get_model(f"/contact_group_fields/{field_id}", CustomField)
