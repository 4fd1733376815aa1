import asyncio
from typing import Optional, Dict, Any, List, AsyncIterator
from urllib.parse import quote

from ..models import (
    BulkOperationResponse,
    Contact,
    ContactGroupLink,
    ContactNotesResponse,
    CreateContactRequest,
    CustomField,
    DeleteContactRequest,
    NoteRequest,
    OperationResponse,
    PagedResponse,
)
from ..pagination import ProgressSink
from ..params import ContactQueryParams, NotesQueryParams, PageParams
from .base import BaseService, parse_model


def _skip(value: bool) -> Optional[List[tuple]]:
    return [("skipDependencyValidation", "true")] if value else None


class ContactService(BaseService):

    async def list(self, params: Optional[ContactQueryParams] = None) -> PagedResponse[Contact]:
        return await self._list("/contacts", params or ContactQueryParams(), Contact)

    def iterate_all(
        self,
        params: Optional[ContactQueryParams] = None,
        *,
        progress: Optional[ProgressSink] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> AsyncIterator[Contact]:
        return self._iterate(self.list, params or ContactQueryParams(per_page=100), "contacts", progress, cancel)

    async def get(self, user_id: int) -> Contact:
        return await self._get_model(f"/contacts/{user_id}", Contact)

    async def get_by_email(self, email: str) -> Contact:
        return await self._get_model(f"/contacts/{quote(email, safe='')}", Contact)

    async def create(self, request: CreateContactRequest, *, skip_dependency_validation: bool = False) -> OperationResponse:
        return await self._send_model(
            "POST", "/contacts", OperationResponse, request.to_payload(), _skip(skip_dependency_validation)
        )

    async def update(self, contact_id: int, fields: Dict[str, Any], *, skip_dependency_validation: bool = False) -> OperationResponse:
        """Update contact properties; ``fields`` uses the API's camelCase field names."""
        return await self._send_model(
            "PUT", f"/contacts/{contact_id}", OperationResponse, {"fields": fields}, _skip(skip_dependency_validation)
        )

    async def delete(self, contact_ids: List[int], *, mark_tickets_as_spam: bool = False) -> BulkOperationResponse:
        body = DeleteContactRequest(contact_id=contact_ids, is_mark_ticket_as_spam=mark_tickets_as_spam)
        return await self._send_model("DELETE", "/contacts", BulkOperationResponse, body.to_payload())

    async def delete_permanently(self, contact_ids: List[int], *, forced: bool = False) -> BulkOperationResponse:
        body = {"contactIdList": contact_ids, "isForced": forced}
        return await self._send_model("DELETE", "/contacts/permanent_delete", BulkOperationResponse, body)

    async def block(self, contact_id: int, *, mark_tickets_as_spam: bool = False) -> OperationResponse:
        params = [("markTicketAsSpam", "true")] if mark_tickets_as_spam else None
        return await self._send_model("PATCH", f"/contacts/{contact_id}/block", OperationResponse, params=params)

    async def unblock(self, contact_id: int, *, remove_tickets_from_spam: bool = False) -> OperationResponse:
        params = [("removeTicketFromSpam", "true")] if remove_tickets_from_spam else None
        return await self._send_model("PATCH", f"/contacts/{contact_id}/unblock", OperationResponse, params=params)

    # contact group membership

    async def groups(self, contact_id: int, params: Optional[PageParams] = None) -> PagedResponse[ContactGroupLink]:
        return await self._list(f"/contacts/{contact_id}/contact_groups", params or PageParams(per_page=50), ContactGroupLink)

    async def add_groups(self, contact_id: int, group_ids: List[int], *, access_scope_id: int = 1) -> BulkOperationResponse:
        body = [{"contactGroupId": gid, "accessScopeId": access_scope_id} for gid in group_ids]
        return await self._send_model("POST", f"/contacts/{contact_id}/contactgroups", BulkOperationResponse, body)

    async def remove_groups(self, contact_id: int, group_ids: List[int]) -> BulkOperationResponse:
        return await self._send_model(
            "DELETE", f"/contacts/{contact_id}/contactgroups", BulkOperationResponse, {"contactGroupIds": group_ids}
        )

    async def change_primary_group(self, contact_id: int, group_id: int) -> OperationResponse:
        return await self._send_model(
            "PATCH", f"/contacts/{contact_id}/change_primary_contact_group/{group_id}", OperationResponse
        )

    # notes

    async def list_notes(self, contact_id: int, params: Optional[NotesQueryParams] = None) -> ContactNotesResponse:
        params = params or NotesQueryParams()
        await self._guard()
        data = await self._get(f"/contacts/{contact_id}/notes", params.to_query())
        return parse_model(ContactNotesResponse, data or {})

    async def add_note(self, contact_id: int, request: NoteRequest) -> OperationResponse:
        return await self._send_model("POST", f"/contacts/{contact_id}/notes", OperationResponse, request.to_payload())

    async def update_note(self, note_id: int, request: NoteRequest) -> OperationResponse:
        return await self._send_model("PUT", f"/contacts/notes/{note_id}", OperationResponse, request.to_payload())

    async def delete_note(self, note_id: int) -> OperationResponse:
        return await self._send_model("DELETE", f"/contacts/notes/{note_id}", OperationResponse)

    async def merge(self, primary_contact_id: int, secondary_contact_ids: List[int]) -> BulkOperationResponse:
        body = {"primaryContactId": primary_contact_id, "secondaryContactIdList": secondary_contact_ids}
        return await self._send_model("POST", "/contacts/merge", BulkOperationResponse, body)

    # contact fields

    async def list_fields(self, params: Optional[PageParams] = None) -> PagedResponse[CustomField]:
        return await self._list("/contact_fields", params or PageParams(per_page=50), CustomField)

    async def get_field(self, field_id: int) -> CustomField:
        return await self._get_model(f"/contact_fields/{field_id}", CustomField)
