import asyncio
import logging
from typing import Optional, Any, List, AsyncIterator

from ..errors import BoldDeskValidationError, BoldDeskApiError
from ..models import (
    AddTicketNoteRequest,
    BulkOperationResponse,
    CreateTicketRequest,
    DateRange,
    OperationResponse,
    PagedResponse,
    ReplyTicketRequest,
    StatusRef,
    Tag,
    Ticket,
    TicketField,
    TicketForm,
    TicketMessage,
    TicketMetrics,
    TicketNote,
    TicketSource,
    TicketWatcher,
    UpdateTicketRequest,
)
from ..pagination import ProgressSink
from ..params import TicketQueryParams, TicketMessageQueryParams, NotesQueryParams
from .base import BaseService, parse_model

logger = logging.getLogger(__name__)

TICKET_VIEWS = ("deleted", "spam", "archived", "filters/deleted", "filters/spam")

_CONTACT_MISSING = ("contact doesn't exist", "contact does not exist")


def _is_missing_contact(error: BoldDeskValidationError) -> bool:
    """True when a ticket query failed only because the requester is unknown."""
    if error.has_field_error("emailId"):
        return True
    texts = [error.message or ""] + [e.error_message or "" for e in error.errors]
    return any(needle in text.lower() for text in texts for needle in _CONTACT_MISSING)


def _unwrap(data: Any, *keys: str) -> Any:
    if isinstance(data, dict):
        for key in keys:
            if isinstance(data.get(key), dict):
                return data[key]
    return data


class TicketService(BaseService):

    async def list(self, params: Optional[TicketQueryParams] = None, *, view: Optional[str] = None) -> PagedResponse[Ticket]:
        """Fetch one page of tickets.

        Args:
            params: Query parameters; defaults to page 1, 100 per page, with counts
            view: Optional sub-listing such as "deleted", "spam" or "archived"

        Returns:
            PagedResponse of Ticket. A filter on a contact that does not exist
            yields an empty page instead of a validation error.
        """
        params = params or TicketQueryParams()
        if view is not None and view not in TICKET_VIEWS:
            raise ValueError(f"Unknown ticket view {view!r}; expected one of {', '.join(TICKET_VIEWS)}")
        path = f"/tickets/{view}" if view else "/tickets"
        logger.debug(f"[BoldDesk] list tickets page={params.page} per_page={params.per_page} q={params.q or '(none)'}")
        try:
            return await self._list(path, params, Ticket)
        except BoldDeskValidationError as e:
            if not _is_missing_contact(e):
                raise
            logger.warning(f"[BoldDesk] Contact doesn't exist - returning empty ticket list. Error: {e.message}")
            return PagedResponse[Ticket](result=[], count=0)

    def iterate_all(
        self,
        params: Optional[TicketQueryParams] = None,
        *,
        view: Optional[str] = None,
        progress: Optional[ProgressSink] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> AsyncIterator[Ticket]:
        async def fetch(p: TicketQueryParams) -> PagedResponse[Ticket]:
            return await self.list(p, view=view)

        return self._iterate(fetch, params or TicketQueryParams(), "tickets", progress, cancel)

    async def count(self, params: Optional[TicketQueryParams] = None) -> int:
        base = params or TicketQueryParams()
        page = await self.list(base.model_copy(update={"page": 1, "per_page": 1, "requires_counts": True}))
        return page.count

    async def get(self, ticket_id: int) -> Ticket:
        return await self._get_model(f"/tickets/{ticket_id}", Ticket)

    async def create(self, request: CreateTicketRequest) -> Ticket:
        await self._guard()
        data = await self._post("/tickets", request.to_payload())
        return parse_model(Ticket, _unwrap(data, "result", "ticket") or {})

    async def update(self, ticket_id: int, request: UpdateTicketRequest, *, skip_dependency_validation: bool = True) -> Ticket:
        """Update ticket properties, then return the refreshed ticket.

        The API answers 400 "No changes found" when nothing differs; that
        is treated as success.
        """
        body = {"fields": request.to_fields()}
        params = [("skipDependencyValidation", "true" if skip_dependency_validation else "false")]
        await self._guard()
        try:
            await self._put(f"/tickets/{ticket_id}/update_fields", body, params)
        except BoldDeskValidationError as e:
            if "no changes found" not in (e.message or "").lower():
                raise
            logger.info(f"[BoldDesk] Ticket {ticket_id}: no changes to apply")
        return await self.get(ticket_id)

    async def delete(self, ticket_id: int) -> OperationResponse:
        return await self._send_model("DELETE", f"/tickets/{ticket_id}", OperationResponse)

    async def delete_permanently(self, ticket_id: int) -> OperationResponse:
        return await self._send_model("DELETE", f"/tickets/{ticket_id}/permanently", OperationResponse)

    async def bulk_delete(self, ticket_ids: List[int], *, permanently: bool = False) -> BulkOperationResponse:
        path = "/tickets/bulk/delete/permanently" if permanently else "/tickets/bulk/delete"
        return await self._send_model("POST", path, BulkOperationResponse, {"ticketIdList": ticket_ids})

    async def restore(self, ticket_id: int) -> OperationResponse:
        return await self._send_model("POST", f"/tickets/{ticket_id}/restore", OperationResponse)

    async def bulk_restore(self, ticket_ids: List[int]) -> BulkOperationResponse:
        return await self._send_model("POST", "/tickets/bulk/restore", BulkOperationResponse, {"ticketIdList": ticket_ids})

    async def mark_spam(self, ticket_id: int) -> OperationResponse:
        return await self._send_model("POST", f"/tickets/{ticket_id}/spam", OperationResponse)

    async def unmark_spam(self, ticket_id: int) -> OperationResponse:
        return await self._send_model("DELETE", f"/tickets/{ticket_id}/spam", OperationResponse)

    async def archive(self, ticket_ids: List[int]) -> OperationResponse:
        return await self._send_model("POST", "/tickets/archive", OperationResponse, {"ticketIdList": ticket_ids})

    async def lock(self, ticket_id: int) -> OperationResponse:
        return await self._send_model("POST", f"/tickets/{ticket_id}/lock", OperationResponse)

    async def unlock(self, ticket_id: int) -> OperationResponse:
        return await self._send_model("POST", f"/tickets/{ticket_id}/unlock", OperationResponse)

    # messages and notes

    async def reply(self, ticket_id: int, request: ReplyTicketRequest) -> OperationResponse:
        return await self._send_model("POST", f"/tickets/{ticket_id}/updates", OperationResponse, request.to_payload())

    async def list_messages(self, ticket_id: int, params: Optional[TicketMessageQueryParams] = None) -> PagedResponse[TicketMessage]:
        # BoldDesk answers 404 for a ticket with no messages yet
        params = params or TicketMessageQueryParams()
        try:
            return await self._list(f"/tickets/{ticket_id}/messages", params, TicketMessage)
        except BoldDeskApiError as e:
            if e.status_code != 404:
                raise
            return PagedResponse[TicketMessage](result=[], count=0)

    def iterate_messages(self, ticket_id: int, params: Optional[TicketMessageQueryParams] = None, **kwargs) -> AsyncIterator[TicketMessage]:
        async def fetch(p: TicketMessageQueryParams) -> PagedResponse[TicketMessage]:
            return await self.list_messages(ticket_id, p)

        return self._iterate(fetch, params or TicketMessageQueryParams(), "messages", **kwargs)

    async def get_message(self, ticket_id: int, message_id: int) -> TicketMessage:
        return await self._get_model(f"/tickets/{ticket_id}/messages/{message_id}", TicketMessage)

    async def update_message(self, ticket_id: int, message_id: int, description: str) -> OperationResponse:
        return await self._send_model(
            "PUT", f"/tickets/{ticket_id}/messages/{message_id}", OperationResponse, {"description": description}
        )

    async def delete_message(self, ticket_id: int, message_id: int) -> OperationResponse:
        return await self._send_model("DELETE", f"/tickets/{ticket_id}/messages/{message_id}", OperationResponse)

    async def list_notes(self, ticket_id: int, params: Optional[NotesQueryParams] = None) -> PagedResponse[TicketNote]:
        return await self._list(f"/tickets/{ticket_id}/notes", params or NotesQueryParams(), TicketNote)

    async def add_note(self, ticket_id: int, request: AddTicketNoteRequest) -> OperationResponse:
        return await self._send_model("POST", f"/tickets/{ticket_id}/notes", OperationResponse, request.to_payload())

    # tags and watchers

    async def list_tags(self, ticket_id: int) -> List[Tag]:
        return await self._list_plain(f"/tickets/{ticket_id}/tags", Tag)

    async def add_tags(self, ticket_id: int, tags: List[str]) -> OperationResponse:
        return await self._send_model("POST", f"/tickets/{ticket_id}/tags", OperationResponse, {"tags": tags})

    async def remove_tags(self, ticket_id: int, tags: List[str]) -> OperationResponse:
        return await self._send_model("DELETE", f"/tickets/{ticket_id}/tags", OperationResponse, {"tags": tags})

    async def list_watchers(self, ticket_id: int) -> List[TicketWatcher]:
        return await self._list_plain(f"/tickets/{ticket_id}/watchers", TicketWatcher)

    async def add_watchers(self, ticket_id: int, user_ids: List[int]) -> OperationResponse:
        return await self._send_model("POST", f"/tickets/{ticket_id}/watchers", OperationResponse, {"userIds": user_ids})

    async def remove_watchers(self, ticket_id: int, user_ids: List[int]) -> OperationResponse:
        return await self._send_model("DELETE", f"/tickets/{ticket_id}/watchers", OperationResponse, {"userIds": user_ids})

    # lookups

    async def metrics(self, ticket_id: int) -> TicketMetrics:
        return await self._get_model(f"/tickets/{ticket_id}/metrics", TicketMetrics)

    async def priorities(self) -> List[StatusRef]:
        return await self._list_plain("/tickets/priorities", StatusRef)

    async def statuses(self) -> List[StatusRef]:
        return await self._list_plain("/tickets/statuses", StatusRef)

    async def sources(self) -> List[TicketSource]:
        return await self._list_plain("/tickets/sources", TicketSource)

    async def fields(self) -> List[TicketField]:
        return await self._list_plain("/tickets/fields", TicketField)

    async def forms(self) -> List[TicketForm]:
        return await self._list_plain("/tickets/forms", TicketForm)

    async def date_range(self, params: Optional[TicketQueryParams] = None) -> DateRange:
        """createdOn of the oldest and newest ticket matching the filter."""
        base = (params or TicketQueryParams()).model_copy(update={"page": 1, "per_page": 1, "requires_counts": False})
        oldest = await self.list(base.model_copy(update={"order_by": "createdon asc"}))
        newest = await self.list(base.model_copy(update={"order_by": "createdon desc"}))
        return DateRange(
            from_=oldest.result[0].created_on if oldest.result else None,
            to=newest.result[0].created_on if newest.result else None,
        )

