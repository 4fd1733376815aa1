import logging
from typing import Optional, Dict, Any, List, Annotated

from mcp.server.fastmcp import FastMCP
from pydantic import BaseModel, Field

from . import __version__
from .client import BoldDeskClient
from .config import load_config, validate_config_or_raise
from .errors import BoldDeskError, ErrorKind
from .models import AddTicketNoteRequest, ReplyTicketRequest
from .params import (
    AgentQueryParams,
    ContactGroupQueryParams,
    ContactQueryParams,
    FieldOptionQueryParams,
    TicketQueryParams,
    WorklogQueryParams,
)

##
# Initialize FastMCP server
##
mcp = FastMCP("bolddesk")

# Shared API client (lazily initialized)
_client: Optional[BoldDeskClient] = None

_ERROR_TYPES = {
    ErrorKind.AUTHENTICATION: "authentication_error",
    ErrorKind.VALIDATION: "validation_error",
    ErrorKind.RATE_LIMIT: "rate_limited",
    ErrorKind.TIMEOUT: "timeout",
    ErrorKind.API: "http_error",
}


def _get_client() -> BoldDeskClient:
    global _client
    if _client is None:
        config = load_config()
        validate_config_or_raise(config)
        _client = BoldDeskClient.from_config(config)
    return _client


def _ok(
    data: Any,
    *,
    pagination: Optional[Dict[str, Any]] = None,
    warnings: Optional[List[str]] = None,
    next_call: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    out: Dict[str, Any] = {"success": True, "data": data}
    if pagination is not None:
        out["pagination"] = pagination
    if warnings:
        out["warnings"] = warnings
    if next_call is not None:
        out["next_call"] = next_call
    return out


def _err(err_type: str, message: str, *, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "success": False,
        "error": {
            "type": err_type,
            "message": message,
        }
    }
    if details:
        out["error"]["details"] = details
    return out


def _bolddesk_err(error: BoldDeskError, message: str, **details: Any) -> Dict[str, Any]:
    """Map a BoldDesk error to an error envelope, keeping its kind-specific payload."""
    if error.status_code:
        details["status"] = error.status_code
    if error.kind is ErrorKind.VALIDATION and error.has_field_errors():
        details["fields"] = {field: list(messages) for field, messages in error.field_errors.items()}
    elif error.kind is ErrorKind.RATE_LIMIT:
        wait = error.get_wait_time()
        if wait is not None:
            details["retry_after_seconds"] = int(wait.total_seconds())
    elif error.kind is ErrorKind.TIMEOUT:
        details["elapsed_ms"] = error.elapsed_ms
        details["url"] = error.request_url
    return _err(_ERROR_TYPES[error.kind], f"{message}: {error.message}", details=details)


def _dump(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(data, list):
        return [_dump(item) for item in data]
    return data


def _paged(tool: str, key: str, response, page: int, per_page: int, arguments: Dict[str, Any]) -> Dict[str, Any]:
    """Wrap one page of results, with next_call pointing at the following page."""
    returned = len(response.result)
    if response.count:
        has_more = page * per_page < response.count
    else:
        has_more = returned >= per_page
    next_page = page + 1 if has_more and returned else None
    return _ok({key: _dump(response.result)}, pagination={
        "current_page": page,
        "next_page": next_page,
        "per_page": per_page,
        "total": response.count or None,
    }, next_call=(
        {"tool": tool, "arguments": {**arguments, "page": next_page, "per_page": per_page}}
        if next_page is not None else None
    ))


@mcp.tool("server.info")
async def get_server_info() -> Dict[str, Any]:
    """
    Health/version endpoint for clients and operators.
    Reports readiness and basic configuration metadata (non-secret).
    """
    config = load_config()
    return _ok({
        "name": "bolddesk",
        "version": __version__,
        "bolddesk_domain": config.domain,
        "ready": config.is_complete,
        "capabilities": {
            "pagination": True,
            "rate_limit_guard": True,
            "retries": False,
        }
    })


@mcp.tool("tickets.list")
async def tickets_list(
    page: Annotated[int, Field(ge=1, description="Page number")] = 1,
    per_page: Annotated[int, Field(ge=1, le=100, description="Items per page")] = 30,
    q: Annotated[Optional[str], Field(description='Q filter, e.g. "status:[1,2] AND createdon:today"')] = None,
    order_by: Annotated[Optional[str], Field(description='e.g. "createdon desc"')] = None,
    view: Annotated[Optional[str], Field(description="deleted, spam or archived")] = None,
) -> Dict[str, Any]:
    """List BoldDesk tickets with pagination support."""
    params = TicketQueryParams(page=page, per_page=per_page, q=q, order_by=order_by)
    try:
        response = await _get_client().tickets.list(params, view=view)
        return _paged("tickets.list", "tickets", response, page, per_page,
                      {"q": q, "order_by": order_by, "view": view})
    except BoldDeskError as e:
        return _bolddesk_err(e, "Failed to fetch tickets")
    except Exception as e:
        return _err("unexpected_error", f"An unexpected error occurred: {str(e)}")


@mcp.tool("tickets.get")
async def tickets_get(ticket_id: int) -> Dict[str, Any]:
    """Get a BoldDesk ticket."""
    try:
        return _ok(_dump(await _get_client().tickets.get(ticket_id)))
    except BoldDeskError as e:
        return _bolddesk_err(e, "Failed to fetch ticket", ticket_id=ticket_id)
    except Exception as e:
        return _err("unexpected_error", f"An unexpected error occurred: {str(e)}", details={"ticket_id": ticket_id})


@mcp.tool("tickets.count")
async def tickets_count(q: Optional[str] = None) -> Dict[str, Any]:
    """Count tickets matching an optional Q filter."""
    try:
        total = await _get_client().tickets.count(TicketQueryParams(q=q))
        return _ok({"count": total})
    except BoldDeskError as e:
        return _bolddesk_err(e, "Failed to count tickets")
    except Exception as e:
        return _err("unexpected_error", f"An unexpected error occurred: {str(e)}")


@mcp.tool("tickets.reply.create")
async def tickets_reply_create(ticket_id: int, body: str, is_private: bool = False) -> Dict[str, Any]:
    """Reply to a BoldDesk ticket."""
    try:
        request = ReplyTicketRequest(description=body, is_private=is_private)
        return _ok(_dump(await _get_client().tickets.reply(ticket_id, request)))
    except BoldDeskError as e:
        return _bolddesk_err(e, "Failed to create ticket reply", ticket_id=ticket_id)
    except Exception as e:
        return _err("unexpected_error", f"An unexpected error occurred: {str(e)}", details={"ticket_id": ticket_id})


@mcp.tool("tickets.note.create")
async def tickets_note_create(ticket_id: int, body: str, is_private: bool = True) -> Dict[str, Any]:
    """Add a note to a BoldDesk ticket (private unless is_private is false)."""
    try:
        request = AddTicketNoteRequest(description=body, is_private=is_private)
        return _ok(_dump(await _get_client().tickets.add_note(ticket_id, request)))
    except BoldDeskError as e:
        return _bolddesk_err(e, "Failed to create ticket note", ticket_id=ticket_id)
    except Exception as e:
        return _err("unexpected_error", f"An unexpected error occurred: {str(e)}", details={"ticket_id": ticket_id})


@mcp.tool("worklogs.list")
async def worklogs_list(
    page: Annotated[int, Field(ge=1, description="Page number")] = 1,
    per_page: Annotated[int, Field(ge=1, le=100, description="Items per page")] = 30,
    include_deleted: bool = False,
) -> Dict[str, Any]:
    """List worklogs across all tickets."""
    params = WorklogQueryParams(page=page, per_page=per_page, include_deleted_worklogs=include_deleted)
    try:
        response = await _get_client().worklogs.list(params)
        return _paged("worklogs.list", "worklogs", response, page, per_page, {"include_deleted": include_deleted})
    except BoldDeskError as e:
        return _bolddesk_err(e, "Failed to fetch worklogs")
    except Exception as e:
        return _err("unexpected_error", f"An unexpected error occurred: {str(e)}")


@mcp.tool("agents.list")
async def agents_list(
    page: Annotated[int, Field(ge=1, description="Page number")] = 1,
    per_page: Annotated[int, Field(ge=1, le=100, description="Items per page")] = 30,
    filter: Annotated[Optional[str], Field(description="Free-text filter on name or email")] = None,
) -> Dict[str, Any]:
    """List BoldDesk agents with pagination support."""
    params = AgentQueryParams(page=page, per_page=per_page, filter=filter)
    try:
        response = await _get_client().agents.list(params)
        return _paged("agents.list", "agents", response, page, per_page, {"filter": filter})
    except BoldDeskError as e:
        return _bolddesk_err(e, "Failed to fetch agents")
    except Exception as e:
        return _err("unexpected_error", f"An unexpected error occurred: {str(e)}")


@mcp.tool("agents.get")
async def agents_get(agent_id: int) -> Dict[str, Any]:
    """Get a BoldDesk agent by user id."""
    try:
        return _ok(_dump(await _get_client().agents.get(agent_id)))
    except BoldDeskError as e:
        return _bolddesk_err(e, "Failed to fetch agent", agent_id=agent_id)
    except Exception as e:
        return _err("unexpected_error", f"An unexpected error occurred: {str(e)}", details={"agent_id": agent_id})


@mcp.tool("contacts.list")
async def contacts_list(
    page: Annotated[int, Field(ge=1, description="Page number")] = 1,
    per_page: Annotated[int, Field(ge=1, le=100, description="Items per page")] = 30,
    q: Annotated[Optional[str], Field(description="Q filter expression")] = None,
    filter: Annotated[Optional[str], Field(description="Free-text filter")] = None,
) -> Dict[str, Any]:
    """List BoldDesk contacts with pagination support."""
    params = ContactQueryParams(page=page, per_page=per_page, q=[q] if q else None, filter=filter)
    try:
        response = await _get_client().contacts.list(params)
        return _paged("contacts.list", "contacts", response, page, per_page, {"q": q, "filter": filter})
    except BoldDeskError as e:
        return _bolddesk_err(e, "Failed to fetch contacts")
    except Exception as e:
        return _err("unexpected_error", f"An unexpected error occurred: {str(e)}")


@mcp.tool("contacts.get")
async def contacts_get(contact_id: int) -> Dict[str, Any]:
    """Get a BoldDesk contact by user id."""
    try:
        return _ok(_dump(await _get_client().contacts.get(contact_id)))
    except BoldDeskError as e:
        return _bolddesk_err(e, "Failed to fetch contact", contact_id=contact_id)
    except Exception as e:
        return _err("unexpected_error", f"An unexpected error occurred: {str(e)}", details={"contact_id": contact_id})


@mcp.tool("contact_groups.list")
async def contact_groups_list(
    page: Annotated[int, Field(ge=1, description="Page number")] = 1,
    per_page: Annotated[int, Field(ge=1, le=100, description="Items per page")] = 30,
    filter: Annotated[Optional[str], Field(description="Free-text filter on the group name")] = None,
) -> Dict[str, Any]:
    """List contact groups (companies) with pagination support."""
    params = ContactGroupQueryParams(page=page, per_page=per_page, filter=filter)
    try:
        response = await _get_client().contact_groups.list(params)
        return _paged("contact_groups.list", "contact_groups", response, page, per_page, {"filter": filter})
    except BoldDeskError as e:
        return _bolddesk_err(e, "Failed to fetch contact groups")
    except Exception as e:
        return _err("unexpected_error", f"An unexpected error occurred: {str(e)}")


@mcp.tool("brands.list")
async def brands_list() -> Dict[str, Any]:
    """List all brands."""
    try:
        response = await _get_client().brands.list()
        return _ok({"brands": _dump(response.result)})
    except BoldDeskError as e:
        return _bolddesk_err(e, "Failed to fetch brands")
    except Exception as e:
        return _err("unexpected_error", f"An unexpected error occurred: {str(e)}")


@mcp.tool("fields.options.list")
async def fields_options_list(
    api_name: Annotated[str, Field(description="Field API name, e.g. cf_region")],
    page: Annotated[int, Field(ge=1, description="Page number")] = 1,
    per_page: Annotated[int, Field(ge=1, le=100, description="Items per page")] = 30,
    filter: Optional[str] = None,
) -> Dict[str, Any]:
    """List the options of a dropdown field."""
    params = FieldOptionQueryParams(page=page, per_page=per_page, filter=filter, requires_counts=True)
    try:
        response = await _get_client().fields.list_options(api_name, params)
        return _paged("fields.options.list", "options", response, page, per_page, {"api_name": api_name, "filter": filter})
    except ValueError as e:
        return _err("invalid_argument", str(e), details={"api_name": api_name})
    except BoldDeskError as e:
        return _bolddesk_err(e, "Failed to fetch field options", api_name=api_name)
    except Exception as e:
        return _err("unexpected_error", f"An unexpected error occurred: {str(e)}")


def main():
    logging.basicConfig(level=logging.INFO)
    logging.info("Starting BoldDesk MCP server")
    try:
        validate_config_or_raise(load_config())
    except Exception as e:
        logging.error(f"Configuration error: {e}")
        raise
    logging.info("BoldDesk MCP server ready")
    mcp.run(transport='stdio')


if __name__ == "__main__":
    main()
