"""Tests for the MCP tool envelopes."""

import httpx
import pytest
from mcp.server.fastmcp import FastMCP

from bolddesk import server


@pytest.fixture
def api(fake_api, monkeypatch):
    monkeypatch.setattr(server, "_client", fake_api.client())
    return fake_api


def test_server_is_a_fastmcp_app():
    assert isinstance(server.mcp, FastMCP)
    assert server.mcp.name == "bolddesk"


def test_ok_and_err_envelopes():
    assert server._ok({"a": 1}) == {"success": True, "data": {"a": 1}}
    assert server._err("http_error", "boom") == {"success": False, "error": {"type": "http_error", "message": "boom"}}
    assert server._err("x", "y", details={"id": 1})["error"]["details"] == {"id": 1}


@pytest.mark.asyncio
async def test_server_info_reports_readiness(clean_env, monkeypatch):
    info = await server.get_server_info()
    assert info["success"] is True
    assert info["data"]["name"] == "bolddesk"
    assert info["data"]["ready"] is False

    monkeypatch.setenv("BOLDDESK_DOMAIN", "acme.bolddesk.com")
    monkeypatch.setenv("BOLDDESK_API_KEY", "secret")
    info = await server.get_server_info()
    assert info["data"]["ready"] is True
    assert info["data"]["bolddesk_domain"] == "acme.bolddesk.com"
    assert "secret" not in str(info)


@pytest.mark.asyncio
async def test_tickets_list_pagination(api):
    api.add("GET", "/tickets", json={"result": [{"ticketId": 1, "title": "A"}, {"ticketId": 2, "title": "B"}], "count": 5})
    result = await server.tickets_list(page=1, per_page=2, q="status:[1]")
    assert result["success"] is True
    assert [t["ticketId"] for t in result["data"]["tickets"]] == [1, 2]
    assert result["pagination"] == {"current_page": 1, "next_page": 2, "per_page": 2, "total": 5}
    assert result["next_call"] == {
        "tool": "tickets.list",
        "arguments": {"q": "status:[1]", "order_by": None, "view": None, "page": 2, "per_page": 2},
    }


@pytest.mark.asyncio
async def test_last_page_has_no_next_call(api):
    api.add("GET", "/tickets", json={"result": [{"ticketId": 5, "title": "E"}], "count": 5})
    result = await server.tickets_list(page=3, per_page=2)
    assert result["pagination"]["next_page"] is None
    assert "next_call" not in result


@pytest.mark.asyncio
async def test_pagination_without_count_uses_page_fill(api):
    api.add("GET", "/agents", json={"result": [{"userId": 1}, {"userId": 2}]})
    result = await server.agents_list(page=1, per_page=2)
    assert result["pagination"]["next_page"] == 2
    assert result["pagination"]["total"] is None


@pytest.mark.asyncio
async def test_validation_error_envelope(api):
    api.add("POST", "/tickets/3/updates", 400, json={
        "message": "Invalid",
        "errors": [{"field": "description", "errorMessage": "required"}],
    })
    result = await server.tickets_reply_create(ticket_id=3, body="")
    assert result["success"] is False
    error = result["error"]
    assert error["type"] == "validation_error"
    assert error["message"] == "Failed to create ticket reply: Invalid"
    assert error["details"] == {"ticket_id": 3, "status": 400, "fields": {"description": ["required"]}}


@pytest.mark.asyncio
async def test_authentication_error_envelope(api):
    api.add("GET", "/tickets/3", 401)
    result = await server.tickets_get(ticket_id=3)
    assert result["error"]["type"] == "authentication_error"
    assert result["error"]["details"]["status"] == 401


@pytest.mark.asyncio
async def test_rate_limit_error_envelope(api):
    api.add("GET", "/brands", 429)
    result = await server.brands_list()
    assert result["error"]["type"] == "rate_limited"
    assert result["error"]["message"] == "Failed to fetch brands: Rate limit exceeded"


@pytest.mark.asyncio
async def test_timeout_envelope(api):
    def slow(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    api.add_handler("GET", "/contacts/4", slow)
    result = await server.contacts_get(contact_id=4)
    assert result["error"]["type"] == "timeout"
    assert result["error"]["details"]["url"].endswith("/contacts/4")


@pytest.mark.asyncio
async def test_note_is_private_by_default(api):
    api.add("POST", "/tickets/3/notes", json={"id": 11, "message": "Note added"})
    result = await server.tickets_note_create(ticket_id=3, body="internal")
    assert result["data"] == {"id": 11, "message": "Note added"}
    assert b'"isPrivate":true' in api.requests[0].content.replace(b" ", b"")


@pytest.mark.asyncio
async def test_ticket_count(api):
    api.add("GET", "/tickets", json={"result": [], "count": 17})
    result = await server.tickets_count(q="status:[1]")
    assert result == {"success": True, "data": {"count": 17}}


@pytest.mark.asyncio
async def test_field_options_invalid_argument(api):
    result = await server.fields_options_list(api_name="  ")
    assert result["error"]["type"] == "invalid_argument"
    assert result["error"]["message"] == "API name cannot be null or empty."
    assert api.requests == []


@pytest.mark.asyncio
async def test_contacts_list_wraps_q(api):
    api.add("GET", "/contacts", json={"result": [{"userId": 1, "contactName": "Ann"}], "count": 1})
    result = await server.contacts_list(q="email:ann@example.com")
    assert result["data"]["contacts"][0]["contactName"] == "Ann"
    assert api.requests[0].url.params.get_list("Q") == ["email:ann@example.com"]
