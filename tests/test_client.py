"""Tests for the HTTP client and the resource services, against a mock transport."""

import json
import time

import httpx
import pytest

from bolddesk.client import BoldDeskClient
from bolddesk.errors import (
    BoldDeskApiError,
    BoldDeskAuthenticationError,
    BoldDeskTimeoutError,
    BoldDeskValidationError,
    ErrorKind,
)
from bolddesk.models import CreateContactRequest, ReplyTicketRequest, UpdateTicketRequest
from bolddesk.params import TicketQueryParams


def ticket(ticket_id, title="Printer"):
    return {"ticketId": ticket_id, "title": title, "status": {"id": 1, "description": "Open"}}


@pytest.mark.asyncio
async def test_sends_api_key_and_user_agent(fake_api):
    fake_api.add("GET", "/tickets/7", json=ticket(7))
    async with fake_api.client() as client:
        result = await client.tickets.get(7)
    assert result.ticket_id == 7
    assert result.status.description == "Open"
    request = fake_api.requests[0]
    assert str(request.url) == "https://acme.bolddesk.com/api/v1.0/tickets/7"
    assert request.headers["x-api-key"] == "test-api-key-123"
    assert request.headers["accept"] == "application/json"
    assert request.headers["user-agent"].startswith("bolddesk/")


@pytest.mark.asyncio
async def test_list_sends_camel_case_paging(fake_api):
    fake_api.add("GET", "/tickets", json={"result": [ticket(1), ticket(2)], "count": 9})
    async with fake_api.client() as client:
        page = await client.tickets.list(TicketQueryParams(per_page=2, q="status:[1]"))
    assert [t.ticket_id for t in page.result] == [1, 2]
    assert page.count == 9
    params = fake_api.requests[0].url.params
    assert params["page"] == "1"
    assert params["perPage"] == "2"
    assert params["requiresCounts"] == "true"
    assert params["q"] == "status:[1]"


@pytest.mark.asyncio
async def test_null_result_is_an_empty_page(fake_api):
    fake_api.add("GET", "/tickets", json={"result": None, "count": None})
    async with fake_api.client() as client:
        page = await client.tickets.list()
    assert page.result == []
    assert page.count == 0


@pytest.mark.asyncio
async def test_null_scalars_in_items_are_accepted(fake_api):
    fake_api.add("GET", "/tickets", json={"result": [{"ticketId": 7, "title": None}], "count": 1})
    async with fake_api.client() as client:
        page = await client.tickets.list()
    assert page.result[0].ticket_id == 7
    assert page.result[0].title is None


@pytest.mark.asyncio
async def test_unexpected_response_shape_is_an_api_error(fake_api):
    fake_api.add("GET", "/tickets", json={"result": [{"ticketId": "seven"}], "count": 1})
    async with fake_api.client() as client:
        with pytest.raises(BoldDeskApiError, match="Failed to parse API response") as exc_info:
            await client.tickets.list()
    assert exc_info.value.kind is ErrorKind.API


@pytest.mark.asyncio
async def test_unexpected_shape_aborts_iteration_with_api_error(fake_api):
    fake_api.add("GET", "/agents", json={"result": "not a list", "count": 1})
    async with fake_api.client() as client:
        with pytest.raises(BoldDeskApiError, match="Failed to parse API response"):
            [agent async for agent in client.agents.iterate_all()]


@pytest.mark.asyncio
async def test_unknown_view_rejected(fake_api):
    async with fake_api.client() as client:
        with pytest.raises(ValueError, match="Unknown ticket view"):
            await client.tickets.list(view="trash")
    assert fake_api.requests == []


@pytest.mark.asyncio
async def test_validation_error_from_response(fake_api):
    fake_api.add("POST", "/contacts", 400, json={
        "message": "Invalid",
        "statusCode": 400,
        "errors": [{"field": "email", "errorMessage": "required", "errorType": "FieldRequired"}],
    })
    async with fake_api.client() as client:
        with pytest.raises(BoldDeskValidationError) as exc_info:
            await client.contacts.create(CreateContactRequest(contact_name="Ann", email_id=""))
    assert exc_info.value.get_field_errors("email") == ["required"]


@pytest.mark.asyncio
async def test_authentication_error(fake_api):
    fake_api.add("GET", "/brands", 401)
    async with fake_api.client() as client:
        with pytest.raises(BoldDeskAuthenticationError) as exc_info:
            await client.brands.list()
    assert exc_info.value.kind is ErrorKind.AUTHENTICATION


@pytest.mark.asyncio
async def test_timeout_becomes_timeout_error(fake_api):
    def slow(request):
        raise httpx.ReadTimeout("timed out", request=request)

    fake_api.add_handler("GET", "/tickets", slow)
    async with fake_api.client() as client:
        with pytest.raises(BoldDeskTimeoutError) as exc_info:
            await client.tickets.list()
    error = exc_info.value
    assert error.kind is ErrorKind.TIMEOUT
    assert error.request_url.startswith("https://acme.bolddesk.com/api/v1.0/tickets")
    assert error.elapsed_ms >= 0


@pytest.mark.asyncio
async def test_network_error_becomes_api_error(fake_api):
    def unreachable(request):
        raise httpx.ConnectError("connection refused", request=request)

    fake_api.add_handler("GET", "/brands", unreachable)
    async with fake_api.client() as client:
        with pytest.raises(BoldDeskApiError, match="Network error"):
            await client.brands.list()


def test_timeout_configuration(monkeypatch):
    monkeypatch.delenv("BOLDDESK_HTTP_TIMEOUT_SECONDS", raising=False)
    assert BoldDeskClient("acme.bolddesk.com", "k").timeout == 180.0
    monkeypatch.setenv("BOLDDESK_HTTP_TIMEOUT_SECONDS", "30")
    assert BoldDeskClient("acme.bolddesk.com", "k").timeout == 30.0
    monkeypatch.setenv("BOLDDESK_HTTP_TIMEOUT_SECONDS", "soon")
    assert BoldDeskClient("acme.bolddesk.com", "k").timeout == 180.0
    assert BoldDeskClient("acme.bolddesk.com", "k", timeout=5).timeout == 5


@pytest.mark.asyncio
async def test_rate_limit_headers_recorded(fake_api):
    fake_api.add("GET", "/brands", json={"result": [], "count": 0}, headers={
        "x-rate-limit-limit": "100",
        "x-rate-limit-remaining": "97",
        "x-rate-limit-reset": "2025-01-01T00:00:10Z",
    })
    async with fake_api.client() as client:
        await client.brands.list()
        assert client.rate_limit.limit == 100
        assert client.rate_limit.remaining == 97
        assert client.rate_limit.reset.year == 2025
        assert client.brands.rate_limit is client.rate_limit


@pytest.mark.asyncio
async def test_missing_contact_filter_yields_empty_page(fake_api, caplog):
    fake_api.add("GET", "/tickets", 400, json={
        "message": "Validation failed",
        "errors": [{"field": "emailId", "errorMessage": "Contact doesn't exist", "errorType": "NotExist"}],
    })
    async with fake_api.client() as client:
        page = await client.tickets.list(TicketQueryParams(q='requesteremail:"ghost@example.com"'))
    assert page.result == []
    assert page.count == 0
    assert "Contact doesn't exist" in caplog.text


@pytest.mark.asyncio
async def test_missing_contact_detected_from_message(fake_api):
    fake_api.add("GET", "/tickets", 400, json={"message": "The contact does not exist.", "errors": []})
    async with fake_api.client() as client:
        page = await client.tickets.list()
    assert page.result == []


@pytest.mark.asyncio
async def test_other_ticket_validation_errors_propagate(fake_api):
    fake_api.add("GET", "/tickets", 400, json={
        "message": "Invalid",
        "errors": [{"field": "q", "errorMessage": "bad syntax"}],
    })
    async with fake_api.client() as client:
        with pytest.raises(BoldDeskValidationError):
            await client.tickets.list(TicketQueryParams(q="status:["))


@pytest.mark.asyncio
async def test_update_with_no_changes_still_returns_ticket(fake_api):
    fake_api.add("PUT", "/tickets/5/update_fields", 400, json={"message": "No changes found", "errors": []})
    fake_api.add("GET", "/tickets/5", json=ticket(5, "Same"))
    async with fake_api.client() as client:
        result = await client.tickets.update(5, UpdateTicketRequest(title="Same"))
    assert result.title == "Same"
    put = fake_api.calls("PUT", "/tickets/5/update_fields")[0]
    assert json.loads(put.content) == {"fields": {"subject": "Same"}}
    assert put.url.params["skipDependencyValidation"] == "true"


@pytest.mark.asyncio
async def test_messages_404_means_no_messages(fake_api):
    fake_api.add("GET", "/tickets/5/messages", 404)
    async with fake_api.client() as client:
        page = await client.tickets.list_messages(5)
    assert page.result == []


@pytest.mark.asyncio
async def test_reply_payload(fake_api):
    fake_api.add("POST", "/tickets/5/updates", json={"id": 99, "message": "Reply added"})
    async with fake_api.client() as client:
        response = await client.tickets.reply(5, ReplyTicketRequest(description="Hello", is_private=False))
    assert response.id == 99
    body = json.loads(fake_api.requests[0].content)
    assert body["description"] == "Hello"
    assert body["isPrivate"] is False


@pytest.mark.asyncio
async def test_count_asks_for_a_single_item(fake_api):
    fake_api.add("GET", "/tickets", json={"result": [ticket(1)], "count": 1234})
    async with fake_api.client() as client:
        assert await client.tickets.count() == 1234
    params = fake_api.requests[0].url.params
    assert params["perPage"] == "1"
    assert params["requiresCounts"] == "true"


@pytest.mark.asyncio
async def test_date_range(fake_api):
    def by_order(request):
        if request.url.params["orderBy"] == "createdon asc":
            return httpx.Response(200, json={"result": [{"ticketId": 1, "createdOn": "2023-02-01T08:00:00Z"}]})
        return httpx.Response(200, json={"result": [{"ticketId": 9, "createdOn": "2024-06-30T17:30:00Z"}]})

    fake_api.add_handler("GET", "/tickets", by_order)
    async with fake_api.client() as client:
        span = await client.tickets.date_range()
    assert span.from_.year == 2023
    assert span.to.year == 2024
    assert len(fake_api.requests) == 2


@pytest.mark.asyncio
async def test_iterate_all_walks_pages(fake_api):
    def pages(request):
        page = int(request.url.params["page"])
        items = {1: [ticket(1), ticket(2)], 2: [ticket(3)]}.get(page, [])
        return httpx.Response(200, json={"result": items, "count": 3})

    fake_api.add_handler("GET", "/tickets", pages)
    async with fake_api.client() as client:
        ids = [t.ticket_id async for t in client.tickets.iterate_all(TicketQueryParams(per_page=2))]
    assert ids == [1, 2, 3]
    assert [r.url.params["page"] for r in fake_api.requests] == ["1", "2"]


@pytest.mark.asyncio
async def test_iterate_all_pauses_once_when_budget_low(fake_api, sleeps):
    reset = str(int(time.time()) + 30)

    def pages(request):
        if request.url.params["page"] == "1":
            return httpx.Response(200, json={"result": [ticket(1), ticket(2)]}, headers={
                "x-rate-limit-limit": "100",
                "x-rate-limit-remaining": "2",
                "x-rate-limit-reset": reset,
            })
        return httpx.Response(200, json={"result": [ticket(3)]})

    fake_api.add_handler("GET", "/tickets", pages)
    async with fake_api.client() as client:
        ids = [t.ticket_id async for t in client.tickets.iterate_all(TicketQueryParams(per_page=2))]
    assert ids == [1, 2, 3]
    assert len(sleeps) == 1
    assert 0 < sleeps[0] <= 30


@pytest.mark.asyncio
async def test_brands_are_a_single_request(fake_api):
    fake_api.add("GET", "/brands", json={"result": [
        {"brandId": 1, "brandName": "Acme", "isPublished": True},
        {"brandId": 2, "brandName": "Acme Labs", "isPublished": False},
    ], "count": 2})
    async with fake_api.client() as client:
        brands = [b async for b in client.brands.iterate_all()]
    assert [b.brand_name for b in brands] == ["Acme", "Acme Labs"]
    assert len(fake_api.requests) == 1


@pytest.mark.asyncio
async def test_field_options_require_api_name(fake_api):
    async with fake_api.client() as client:
        with pytest.raises(ValueError, match="API name cannot be null or empty."):
            await client.fields.list_options("   ")
        with pytest.raises(ValueError, match="greater than 0"):
            await client.fields.remove_option(0)
    assert fake_api.requests == []


@pytest.mark.asyncio
async def test_field_options_path_and_query(fake_api):
    fake_api.add("GET", "/fields/collection/cf_region/options", json={
        "result": [{"id": 4, "name": "North", "sortOrder": 1}], "count": 1,
    })
    async with fake_api.client() as client:
        page = await client.fields.list_options(" cf_region ")
    assert page.result[0].name == "North"
    assert fake_api.requests[0].url.params["PerPage"] == "10"


@pytest.mark.asyncio
async def test_worklogs_list(fake_api):
    fake_api.add("GET", "/tickets/worklogs", json={
        "result": [{"worklogId": 3, "ticketId": 5, "timeSpent": 1.5, "isBillable": True}], "count": 1,
    })
    async with fake_api.client() as client:
        page = await client.worklogs.list()
    assert page.result[0].time_spent == 1.5
    assert "includeDeletedWorklogs" not in fake_api.requests[0].url.params


@pytest.mark.asyncio
async def test_agent_list_uses_agent_defaults(fake_api):
    fake_api.add("GET", "/agents", json={"result": [{"userId": 8, "name": "Bo", "emailId": "bo@example.com"}], "count": 1})
    async with fake_api.client() as client:
        page = await client.agents.list()
    assert page.result[0].email_id == "bo@example.com"
    assert fake_api.requests[0].url.params["perPage"] == "10"
