import logging
import os
import time
from typing import Optional, Dict, Any, Union, List, Tuple

import httpx

from . import __version__
from .errors import BoldDeskApiError, BoldDeskTimeoutError, classify_response
from .ratelimit import RateLimitInfo
from .services import (
    AgentService,
    BrandService,
    ContactGroupService,
    ContactService,
    FieldService,
    TicketService,
    WorklogService,
)

logger = logging.getLogger(__name__)

USER_AGENT = f"bolddesk/{__version__}"
DEFAULT_TIMEOUT_SECONDS = 180.0
TIMEOUT_ENV = "BOLDDESK_HTTP_TIMEOUT_SECONDS"

Params = Union[Dict[str, Any], List[Tuple[str, str]], None]


def _resolve_timeout(timeout: Optional[float]) -> float:
    if timeout is not None:
        return timeout
    raw = os.getenv(TIMEOUT_ENV)
    if raw:
        try:
            value = float(raw)
            if value > 0:
                return value
        except ValueError:
            pass
        logger.warning(f"Ignoring invalid {TIMEOUT_ENV}={raw!r}")
    return DEFAULT_TIMEOUT_SECONDS


class BoldDeskClient:
    """Async client for the BoldDesk REST API (``https://{domain}/api/v1.0``).

    Each instance owns its connection pool and its rate-limit snapshot;
    the resource services hang off it as attributes::

        async with BoldDeskClient("acme.bolddesk.com", api_key) as client:
            async for ticket in client.tickets.iterate_all():
                ...
    """

    def __init__(
        self,
        domain: str,
        api_key: str,
        *,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.domain = domain
        self.base_url = f"https://{domain}/api/v1.0"
        self.rate_limit = RateLimitInfo()
        self.timeout = _resolve_timeout(timeout)
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "x-api-key": api_key,
                "Accept": "application/json",
                "User-Agent": USER_AGENT,
            },
            timeout=httpx.Timeout(self.timeout, connect=min(self.timeout, 10.0)),
            transport=transport,
        )

        self.tickets = TicketService(self)
        self.worklogs = WorklogService(self)
        self.agents = AgentService(self)
        self.contacts = ContactService(self)
        self.contact_groups = ContactGroupService(self)
        self.brands = BrandService(self)
        self.fields = FieldService(self)

    @classmethod
    def from_config(cls, config, **kwargs) -> "BoldDeskClient":
        return cls(config.domain, config.api_key, **kwargs)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "BoldDeskClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def request(self, method: str, path: str, *, params: Params = None, json: Any = None) -> httpx.Response:
        """Send one request and return the successful response.

        Rate-limit headers are recorded on every response. Non-2xx
        responses raise the matching BoldDeskError; nothing is retried.
        """
        logger.debug(f"[BoldDesk] {method} {path} params={params}")
        request = self._http.build_request(method, path, params=params, json=json)
        started = time.monotonic()
        try:
            resp = await self._http.send(request)
        except httpx.TimeoutException as e:
            elapsed_ms = int((time.monotonic() - started) * 1000)
            url = str(request.url)
            raise BoldDeskTimeoutError(
                f"Request to {url} timed out after {elapsed_ms} ms",
                request_url=url,
                elapsed_ms=elapsed_ms,
            ) from e
        except httpx.RequestError as e:
            raise BoldDeskApiError(f"Network error while calling BoldDesk API: {e}") from e

        self.rate_limit.update_from_headers(resp.headers)

        if not resp.is_success:
            error = classify_response(resp.status_code, resp.text, self.rate_limit)
            logger.debug(f"[BoldDesk] {method} {path} failed: {resp.status_code} {error.message}")
            raise error
        return resp

    async def request_json(self, method: str, path: str, *, params: Params = None, json: Any = None) -> Any:
        resp = await self.request(method, path, params=params, json=json)
        if not resp.content or not resp.text.strip():
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise BoldDeskApiError(f"Failed to parse API response: {e}", status_code=resp.status_code) from e
