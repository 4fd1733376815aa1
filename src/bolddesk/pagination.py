import asyncio
import logging
from typing import Optional, Callable, Awaitable, AsyncIterator, TypeVar

from .models import PagedResponse
from .params import PageParams
from .ratelimit import RateLimitInfo, wait_if_needed

logger = logging.getLogger(__name__)

MAX_PER_PAGE = 100

T = TypeVar("T")
P = TypeVar("P", bound=PageParams)

PageFetcher = Callable[[P], Awaitable[PagedResponse[T]]]
ProgressSink = Callable[[str], None]


async def paginate(
    fetch_page: PageFetcher,
    params: P,
    *,
    rate_limit: RateLimitInfo,
    resource: str = "items",
    progress: Optional[ProgressSink] = None,
    cancel: Optional[asyncio.Event] = None,
    sleep: Optional[Callable[[float], Awaitable[None]]] = None,
) -> AsyncIterator[T]:
    """Walk every page of a list endpoint and yield its items one at a time.

    Stops on an empty page, once the server-reported ``count`` has been
    reached, or on a page shorter than ``per_page``. Only one request is in
    flight at a time; the rate-limit guard runs before each of them.

    Args:
        fetch_page: Coroutine returning one PagedResponse for the given params
        params: Initial query parameters; copied, never mutated
        rate_limit: Snapshot consulted before every page request
        resource: Plural noun used in progress messages
        progress: Optional callable receiving human-readable status lines
        cancel: Event checked before each page fetch
        sleep: Injectable sleep used by the rate-limit guard
    """
    per_page = min(params.per_page, MAX_PER_PAGE)
    page = params.page
    fetched = 0

    def report(message: str) -> None:
        logger.debug(message)
        if progress is not None:
            progress(message)

    while cancel is None or not cancel.is_set():
        await wait_if_needed(rate_limit, sleep=sleep)

        report(f"Fetching page {page}...")
        response = await fetch_page(params.model_copy(update={"page": page, "per_page": per_page}))
        items = response.result
        if not items:
            break

        for item in items:
            fetched += 1
            yield item

        if response.count > 0 and fetched >= response.count:
            done = True
        elif len(items) < per_page:
            done = True
        else:
            done = False
            page += 1

        report(f"Fetched {fetched} {resource} so far...")
        if done:
            break

    report(f"Completed. Total {resource} fetched: {fetched}")
