import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from typing import Optional, Mapping, Callable, Awaitable

logger = logging.getLogger(__name__)

LIMIT_HEADER = "x-rate-limit-limit"
REMAINING_HEADER = "x-rate-limit-remaining"
RESET_HEADER = "x-rate-limit-reset"

# Guard thresholds
LOW_REMAINING = 5
MAX_WAIT = timedelta(minutes=2)


def _parse_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse x-rate-limit-reset.

    Accepts ISO-8601, RFC 1123 dates and unix epoch seconds. Returns an
    aware UTC datetime or None when the value cannot be understood.
    """
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    try:
        return datetime.fromtimestamp(float(value), tz=timezone.utc)
    except (ValueError, OverflowError, OSError):
        pass
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        try:
            parsed = parsedate_to_datetime(value)
        except (TypeError, ValueError):
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass
class RateLimitInfo:
    """Most recent rate-limit reading from response headers."""
    limit: Optional[int] = None
    remaining: Optional[int] = None
    reset: Optional[datetime] = None
    # reset value already slept through by the guard
    waited_for: Optional[datetime] = None

    def update_from_headers(self, headers: Mapping[str, str]) -> None:
        self.waited_for = None
        self.limit = _parse_int(headers.get(LIMIT_HEADER))
        self.remaining = _parse_int(headers.get(REMAINING_HEADER))
        self.reset = _parse_timestamp(headers.get(RESET_HEADER))

    def wait_time(self, now: Optional[datetime] = None) -> Optional[timedelta]:
        """Time to pause before the next request, or None when no pause is needed."""
        if self.remaining is None or self.reset is None:
            return None
        if self.remaining > LOW_REMAINING or self.waited_for == self.reset:
            return None
        now = now or datetime.now(timezone.utc)
        delta = self.reset - now
        if timedelta(0) < delta < MAX_WAIT:
            return delta
        return None


async def _async_sleep(seconds: float) -> None:
    await asyncio.sleep(seconds)


def parse_rate_limit_headers(headers: Mapping[str, str]) -> RateLimitInfo:
    info = RateLimitInfo()
    info.update_from_headers(headers)
    return info


async def wait_if_needed(
    info: RateLimitInfo,
    *,
    sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    now: Optional[datetime] = None,
) -> float:
    """Pause when the remaining budget is nearly exhausted.

    Args:
        info: Snapshot shared by every service of a client
        sleep: Awaitable sleep function (injectable for tests)
        now: Override for the current time

    Returns:
        Seconds waited, 0 when no wait was needed
    """
    delay = info.wait_time(now)
    if delay is None:
        return 0.0
    seconds = delay.total_seconds()
    logger.warning(f"Rate limit nearly exceeded. Waiting {seconds:.0f} seconds...")
    await (sleep or _async_sleep)(seconds)
    info.waited_for = info.reset
    return seconds
