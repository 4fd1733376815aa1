import asyncio
import functools
import json
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Optional, Any, AsyncIterator, Awaitable, Callable, Coroutine, List, TypeVar

import typer
from rich.console import Console

from ..client import BoldDeskClient
from ..config import load_config, validate_config_or_raise
from ..errors import BoldDeskError, describe_error

logger = logging.getLogger(__name__)

T = TypeVar("T")

PageOption = Annotated[Optional[int], typer.Option("--page", "-p", min=1, help="Page number (1-based)")]
PerPageOption = Annotated[Optional[int], typer.Option("--per-page", min=1, help="Items per page; the server caps this at 100")]
AllOption = Annotated[bool, typer.Option("--all", help="Fetch every page, reporting progress on stderr")]


class OutputFormat(str, Enum):
    table = "table"
    json = "json"


@dataclass
class CliState:
    """Global options of the current invocation."""
    output_format: OutputFormat = OutputFormat.table
    page: Optional[int] = None
    per_page: Optional[int] = None
    verbose: bool = False
    no_ansi: bool = False


state = CliState()


def console() -> Console:
    return Console(no_color=state.no_ansi, highlight=not state.no_ansi)


def err_console() -> Console:
    return Console(stderr=True, no_color=state.no_ansi, highlight=False)


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Run an async function synchronously."""
    return asyncio.run(coro)


def make_client() -> BoldDeskClient:
    """Build a client from ~/.bolddesk-cli/config.json and the environment."""
    config = load_config()
    validate_config_or_raise(config)
    return BoldDeskClient.from_config(config)


@asynccontextmanager
async def client_session() -> AsyncIterator[BoldDeskClient]:
    client = make_client()
    try:
        yield client
    finally:
        await client.aclose()


def call(operation: Callable[[BoldDeskClient], Awaitable[T]]) -> T:
    """Open a client, await one operation on it and close the client."""

    async def _run() -> T:
        async with client_session() as client:
            return await operation(client)

    return run_async(_run())


def fetch_all(iterate: Callable[[BoldDeskClient, Callable[[str], None]], AsyncIterator[T]]) -> List[T]:
    """Drain a paginated iterator, reporting progress on stderr."""

    async def _run() -> List[T]:
        async with client_session() as client:
            return [item async for item in iterate(client, print_progress)]

    return run_async(_run())


def page_options(page: Optional[int], per_page: Optional[int]) -> dict:
    """Merge per-command paging flags with the global ones.

    Only values actually given are returned so each resource keeps its own
    default page size.
    """
    values = {}
    page = page if page is not None else state.page
    per_page = per_page if per_page is not None else state.per_page
    if page is not None:
        values["page"] = page
    if per_page is not None:
        values["per_page"] = per_page
    return values


def print_progress(message: str) -> None:
    err_console().print(f"[dim]{message}[/dim]")


def print_error(lines: List[str]) -> None:
    out = err_console()
    for line in lines:
        out.print(line, style="red", markup=False, highlight=False)


def bolddesk_command(func: Callable) -> Callable:
    """Render BoldDesk, configuration and input errors and exit with code 1."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (typer.Exit, typer.Abort):
            raise
        except BoldDeskError as e:
            logger.info(f"[BoldDesk] {func.__name__} failed: {e.kind.value}")
            print_error(describe_error(e))
            raise typer.Exit(1) from e
        except (RuntimeError, ValueError) as e:
            print_error([f"Error: {e}"])
            raise typer.Exit(1) from e

    return wrapper


def split_ids(value: Optional[str]) -> List[int]:
    """Parse "1,2, 3" into [1, 2, 3]."""
    if not value:
        return []
    try:
        return [int(part) for part in value.split(",") if part.strip()]
    except ValueError:
        raise ValueError(f"Expected a comma-separated list of numeric IDs, got {value!r}") from None


def split_words(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def parse_assignments(values: Optional[List[str]]) -> Optional[dict]:
    """Turn ["priorityId=2", "name=Acme"] into a dict; values are JSON when they parse as JSON."""
    if not values:
        return None
    fields = {}
    for item in values:
        key, sep, raw = item.partition("=")
        if not sep or not key:
            raise ValueError(f"Expected key=value, got {item!r}")
        try:
            fields[key] = json.loads(raw)
        except ValueError:
            fields[key] = raw
    return fields
