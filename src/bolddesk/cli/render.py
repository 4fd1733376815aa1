import json
from datetime import datetime
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple

import typer
from pydantic import BaseModel
from rich.table import Table

from .common import OutputFormat, console, state

Column = Tuple[str, Callable[[Any], Any]]


def to_jsonable(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(data, (list, tuple)):
        return [to_jsonable(item) for item in data]
    if isinstance(data, dict):
        return {key: to_jsonable(value) for key, value in data.items()}
    return data


def output_json(data: Any) -> None:
    typer.echo(json.dumps(to_jsonable(data), indent=2, default=str))


def cell(value: Any) -> str:
    """Format one table cell."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M")
    if isinstance(value, BaseModel):
        for attr in ("name", "description", "display_name"):
            text = getattr(value, attr, None)
            if text:
                return str(text)
        return ""
    if isinstance(value, dict):
        return str(value.get("name") or value.get("description") or value.get("value") or "")
    if isinstance(value, (list, tuple)):
        return ", ".join(cell(item) for item in value)
    return str(value)


def field(name: str) -> Callable[[Any], Any]:
    return lambda item: getattr(item, name, None)


def output_list(
    items: Sequence[Any],
    columns: List[Column],
    *,
    title: Optional[str] = None,
    total: Optional[int] = None,
) -> None:
    """Print a list of records as a rich table or as JSON.

    Args:
        items: Records to print
        columns: (header, getter) pairs used in table mode
        title: Table title
        total: Server-reported total, shown under the table when larger than the page
    """
    if state.output_format is OutputFormat.json:
        output_json(list(items))
        return

    out = console()
    if not items:
        out.print("[yellow]No results.[/yellow]")
        return

    table = Table(title=title)
    for header, _ in columns:
        table.add_column(header)
    for item in items:
        table.add_row(*(cell(getter(item)) for _, getter in columns))
    out.print(table)
    if total is not None and total > len(items):
        out.print(f"[dim]Showing {len(items)} of {total}. Use --page or --all for more.[/dim]")


def output_record(record: Any, *, title: Optional[str] = None) -> None:
    """Print a single record as a two-column table or as JSON."""
    if state.output_format is OutputFormat.json:
        output_json(record)
        return

    data = to_jsonable(record)
    table = Table(title=title, show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for key, value in _flatten(data):
        table.add_row(key, value)
    console().print(table)


def _flatten(data: Any) -> Iterable[Tuple[str, str]]:
    if not isinstance(data, dict):
        yield "value", str(data)
        return
    for key, value in data.items():
        if isinstance(value, dict):
            text = cell(value) or json.dumps(value, default=str)
        elif isinstance(value, list):
            text = ", ".join(cell(v) if isinstance(v, dict) else str(v) for v in value)
        else:
            text = cell(value)
        yield key, text


def output_operation(response: Any, default_message: str) -> None:
    """Print the outcome of a create/update/delete style call."""
    if state.output_format is OutputFormat.json:
        output_json(response)
        return
    message = getattr(response, "message", None) or default_message
    console().print(f"[green]{message}[/green]")


def output_value(name: str, value: Any) -> None:
    """Print a single scalar result."""
    if state.output_format is OutputFormat.json:
        output_json({name: value})
    else:
        typer.echo(str(value))
