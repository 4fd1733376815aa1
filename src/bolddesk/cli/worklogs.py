from datetime import datetime, timezone
from typing import Annotated, Optional

import typer

from ..params import WorklogQueryParams
from .common import AllOption, PageOption, PerPageOption, bolddesk_command, call, fetch_all, page_options
from .render import field, output_list, output_value

worklogs_app = typer.Typer(name="worklogs", help="Time entries logged on tickets", no_args_is_help=True)

WORKLOG_COLUMNS = [
    ("ID", field("worklog_id")),
    ("Ticket", field("ticket_id")),
    ("Agent", field("created_by")),
    ("Minutes", field("time_spent")),
    ("Billable", field("is_billable")),
    ("Date", field("worklog_date")),
    ("Description", field("description")),
]


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def _params(
    created_from: Optional[datetime],
    created_to: Optional[datetime],
    updated_from: Optional[datetime],
    updated_to: Optional[datetime],
    include_deleted: bool,
    order_by: Optional[str] = None,
    **paging,
) -> WorklogQueryParams:
    return WorklogQueryParams(
        last_created_date_from=_as_utc(created_from),
        last_created_date_to=_as_utc(created_to),
        last_updated_date_from=_as_utc(updated_from),
        last_updated_date_to=_as_utc(updated_to),
        include_deleted_worklogs=include_deleted,
        order_by=order_by,
        **paging,
    )


@worklogs_app.command("list")
@bolddesk_command
def list_worklogs(
    created_from: Annotated[Optional[datetime], typer.Option("--created-from", help="Created on or after (UTC)")] = None,
    created_to: Annotated[Optional[datetime], typer.Option("--created-to", help="Created on or before (UTC)")] = None,
    updated_from: Annotated[Optional[datetime], typer.Option("--updated-from", help="Updated on or after (UTC)")] = None,
    updated_to: Annotated[Optional[datetime], typer.Option("--updated-to", help="Updated on or before (UTC)")] = None,
    include_deleted: Annotated[bool, typer.Option("--include-deleted", help="Include deleted worklogs")] = False,
    order_by: Annotated[Optional[str], typer.Option("--order-by")] = None,
    page: PageOption = None,
    per_page: PerPageOption = None,
    fetch_every_page: AllOption = False,
):
    """List worklogs across all tickets."""
    params = _params(created_from, created_to, updated_from, updated_to, include_deleted, order_by,
                     **page_options(page, per_page))
    if fetch_every_page:
        worklogs = fetch_all(lambda client, progress: client.worklogs.iterate_all(params, progress=progress))
        output_list(worklogs, WORKLOG_COLUMNS, title="Worklogs")
    else:
        response = call(lambda client: client.worklogs.list(params))
        output_list(response.result, WORKLOG_COLUMNS, title="Worklogs", total=response.count)


@worklogs_app.command("count")
@bolddesk_command
def count_worklogs(
    created_from: Annotated[Optional[datetime], typer.Option("--created-from")] = None,
    created_to: Annotated[Optional[datetime], typer.Option("--created-to")] = None,
    include_deleted: Annotated[bool, typer.Option("--include-deleted")] = False,
):
    """Count worklogs matching the date filters."""
    params = _params(created_from, created_to, None, None, include_deleted)
    output_value("count", call(lambda client: client.worklogs.count(params)))
