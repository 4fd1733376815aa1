from typing import Annotated, Optional

import typer

from ..params import UserBrandQueryParams
from .common import bolddesk_command, call
from .render import field, output_list

brands_app = typer.Typer(name="brands", help="Brand operations", no_args_is_help=True)

BRAND_COLUMNS = [
    ("ID", field("brand_id")),
    ("Name", field("brand_name")),
    ("Published", field("is_published")),
    ("Disabled", field("is_disabled")),
]


@brands_app.command("list")
@bolddesk_command
def list_brands():
    """List all brands."""
    response = call(lambda client: client.brands.list())
    output_list(response.result, BRAND_COLUMNS, title="Brands", total=response.count)


@brands_app.command("user")
@bolddesk_command
def user_brands(
    filter: Annotated[Optional[str], typer.Option("--filter")] = None,
    include_deactivated: Annotated[bool, typer.Option("--include-deactivated")] = False,
):
    """List brands available to the current user."""
    params = UserBrandQueryParams(filter=filter, need_to_include_deactivated_brands=include_deactivated)
    response = call(lambda client: client.brands.user_brands(params))
    output_list(
        response.result,
        [("ID", field("key")), ("Name", field("text")), ("Default", field("is_default")),
         ("Deactivated", field("is_deactivated"))],
        title="User brands",
        total=response.count,
    )
