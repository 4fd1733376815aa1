from typing import Annotated, Optional

import typer

from ..models import FieldPositionChange
from ..params import FieldOptionQueryParams
from .common import AllOption, PageOption, PerPageOption, bolddesk_command, call, fetch_all, page_options, split_words
from .render import field, output_list, output_operation

fields_app = typer.Typer(name="fields", help="Dropdown field options", no_args_is_help=True)

OPTION_COLUMNS = [
    ("ID", field("id")),
    ("Name", field("name")),
    ("Order", field("sort_order")),
    ("Default", field("is_default")),
    ("Read-only", field("is_read_only")),
]

FieldIdArg = Annotated[int, typer.Argument(help="Field ID")]
OptionIdArg = Annotated[int, typer.Argument(help="Field option ID")]


@fields_app.command("options")
@bolddesk_command
def list_options(
    api_name: Annotated[str, typer.Argument(help="Field API name, e.g. cf_region")],
    filter: Annotated[Optional[str], typer.Option("--filter")] = None,
    parent_option_id: Annotated[Optional[int], typer.Option("--parent-option-id")] = None,
    include_read_only: Annotated[bool, typer.Option("--include-read-only")] = False,
    page: PageOption = None,
    per_page: PerPageOption = None,
    fetch_every_page: AllOption = False,
):
    """List the options of a dropdown field."""
    params = FieldOptionQueryParams(
        filter=filter,
        parent_option_id=parent_option_id,
        include_read_only_also=include_read_only,
        requires_counts=True,
        **page_options(page, per_page),
    )
    if fetch_every_page:
        if per_page is None:
            params = params.model_copy(update={"per_page": 100})
        options = fetch_all(lambda client, progress: client.fields.iterate_options(api_name, params, progress=progress))
        output_list(options, OPTION_COLUMNS, title=f"Options of {api_name}")
    else:
        response = call(lambda client: client.fields.list_options(api_name, params))
        output_list(response.result, OPTION_COLUMNS, title=f"Options of {api_name}", total=response.count)


@fields_app.command("add-options")
@bolddesk_command
def add_options(
    api_name: Annotated[str, typer.Argument(help="Field API name")],
    options: Annotated[str, typer.Argument(help="Comma-separated option names")],
):
    """Add options to a dropdown field."""
    names = split_words(options)
    response = call(lambda client: client.fields.add_options(api_name, names))
    output_operation(response, f"Added {len(names)} option(s) to {api_name}.")


@fields_app.command("remove-option")
@bolddesk_command
def remove_option(option_id: OptionIdArg):
    """Delete a field option."""
    response = call(lambda client: client.fields.remove_option(option_id))
    output_operation(response, f"Option {option_id} removed.")


@fields_app.command("readonly")
@bolddesk_command
def set_readonly(
    option_id: OptionIdArg,
    read_only: Annotated[bool, typer.Option("--on/--off", help="Make the option read-only or editable")] = True,
):
    """Make a field option read-only, or editable again."""
    response = call(lambda client: client.fields.set_option_readonly(option_id, read_only))
    output_operation(response, f"Option {option_id} {'is now read-only' if read_only else 'is editable'}.")


@fields_app.command("move-option")
@bolddesk_command
def move_option(
    field_id: FieldIdArg,
    option_id: OptionIdArg,
    position: Annotated[int, typer.Option("--to", help="Target position")] = 1,
    alphabetical: Annotated[bool, typer.Option("--alphabetical", help="Sort all options alphabetically")] = False,
    top: Annotated[bool, typer.Option("--top", help="Move to the first position")] = False,
    bottom: Annotated[bool, typer.Option("--bottom", help="Move to the last position")] = False,
):
    """Change the position of a field option."""
    change = FieldPositionChange(
        to_position=position,
        is_sort_by_alphabetical_order=alphabetical,
        is_move_to_top_position=top,
        is_move_to_bottom_position=bottom,
    )
    response = call(lambda client: client.fields.change_option_position(field_id, option_id, change))
    output_operation(response, f"Option {option_id} moved.")


@fields_app.command("default-option")
@bolddesk_command
def default_option(
    field_id: FieldIdArg,
    option_id: OptionIdArg,
    remove: Annotated[bool, typer.Option("--remove", help="Clear the default instead of setting it")] = False,
):
    """Set or clear the default option of a field."""
    if remove:
        response = call(lambda client: client.fields.remove_default_option(field_id, option_id))
        output_operation(response, f"Option {option_id} is no longer the default.")
    else:
        response = call(lambda client: client.fields.set_default_option(field_id, option_id))
        output_operation(response, f"Option {option_id} is now the default.")
