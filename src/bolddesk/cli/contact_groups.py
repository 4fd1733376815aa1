from typing import Annotated, List, Optional

import typer

from ..models import AddContactGroupRequest, AddContactToGroupRequest, NoteRequest
from ..params import ContactGroupDomainsQueryParams, ContactGroupMembersQueryParams, ContactGroupQueryParams
from .common import (
    AllOption,
    PageOption,
    PerPageOption,
    bolddesk_command,
    call,
    fetch_all,
    page_options,
    parse_assignments,
    split_ids,
)
from .contacts import CONTACT_COLUMNS, NOTE_COLUMNS
from .render import field, output_list, output_operation, output_record

contact_groups_app = typer.Typer(name="contact-groups", help="Contact group (company) operations", no_args_is_help=True)

GROUP_COLUMNS = [
    ("ID", field("contact_group_id")),
    ("Name", field("contact_group_name")),
    ("Description", field("description")),
    ("Created", field("created_on")),
]

DOMAIN_COLUMNS = [
    ("ID", field("id")),
    ("Domain", field("domain")),
    ("Group ID", field("contact_group_id")),
    ("Group", field("contact_group_name")),
]


@contact_groups_app.command("list")
@bolddesk_command
def list_groups(
    q: Annotated[Optional[List[str]], typer.Option("--q", "-q", help="Q expression (repeatable)")] = None,
    filter: Annotated[Optional[str], typer.Option("--filter")] = None,
    order_by: Annotated[Optional[str], typer.Option("--order-by")] = None,
    page: PageOption = None,
    per_page: PerPageOption = None,
    fetch_every_page: AllOption = False,
):
    """List contact groups."""
    params = ContactGroupQueryParams(q=q or None, filter=filter, order_by=order_by, **page_options(page, per_page))
    if fetch_every_page:
        groups = fetch_all(lambda client, progress: client.contact_groups.iterate_all(params, progress=progress))
        output_list(groups, GROUP_COLUMNS, title="Contact groups")
    else:
        response = call(lambda client: client.contact_groups.list(params))
        output_list(response.result, GROUP_COLUMNS, title="Contact groups", total=response.count)


@contact_groups_app.command("get")
@bolddesk_command
def get_group(group: Annotated[str, typer.Argument(help="Contact group ID or name")]):
    """Show one contact group."""
    if group.isdigit():
        detail = call(lambda client: client.contact_groups.get(int(group)))
    else:
        detail = call(lambda client: client.contact_groups.get_by_name(group))
    output_record(detail, title=f"Contact group {group}")


@contact_groups_app.command("create")
@bolddesk_command
def create_group(
    name: Annotated[str, typer.Option("--name")],
    description: Annotated[Optional[str], typer.Option("--description", "-d")] = None,
    notes: Annotated[Optional[str], typer.Option("--notes")] = None,
    address: Annotated[Optional[str], typer.Option("--address")] = None,
):
    """Create a contact group."""
    request = AddContactGroupRequest(
        contact_group_name=name,
        contact_group_description=description,
        contact_group_notes=notes,
        contact_group_address=address,
    )
    response = call(lambda client: client.contact_groups.create(request))
    output_operation(response, f"Contact group {name!r} created.")


@contact_groups_app.command("update")
@bolddesk_command
def update_group(
    group_id: Annotated[int, typer.Argument(help="Contact group ID")],
    values: Annotated[List[str], typer.Option("--set", help="Field as apiName=value (repeatable)")],
):
    """Update contact group fields."""
    response = call(lambda client: client.contact_groups.update(group_id, parse_assignments(values)))
    output_operation(response, f"Contact group {group_id} updated.")


@contact_groups_app.command("delete")
@bolddesk_command
def delete_groups(group_ids: Annotated[str, typer.Argument(help="Comma-separated contact group IDs")]):
    """Delete contact groups."""
    ids = split_ids(group_ids)
    response = call(lambda client: client.contact_groups.delete(ids))
    output_operation(response, f"Deleted {len(ids)} contact group(s).")


@contact_groups_app.command("members")
@bolddesk_command
def group_members(
    group_id: Annotated[int, typer.Argument(help="Contact group ID")],
    add: Annotated[Optional[str], typer.Option("--add", help="Comma-separated contact IDs to add")] = None,
    remove: Annotated[Optional[int], typer.Option("--remove", help="Contact ID to remove")] = None,
    filter: Annotated[Optional[str], typer.Option("--filter")] = None,
    page: PageOption = None,
    per_page: PerPageOption = None,
    fetch_every_page: AllOption = False,
):
    """Show or change the members of a contact group."""
    if add:
        members = [AddContactToGroupRequest(user_id=user_id) for user_id in split_ids(add)]
        response = call(lambda client: client.contact_groups.add_members(group_id, members))
        output_operation(response, f"Added {len(members)} contact(s) to group {group_id}.")
        return
    if remove is not None:
        response = call(lambda client: client.contact_groups.remove_member(group_id, remove))
        output_operation(response, f"Contact {remove} removed from group {group_id}.")
        return

    params = ContactGroupMembersQueryParams(filter=filter, **page_options(page, per_page))
    if fetch_every_page:
        contacts = fetch_all(lambda client, progress: client.contact_groups.iterate_members(group_id, params, progress=progress))
        output_list(contacts, CONTACT_COLUMNS, title=f"Members of group {group_id}")
    else:
        response = call(lambda client: client.contact_groups.list_members(group_id, params))
        output_list(response.result, CONTACT_COLUMNS, title=f"Members of group {group_id}", total=response.count)


@contact_groups_app.command("domains")
@bolddesk_command
def group_domains(
    domain_ids: Annotated[Optional[str], typer.Option("--domain-ids", help="Comma-separated domain IDs")] = None,
    filter: Annotated[Optional[str], typer.Option("--filter")] = None,
    page: PageOption = None,
    per_page: PerPageOption = None,
    fetch_every_page: AllOption = False,
):
    """List email domains mapped to contact groups."""
    params = ContactGroupDomainsQueryParams(
        domain_ids=split_ids(domain_ids) or None, filter=filter, **page_options(page, per_page)
    )
    if fetch_every_page:
        domains = fetch_all(lambda client, progress: client.contact_groups.iterate_domains(params, progress=progress))
        output_list(domains, DOMAIN_COLUMNS, title="Contact group domains")
    else:
        response = call(lambda client: client.contact_groups.list_domains(params))
        output_list(response.result, DOMAIN_COLUMNS, title="Contact group domains", total=response.count)


@contact_groups_app.command("notes")
@bolddesk_command
def group_notes(group_id: Annotated[int, typer.Argument(help="Contact group ID")]):
    """List notes of a contact group."""
    response = call(lambda client: client.contact_groups.list_notes(group_id))
    output_list(response.contact_group_notes_object, NOTE_COLUMNS, title=f"Notes of group {group_id}",
                total=response.count)


@contact_groups_app.command("note-add")
@bolddesk_command
def add_group_note(
    group_id: Annotated[int, typer.Argument(help="Contact group ID")],
    description: Annotated[str, typer.Option("--description", "-d")],
    subject: Annotated[Optional[str], typer.Option("--subject", "-s")] = None,
):
    """Add a note to a contact group."""
    request = NoteRequest(subject=subject, description=description)
    response = call(lambda client: client.contact_groups.add_note(group_id, request))
    output_operation(response, f"Note added to group {group_id}.")


@contact_groups_app.command("note-delete")
@bolddesk_command
def delete_group_note(note_id: Annotated[int, typer.Argument(help="Note ID")]):
    """Delete a contact group note."""
    response = call(lambda client: client.contact_groups.delete_note(note_id))
    output_operation(response, f"Note {note_id} deleted.")
