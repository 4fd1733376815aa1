from typing import Annotated, List, Optional

import typer

from ..models import CreateContactRequest, NoteRequest
from ..params import ContactQueryParams, NotesQueryParams, PageParams
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
from .render import field, output_list, output_operation, output_record

contacts_app = typer.Typer(name="contacts", help="Contact operations", no_args_is_help=True)

CONTACT_COLUMNS = [
    ("ID", field("user_id")),
    ("Name", field("contact_name")),
    ("Email", field("email_id")),
    ("Phone", field("contact_phone_no")),
    ("Blocked", field("is_blocked")),
    ("Created", field("created_on")),
]

NOTE_COLUMNS = [
    ("ID", field("id")),
    ("Subject", field("subject")),
    ("Created by", field("created_by")),
    ("Created", field("created_on")),
    ("Description", field("description")),
]


@contacts_app.command("list")
@bolddesk_command
def list_contacts(
    q: Annotated[Optional[List[str]], typer.Option("--q", "-q", help="Q expression (repeatable)")] = None,
    filter: Annotated[Optional[str], typer.Option("--filter", help="Free-text filter")] = None,
    order_by: Annotated[Optional[str], typer.Option("--order-by")] = None,
    view: Annotated[Optional[str], typer.Option("--view", help="Contact view, e.g. blocked")] = None,
    contact_group_id: Annotated[Optional[int], typer.Option("--contact-group-id")] = None,
    page: PageOption = None,
    per_page: PerPageOption = None,
    fetch_every_page: AllOption = False,
):
    """List contacts."""
    params = ContactQueryParams(
        q=q or None,
        filter=filter,
        order_by=order_by,
        view=view,
        contact_group_id=contact_group_id,
        **page_options(page, per_page),
    )
    if fetch_every_page:
        contacts = fetch_all(lambda client, progress: client.contacts.iterate_all(params, progress=progress))
        output_list(contacts, CONTACT_COLUMNS, title="Contacts")
    else:
        response = call(lambda client: client.contacts.list(params))
        output_list(response.result, CONTACT_COLUMNS, title="Contacts", total=response.count)


@contacts_app.command("get")
@bolddesk_command
def get_contact(contact: Annotated[str, typer.Argument(help="Contact user ID or email address")]):
    """Show one contact."""
    if contact.isdigit():
        detail = call(lambda client: client.contacts.get(int(contact)))
    else:
        detail = call(lambda client: client.contacts.get_by_email(contact))
    output_record(detail, title=f"Contact {contact}")


@contacts_app.command("create")
@bolddesk_command
def create_contact(
    name: Annotated[str, typer.Option("--name", help="Contact name")],
    email: Annotated[str, typer.Option("--email", help="Email address")],
    phone: Annotated[Optional[str], typer.Option("--phone")] = None,
    job_title: Annotated[Optional[str], typer.Option("--job-title")] = None,
    tags: Annotated[Optional[str], typer.Option("--tags", help="Comma-separated tags")] = None,
    custom: Annotated[Optional[List[str]], typer.Option("--custom", help="Custom field as key=value (repeatable)")] = None,
):
    """Create a contact."""
    request = CreateContactRequest(
        contact_name=name,
        email_id=email,
        contact_phone_no=phone,
        contact_job_title=job_title,
        contact_tag=tags,
        custom_fields=parse_assignments(custom),
    )
    response = call(lambda client: client.contacts.create(request))
    output_operation(response, f"Contact {email} created.")


@contacts_app.command("update")
@bolddesk_command
def update_contact(
    contact_id: Annotated[int, typer.Argument(help="Contact user ID")],
    values: Annotated[List[str], typer.Option("--set", help="Field as apiName=value (repeatable)")],
):
    """Update contact fields, e.g. --set contactName=Jane --set contactPhoneNo=555-0100."""
    fields = parse_assignments(values)
    response = call(lambda client: client.contacts.update(contact_id, fields))
    output_operation(response, f"Contact {contact_id} updated.")


@contacts_app.command("delete")
@bolddesk_command
def delete_contacts(
    contact_ids: Annotated[str, typer.Argument(help="Comma-separated contact IDs")],
    permanent: Annotated[bool, typer.Option("--permanent", help="Delete permanently")] = False,
    spam: Annotated[bool, typer.Option("--spam", help="Mark the contacts' tickets as spam")] = False,
    force: Annotated[bool, typer.Option("--force", help="With --permanent, delete even when tickets exist")] = False,
):
    """Delete contacts."""
    ids = split_ids(contact_ids)
    if permanent:
        response = call(lambda client: client.contacts.delete_permanently(ids, forced=force))
    else:
        response = call(lambda client: client.contacts.delete(ids, mark_tickets_as_spam=spam))
    output_operation(response, f"Deleted {len(ids)} contact(s).")


@contacts_app.command("block")
@bolddesk_command
def block_contact(
    contact_id: Annotated[int, typer.Argument(help="Contact user ID")],
    spam: Annotated[bool, typer.Option("--spam", help="Mark the contact's tickets as spam")] = False,
):
    """Block a contact."""
    response = call(lambda client: client.contacts.block(contact_id, mark_tickets_as_spam=spam))
    output_operation(response, f"Contact {contact_id} blocked.")


@contacts_app.command("unblock")
@bolddesk_command
def unblock_contact(
    contact_id: Annotated[int, typer.Argument(help="Contact user ID")],
    unspam: Annotated[bool, typer.Option("--unspam", help="Remove the contact's tickets from spam")] = False,
):
    """Unblock a contact."""
    response = call(lambda client: client.contacts.unblock(contact_id, remove_tickets_from_spam=unspam))
    output_operation(response, f"Contact {contact_id} unblocked.")


@contacts_app.command("groups")
@bolddesk_command
def contact_groups(
    contact_id: Annotated[int, typer.Argument(help="Contact user ID")],
    add: Annotated[Optional[str], typer.Option("--add", help="Comma-separated group IDs to join")] = None,
    remove: Annotated[Optional[str], typer.Option("--remove", help="Comma-separated group IDs to leave")] = None,
    primary: Annotated[Optional[int], typer.Option("--primary", help="Make this group the primary one")] = None,
):
    """Show or change a contact's contact groups."""
    if add:
        response = call(lambda client: client.contacts.add_groups(contact_id, split_ids(add)))
        output_operation(response, f"Contact {contact_id} added to groups.")
    elif remove:
        response = call(lambda client: client.contacts.remove_groups(contact_id, split_ids(remove)))
        output_operation(response, f"Contact {contact_id} removed from groups.")
    elif primary is not None:
        response = call(lambda client: client.contacts.change_primary_group(contact_id, primary))
        output_operation(response, f"Primary group of contact {contact_id} changed.")
    else:
        response = call(lambda client: client.contacts.groups(contact_id))
        output_list(
            response.result,
            [("ID", field("id")), ("Name", field("name")), ("Primary", field("is_primary"))],
            title=f"Groups of contact {contact_id}",
            total=response.count,
        )


@contacts_app.command("notes")
@bolddesk_command
def contact_notes(contact_id: Annotated[int, typer.Argument(help="Contact user ID")], page: PageOption = None,
                  per_page: PerPageOption = None):
    """List notes of a contact."""
    params = NotesQueryParams(**page_options(page, per_page))
    response = call(lambda client: client.contacts.list_notes(contact_id, params))
    output_list(response.contact_note_objects, NOTE_COLUMNS, title=f"Notes of contact {contact_id}",
                total=response.total_list_count)


@contacts_app.command("note-add")
@bolddesk_command
def add_contact_note(
    contact_id: Annotated[int, typer.Argument(help="Contact user ID")],
    description: Annotated[str, typer.Option("--description", "-d")],
    subject: Annotated[Optional[str], typer.Option("--subject", "-s")] = None,
):
    """Add a note to a contact."""
    response = call(lambda client: client.contacts.add_note(contact_id, NoteRequest(subject=subject, description=description)))
    output_operation(response, f"Note added to contact {contact_id}.")


@contacts_app.command("note-delete")
@bolddesk_command
def delete_contact_note(note_id: Annotated[int, typer.Argument(help="Note ID")]):
    """Delete a contact note."""
    response = call(lambda client: client.contacts.delete_note(note_id))
    output_operation(response, f"Note {note_id} deleted.")


@contacts_app.command("merge")
@bolddesk_command
def merge_contacts(
    primary_id: Annotated[int, typer.Argument(help="Contact that is kept")],
    secondary_ids: Annotated[str, typer.Argument(help="Comma-separated contacts merged into it")],
):
    """Merge contacts into a primary contact."""
    ids = split_ids(secondary_ids)
    response = call(lambda client: client.contacts.merge(primary_id, ids))
    output_operation(response, f"Merged {len(ids)} contact(s) into {primary_id}.")


@contacts_app.command("fields")
@bolddesk_command
def contact_fields(page: PageOption = None, per_page: PerPageOption = None):
    """List contact fields."""
    params = PageParams(**{"per_page": 50, **page_options(page, per_page)})
    response = call(lambda client: client.contacts.list_fields(params))
    output_list(
        response.result,
        [("ID", field("field_id")), ("API name", field("api_name")), ("Label", field("label_for_agent_portal")),
         ("Type", field("field_type"))],
        title="Contact fields",
        total=response.count,
    )
