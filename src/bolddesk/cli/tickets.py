from typing import Annotated, List, Optional

import typer

from ..models import AddTicketNoteRequest, CreateTicketRequest, ReplyTicketRequest, UpdateTicketRequest
from ..params import NotesQueryParams, TicketMessageQueryParams, TicketQueryParams
from ..query import QueryBuilder, TimePeriod
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
    split_words,
)
from .render import field, output_list, output_operation, output_record, output_value

tickets_app = typer.Typer(name="tickets", help="Ticket operations", no_args_is_help=True)

TICKET_COLUMNS = [
    ("ID", field("ticket_id")),
    ("Title", field("title")),
    ("Status", field("status")),
    ("Priority", field("priority")),
    ("Agent", field("agent")),
    ("Created", field("created_on")),
]

MESSAGE_COLUMNS = [
    ("ID", field("message_id")),
    ("From", field("from_user")),
    ("Private", field("is_private")),
    ("Created", field("created_on")),
    ("Description", field("description")),
]

NOTE_COLUMNS = [
    ("ID", field("note_id")),
    ("From", field("from_user")),
    ("Private", field("is_private")),
    ("Created", field("created_on")),
    ("Description", field("description")),
]

LOOKUP_COLUMNS = [("ID", field("id")), ("Description", field("description"))]


def build_ticket_query(
    q: Optional[str],
    status: Optional[str] = None,
    priority: Optional[str] = None,
    agent: Optional[str] = None,
    requester_email: Optional[str] = None,
    created: Optional[TimePeriod] = None,
) -> Optional[str]:
    """Combine the shortcut filter flags with a raw Q expression."""
    builder = QueryBuilder()
    if status:
        builder.status(*split_ids(status))
    if priority:
        builder.priority(*split_ids(priority))
    if agent:
        builder.agents(*split_ids(agent))
    if requester_email:
        builder.requester_email(requester_email)
    if created:
        builder.created_on(created)
    if q:
        builder.add(q)
    return builder.build() or None


@tickets_app.command("list")
@bolddesk_command
def list_tickets(
    q: Annotated[Optional[str], typer.Option("--q", "-q", help='Raw Q expression, e.g. "status:[1,2]"')] = None,
    status: Annotated[Optional[str], typer.Option("--status", help="Comma-separated status IDs")] = None,
    priority: Annotated[Optional[str], typer.Option("--priority", help="Comma-separated priority IDs")] = None,
    agent: Annotated[Optional[str], typer.Option("--agent", help="Comma-separated agent IDs")] = None,
    requester_email: Annotated[Optional[str], typer.Option("--requester-email", help="Requester email address")] = None,
    created: Annotated[Optional[TimePeriod], typer.Option("--created", help="Created-on period")] = None,
    filter_id: Annotated[Optional[str], typer.Option("--filter-id", help="Saved view ID")] = None,
    brand_ids: Annotated[Optional[str], typer.Option("--brand-ids", help="Comma-separated brand IDs")] = None,
    order_by: Annotated[Optional[str], typer.Option("--order-by", help='e.g. "createdon desc"')] = None,
    view: Annotated[Optional[str], typer.Option("--view", help="deleted, spam or archived")] = None,
    page: PageOption = None,
    per_page: PerPageOption = None,
    fetch_every_page: AllOption = False,
):
    """List tickets."""
    params = TicketQueryParams(
        q=build_ticket_query(q, status, priority, agent, requester_email, created),
        filter_id=filter_id,
        brand_ids=split_ids(brand_ids) or None,
        order_by=order_by,
        **page_options(page, per_page),
    )
    if fetch_every_page:
        tickets = fetch_all(lambda client, progress: client.tickets.iterate_all(params, view=view, progress=progress))
        output_list(tickets, TICKET_COLUMNS, title="Tickets")
    else:
        response = call(lambda client: client.tickets.list(params, view=view))
        output_list(response.result, TICKET_COLUMNS, title="Tickets", total=response.count)


@tickets_app.command("get")
@bolddesk_command
def get_ticket(ticket_id: Annotated[int, typer.Argument(help="Ticket ID")]):
    """Show one ticket."""
    ticket = call(lambda client: client.tickets.get(ticket_id))
    output_record(ticket, title=f"Ticket #{ticket_id}")


@tickets_app.command("count")
@bolddesk_command
def count_tickets(
    q: Annotated[Optional[str], typer.Option("--q", "-q", help="Raw Q expression")] = None,
    status: Annotated[Optional[str], typer.Option("--status", help="Comma-separated status IDs")] = None,
    created: Annotated[Optional[TimePeriod], typer.Option("--created", help="Created-on period")] = None,
):
    """Count tickets matching a filter."""
    params = TicketQueryParams(q=build_ticket_query(q, status, created=created))
    total = call(lambda client: client.tickets.count(params))
    output_value("count", total)


@tickets_app.command("date-range")
@bolddesk_command
def ticket_date_range(q: Annotated[Optional[str], typer.Option("--q", "-q", help="Raw Q expression")] = None):
    """Show the creation dates of the oldest and newest matching tickets."""
    result = call(lambda client: client.tickets.date_range(TicketQueryParams(q=q)))
    output_record(result, title="Ticket date range")


@tickets_app.command("create")
@bolddesk_command
def create_ticket(
    subject: Annotated[str, typer.Option("--subject", "-s", help="Ticket subject")],
    description: Annotated[str, typer.Option("--description", "-d", help="Ticket body")],
    requester_id: Annotated[Optional[int], typer.Option("--requester-id")] = None,
    category_id: Annotated[Optional[int], typer.Option("--category-id")] = None,
    priority_id: Annotated[Optional[int], typer.Option("--priority-id")] = None,
    agent_id: Annotated[Optional[int], typer.Option("--agent-id")] = None,
    group_id: Annotated[Optional[int], typer.Option("--group-id")] = None,
    brand_id: Annotated[Optional[int], typer.Option("--brand-id")] = None,
    tags: Annotated[Optional[str], typer.Option("--tags", help="Comma-separated tag names")] = None,
    custom: Annotated[Optional[List[str]], typer.Option("--custom", help="Custom field as key=value (repeatable)")] = None,
):
    """Create a ticket."""
    request = CreateTicketRequest(
        subject=subject,
        description=description,
        requester_id=requester_id,
        category_id=category_id,
        priority_id=priority_id,
        agent_id=agent_id,
        group_id=group_id,
        brand_id=brand_id,
        tags=tags,
        custom_fields=parse_assignments(custom),
    )
    ticket = call(lambda client: client.tickets.create(request))
    output_record(ticket, title="Created ticket")


@tickets_app.command("update")
@bolddesk_command
def update_ticket(
    ticket_id: Annotated[int, typer.Argument(help="Ticket ID")],
    title: Annotated[Optional[str], typer.Option("--title")] = None,
    status_id: Annotated[Optional[int], typer.Option("--status-id")] = None,
    priority_id: Annotated[Optional[int], typer.Option("--priority-id")] = None,
    category_id: Annotated[Optional[int], typer.Option("--category-id")] = None,
    agent_id: Annotated[Optional[int], typer.Option("--agent-id")] = None,
    group_id: Annotated[Optional[int], typer.Option("--group-id")] = None,
    custom: Annotated[Optional[List[str]], typer.Option("--custom", help="Custom field as key=value (repeatable)")] = None,
):
    """Update ticket properties."""
    request = UpdateTicketRequest(
        title=title,
        status_id=status_id,
        priority_id=priority_id,
        category_id=category_id,
        agent_id=agent_id,
        group_id=group_id,
        custom_fields=parse_assignments(custom),
    )
    if not request.to_fields():
        raise ValueError("Nothing to update; pass at least one field option.")
    ticket = call(lambda client: client.tickets.update(ticket_id, request))
    output_record(ticket, title=f"Ticket #{ticket_id}")


@tickets_app.command("delete")
@bolddesk_command
def delete_ticket(
    ticket_id: Annotated[int, typer.Argument(help="Ticket ID")],
    permanent: Annotated[bool, typer.Option("--permanent", help="Delete permanently instead of moving to trash")] = False,
):
    """Delete a ticket."""
    if permanent:
        response = call(lambda client: client.tickets.delete_permanently(ticket_id))
    else:
        response = call(lambda client: client.tickets.delete(ticket_id))
    output_operation(response, f"Ticket {ticket_id} deleted.")


@tickets_app.command("restore")
@bolddesk_command
def restore_ticket(ticket_id: Annotated[int, typer.Argument(help="Ticket ID")]):
    """Restore a deleted ticket."""
    response = call(lambda client: client.tickets.restore(ticket_id))
    output_operation(response, f"Ticket {ticket_id} restored.")


@tickets_app.command("archive")
@bolddesk_command
def archive_tickets(ticket_ids: Annotated[str, typer.Argument(help="Comma-separated ticket IDs")]):
    """Archive tickets."""
    ids = split_ids(ticket_ids)
    response = call(lambda client: client.tickets.archive(ids))
    output_operation(response, f"Archived {len(ids)} ticket(s).")


@tickets_app.command("spam")
@bolddesk_command
def spam_ticket(
    ticket_id: Annotated[int, typer.Argument(help="Ticket ID")],
    unmark: Annotated[bool, typer.Option("--unmark", help="Remove the spam mark")] = False,
):
    """Mark a ticket as spam, or remove the mark."""
    if unmark:
        response = call(lambda client: client.tickets.unmark_spam(ticket_id))
        output_operation(response, f"Ticket {ticket_id} is no longer spam.")
    else:
        response = call(lambda client: client.tickets.mark_spam(ticket_id))
        output_operation(response, f"Ticket {ticket_id} marked as spam.")


@tickets_app.command("lock")
@bolddesk_command
def lock_ticket(ticket_id: Annotated[int, typer.Argument(help="Ticket ID")]):
    """Lock a ticket."""
    response = call(lambda client: client.tickets.lock(ticket_id))
    output_operation(response, f"Ticket {ticket_id} locked.")


@tickets_app.command("unlock")
@bolddesk_command
def unlock_ticket(ticket_id: Annotated[int, typer.Argument(help="Ticket ID")]):
    """Unlock a ticket."""
    response = call(lambda client: client.tickets.unlock(ticket_id))
    output_operation(response, f"Ticket {ticket_id} unlocked.")


@tickets_app.command("reply")
@bolddesk_command
def reply_ticket(
    ticket_id: Annotated[int, typer.Argument(help="Ticket ID")],
    description: Annotated[str, typer.Option("--description", "-d", help="Reply body")],
    private: Annotated[bool, typer.Option("--private", help="Visible to agents only")] = False,
    cc: Annotated[Optional[str], typer.Option("--cc", help="Comma-separated email addresses")] = None,
    skip_email: Annotated[bool, typer.Option("--skip-email", help="Do not notify by email")] = False,
):
    """Reply to a ticket."""
    request = ReplyTicketRequest(
        description=description,
        is_private=private,
        cc=split_words(cc) or None,
        skip_email_notification=skip_email or None,
    )
    response = call(lambda client: client.tickets.reply(ticket_id, request))
    output_operation(response, f"Reply added to ticket {ticket_id}.")


@tickets_app.command("messages")
@bolddesk_command
def list_messages(
    ticket_id: Annotated[int, typer.Argument(help="Ticket ID")],
    order_by: Annotated[Optional[str], typer.Option("--order-by")] = None,
    page: PageOption = None,
    per_page: PerPageOption = None,
    fetch_every_page: AllOption = False,
):
    """List the messages of a ticket."""
    params = TicketMessageQueryParams(order_by=order_by, **page_options(page, per_page))
    if fetch_every_page:
        messages = fetch_all(lambda client, progress: client.tickets.iterate_messages(ticket_id, params, progress=progress))
        output_list(messages, MESSAGE_COLUMNS, title=f"Messages of ticket #{ticket_id}")
    else:
        response = call(lambda client: client.tickets.list_messages(ticket_id, params))
        output_list(response.result, MESSAGE_COLUMNS, title=f"Messages of ticket #{ticket_id}", total=response.count)


@tickets_app.command("notes")
@bolddesk_command
def list_notes(ticket_id: Annotated[int, typer.Argument(help="Ticket ID")], page: PageOption = None, per_page: PerPageOption = None):
    """List the notes of a ticket."""
    params = NotesQueryParams(**page_options(page, per_page))
    response = call(lambda client: client.tickets.list_notes(ticket_id, params))
    output_list(response.result, NOTE_COLUMNS, title=f"Notes of ticket #{ticket_id}", total=response.count)


@tickets_app.command("note-add")
@bolddesk_command
def add_note(
    ticket_id: Annotated[int, typer.Argument(help="Ticket ID")],
    description: Annotated[str, typer.Option("--description", "-d", help="Note body")],
    public: Annotated[bool, typer.Option("--public", help="Make the note visible to the customer")] = False,
):
    """Add a note to a ticket."""
    request = AddTicketNoteRequest(description=description, is_private=not public)
    response = call(lambda client: client.tickets.add_note(ticket_id, request))
    output_operation(response, f"Note added to ticket {ticket_id}.")


@tickets_app.command("tags")
@bolddesk_command
def ticket_tags(
    ticket_id: Annotated[int, typer.Argument(help="Ticket ID")],
    add: Annotated[Optional[str], typer.Option("--add", help="Comma-separated tags to add")] = None,
    remove: Annotated[Optional[str], typer.Option("--remove", help="Comma-separated tags to remove")] = None,
):
    """Show, add or remove ticket tags."""
    if add:
        response = call(lambda client: client.tickets.add_tags(ticket_id, split_words(add)))
        output_operation(response, f"Tags added to ticket {ticket_id}.")
    elif remove:
        response = call(lambda client: client.tickets.remove_tags(ticket_id, split_words(remove)))
        output_operation(response, f"Tags removed from ticket {ticket_id}.")
    else:
        tags = call(lambda client: client.tickets.list_tags(ticket_id))
        output_list(tags, [("ID", field("tag_id")), ("Name", field("tag_name"))], title="Tags")


@tickets_app.command("watchers")
@bolddesk_command
def ticket_watchers(
    ticket_id: Annotated[int, typer.Argument(help="Ticket ID")],
    add: Annotated[Optional[str], typer.Option("--add", help="Comma-separated user IDs to add")] = None,
    remove: Annotated[Optional[str], typer.Option("--remove", help="Comma-separated user IDs to remove")] = None,
):
    """Show, add or remove ticket watchers."""
    if add:
        response = call(lambda client: client.tickets.add_watchers(ticket_id, split_ids(add)))
        output_operation(response, f"Watchers added to ticket {ticket_id}.")
    elif remove:
        response = call(lambda client: client.tickets.remove_watchers(ticket_id, split_ids(remove)))
        output_operation(response, f"Watchers removed from ticket {ticket_id}.")
    else:
        watchers = call(lambda client: client.tickets.list_watchers(ticket_id))
        output_list(watchers, [("User ID", field("user_id")), ("User", field("user")), ("Added", field("added_on"))], title="Watchers")


@tickets_app.command("metrics")
@bolddesk_command
def ticket_metrics(ticket_id: Annotated[int, typer.Argument(help="Ticket ID")]):
    """Show response and resolution metrics of a ticket."""
    output_record(call(lambda client: client.tickets.metrics(ticket_id)), title=f"Metrics of ticket #{ticket_id}")


@tickets_app.command("priorities")
@bolddesk_command
def ticket_priorities():
    """List ticket priorities."""
    output_list(call(lambda client: client.tickets.priorities()), LOOKUP_COLUMNS, title="Priorities")


@tickets_app.command("statuses")
@bolddesk_command
def ticket_statuses():
    """List ticket statuses."""
    output_list(call(lambda client: client.tickets.statuses()), LOOKUP_COLUMNS, title="Statuses")


@tickets_app.command("sources")
@bolddesk_command
def ticket_sources():
    """List ticket sources."""
    sources = call(lambda client: client.tickets.sources())
    output_list(sources, [("ID", field("source_id")), ("Name", field("source_name"))], title="Sources")


@tickets_app.command("fields")
@bolddesk_command
def ticket_fields():
    """List ticket fields."""
    fields = call(lambda client: client.tickets.fields())
    output_list(
        fields,
        [("ID", field("field_id")), ("Name", field("field_name")), ("Type", field("field_type")), ("Required", field("is_required"))],
        title="Ticket fields",
    )


@tickets_app.command("forms")
@bolddesk_command
def ticket_forms():
    """List ticket forms."""
    forms = call(lambda client: client.tickets.forms())
    output_list(forms, [("ID", field("form_id")), ("Name", field("form_name")), ("Active", field("is_active"))], title="Forms")
