from typing import Annotated, Optional

import typer

from ..models import CreateAgentRequest, DeactivateAgentRequest, UpdateAgentRequest
from ..params import AgentCollectionQueryParams, AgentQueryParams
from .common import AllOption, PageOption, PerPageOption, bolddesk_command, call, fetch_all, page_options
from .render import field, output_list, output_operation, output_record

agents_app = typer.Typer(name="agents", help="Agent operations", no_args_is_help=True)

AGENT_COLUMNS = [
    ("ID", field("user_id")),
    ("Name", field("name")),
    ("Email", field("email_id")),
    ("Available", field("is_available")),
    ("Verified", field("is_verified")),
    ("Last activity", field("last_activity_on")),
]


@agents_app.command("list")
@bolddesk_command
def list_agents(
    q: Annotated[Optional[str], typer.Option("--q", "-q", help="Q expression")] = None,
    filter: Annotated[Optional[str], typer.Option("--filter", help="Free-text filter")] = None,
    order_by: Annotated[Optional[str], typer.Option("--order-by")] = None,
    available: Annotated[Optional[bool], typer.Option("--available/--unavailable", help="Filter by availability")] = None,
    role_id: Annotated[Optional[str], typer.Option("--role-id")] = None,
    page: PageOption = None,
    per_page: PerPageOption = None,
    fetch_every_page: AllOption = False,
):
    """List agents."""
    params = AgentQueryParams(
        q=q, filter=filter, order_by=order_by, is_available=available, role_id=role_id, **page_options(page, per_page)
    )
    if fetch_every_page:
        if per_page is None:
            params = params.model_copy(update={"per_page": 100})
        agents = fetch_all(lambda client, progress: client.agents.iterate_all(params, progress=progress))
        output_list(agents, AGENT_COLUMNS, title="Agents")
    else:
        response = call(lambda client: client.agents.list(params))
        output_list(response.result, AGENT_COLUMNS, title="Agents", total=response.count)


@agents_app.command("get")
@bolddesk_command
def get_agent(agent: Annotated[str, typer.Argument(help="Agent user ID or email address")]):
    """Show one agent."""
    if agent.isdigit():
        detail = call(lambda client: client.agents.get(int(agent)))
    else:
        detail = call(lambda client: client.agents.get_by_email(agent))
    output_record(detail, title=f"Agent {agent}")


@agents_app.command("count")
@bolddesk_command
def count_agents():
    """Agent counts by status."""
    counts = call(lambda client: client.agents.count())
    output_list(counts, [("Status", field("status")), ("Count", field("count"))], title="Agents by status")


@agents_app.command("collections")
@bolddesk_command
def agent_collections(
    group_id: Annotated[Optional[int], typer.Option("--group-id")] = None,
    role_id: Annotated[Optional[int], typer.Option("--role-id")] = None,
    shift_id: Annotated[Optional[int], typer.Option("--shift-id")] = None,
    filter: Annotated[Optional[str], typer.Option("--filter")] = None,
    page: PageOption = None,
    per_page: PerPageOption = None,
):
    """List agents of a group, role or shift."""
    params = AgentCollectionQueryParams(
        group_id=group_id, role_id=role_id, shift_id=shift_id, filter=filter, **page_options(page, per_page)
    )
    response = call(lambda client: client.agents.collections(params))
    output_list(response.result, AGENT_COLUMNS, title="Agents", total=response.count)


@agents_app.command("create")
@bolddesk_command
def create_agent(
    name: Annotated[str, typer.Option("--name", help="Full name")],
    email: Annotated[str, typer.Option("--email", help="Email address")],
    display_name: Annotated[Optional[str], typer.Option("--display-name")] = None,
    role_ids: Annotated[Optional[str], typer.Option("--role-ids", help="Comma-separated role IDs")] = None,
    group_ids: Annotated[Optional[str], typer.Option("--group-ids", help="Comma-separated group IDs")] = None,
    brand_ids: Annotated[Optional[str], typer.Option("--brand-ids", help="Comma-separated brand IDs")] = None,
):
    """Create an agent."""
    request = CreateAgentRequest(
        name=name, email_id=email, display_name=display_name, role_ids=role_ids, group_ids=group_ids, brand_ids=brand_ids
    )
    response = call(lambda client: client.agents.create(request))
    output_operation(response, f"Agent {email} created.")


@agents_app.command("update")
@bolddesk_command
def update_agent(
    user_id: Annotated[int, typer.Argument(help="Agent user ID")],
    name: Annotated[Optional[str], typer.Option("--name")] = None,
    display_name: Annotated[Optional[str], typer.Option("--display-name")] = None,
    role_ids: Annotated[Optional[str], typer.Option("--role-ids")] = None,
    group_ids: Annotated[Optional[str], typer.Option("--group-ids")] = None,
    phone: Annotated[Optional[str], typer.Option("--phone")] = None,
):
    """Update an agent."""
    request = UpdateAgentRequest(
        name=name, display_name=display_name, role_ids=role_ids, group_ids=group_ids, phone_no=phone
    )
    if not request.to_payload():
        raise ValueError("Nothing to update; pass at least one field option.")
    response = call(lambda client: client.agents.update(user_id, request))
    output_operation(response, f"Agent {user_id} updated.")


@agents_app.command("activate")
@bolddesk_command
def activate_agent(user_id: Annotated[int, typer.Argument(help="Agent user ID")]):
    """Activate an agent."""
    response = call(lambda client: client.agents.activate(user_id))
    output_operation(response, f"Agent {user_id} activated.")


@agents_app.command("deactivate")
@bolddesk_command
def deactivate_agent(
    user_id: Annotated[int, typer.Argument(help="Agent user ID")],
    new_agent_id: Annotated[Optional[int], typer.Option("--reassign-to-agent", help="Agent receiving the open tickets")] = None,
    new_group_id: Annotated[Optional[int], typer.Option("--reassign-to-group", help="Group receiving the open tickets")] = None,
):
    """Deactivate an agent, optionally reassigning their tickets."""
    request = None
    if new_agent_id is not None or new_group_id is not None:
        request = DeactivateAgentRequest(new_agent_id=new_agent_id, new_group_id=new_group_id, reassign_group_or_agent=True)
    response = call(lambda client: client.agents.deactivate(user_id, request))
    output_operation(response, f"Agent {user_id} deactivated.")


@agents_app.command("availability")
@bolddesk_command
def set_availability(
    user_id: Annotated[int, typer.Argument(help="Agent user ID")],
    status_id: Annotated[int, typer.Argument(help="Availability status ID")],
):
    """Set an agent's availability status."""
    response = call(lambda client: client.agents.set_availability(user_id, status_id))
    output_operation(response, f"Availability of agent {user_id} updated.")
