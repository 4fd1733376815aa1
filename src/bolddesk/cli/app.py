"""BoldDesk command-line interface.

Usage:
    bolddesk config set --domain yourcompany.bolddesk.com --api-key KEY
    bolddesk tickets list --status 1,2 --all
    bolddesk --format json agents get 42
    bolddesk repl
"""
import logging
from typing import Annotated, Optional

import typer

from .. import __version__
from .agents import agents_app
from .brands import brands_app
from .common import OutputFormat, state
from .config_cmd import config_app
from .contact_groups import contact_groups_app
from .contacts import contacts_app
from .fields import fields_app
from .repl import run_repl
from .tickets import tickets_app
from .worklogs import worklogs_app

app = typer.Typer(
    name="bolddesk",
    help="Command-line client for the BoldDesk helpdesk API.",
    no_args_is_help=True,
    add_completion=False,
)

app.add_typer(config_app, name="config")
app.add_typer(tickets_app, name="tickets")
app.add_typer(worklogs_app, name="worklogs")
app.add_typer(agents_app, name="agents")
app.add_typer(contacts_app, name="contacts")
app.add_typer(contact_groups_app, name="contact-groups")
app.add_typer(brands_app, name="brands")
app.add_typer(fields_app, name="fields")


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"bolddesk {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        Optional[bool],
        typer.Option("--version", "-V", callback=version_callback, is_eager=True, help="Show version and exit"),
    ] = None,
    output_format: Annotated[OutputFormat, typer.Option("--format", "-f", help="Output format")] = OutputFormat.table,
    page: Annotated[Optional[int], typer.Option("--page", min=1, help="Default page for list commands")] = None,
    per_page: Annotated[Optional[int], typer.Option("--per-page", min=1, help="Default page size for list commands")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log requests and progress")] = False,
    no_ansi: Annotated[bool, typer.Option("--no-ansi", help="Disable colors")] = False,
):
    """Command-line client for the BoldDesk helpdesk API.

    Credentials come from ~/.bolddesk-cli/config.json, overridden by
    BOLDDESK_DOMAIN and BOLDDESK_API_KEY.
    """
    state.output_format = output_format
    state.page = page
    state.per_page = per_page
    state.verbose = verbose
    state.no_ansi = no_ansi
    logging.getLogger("bolddesk").setLevel(logging.INFO if verbose else logging.WARNING)


@app.command("repl")
def repl():
    """Start an interactive shell."""
    run_repl(app)


def main():
    logging.basicConfig(level=logging.WARNING)
    app()


if __name__ == "__main__":
    main()
