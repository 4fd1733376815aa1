from typing import Annotated, Optional

import typer

from ..config import default_config_path, load_config, save_config
from .common import bolddesk_command, call, console

config_app = typer.Typer(name="config", help="Manage the saved domain and API key", no_args_is_help=True)


@config_app.command("set")
@bolddesk_command
def set_config(
    domain: Annotated[Optional[str], typer.Option("--domain", "-d", help="Helpdesk host, e.g. yourcompany.bolddesk.com")] = None,
    api_key: Annotated[Optional[str], typer.Option("--api-key", "-k", help="BoldDesk API key")] = None,
):
    """Save domain and API key to ~/.bolddesk-cli/config.json."""
    if not domain and not api_key:
        domain = typer.prompt("Domain")
        api_key = typer.prompt("API key", hide_input=True)

    # Only the file's own values are rewritten; environment overrides are not persisted
    config = load_config(env={})
    if domain:
        config.domain = domain.strip()
    if api_key:
        config.api_key = api_key.strip()
    path = save_config(config)
    console().print(f"[green]Configuration saved to {path}[/green]")


@config_app.command("get")
@bolddesk_command
def get_config():
    """Show the effective configuration (environment overrides applied)."""
    config = load_config()
    if not config.domain and not config.api_key:
        console().print(f"No configuration found in {default_config_path()}. Use 'bolddesk config set'.")
        raise typer.Exit(1)
    out = console()
    out.print(f"Domain: {config.domain or '(not set)'}")
    out.print(f"API Key: {config.masked_api_key() if config.api_key else '(not set)'}")
    if config.domain:
        out.print(f"Base URL: https://{config.domain}/api/v1.0")


@config_app.command("test")
@bolddesk_command
def test_config():
    """Check the credentials with a lightweight request."""
    response = call(lambda client: client.brands.list())
    console().print(f"[green]Connected. Brands: {len(response.result)}[/green]")
