"""Tests for the bolddesk command-line interface."""

import json

import pytest
import typer
from typer.testing import CliRunner

from bolddesk import __version__
from bolddesk.cli import common
from bolddesk.cli.app import app
from bolddesk.cli.common import OutputFormat, parse_assignments, split_ids
from bolddesk.cli.repl import command_tree, run_repl
from bolddesk.cli.tickets import build_ticket_query
from bolddesk.query import TimePeriod

runner = CliRunner()

TICKETS = {
    "result": [
        {"ticketId": 101, "title": "Printer", "status": {"id": 1, "description": "Open"}},
        {"ticketId": 102, "title": "Laptop", "status": {"id": 2, "description": "Closed"}},
    ],
    "count": 5,
}


@pytest.fixture(autouse=True)
def wide_terminal(monkeypatch):
    monkeypatch.setenv("COLUMNS", "200")


@pytest.fixture(autouse=True)
def reset_state():
    common.state.output_format = OutputFormat.table
    common.state.page = None
    common.state.per_page = None
    common.state.verbose = False
    common.state.no_ansi = False


@pytest.fixture
def api(fake_api, monkeypatch):
    """Route every CLI command to the fake API."""
    monkeypatch.setattr(common, "make_client", fake_api.client)
    return fake_api


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert f"bolddesk {__version__}" in result.stdout


def test_no_arguments_shows_help():
    result = runner.invoke(app, [])
    assert "tickets" in result.output
    assert "contact-groups" in result.output


def test_tickets_list_table(api):
    api.add("GET", "/tickets", json=TICKETS)
    result = runner.invoke(app, ["tickets", "list", "--status", "1,2"])
    assert result.exit_code == 0, result.output
    assert "Printer" in result.stdout
    assert "Laptop" in result.stdout
    assert "Showing 2 of 5" in result.stdout
    assert api.requests[0].url.params["q"] == "status:[1,2]"


def test_tickets_list_json(api):
    api.add("GET", "/tickets", json=TICKETS)
    result = runner.invoke(app, ["--format", "json", "tickets", "list"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert [t["ticketId"] for t in data] == [101, 102]
    assert data[0]["status"]["description"] == "Open"


def test_global_paging_flags_apply(api):
    api.add("GET", "/tickets", json={"result": [], "count": 0})
    result = runner.invoke(app, ["--page", "3", "--per-page", "5", "tickets", "list"])
    assert result.exit_code == 0, result.output
    assert "No results." in result.stdout
    params = api.requests[0].url.params
    assert params["page"] == "3"
    assert params["perPage"] == "5"


def test_command_paging_flags_win(api):
    api.add("GET", "/tickets", json={"result": [], "count": 0})
    runner.invoke(app, ["--per-page", "5", "tickets", "list", "--per-page", "7"])
    assert api.requests[0].url.params["perPage"] == "7"


def test_list_all_reports_progress(api):
    api.add("GET", "/tickets", json={"result": TICKETS["result"], "count": 3})
    api.add("GET", "/tickets", json={"result": [{"ticketId": 103, "title": "Phone"}], "count": 3})
    result = runner.invoke(app, ["tickets", "list", "--all", "--per-page", "2"])
    assert result.exit_code == 0, result.output
    assert "Phone" in result.output
    assert "Completed. Total tickets fetched: 3" in result.output
    assert len(api.requests) == 2


def test_api_error_exits_with_code_1(api):
    api.add("GET", "/tickets", 401)
    result = runner.invoke(app, ["tickets", "list"])
    assert result.exit_code == 1
    assert "Authentication error: Authentication failed. Please verify your API key." in result.output


def test_validation_error_lists_fields(api):
    api.add("POST", "/tickets/9/notes", 400, json={
        "message": "Invalid",
        "errors": [{"field": "description", "errorMessage": "required"}],
    })
    result = runner.invoke(app, ["tickets", "note-add", "9", "--description", " "])
    assert result.exit_code == 1
    assert "Validation error: Invalid" in result.output
    assert "- description: required" in result.output


def test_input_error_exits_with_code_1(api):
    result = runner.invoke(app, ["tickets", "update", "5"])
    assert result.exit_code == 1
    assert "Nothing to update" in result.output
    assert api.requests == []


def test_missing_configuration(clean_env):
    result = runner.invoke(app, ["brands", "list"])
    assert result.exit_code == 1
    assert "Missing required configuration" in result.output


def test_count_json(api):
    api.add("GET", "/tickets", json={"result": [], "count": 42})
    result = runner.invoke(app, ["-f", "json", "tickets", "count", "--created", "today"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == {"count": 42}
    assert api.requests[0].url.params["q"] == "createdon:today"


def test_brands_list(api):
    api.add("GET", "/brands", json={"result": [{"brandId": 1, "brandName": "Acme", "isPublished": True}], "count": 1})
    result = runner.invoke(app, ["brands", "list"])
    assert result.exit_code == 0, result.output
    assert "Acme" in result.stdout
    assert "yes" in result.stdout


def test_field_options_blank_api_name(api):
    result = runner.invoke(app, ["fields", "options", " "])
    assert result.exit_code == 1
    assert "API name cannot be null or empty." in result.output


def test_agent_lookup_by_id(api):
    api.add("GET", "/agents/8", json={"userId": 8, "name": "Bo", "emailId": "bo@example.com"})
    result = runner.invoke(app, ["-f", "json", "agents", "get", "8"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["emailId"] == "bo@example.com"


def test_config_set_and_get(clean_env):
    result = runner.invoke(app, ["config", "set", "--domain", " acme.bolddesk.com ", "--api-key", "abcd1234efgh5678"])
    assert result.exit_code == 0, result.output
    saved = json.loads((clean_env / ".bolddesk-cli" / "config.json").read_text(encoding="utf-8"))
    assert saved == {"domain": "acme.bolddesk.com", "apiKey": "abcd1234efgh5678"}

    result = runner.invoke(app, ["config", "get"])
    assert result.exit_code == 0, result.output
    assert "Domain: acme.bolddesk.com" in result.stdout
    assert "abcd1234efgh5678" not in result.stdout
    assert "Base URL: https://acme.bolddesk.com/api/v1.0" in result.stdout


def test_config_set_does_not_persist_environment(clean_env, monkeypatch):
    monkeypatch.setenv("BOLDDESK_DOMAIN", "env.bolddesk.com")
    runner.invoke(app, ["config", "set", "--api-key", "abcd1234efgh5678"])
    saved = json.loads((clean_env / ".bolddesk-cli" / "config.json").read_text(encoding="utf-8"))
    assert saved == {"apiKey": "abcd1234efgh5678"}


def test_config_get_without_configuration(clean_env):
    result = runner.invoke(app, ["config", "get"])
    assert result.exit_code == 1
    assert "No configuration found" in result.output


def test_build_ticket_query():
    assert build_ticket_query(None) is None
    assert build_ticket_query("hascomment:true", status="1", created=TimePeriod.LAST_7_DAYS) == (
        "status:[1] AND createdon:last7days AND hascomment:true"
    )


def test_split_ids():
    assert split_ids("1, 2,,3") == [1, 2, 3]
    assert split_ids(None) == []
    with pytest.raises(ValueError, match="numeric IDs"):
        split_ids("1,two")


def test_parse_assignments():
    assert parse_assignments(None) is None
    assert parse_assignments(["priorityId=2", "name=Acme", "flags=[1,2]"]) == {
        "priorityId": 2, "name": "Acme", "flags": [1, 2],
    }
    with pytest.raises(ValueError, match="Expected key=value"):
        parse_assignments(["broken"])


def test_command_tree():
    tree = command_tree(typer.main.get_command(app))
    assert "list" in tree["tickets"]
    assert "options" in tree["fields"]
    assert tree["repl"] == []


def test_repl_runs_commands_until_exit(api, clean_env, capsys):
    api.add("GET", "/brands", json={"result": [{"brandId": 1, "brandName": "Acme"}], "count": 1})
    lines = iter(["", "# comment", "brands list", "repl", "exit", "brands list"])
    run_repl(app, read_line=lambda prompt: next(lines))
    out = capsys.readouterr().out
    assert "Acme" in out
    assert "Already in the interactive shell." in out
    assert "Goodbye!" in out
    assert len(api.requests) == 1


def test_repl_reports_failures_and_stops_on_eof(api, clean_env, capsys):
    api.add("GET", "/brands", 401)
    lines = iter(["brands list", 'tickets list --q "unclosed'])

    def read_line(prompt):
        try:
            return next(lines)
        except StopIteration:
            raise EOFError from None

    run_repl(app, read_line=read_line)
    captured = capsys.readouterr()
    assert "(exit 1)" in captured.out
    assert "Could not parse input" in captured.out
    assert "Authentication error" in captured.err
    assert "Goodbye!" in captured.out
