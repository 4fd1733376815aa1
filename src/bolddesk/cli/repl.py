import logging
import shlex
from pathlib import Path
from typing import Callable, Dict, List, Optional

import click
import typer

from ..config import CONFIG_DIR_NAME
from .common import OutputFormat, console, state

try:
    import readline
except ImportError:  # Windows
    readline = None

logger = logging.getLogger(__name__)

EXIT_WORDS = ("exit", "quit", "q")
HISTORY_FILE_NAME = "history"


def command_tree(group: click.Group) -> Dict[str, List[str]]:
    """Map each top-level command to its subcommand names, for completion."""
    tree = {}
    for name, command in group.commands.items():
        tree[name] = sorted(command.commands) if isinstance(command, click.Group) else []
    return tree


def global_args() -> List[str]:
    """Global flags given when the shell was started, replayed for each line."""
    args = []
    if state.output_format is not OutputFormat.table:
        args += ["--format", state.output_format.value]
    if state.page is not None:
        args += ["--page", str(state.page)]
    if state.per_page is not None:
        args += ["--per-page", str(state.per_page)]
    if state.verbose:
        args.append("--verbose")
    if state.no_ansi:
        args.append("--no-ansi")
    return args


def _install_completion(tree: Dict[str, List[str]]) -> None:
    def complete(text: str, index: int) -> Optional[str]:
        buffer = readline.get_line_buffer()
        words = buffer.split()
        if not words or (len(words) == 1 and not buffer.endswith(" ")):
            candidates = sorted(tree) + ["help", "exit"]
        else:
            candidates = tree.get(words[0], [])
        matches = [word for word in candidates if word.startswith(text)]
        return matches[index] if index < len(matches) else None

    readline.set_completer(complete)
    readline.parse_and_bind("tab: complete")


def _history_path() -> Path:
    return Path.home() / CONFIG_DIR_NAME / HISTORY_FILE_NAME


def run_line(command: click.Command, tokens: List[str], prefix: List[str]) -> int:
    """Run one tokenized line through the CLI in-process and return its exit code."""
    try:
        result = command.main(args=prefix + tokens, prog_name="bolddesk", standalone_mode=False)
    except click.exceptions.Abort:
        return 1
    except click.ClickException as e:
        e.show()
        return e.exit_code
    return result if isinstance(result, int) else 0


def run_repl(app: typer.Typer, read_line: Callable[[str], str] = input) -> None:
    """Interactive shell: each line is a bolddesk command without the leading 'bolddesk'."""
    command = typer.main.get_command(app)
    prefix = global_args()
    out = console()

    history = _history_path()
    if readline is not None:
        _install_completion(command_tree(command))
        try:
            readline.read_history_file(history)
        except OSError:
            pass

    out.print("[bold]BoldDesk interactive shell[/bold]. Type 'help' for commands, 'exit' to quit.")
    while True:
        try:
            line = read_line("bolddesk> ").strip()
        except (EOFError, KeyboardInterrupt):
            out.print()
            break
        if not line or line.startswith("#"):
            continue
        if line.lower() in EXIT_WORDS:
            break
        try:
            tokens = shlex.split(line)
        except ValueError as e:
            out.print(f"[red]Could not parse input: {e}[/red]")
            continue
        if tokens[0] == "help":
            tokens = tokens[1:] + ["--help"]
        elif tokens[0] == "repl":
            out.print("Already in the interactive shell.")
            continue

        code = run_line(command, tokens, prefix)
        if code:
            out.print(f"[grey50](exit {code})[/grey50]")

    if readline is not None:
        try:
            history.parent.mkdir(parents=True, exist_ok=True)
            readline.write_history_file(history)
        except OSError as e:
            logger.debug(f"Could not save shell history: {e}")
    out.print("[grey50]Goodbye![/grey50]")
