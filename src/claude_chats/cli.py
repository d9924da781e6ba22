"""claude-chats CLI - browse and delete Claude Code chat sessions."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from claude_chats import __version__
from claude_chats.config import (
    DEFAULT_CLAUDE_DIR,
    AppConfig,
    ClaudePaths,
    expand_claude_dir,
    load_config,
    save_config,
)

app = typer.Typer(
    name="claude-chats",
    help="Browse Claude Code chat sessions and delete them with all their files.",
    invoke_without_command=True,
)

console = Console()


def version_callback(value: bool) -> None:
    if value:
        console.print(f"claude-chats v{__version__}")
        raise typer.Exit()


def _setup_logging(log_file: Path | None, verbose: bool) -> None:
    if log_file is None:
        return
    logging.basicConfig(
        filename=log_file,
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _first_run_setup() -> AppConfig:
    """Ask for the Claude directory and remember it."""
    console.print("[bold]Claude Chat Manager - First Run Setup[/bold]\n")
    raw = typer.prompt(
        "Path to your Claude directory",
        default=str(DEFAULT_CLAUDE_DIR),
        show_default=True,
    )
    claude_dir = expand_claude_dir(raw)
    if not claude_dir.is_dir():
        console.print(f"[red]Error:[/red] Directory does not exist: {claude_dir}")
        console.print("Please create the directory or specify a different path.")
        raise typer.Exit(1)

    config = AppConfig(claude_dir=str(claude_dir))
    try:
        path = save_config(config)
    except OSError as exc:
        console.print(f"[yellow]Warning:[/yellow] Could not save config: {exc}")
    else:
        console.print(f"\n[green]✓[/green] Configuration saved to: {path}\n")
    return config


def resolve_paths(claude_dir: Path | None) -> ClaudePaths:
    """Claude paths from the override, the saved config, or first-run setup."""
    if claude_dir is not None:
        root = claude_dir.expanduser()
        if not root.is_dir():
            console.print(f"[red]Error:[/red] Directory does not exist: {root}")
            raise typer.Exit(1)
        return ClaudePaths(root)

    config = load_config() or _first_run_setup()
    return config.paths


@app.callback()
def main(
    ctx: typer.Context,
    claude_dir: Annotated[
        Optional[Path],
        typer.Option("--claude-dir", "-d", help="Claude directory to use for this run"),
    ] = None,
    log_file: Annotated[
        Optional[Path],
        typer.Option("--log-file", help="Write a log of scans and deletions to this file"),
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", help="Log debug detail (with --log-file)")
    ] = False,
    version: Annotated[
        Optional[bool],
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = None,
) -> None:
    """Claude Code Chat Manager. Without a command, opens the interactive list."""
    _setup_logging(log_file, verbose)
    paths = resolve_paths(claude_dir)
    ctx.obj = paths

    if ctx.invoked_subcommand is None:
        from claude_chats.tui.app import run_app

        run_app(paths)


@app.command("list")
def list_chats(ctx: typer.Context) -> None:
    """Print all sessions, newest first."""
    from claude_chats.sessions.scanner import scan_sessions

    sessions = scan_sessions(ctx.obj)
    if not sessions:
        console.print("[dim]No chats found.[/dim]")
        return

    table = Table(title=f"Chats ({len(sessions)})")
    table.add_column("Timestamp", style="cyan", no_wrap=True)
    table.add_column("Version")
    table.add_column("Lines", justify="right")
    table.add_column("Title", overflow="ellipsis", no_wrap=True, ratio=3)
    table.add_column("Project", style="green", overflow="ellipsis", no_wrap=True, ratio=2)
    table.add_column("UUID", style="dim", no_wrap=True)

    for session in sessions:
        table.add_row(
            session.timestamp,
            session.version,
            str(session.record_count) if session.record_count else "-",
            session.title,
            session.project,
            session.uuid,
        )

    console.print(table)


@app.command("files")
def files(
    ctx: typer.Context,
    uuid: Annotated[str, typer.Argument(help="Session UUID")],
) -> None:
    """Show every file a deletion of UUID would remove. Nothing is deleted."""
    from claude_chats.cleanup.resolver import resolve_related_files

    related = resolve_related_files(ctx.obj, uuid)
    if not related:
        console.print(f"[red]No files found for session:[/red] {escape(uuid)}")
        raise typer.Exit(1)

    for path in related:
        kind = "dir " if path.is_dir() else "file"
        console.print(f"  [dim]{kind}[/dim] {escape(str(path))}", soft_wrap=True)
