#!/usr/bin/env python3
"""
fexplorer - Linux File Explorer

Main entry point for the fexplorer CLI application.
"""

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from core import ActionStatus, ActionType, load_config
from modules.file_explorer import Explorer, OperationResult
from modules.file_explorer.metadata import format_size, format_timestamp


console = Console()

MENU = """[cyan]Navigation & Listing:[/cyan]
  1.  List files (simple)
  2.  List files (detailed)
  3.  Change directory
  4.  Show current path
[cyan]File/Directory Operations:[/cyan]
  5.  Create directory
  6.  Create file
  7.  Delete file/directory
  8.  Copy file
  9.  Move/Rename file
[cyan]Search & Information:[/cyan]
  10. Search files
  11. View file information
[cyan]Permissions:[/cyan]
  12. Change permissions
[cyan]Other:[/cyan]
  0.  Exit"""


def get_explorer(path=None, config_path: str = "config.yaml") -> Explorer:
    """Get an explorer configured from the YAML settings."""
    config = load_config(config_path)
    return Explorer(start_path=path, config=config)


def report(result: OperationResult) -> bool:
    """Print a one-line outcome for a result and return its success flag."""
    if result.success:
        console.print(f"[green]{escape(result.message)}[/green]")
    else:
        console.print(f"[red]Error ({result.error.label}):[/red] {escape(result.message)}")
    return result.success


def _entry_style(entry) -> str:
    if entry.is_dir:
        return "blue"
    if entry.is_executable:
        return "green"
    return ""


def render_listing(explorer: Explorer, result: OperationResult, detailed: bool) -> None:
    """Print a directory listing produced by list_simple/list_detailed."""
    console.print(f"\n[bold cyan]Current Directory: {escape(explorer.get_current_path())}[/bold cyan]")

    if not detailed:
        for entry in result.data:
            if entry.is_dir:
                console.print(f"[blue]\\[DIR]  {escape(entry.name)}[/blue]")
            else:
                console.print(f"       {escape(entry.name)}")
        return

    table = Table(show_edge=False)
    table.add_column("Permissions")
    table.add_column("Owner")
    table.add_column("Group")
    table.add_column("Size", justify="right")
    table.add_column("Modified", style="dim")
    table.add_column("Name")

    for entry in result.data:
        if entry.error:
            table.add_row(entry.permissions, "?", "?", "?", "?", f"[red]{escape(entry.name)}[/red]")
            continue
        style = _entry_style(entry)
        name = f"[{style}]{escape(entry.name)}[/{style}]" if style else escape(entry.name)
        table.add_row(
            entry.permissions,
            escape(entry.owner),
            escape(entry.group),
            entry.size_display,
            format_timestamp(entry.modified),
            name
        )

    console.print(table)


def render_info(entry) -> None:
    """Print the metadata panel for a single entry."""
    size = f"{format_size(entry.size)} ({entry.size} bytes)"
    lines = [
        f"Type:        {entry.type_label}",
        f"Size:        {size}",
        f"Permissions: {entry.permissions} ({entry.octal})",
        f"Owner:       {escape(entry.owner)}",
        f"Group:       {escape(entry.group)}",
        f"Modified:    {format_timestamp(entry.modified, with_seconds=True)}",
        f"Accessed:    {format_timestamp(entry.accessed, with_seconds=True)}",
        f"Changed:     {format_timestamp(entry.changed, with_seconds=True)}",
    ]
    console.print(Panel("\n".join(lines), title=f"File Information: {escape(entry.name)}", expand=False))


def render_search(pattern: str, result: OperationResult) -> None:
    if not result.data:
        console.print(f"No files found matching '{escape(pattern)}'.")
        return
    console.print(f"[green]Found {len(result.data)} result(s):[/green]")
    for path in result.data:
        console.print(f"  {escape(path)}")


def _finish(ctx: click.Context, ok: bool) -> None:
    if not ok:
        ctx.exit(1)


@click.group()
@click.version_option(version="0.1.0", prog_name="fexplorer")
@click.option("--path", "-C", "path", default=None, help="Directory to start from.")
@click.option("--config", "config_path", default="config.yaml", show_default=True,
              help="YAML settings file.")
@click.pass_context
def fexplorer(ctx, path, config_path):
    """
    fexplorer - Linux File Explorer

    Browse and manage files from a single current directory.
    """
    ctx.ensure_object(dict)
    ctx.obj["path"] = path
    ctx.obj["config_path"] = config_path


def _explorer(ctx: click.Context) -> Explorer:
    if "explorer" not in ctx.obj:
        try:
            explorer = get_explorer(ctx.obj["path"], ctx.obj["config_path"])
        except ValueError as e:
            raise click.ClickException(f"Invalid configuration: {e}")
        if explorer.start_error is not None:
            raise click.ClickException(explorer.start_error.message)
        ctx.obj["explorer"] = explorer
    return ctx.obj["explorer"]


@fexplorer.command()
@click.option("-l", "--long", "detailed", is_flag=True, help="Show permissions, owner, size and time.")
@click.pass_context
def ls(ctx, detailed):
    """List the current directory."""
    explorer = _explorer(ctx)
    result = explorer.list_files(detailed)
    if not result.success:
        _finish(ctx, report(result))
        return
    render_listing(explorer, result, detailed)


@fexplorer.command()
@click.pass_context
def pwd(ctx):
    """Show the current path."""
    console.print(escape(_explorer(ctx).get_current_path()))


@fexplorer.command()
@click.argument("name")
@click.pass_context
def cd(ctx, name):
    """Resolve and validate a directory change."""
    _finish(ctx, report(_explorer(ctx).change_directory(name)))


@fexplorer.command()
@click.argument("name")
@click.pass_context
def mkdir(ctx, name):
    """Create a directory."""
    _finish(ctx, report(_explorer(ctx).create_directory(name)))


@fexplorer.command()
@click.argument("name")
@click.pass_context
def touch(ctx, name):
    """Create an empty file."""
    _finish(ctx, report(_explorer(ctx).create_file(name)))


@fexplorer.command()
@click.argument("name")
@click.pass_context
def rm(ctx, name):
    """Delete a file or an empty directory."""
    _finish(ctx, report(_explorer(ctx).delete_item(name)))


@fexplorer.command()
@click.argument("src")
@click.argument("dest")
@click.pass_context
def cp(ctx, src, dest):
    """Copy a file."""
    _finish(ctx, report(_explorer(ctx).copy_file(src, dest)))


@fexplorer.command()
@click.argument("src")
@click.argument("dest")
@click.pass_context
def mv(ctx, src, dest):
    """Move or rename a file or directory."""
    _finish(ctx, report(_explorer(ctx).move_item(src, dest)))


@fexplorer.command()
@click.argument("name")
@click.argument("mode")
@click.pass_context
def chmod(ctx, name, mode):
    """Change permissions using three octal digits, e.g. 755."""
    _finish(ctx, report(_explorer(ctx).change_permissions(name, mode)))


@fexplorer.command()
@click.argument("pattern")
@click.pass_context
def search(ctx, pattern):
    """Search recursively for names containing PATTERN."""
    explorer = _explorer(ctx)
    console.print(f"[yellow]Searching for '{escape(pattern)}' in {escape(explorer.get_current_path())}...[/yellow]")
    render_search(pattern, explorer.search_files(pattern))


@fexplorer.command()
@click.argument("name")
@click.pass_context
def info(ctx, name):
    """View file information."""
    result = _explorer(ctx).view_info(name)
    if not result.success:
        _finish(ctx, report(result))
        return
    render_info(result.data)


@fexplorer.command()
@click.option("--limit", default=20, show_default=True, help="Number of entries to show.")
@click.option("--failed", is_flag=True, help="Only show failed actions.")
@click.option("--type", "action_type", type=click.Choice([t.value for t in ActionType]),
              help="Only show actions of this type.")
@click.option("--date", "day", type=click.DateTime(formats=["%Y-%m-%d"]),
              help="Only show actions from this day (YYYY-MM-DD).")
@click.option("--export", "export_format", type=click.Choice(["json", "csv"]),
              help="Print the whole log in this format.")
@click.option("--clear", "clear_log", is_flag=True, help="Back up the log and start a new one.")
@click.option("--yes", "-y", is_flag=True, help="Clear without asking for confirmation.")
@click.pass_context
def audit(ctx, limit, failed, action_type, day, export_format, clear_log, yes):
    """View, export or clear the audit log."""
    logger = _explorer(ctx).logger
    if not logger.enabled:
        console.print("[dim]Auditing is disabled. Set audit.log_path in the config to enable it.[/dim]")
        return

    if clear_log:
        if not yes and not click.confirm("Clear the audit log?"):
            console.print("[yellow]Cancelled.[/yellow]")
            return
        try:
            cleared = logger.clear(confirm=True)
        except OSError as e:
            raise click.ClickException(f"Cannot clear audit log: {e}")
        if cleared:
            console.print("[green]Audit log cleared. The old entries were kept in a backup file.[/green]")
        else:
            console.print("[dim]Nothing to clear.[/dim]")
        return

    if export_format:
        click.echo(logger.export(export_format))
        return

    if day is not None:
        entries = list(reversed(logger.get_by_date(day)))
    elif action_type is not None:
        entries = logger.get_by_action_type(ActionType(action_type), limit=limit)
    elif failed:
        entries = logger.get_failed_actions(limit=limit)
    else:
        entries = logger.get_recent(limit=limit)

    if failed:
        entries = [e for e in entries if e.status == ActionStatus.FAILED.value]
    if action_type is not None:
        entries = [e for e in entries if e.action_type == action_type]
    entries = entries[:limit]

    if not entries:
        console.print("[dim]No audit entries found.[/dim]")
        return

    table = Table(title="Recent Audit Log")
    table.add_column("Time", style="dim")
    table.add_column("Type")
    table.add_column("Action")
    table.add_column("Status")

    for entry in entries:
        # Format timestamp
        time_str = entry.timestamp.split("T")[1].split(".")[0] if "T" in entry.timestamp else entry.timestamp

        status_str = entry.status
        if entry.status == "executed":
            status_str = f"[green]{entry.status}[/green]"
        elif entry.status == "failed":
            status_str = f"[red]{entry.status}[/red]"

        description = entry.action_description
        table.add_row(
            time_str,
            entry.action_type,
            escape(description[:60] + "..." if len(description) > 60 else description),
            status_str
        )

    console.print(table)


def _ask(prompt: str) -> str:
    return console.input(prompt).strip()


def run_menu_choice(explorer: Explorer, choice: str) -> bool:
    """
    Execute one numbered menu choice.

    Returns False when the session should end.
    """
    if choice == "0":
        return False
    if choice in ("1", "2"):
        detailed = choice == "2"
        result = explorer.list_files(detailed)
        if result.success:
            render_listing(explorer, result, detailed)
        else:
            report(result)
    elif choice == "3":
        report(explorer.change_directory(_ask("Enter directory path (or .. for parent): ")))
    elif choice == "4":
        console.print(f"[green]Current path: {escape(explorer.get_current_path())}[/green]")
    elif choice == "5":
        report(explorer.create_directory(_ask("Enter directory name: ")))
    elif choice == "6":
        report(explorer.create_file(_ask("Enter file name: ")))
    elif choice == "7":
        report(explorer.delete_item(_ask("Enter file/directory name: ")))
    elif choice == "8":
        src = _ask("Enter source file name: ")
        dest = _ask("Enter destination file name: ")
        report(explorer.copy_file(src, dest))
    elif choice == "9":
        src = _ask("Enter source name: ")
        dest = _ask("Enter destination name: ")
        report(explorer.move_item(src, dest))
    elif choice == "10":
        pattern = _ask("Enter search pattern: ")
        console.print(f"[yellow]Searching for '{escape(pattern)}' in {escape(explorer.get_current_path())}...[/yellow]")
        render_search(pattern, explorer.search_files(pattern))
    elif choice == "11":
        result = explorer.view_info(_ask("Enter file/directory name: "))
        if result.success:
            render_info(result.data)
        else:
            report(result)
    elif choice == "12":
        name = _ask("Enter file/directory name: ")
        mode = _ask("Enter permissions (e.g., 755): ")
        report(explorer.change_permissions(name, mode))
    else:
        console.print("[red]Invalid choice. Please try again.[/red]")
    return True


@fexplorer.command()
@click.pass_context
def shell(ctx):
    """Start an interactive menu session."""
    explorer = _explorer(ctx)
    console.print(Panel.fit(
        "[bold green]Welcome to Linux File Explorer[/bold green]\n"
        "[dim]Enter 0 to end the session[/dim]",
        title="Interactive Mode"
    ))

    while True:
        console.print(Panel(MENU, title="[bold magenta]FILE EXPLORER MENU[/bold magenta]", expand=False))
        try:
            choice = _ask("[yellow]Enter choice: [/yellow]")
            if not run_menu_choice(explorer, choice):
                break
        except (EOFError, KeyboardInterrupt):
            console.print()
            break

    console.print("[bold green]Thank you for using File Explorer![/bold green]")


def main() -> None:
    fexplorer(obj={})


if __name__ == "__main__":
    main()
