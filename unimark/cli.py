#!/usr/bin/env python3
"""
unimark - unified browser bookmarks

Command-line interface. Without a subcommand, starts the interactive shell.
"""
import sys
import argparse
import json
import logging
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.style import Style
from rich.table import Table
from rich.text import Text

from unimark import browser_import, launcher
from unimark.config import UnimarkConfig, get_config, init_config
from unimark.exceptions import UnimarkError
from unimark.models import AppState, Bookmark
from unimark.store import load_state, save_state

logger = logging.getLogger(__name__)


console = Console()


def format_bookmark(bookmark: Bookmark, links: bool = False) -> Text:
    """
    Render one bookmark line.

    By default the name is a terminal hyperlink to the URL; with ``links``
    the raw URL is printed after the name for terminals without hyperlinks.
    """
    text = Text()
    text.append(f"[{bookmark.id}]", style="bold cyan")
    text.append(" ")
    if bookmark.favorite:
        text.append("★ ", style="yellow")

    if links:
        text.append(bookmark.name)
        text.append(" - ")
        text.append(bookmark.url, style="bright_black")
    else:
        text.append(bookmark.name, style=Style(color="blue", link=bookmark.url))
    return text


def output_bookmarks(bookmarks: List[Bookmark], format: str = "plain", links: bool = False):
    """Output bookmarks in the specified format."""
    if format == "json":
        print(json.dumps([b.to_dict() for b in bookmarks], indent=2, ensure_ascii=False))
    elif format == "table":
        table = Table(title="Bookmarks")
        table.add_column("ID", style="cyan")
        table.add_column("★", style="yellow")
        table.add_column("Name", style="green")
        table.add_column("URL", style="blue")
        for b in bookmarks:
            table.add_row(str(b.id), "★" if b.favorite else "", escape(b.name), escape(b.url))
        console.print(table)
    else:
        for b in bookmarks:
            console.print(format_bookmark(b, links=links))


def setup_logging(level: str):
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO),
                        format='%(levelname)s: %(message)s')


def load_app_state(config: UnimarkConfig) -> AppState:
    """Load the store named by the configuration."""
    state = load_state(config.get_store_path())
    if not state.config.default_browser_cmd and config.default_browser_cmd:
        state.config.default_browser_cmd = config.default_browser_cmd
    return state


def cmd_shell(args):
    """Launch the interactive bookmark shell."""
    from unimark.repl import BookmarkRepl, ShellCore

    config = get_config()
    state = load_app_state(config)
    core = ShellCore(state, config.get_store_path())
    BookmarkRepl(core, history_file=config.history_file, console=console).run()


def cmd_import(args):
    """Import bookmarks from all installed browsers."""
    config = get_config()
    state = load_app_state(config)
    summary = browser_import.run_import(state)

    if args.output == "json":
        print(json.dumps({
            "new_count": summary.new_count,
            "found_any": summary.found_any,
            "browsers": summary.browsers,
            "notices": summary.notices,
        }, indent=2))
    else:
        for notice in summary.notices:
            console.print(Text(f"Notice: {notice}", style="yellow"))
        message = summary.message()
        if args.save and summary.new_count > 0:
            message = f"Imported {summary.new_count} new bookmarks."
        console.print(message)

    if args.save and summary.new_count > 0:
        save_state(state, config.get_store_path())
        if args.output != "json":
            console.print(f"[green]State saved to {escape(str(config.get_store_path()))}[/green]")


def cmd_list(args):
    """List bookmarks."""
    state = load_app_state(get_config())
    bookmarks = state.sorted_bookmarks(favorites_only=args.fav)
    if not bookmarks and args.output != "json":
        console.print("No favorites found." if args.fav else "No bookmarks found.")
        return
    output_bookmarks(bookmarks, args.output, links=args.links)


def cmd_open(args):
    """Open a bookmark in the configured browser."""
    state = load_app_state(get_config())
    bookmark = state.get(args.id)
    if bookmark is None:
        raise UnimarkError(f"ID not found: {args.id}")
    console.print(f"Opening '{escape(bookmark.name)}'...")
    launcher.open_url(bookmark.url, state.config.default_browser_cmd)


def cmd_fav(args):
    """Toggle the favorite flag of a bookmark and save."""
    config = get_config()
    state = load_app_state(config)
    bookmark = state.toggle_favorite(args.id)
    if bookmark is None:
        raise UnimarkError(f"ID not found: {args.id}")
    save_state(state, config.get_store_path())
    status = "added to" if bookmark.favorite else "removed from"
    console.print(f"Bookmark '{escape(bookmark.name)}' {status} favorites.")


def cmd_locate(args):
    """Show where bookmarks are looked for on this system."""
    os_kind = browser_import.detect_os()
    profiles = browser_import.candidate_profiles(os_kind, Path.home())

    if args.output == "json":
        print(json.dumps([{
            "browser": p.browser,
            "path": str(p.path),
            "exists": p.path.exists(),
        } for p in profiles], indent=2))
        return

    if not profiles:
        console.print("[yellow]No known browser locations for this operating system[/yellow]")
        return

    table = Table(title="Browser Bookmark Locations")
    table.add_column("Browser", style="cyan")
    table.add_column("Path", style="dim")
    table.add_column("Found", style="green")
    for profile in profiles:
        table.add_row(profile.browser, escape(str(profile.path)), "✓" if profile.path.exists() else "")
    console.print(table)


def cmd_config(args):
    """Show or initialize configuration."""
    config = get_config()

    if args.action == "show":
        table = Table(title="Configuration")
        table.add_column("Key", style="cyan")
        table.add_column("Value", style="white")
        for key, value in vars(config).items():
            table.add_row(key, escape(str(value)))
        console.print(table)
    elif args.action == "init":
        config_path = config.save()
        console.print(f"[green]Created config at {escape(str(config_path))}[/green]")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="unimark",
        description="Browse and open bookmarks from every installed browser",
    )
    parser.add_argument("--store", help="Bookmark store file (default: bookmarks.json)")
    parser.add_argument("--config", help="Config file to load")
    parser.add_argument("-o", "--output", choices=["plain", "table", "json"], default="plain",
                        help="Output format")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.set_defaults(func=cmd_shell)

    subparsers = parser.add_subparsers(dest="command")

    shell_parser = subparsers.add_parser("shell", help="Interactive bookmark shell (default)")
    shell_parser.set_defaults(func=cmd_shell)

    import_parser = subparsers.add_parser("import", help="Import bookmarks from installed browsers")
    import_parser.add_argument("--no-save", dest="save", action="store_false",
                               help="Do not write new bookmarks to the store")
    import_parser.set_defaults(func=cmd_import)

    list_parser = subparsers.add_parser("list", help="List bookmarks")
    list_parser.add_argument("--fav", action="store_true", help="Only favorites")
    list_parser.add_argument("--links", action="store_true", help="Show raw URLs")
    list_parser.set_defaults(func=cmd_list)

    open_parser = subparsers.add_parser("open", help="Open a bookmark")
    open_parser.add_argument("id", type=int, help="Bookmark ID")
    open_parser.set_defaults(func=cmd_open)

    fav_parser = subparsers.add_parser("fav", help="Toggle favorite status")
    fav_parser.add_argument("id", type=int, help="Bookmark ID")
    fav_parser.set_defaults(func=cmd_fav)

    locate_parser = subparsers.add_parser("locate", help="Show browser bookmark locations")
    locate_parser.set_defaults(func=cmd_locate)

    config_parser = subparsers.add_parser("config", help="Manage configuration")
    config_parser.add_argument("action", choices=["show", "init"], help="Config action")
    config_parser.set_defaults(func=cmd_config)

    return parser


def main(argv: Optional[List[str]] = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = init_config(
            store_file=args.store,
            config_file=Path(args.config) if args.config else None,
        )
        setup_logging("DEBUG" if args.verbose else config.log_level)
        if not config.color_output:
            console.no_color = True

        args.func(args)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        sys.exit(130)
    except UnimarkError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
