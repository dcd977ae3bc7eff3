"""
unimark interactive shell.

Commands:
- list, ls            List bookmarks as clickable hyperlinks
- list fav            List only favorite bookmarks
- list links          List bookmarks with visible URLs (for basic terminals)
- open <id>           Open the bookmark with the given ID
- fav <id>            Toggle favorite status for a bookmark
- import              Scan installed browsers for new bookmarks
- set-browser <cmd>   Set the command used to open links
- save                Save all changes to the store
- help, ?             Show help
- exit, quit, q       Save and quit

``ShellCore`` parses and executes commands without doing any terminal I/O so
it can be driven from tests; ``BookmarkRepl`` wraps it in a prompt_toolkit
session.
"""

import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.history import FileHistory
from prompt_toolkit.styles import Style
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from . import browser_import
from . import launcher
from .browser_import import OSKind
from .cli import format_bookmark
from .models import AppState
from .store import save_state

logger = logging.getLogger(__name__)


HELP_TEXT = """
--- Bookmark Manager Help ---
  list              - Show bookmarks as clickable hyperlinks
  list fav          - Show only favorite bookmarks as hyperlinks
  list links        - Show bookmarks with visible URLs (for basic terminals)
  open <id>         - Open the bookmark with the given ID
  fav <id>          - Toggle favorite status for a bookmark
  import            - Scan for new bookmarks from installed browsers
  set-browser <cmd> - Set the command to open links (e.g., 'firefox')
  save              - Save all changes to the bookmark store
  help              - Show this help message
  exit              - Quit the program
-----------------------------
"""


class CommandResult:
    """Result of a shell command execution."""

    def __init__(self, success: bool, output: Any = None,
                 error: str = None, should_exit: bool = False):
        self.success = success
        self.output = output
        self.error = error
        self.should_exit = should_exit


class ShellCore:
    """
    Command parsing and execution for the bookmark shell.

    Args:
        state: Application state to operate on
        store_path: File that ``save`` writes to
        os_kind: Operating system used by ``import`` (detected when omitted)
        home_dir: Home directory used by ``import`` (``Path.home()`` when omitted)
    """

    def __init__(self, state: AppState, store_path: Union[str, Path],
                 os_kind: Optional[OSKind] = None,
                 home_dir: Optional[Union[str, Path]] = None):
        self.state = state
        self.store_path = Path(store_path)
        self.os_kind = os_kind
        self.home_dir = home_dir

        self.commands: Dict[str, Callable[[List[str]], CommandResult]] = {
            "list": self.cmd_list,
            "open": self.cmd_open,
            "fav": self.cmd_fav,
            "import": self.cmd_import,
            "set-browser": self.cmd_set_browser,
            "save": self.cmd_save,
            "help": self.cmd_help,
            "exit": self.cmd_exit,
        }

        self.aliases = {
            "ls": "list",
            "quit": "exit",
            "q": "exit",
            "?": "help",
        }

    def execute(self, command_line: str) -> CommandResult:
        """
        Execute a command line and return the result.

        Arguments are split on whitespace, so browser commands containing
        backslashes (Windows paths) survive ``set-browser`` unchanged.
        """
        parts = command_line.split()
        if not parts:
            return CommandResult(True)

        command = parts[0].lower()
        args = parts[1:]
        command = self.aliases.get(command, command)

        handler = self.commands.get(command)
        if handler is None:
            return CommandResult(False, error=f"Unknown command: '{parts[0]}'.")

        try:
            return handler(args)
        except Exception as e:
            logger.debug("Command failed", exc_info=True)
            return CommandResult(False, error=str(e))

    def _parse_id(self, args: List[str], usage: str) -> Tuple[Optional[int], Optional[CommandResult]]:
        if not args:
            return None, CommandResult(False, error=f"Usage: {usage}")
        try:
            return int(args[0]), None
        except ValueError:
            return None, CommandResult(False, error="Invalid ID.")

    def cmd_list(self, args: List[str]) -> CommandResult:
        """List bookmarks sorted by name."""
        favorites_only = bool(args) and args[0] == "fav"
        show_links = bool(args) and args[0] == "links"

        bookmarks = self.state.sorted_bookmarks(favorites_only=favorites_only)
        if not bookmarks:
            return CommandResult(True, output="No favorites found." if favorites_only
                                 else "No bookmarks found.")

        return CommandResult(True, output=[format_bookmark(b, links=show_links)
                                           for b in bookmarks])

    def cmd_open(self, args: List[str]) -> CommandResult:
        """Open a bookmark with the configured browser command."""
        bookmark_id, failure = self._parse_id(args, "open <id>")
        if failure:
            return failure

        bookmark = self.state.get(bookmark_id)
        if bookmark is None:
            return CommandResult(False, error="ID not found.")

        launcher.open_url(bookmark.url, self.state.config.default_browser_cmd)
        return CommandResult(True, output=f"Opening '{bookmark.name}'...")

    def cmd_fav(self, args: List[str]) -> CommandResult:
        """Toggle the favorite flag of a bookmark."""
        bookmark_id, failure = self._parse_id(args, "fav <id>")
        if failure:
            return failure

        bookmark = self.state.toggle_favorite(bookmark_id)
        if bookmark is None:
            return CommandResult(False, error="ID not found.")

        status = "added to" if bookmark.favorite else "removed from"
        return CommandResult(True, output=f"Bookmark '{bookmark.name}' {status} favorites.")

    def cmd_import(self, args: List[str]) -> CommandResult:
        """Scan installed browsers and merge new bookmarks."""
        summary = browser_import.run_import(self.state, self.os_kind, self.home_dir)
        lines = [f"Notice: {notice}" for notice in summary.notices]
        lines.append(summary.message())
        return CommandResult(True, output=lines)

    def cmd_set_browser(self, args: List[str]) -> CommandResult:
        """Set the command used to open bookmarks."""
        if not args:
            return CommandResult(
                False,
                error=f"Usage: set-browser <cmd>\nCurrent: '{self.state.config.default_browser_cmd}'"
            )
        self.state.config.default_browser_cmd = " ".join(args)
        return CommandResult(True, output=f"Browser command set to: '{self.state.config.default_browser_cmd}'")

    def cmd_save(self, args: List[str]) -> CommandResult:
        """Persist the state."""
        save_state(self.state, self.store_path)
        return CommandResult(True, output=f"State saved to {self.store_path}")

    def cmd_help(self, args: List[str]) -> CommandResult:
        return CommandResult(True, output=HELP_TEXT)

    def cmd_exit(self, args: List[str]) -> CommandResult:
        return CommandResult(True, should_exit=True)


class BookmarkRepl:
    """
    Interactive shell with a prompt_toolkit interface.
    """

    def __init__(self, core: ShellCore, history_file: Optional[str] = None,
                 console: Optional[Console] = None):
        self.core = core
        self.console = console or Console()
        self.session = None
        self._setup_prompt(history_file)

    def _setup_prompt(self, history_file: Optional[str]):
        """Set up the prompt_toolkit session."""
        commands = list(self.core.commands.keys()) + list(self.core.aliases.keys())
        completer = WordCompleter(commands, ignore_case=True)

        style = Style.from_dict({
            'prompt': '#00aa00 bold',
        })

        self.session = PromptSession(
            completer=completer,
            history=FileHistory(history_file) if history_file else None,
            style=style,
            enable_history_search=True,
        )

    def print_result(self, result: CommandResult):
        # Output carries bookmark names and typed input, never markup
        if isinstance(result.output, list):
            for line in result.output:
                self.console.print(line, markup=False)
        elif result.output is not None:
            self.console.print(result.output, markup=False)

        if result.error:
            self.console.print(Text(result.error, style="red"), highlight=False)

    def run(self):
        """Run the shell until exit or EOF, then save."""
        self.console.print(Panel.fit(
            "[bold cyan]unimark[/bold cyan]\n"
            "Type 'help' for commands, 'exit' to quit",
            border_style="cyan"
        ))

        try:
            self._loop()
        finally:
            result = self.core.execute("save")
            if result.success:
                self.console.print("\nChanges saved. Goodbye!")
            else:
                self.console.print(Text(f"Could not save on exit: {result.error}", style="red"))

    def _loop(self):
        while True:
            try:
                command_line = self.session.prompt([('class:prompt', '> ')])
            except KeyboardInterrupt:
                self.console.print("[yellow]Use 'exit' to quit[/yellow]")
                continue
            except EOFError:
                break

            result = self.core.execute(command_line)
            self.print_result(result)
            if result.should_exit:
                break
