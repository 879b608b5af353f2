from datetime import date
from typing import Dict, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm, Prompt
from rich.table import Table

from .utils import format_episode_number, has_aired, last_watched_of


class DisplayManager:
    """Renders tables and prompts using rich."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def log(self, message: str, style: Optional[str] = None):
        self.console.print(message, style=style, markup=False, highlight=False)

    def error(self, message: str):
        self.console.print(message, style="bold red", markup=False, highlight=False)

    def show_candidates(self, shows: List[Dict]):
        """Print a numbered list of search results."""
        self.console.print()
        for i, show in enumerate(shows):
            premiered = (show.get("premiered") or "")[:4]
            year = f", {premiered}" if premiered else ""
            self.console.print(
                f"[bold]\\[{i}][/bold] {escape(show['name'])} ({escape(show['network'])}{year}) [dim]{escape(show['status'])}[/dim]",
                highlight=False,
            )
        self.console.print()

    def choose(self, prompt: str, count: int) -> Optional[int]:
        """Ask for an index in [0, count). Returns None if the user aborts with a blank answer or 'q'."""
        while True:
            answer = Prompt.ask(f"{prompt} (0-{count - 1}, q to abort)", console=self.console, default="")
            answer = answer.strip().lower()
            if answer in ("", "q"):
                return None
            if answer.isdigit() and int(answer) < count:
                return int(answer)
            self.error(f"Please enter a number between 0 and {count - 1}.")

    def confirm(self, question: str, default: bool = True) -> bool:
        return Confirm.ask(question, console=self.console, default=default)

    def ask(self, question: str) -> str:
        return Prompt.ask(question, console=self.console, default="").strip()

    def shows_table(self, shows: List[Dict]):
        """Print the subscribed shows."""
        table = Table(title="Subscribed shows", expand=False)
        table.add_column("Show", style="bold")
        table.add_column("Network")
        table.add_column("Status")
        table.add_column("Runtime", justify="right")
        table.add_column("Last watched", justify="right")

        for show in shows:
            season, number = last_watched_of(show)
            last_watched = format_episode_number(season, number) if (season, number) != (0, 0) else "-"
            runtime = f"{show['runtime']} min" if show.get("runtime") else "-"
            status_style = "green" if show.get("status") == "Running" else "dim"
            table.add_row(
                escape(show["name"]),
                escape(show.get("network") or "Unknown"),
                f"[{status_style}]{escape(show.get('status') or 'Unknown')}[/{status_style}]",
                runtime,
                last_watched,
            )

        self.console.print(table)

    def episodes_table(self, episodes: List[Dict], show_names: Optional[Dict[int, str]] = None,
                       title: str = "Episodes", today: Optional[date] = None):
        """Print episodes; upcoming ones are dimmed, watched ones marked."""
        table = Table(title=title, expand=False)
        if show_names is not None:
            table.add_column("Show", style="bold")
        table.add_column("Episode")
        table.add_column("Name")
        table.add_column("Air date")
        table.add_column("", justify="center")

        for episode in episodes:
            row = [
                format_episode_number(episode["season"], episode["number"]),
                escape(episode.get("name") or ""),
                episode.get("airdate") or "TBA",
                "✓" if episode.get("watched") else "",
            ]
            if show_names is not None:
                row.insert(0, escape(show_names.get(episode["show_id"], str(episode["show_id"]))))
            style = None if has_aired(episode, today) else "dim"
            table.add_row(*row, style=style)

        self.console.print(table)
