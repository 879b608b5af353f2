import logging
from typing import Dict, List, Optional

from .config import ConfigManager
from .display import DisplayManager
from .errors import SelectionAborted, ShowNotFoundError
from .filter import SearchFilter
from .store import SubscriptionStore
from .tvmaze_api import TvMazeClient
from .utils import (
    EpisodeNumber,
    episode_key,
    format_episode_number,
    has_aired,
    last_watched_of,
    parse_episode_number,
)


class App:
    """Main application controller."""

    def __init__(self, config_path: str = None, debug: bool = False, assume_yes: bool = False,
                 client: Optional[TvMazeClient] = None, store: Optional[SubscriptionStore] = None,
                 display: Optional[DisplayManager] = None):
        self.assume_yes = assume_yes

        logging.basicConfig(
            level=logging.DEBUG if debug else logging.INFO,
            format="%(asctime)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S"
        )
        self.logger = logging.getLogger(__name__)

        self.config_manager = ConfigManager(config_path)
        self.config = self.config_manager.load()

        # Override debug from config if not set in args
        self.debug = debug or self.config.get("debug", False)
        if self.debug:
            logging.getLogger().setLevel(logging.DEBUG)

        api_config = self.config["api"]
        self.client = client or TvMazeClient(
            self.logger,
            base_url=api_config["base_url"],
            timeout=api_config["timeout"],
            retries=api_config["retries"],
        )
        self.filter = SearchFilter(self.logger, self.config["search"])
        self.display = display or DisplayManager()
        self.store = store or SubscriptionStore(self.config["data_dir"], self.logger)
        self.store.load()

    def add_show(self, title: str):
        """Search TVmaze for a show, let the user pick one and subscribe to it."""
        candidates = self.filter.apply(self.client.search_shows(title))
        if not candidates:
            raise ShowNotFoundError(f"No show found for \"{title}\"")

        show = self._select(candidates, "Which show do you want to add?")

        if self.store.get_show(show["id"]) is not None:
            self.display.log(f"Already subscribed to {show['name']}.", style="yellow")
            return

        if not self._confirm(f"Add {show['name']} ({show['network']})?"):
            self.display.log("Nothing added.")
            return

        episodes = self.client.get_episodes(show["id"])
        last_watched = self._ask_last_watched(episodes)

        self.store.add_show(show, last_watched=last_watched)
        self.store.add_episodes([e for e in episodes if episode_key(e) > (last_watched or (0, 0))])
        self.store.save()

        message = f"Added {show['name']}"
        if last_watched:
            message += f" (watched up to {format_episode_number(*last_watched)})"
        self.display.log(message + ".", style="green")

    def remove_show(self, title: str):
        """Unsubscribe from a show."""
        show = self._find_subscription(title)

        if not self._confirm(f"Remove {show['name']}?"):
            self.display.log("Nothing removed.")
            return

        self.store.remove_show(show["id"])
        self.store.save()
        self.display.log(f"Removed {show['name']}.", style="green")

    def list_shows(self):
        shows = self.store.shows_by_most_recent()
        if not shows:
            self.display.log("No subscribed shows. Add one with: bingers add <show>")
            return
        self.display.shows_table(shows)

    def list_episodes(self):
        episodes = self.store.unwatched_episodes_oldest_first()
        if not episodes:
            self.display.log("No unwatched episodes.")
            return
        show_names = {show["id"]: show["name"] for show in self.store.subscribed_shows}
        self.display.episodes_table(episodes, show_names=show_names, title="Unwatched episodes")

    def mark_as_watched(self, title: str, season: Optional[int] = None, episode: Optional[int] = None):
        """Mark the next episode, a whole season, or a single episode of a subscription as watched."""
        show = self._find_subscription(title)

        marked = self.store.mark_as_watched(show["id"], season, episode)
        if marked is None:
            self.display.log(f"Nothing to mark as watched for {show['name']}.", style="yellow")
            return

        self.store.save()
        self.display.log(
            f"Marked {show['name']} {format_episode_number(*marked)} as watched.", style="green"
        )

    def update(self, force: bool = False):
        """Refresh show metadata and pick up new episodes."""
        if not self.store.subscribed_shows:
            self.display.log("No subscribed shows to update.")
            return

        new_episodes = 0
        for stored in list(self.store.subscribed_shows):
            show = self.client.get_show(stored["id"])
            changed = self.store.update_show(show)
            if not (changed or force):
                self.logger.debug(f"{show['name']} is up to date")
                continue

            last_watched = last_watched_of(self.store.get_show(show["id"]))
            added = []
            for episode in self.client.get_episodes(show["id"]):
                if not self.store.update_episode(episode) and episode_key(episode) > last_watched:
                    added.append(episode)
            count = self.store.add_episodes(added)
            if count:
                self.display.log(f"{show['name']}: {count} new episode(s)")
            new_episodes += count

        self.store.save()
        self.display.log(f"Update complete, {new_episodes} new episode(s).", style="green")

    def _select(self, candidates: List[Dict], prompt: str) -> Dict:
        """Let the user pick one of several candidates. A single candidate is returned as-is."""
        self.display.show_candidates(candidates)
        if len(candidates) == 1:
            return candidates[0]

        index = self.display.choose(prompt, len(candidates))
        if index is None:
            raise SelectionAborted("Aborted.")
        return candidates[index]

    def _confirm(self, question: str) -> bool:
        if self.assume_yes:
            return True
        return self.display.confirm(question)

    def _find_subscription(self, title: str) -> Dict:
        matches = self.store.find_shows(title)
        if not matches:
            raise ShowNotFoundError(f"\"{title}\" not found in subscribed shows")
        if len(matches) == 1:
            return matches[0]
        return self._select(matches, "Which show do you mean?")

    def _ask_last_watched(self, episodes: List[Dict]) -> Optional[EpisodeNumber]:
        """
        Show the aired episodes and ask which one the user watched last.

        Accepts "S02E05", "2x5" or "S02" for a whole season. Returns None if
        nothing was watched yet.
        """
        aired = [e for e in episodes if has_aired(e)]
        if not aired or self.assume_yes:
            return None

        self.display.episodes_table(aired, title="Aired episodes")
        known = {episode_key(e) for e in aired}

        while True:
            answer = self.display.ask("Last episode you have already watched (e.g. S01E05 or S01, blank for none)")
            if not answer:
                return None

            try:
                season, number = parse_episode_number(answer)
            except ValueError:
                self.display.error(f"Could not understand \"{answer}\".")
                continue

            if number is None:
                season_episodes = sorted(key for key in known if key[0] == season)
                if season_episodes:
                    return season_episodes[-1]
            elif (season, number) in known:
                return season, number

            self.display.error(f"No aired episode matches \"{answer}\".")
