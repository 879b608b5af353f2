import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional

from .errors import UserDataError, VersionMismatchError
from .utils import EpisodeNumber, episode_key, last_watched_of

VERSION = 1

# Sort order of show statuses in shows_by_most_recent()
_STATUS_RANK = {"Running": 0, "To Be Determined": 1}


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _valid_show(show) -> bool:
    """Check the fields read with [] and fill optional ones with defaults."""
    if not isinstance(show, dict) or not _is_int(show.get("id")) or not isinstance(show.get("name"), str):
        return False

    for field in ("network", "status"):
        if show.get(field) is None:
            show[field] = "Unknown"
        elif not isinstance(show[field], str):
            return False

    last_watched = show.setdefault("last_watched", None)
    if last_watched is not None:
        if not isinstance(last_watched, list) or len(last_watched) != 2 or not all(map(_is_int, last_watched)):
            return False
    return True


def _valid_episode(episode) -> bool:
    if not isinstance(episode, dict):
        return False
    if not all(_is_int(episode.get(key)) for key in ("show_id", "season", "number")):
        return False

    if episode.get("name") is None:
        episode["name"] = ""
    elif not isinstance(episode["name"], str):
        return False

    if not all(isinstance(episode.get(key), (str, type(None))) for key in ("airdate", "airstamp")):
        return False

    return isinstance(episode.setdefault("watched", False), bool)


class SubscriptionStore:
    """Manages subscribed shows and their unwatched episodes in a JSON file."""

    FILENAME = "user_data.json"

    def __init__(self, data_dir: Path, logger: Optional[logging.Logger] = None):
        self.data_dir = Path(data_dir)
        self.path = self.data_dir / self.FILENAME
        self.logger = logger or logging.getLogger(__name__)
        self.data = self._empty()

    @staticmethod
    def _empty() -> Dict:
        return {"version": VERSION, "subscribed_shows": [], "unwatched_episodes": []}

    def load(self) -> "SubscriptionStore":
        """Load user data from disk. A missing file yields an empty store."""
        if not self.path.exists():
            self.logger.info(f"No user data found at {self.path}, starting with an empty list.")
            self.data = self._empty()
            return self

        try:
            content = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise UserDataError(f"Unable to read user data from {self.path}: {e}") from e

        try:
            data = json.loads(content)
        except ValueError as e:
            raise UserDataError(f"Unable to parse user data from {self.path}: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("version"), int):
            raise UserDataError(f"Unable to parse version from {self.path}")

        if data["version"] > VERSION:
            raise VersionMismatchError(VERSION, data["version"])

        shows = data.get("subscribed_shows", [])
        episodes = data.get("unwatched_episodes", [])
        if not isinstance(shows, list) or not isinstance(episodes, list):
            raise UserDataError(f"Unable to deserialize user data from {self.path}")

        if not all(_valid_show(show) for show in shows) or not all(_valid_episode(e) for e in episodes):
            raise UserDataError(f"Unable to deserialize user data from {self.path}: malformed entry")

        self.data = {"version": VERSION, "subscribed_shows": shows, "unwatched_episodes": episodes}
        self._sort_episodes()
        self.logger.debug(f"Loaded {len(shows)} show(s), {len(episodes)} episode(s) from {self.path}")
        return self

    def save(self):
        """Atomically write user data to disk."""
        tmp_path = self.data_dir / "user_data.tmp"
        lock_path = self.data_dir / "user_data.lock"

        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)

            # Use a lock file to serialize writes
            with open(lock_path, "w", encoding="utf-8") as lock_file:
                try:
                    import fcntl

                    fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
                except (ImportError, OSError):
                    pass  # fcntl not available or locking failed, proceed best-effort

                with open(tmp_path, "w", encoding="utf-8") as f:
                    json.dump(self.data, f, indent=2, ensure_ascii=False)
                    f.flush()
                    os.fsync(f.fileno())

                os.replace(tmp_path, self.path)
        except OSError as e:
            raise UserDataError(f"Unable to write user data to {self.path}: {e}") from e

        self.logger.debug(f"Saved user data to {self.path}")

    @property
    def subscribed_shows(self) -> List[Dict]:
        return self.data["subscribed_shows"]

    @property
    def unwatched_episodes(self) -> List[Dict]:
        return self.data["unwatched_episodes"]

    def get_show(self, show_id: int) -> Optional[Dict]:
        for show in self.subscribed_shows:
            if show["id"] == show_id:
                return show
        return None

    def find_shows(self, name: str) -> List[Dict]:
        """Find subscriptions by name: exact (case-insensitive) match first, else substring matches."""
        needle = name.strip().casefold()
        if not needle:
            return []
        exact = [show for show in self.subscribed_shows if show["name"].casefold() == needle]
        if exact:
            return exact
        return [show for show in self.subscribed_shows if needle in show["name"].casefold()]

    def shows_by_most_recent(self) -> List[Dict]:
        """Running shows first, then undetermined ones, then the rest; most recently updated first."""
        shows = sorted(self.subscribed_shows, key=lambda s: s.get("last_updated") or 0, reverse=True)
        return sorted(shows, key=lambda s: _STATUS_RANK.get(s.get("status"), 2))

    def unwatched_episodes_oldest_first(self) -> List[Dict]:
        """Episodes by air time; episodes without an air time come first."""
        return sorted(
            self.unwatched_episodes,
            key=lambda e: (e.get("airstamp") is not None, e.get("airstamp") or "", e["show_id"], episode_key(e)),
        )

    def add_show(self, show: Dict, last_watched: Optional[EpisodeNumber] = None) -> bool:
        """Subscribe to a show. Returns False if it is already subscribed."""
        if self.get_show(show["id"]) is not None:
            return False

        show = dict(show)
        show.pop("score", None)
        show["last_watched"] = list(last_watched) if last_watched else show.get("last_watched")
        self.subscribed_shows.append(show)
        self.subscribed_shows.sort(key=lambda s: (s["name"].casefold(), s["id"]))
        return True

    def remove_show(self, show_id: int) -> bool:
        """Unsubscribe from a show and drop its unwatched episodes."""
        before = len(self.subscribed_shows)
        self.data["subscribed_shows"] = [s for s in self.subscribed_shows if s["id"] != show_id]
        self.remove_episodes(show_id)
        return len(self.subscribed_shows) != before

    def add_episodes(self, episodes: List[Dict]) -> int:
        """Add episodes not yet stored. Returns how many were added."""
        known = {(e["show_id"], *episode_key(e)) for e in self.unwatched_episodes}
        added = 0
        for episode in episodes:
            key = (episode["show_id"], *episode_key(episode))
            if key in known:
                continue
            episode = dict(episode)
            episode.setdefault("watched", False)
            self.unwatched_episodes.append(episode)
            known.add(key)
            added += 1

        if added:
            self._sort_episodes()
        return added

    def remove_episodes(self, show_id: int):
        self.data["unwatched_episodes"] = [e for e in self.unwatched_episodes if e["show_id"] != show_id]

    def _sort_episodes(self):
        self.unwatched_episodes.sort(key=lambda e: (e["show_id"], *episode_key(e)))

    def mark_as_watched(self, show_id: int, season: Optional[int] = None,
                        episode: Optional[int] = None) -> Optional[EpisodeNumber]:
        """
        Mark episode(s) of a show as watched.

        If neither season nor episode are given, marks the next unwatched episode.
        If only season is given, marks the whole season.
        If both are given, marks that exact episode.

        Watched episodes directly following the last watched one are removed
        and the last watched pointer advances past them. Watched episodes that
        are separated from the pointer by unwatched ones are kept until the
        gap is closed.

        Returns the episode number of the last episode that was marked.
        """
        if season is None and episode is not None:
            return None

        candidates = [e for e in self.unwatched_episodes if e["show_id"] == show_id and not e["watched"]]
        if season is None:
            marked = candidates[:1]
        elif episode is None:
            marked = [e for e in candidates if e["season"] == season]
        else:
            marked = [e for e in candidates if episode_key(e) == (season, episode)]

        if not marked:
            return None

        for e in marked:
            e["watched"] = True
        last_marked = episode_key(marked[-1])

        show = self.get_show(show_id)
        last_watched = last_watched_of(show) if show else (0, 0)

        gap = any(
            last_watched < episode_key(e) < last_marked
            for e in self.unwatched_episodes
            if e["show_id"] == show_id and not e["watched"]
        )
        if gap:
            return last_marked

        # Episodes are sorted, so the show's episodes after the pointer come in order
        remaining = []
        stop = False
        for e in self.unwatched_episodes:
            if e["show_id"] == show_id and episode_key(e) > last_watched and not stop:
                if e["watched"]:
                    last_watched = episode_key(e)
                    continue
                stop = True
            remaining.append(e)
        self.data["unwatched_episodes"] = remaining

        if show is not None:
            show["last_watched"] = list(last_watched) if last_watched != (0, 0) else None

        return last_marked

    def update_show(self, show: Dict) -> bool:
        """
        Update the metadata of a subscribed show.

        Returns whether the show's last_updated field changed.
        """
        stored = self.get_show(show["id"])
        if stored is None:
            return False

        if stored["name"] != show["name"]:
            self.logger.info(f"\"{stored['name']}\" changed to \"{show['name']}\"")
            stored["name"] = show["name"]

        if stored.get("status") != show.get("status"):
            self.logger.info(f"{stored['name']}: Changed from {stored.get('status')} to {show.get('status')}")
            stored["status"] = show.get("status")

        for field in ("language", "network", "runtime", "premiered", "schedule"):
            stored[field] = show.get(field)

        if stored.get("last_updated") != show.get("last_updated"):
            stored["last_updated"] = show.get("last_updated")
            return True
        return False

    def update_episode(self, episode: Dict) -> bool:
        """
        Update the metadata of a stored episode, matched by its TVmaze id.

        Returns False if the episode is not stored.
        """
        stored = None
        for e in self.unwatched_episodes:
            if e.get("id") is not None and e.get("id") == episode.get("id"):
                stored = e
                break
        if stored is None:
            return False

        if stored["name"] != episode["name"]:
            self.logger.info(f"\"{stored['name']}\" changed to \"{episode['name']}\"")
            stored["name"] = episode["name"]

        if episode_key(stored) != episode_key(episode):
            self.logger.info(
                f"{stored['name']}: Changed from being season {stored['season']} episode {stored['number']} "
                f"to season {episode['season']} episode {episode['number']}"
            )
            stored["season"], stored["number"] = episode_key(episode)
            self._sort_episodes()

        stored["airdate"] = episode.get("airdate")
        stored["airstamp"] = episode.get("airstamp")
        stored["runtime"] = episode.get("runtime")
        return True
