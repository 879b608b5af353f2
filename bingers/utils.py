import re
from datetime import date
from typing import Any, Dict, Optional, Tuple

EpisodeNumber = Tuple[int, int]

_EPISODE_RE = re.compile(r"^s?(\d+)\s*(?:[ex]\s*(\d+))?$", re.IGNORECASE)


def traverse_obj(obj: Any, *paths: Any, default: Any = None) -> Any:
    """
    Safely traverse a nested dictionary/list structure.

    Each path is a tuple of keys/indices. If multiple paths are given, the
    first one that yields a non-None result is returned.
    """
    for path in paths:
        current = obj
        if not isinstance(path, (list, tuple)):
            path = [path]

        for key in path:
            if isinstance(current, dict):
                current = current.get(key)
            elif isinstance(current, (list, tuple)) and isinstance(key, int) and 0 <= key < len(current):
                current = current[key]
            else:
                current = None

            if current is None:
                break

        if current is not None:
            return current

    return default


def episode_key(episode: Dict) -> EpisodeNumber:
    return episode["season"], episode["number"]


def last_watched_of(show: Dict) -> EpisodeNumber:
    """Last watched (season, episode) of a subscription; (0, 0) when unset."""
    last_watched = show.get("last_watched")
    if not last_watched:
        return 0, 0
    return int(last_watched[0]), int(last_watched[1])


def format_episode_number(season: int, number: int) -> str:
    return f"S{season:02d}E{number:02d}"


def parse_episode_number(text: str) -> Tuple[int, Optional[int]]:
    """
    Parse user input like "S02E05", "2x5", "s2 e5" or "S02".

    Returns (season, episode); episode is None when only a season was given.
    Raises ValueError for anything else.
    """
    match = _EPISODE_RE.match(text.strip())
    if not match:
        raise ValueError(f"Not an episode number: {text!r}")
    season = int(match.group(1))
    episode = int(match.group(2)) if match.group(2) else None
    return season, episode


def has_aired(episode: Dict, today: Optional[date] = None) -> bool:
    airdate = episode.get("airdate")
    if not airdate:
        return False
    today = today or date.today()
    try:
        return date.fromisoformat(airdate) <= today
    except ValueError:
        return False
