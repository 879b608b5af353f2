import logging
from typing import Any, Dict, List, Optional

import certifi
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .errors import ApiError
from .utils import traverse_obj


class TvMazeClient:
    """Read-only client for the TVmaze API."""

    _HEADERS = {
        "Accept": "application/json",
        "User-Agent": "bingers (+https://www.tvmaze.com/api)",
    }

    def __init__(self, logger: logging.Logger, base_url: str = "https://api.tvmaze.com",
                 timeout: float = 10, retries: int = 3):
        self.logger = logger
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = self._build_session(retries)

    def _build_session(self, retries: int) -> requests.Session:
        """Create a requests session with retry logic."""
        session = requests.Session()
        session.headers.update(self._HEADERS)
        session.verify = certifi.where()

        # TVmaze rate limits with 429
        retry_strategy = Retry(
            total=retries,
            backoff_factor=0.5,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET"],
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        return session

    def _call_api(self, path: str, params: Optional[Dict] = None) -> Any:
        """GET a TVmaze endpoint and return the decoded JSON body."""
        url = f"{self.base_url}{path}"
        self.logger.debug(f"Calling API: {url} {params or ''}")

        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise ApiError(f"HTTP request to {url} failed: {e}", url=url) from e

        self.logger.debug(f"{response.status_code} {response.url}")
        if response.status_code != 200:
            raise ApiError(
                f"HTTP error: Received status code {response.status_code} from {response.url}",
                status=response.status_code,
                url=response.url,
            )

        try:
            return response.json()
        except ValueError as e:
            raise ApiError(f"Unable to deserialize HTTP response from {response.url}", url=response.url) from e

    def search_shows(self, query: str) -> List[Dict]:
        """Search TVmaze for shows matching a free-text title, best match first."""
        results = self._call_api("/search/shows", {"q": query}) or []
        shows = []
        for result in results:
            raw_show = result.get("show")
            if not raw_show or raw_show.get("id") is None:
                continue
            show = self._parse_show(raw_show)
            show["score"] = result.get("score", 0)
            shows.append(show)

        self.logger.debug(f"Found {len(shows)} show(s) for {query!r}")
        return shows

    def get_show(self, show_id: int) -> Dict:
        return self._parse_show(self._call_api(f"/shows/{show_id}"))

    def get_episodes(self, show_id: int) -> List[Dict]:
        """Fetch all episodes of a show. Specials without an episode number are skipped."""
        episodes = []
        for raw_episode in self._call_api(f"/shows/{show_id}/episodes") or []:
            if raw_episode.get("season") is None or raw_episode.get("number") is None:
                continue
            episodes.append(self._parse_episode(raw_episode, show_id))

        self.logger.debug(f"Found {len(episodes)} episode(s) for show {show_id}")
        return episodes

    @staticmethod
    def _parse_show(raw: Dict) -> Dict:
        return {
            "id": raw["id"],
            "name": raw.get("name") or "",
            "language": raw.get("language"),
            "status": raw.get("status") or "Unknown",
            "network": traverse_obj(raw, ("network", "name"), ("webChannel", "name"), default="Unknown"),
            "runtime": raw.get("runtime") or raw.get("averageRuntime"),
            "premiered": raw.get("premiered"),
            "schedule": {
                "time": traverse_obj(raw, ("schedule", "time"), default=""),
                "days": traverse_obj(raw, ("schedule", "days"), default=[]),
            },
            "last_updated": raw.get("updated"),
        }

    @staticmethod
    def _parse_episode(raw: Dict, show_id: int) -> Dict:
        return {
            "id": raw.get("id"),
            "show_id": show_id,
            "season": raw["season"],
            "number": raw["number"],
            "name": raw.get("name") or "",
            "airdate": raw.get("airdate") or None,
            "airstamp": raw.get("airstamp"),
            "runtime": raw.get("runtime"),
            "watched": False,
        }
