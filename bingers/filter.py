import logging
from typing import Dict, List


class SearchFilter:
    """Filters search results based on configured statuses and languages."""

    def __init__(self, logger: logging.Logger, search_config: Dict):
        self.logger = logger
        self.statuses = search_config.get("statuses") or []
        self.languages = search_config.get("languages") or []

    def matches(self, show: Dict) -> bool:
        """Check if a show passes the status and language filters."""
        if self.statuses and show.get("status") not in self.statuses:
            self.logger.debug(f"  -> Excluded {show['name']} (status {show.get('status')})")
            return False

        if self.languages and show.get("language") not in self.languages:
            self.logger.debug(f"  -> Excluded {show['name']} (language {show.get('language')})")
            return False

        return True

    def apply(self, shows: List[Dict]) -> List[Dict]:
        """Return the matching shows, or all of them if none match."""
        filtered = [show for show in shows if self.matches(show)]
        if not filtered and shows:
            self.logger.debug("No search result passed the filters, showing all results")
            return shows
        return filtered
